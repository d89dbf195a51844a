#!/usr/bin/env python3

import math
from stackcutlib.core import filters
from stackcutlib.core import timing
from stackcutlib.core import utils

#============================================

TIME_EPSILON_MS = 0.5
VOLUME_EPSILON = 1e-6

# channel merge decisions
MERGE_EMPTY = 'empty'
MERGE_SAME_CLIP = 'same-clip'
MERGE_CONTINUOUS = 'continuous'
MERGE_DIFFERENT = 'different'
AGREEING_DECISIONS = (MERGE_EMPTY, MERGE_SAME_CLIP, MERGE_CONTINUOUS)

#============================================

class MergeResult():
	def __init__(self, segments: list, merge_blocked_by_other_tracks: bool = False):
		self.segments = segments
		self.merge_blocked_by_other_tracks = merge_blocked_by_other_tracks

#============================================

def _finite_or_none(value):
	if value is None or value == '' or isinstance(value, bool):
		return None
	try:
		number = float(value)
	except (TypeError, ValueError):
		return None
	if not math.isfinite(number):
		return None
	return number

#============================================

def normalize_range(range_start, range_end) -> tuple:
	"""
	Clamp an export range to non-negative times.

	Returns (start, end) with end None for an open range, or None when the
	range is empty or inverted.
	"""
	start = _finite_or_none(range_start)
	start = max(0.0, start) if start is not None else 0.0
	end = _finite_or_none(range_end)
	if end is not None:
		end = max(0.0, end)
		if end <= start:
			return None
	return (start, end)

#============================================

def clip_to_range(segments: list, range_start: float, range_end) -> list:
	clipped = []
	for segment in segments:
		start = max(segment.start, range_start)
		end = segment.end if range_end is None else min(segment.end, range_end)
		if end <= start:
			continue
		clipped.append(segment.with_bounds(start, end))
	return clipped

#============================================

class SegmentMerger():
	"""
	Merge neighbouring segments that play one uninterrupted window of a
	single source with identical effective filters.
	"""
	def __init__(self, defaults: filters.DefaultFilters, resolve=None):
		self.defaults = defaults
		self.resolve = resolve or filters.resolve_filters
		self._resolved_cache = {}

	#============================
	def merge(self, segments: list) -> MergeResult:
		if len(segments) == 0:
			return MergeResult([])
		merged = [segments[0].with_bounds(segments[0].start, segments[0].end)]
		blocked = False
		for segment in segments[1:]:
			last = merged[-1]
			if not utils.is_close_time(last.end, segment.start, TIME_EPSILON_MS):
				merged.append(segment.with_bounds(segment.start, segment.end))
				continue
			boundary = segment.start
			audio_decision = self.channel_decision(last.audio_tail,
				segment.audio_clip, boundary, 'audio')
			video_decision = self.channel_decision(last.video_tail,
				segment.video_clip, boundary, 'video')
			audio_ok = audio_decision in AGREEING_DECISIONS
			video_ok = video_decision in AGREEING_DECISIONS
			if audio_ok and video_ok:
				last.end = segment.end
				_extend_run(last.video_clips, segment.video_clips)
				_extend_run(last.audio_clips, segment.audio_clips)
				continue
			if audio_decision == MERGE_CONTINUOUS and not video_ok:
				blocked = True
			if video_decision == MERGE_CONTINUOUS and not audio_ok:
				blocked = True
			merged.append(segment.with_bounds(segment.start, segment.end))
		return MergeResult(merged, blocked)

	#============================
	def channel_decision(self, prev_clip, next_clip, boundary: float,
		kind: str) -> str:
		if prev_clip is None and next_clip is None:
			return MERGE_EMPTY
		if prev_clip is None or next_clip is None:
			return MERGE_DIFFERENT
		if prev_clip.id == next_clip.id:
			return MERGE_SAME_CLIP
		if self.is_continuous_pair(prev_clip, next_clip, boundary, kind):
			return MERGE_CONTINUOUS
		return MERGE_DIFFERENT

	#============================
	def is_continuous_pair(self, prev_clip, next_clip, boundary: float,
		kind: str) -> bool:
		if prev_clip.media_id != next_clip.media_id:
			return False
		prev_speed = timing.clip_speed(prev_clip)
		if prev_speed != timing.clip_speed(next_clip):
			return False
		if prev_clip.reversed or next_clip.reversed:
			return False
		if not utils.is_close_time(prev_clip.end, boundary, TIME_EPSILON_MS):
			return False
		if not utils.is_close_time(next_clip.start, boundary, TIME_EPSILON_MS):
			return False
		expected_trim = (prev_clip.trim_start or 0) + prev_clip.duration * prev_speed
		if not utils.is_close_time(expected_trim, next_clip.trim_start or 0,
			TIME_EPSILON_MS):
			return False
		prev_resolved = self._resolved(prev_clip)
		next_resolved = self._resolved(next_clip)
		if kind == 'video':
			if not prev_clip.visible or not next_clip.visible:
				return False
			return prev_resolved.video == next_resolved.video
		if bool(prev_clip.muted) != bool(next_clip.muted):
			return False
		if prev_resolved.audio != next_resolved.audio:
			return False
		return _volumes_equal(prev_resolved.volume, next_resolved.volume)

	#============================
	def _resolved(self, clip) -> filters.ResolvedFilters:
		resolved = self._resolved_cache.get(clip.id)
		if resolved is None:
			resolved = self.resolve(clip, self.defaults)
			self._resolved_cache[clip.id] = resolved
		return resolved

#============================================

def _extend_run(run: list, clips: list) -> None:
	for clip in clips:
		if run and run[-1].id == clip.id:
			continue
		run.append(clip)

#============================================

def _volumes_equal(first, second) -> bool:
	first_value = _finite_or_none(first)
	second_value = _finite_or_none(second)
	if first_value is None or second_value is None:
		return first == second
	return abs(first_value - second_value) <= VOLUME_EPSILON
