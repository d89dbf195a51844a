#!/usr/bin/env python3

from stackcutlib.core import model

#============================================

class Segment():
	"""
	Half-open timeline interval [start, end) with one winning clip per channel.

	Each channel keeps the run of clips that contribute to the interval.
	The first clip of a run is the channel winner and anchors the source
	window; continuity merges append further clips to the run.
	"""
	def __init__(self, start: float, end: float, video_clips: list = None,
		audio_clips: list = None):
		self.start = start
		self.end = end
		self.video_clips = list(video_clips or [])
		self.audio_clips = list(audio_clips or [])

	#============================
	@property
	def duration(self) -> float:
		return self.end - self.start

	#============================
	@property
	def video_clip(self):
		return self.video_clips[0] if self.video_clips else None

	#============================
	@property
	def audio_clip(self):
		return self.audio_clips[0] if self.audio_clips else None

	#============================
	@property
	def video_tail(self):
		return self.video_clips[-1] if self.video_clips else None

	#============================
	@property
	def audio_tail(self):
		return self.audio_clips[-1] if self.audio_clips else None

	#============================
	@property
	def is_empty(self) -> bool:
		return not self.video_clips and not self.audio_clips

	#============================
	def with_bounds(self, start: float, end: float):
		return Segment(start, end, self.video_clips, self.audio_clips)

	#============================
	def __repr__(self) -> str:
		video_id = self.video_clip.id if self.video_clip else None
		audio_id = self.audio_clip.id if self.audio_clip else None
		return f"Segment({self.start}, {self.end}, video={video_id!r}, audio={audio_id!r})"

#============================================

def clip_id(clip):
	return clip.id if clip is not None else None

#============================================

class SegmentResolver():
	def __init__(self, clips: list, media_by_id: dict, media_info: dict = None):
		self.clips = list(clips)
		self.media_by_id = media_by_id
		self.media_info = media_info or {}

	#============================
	def resolve(self) -> list:
		return merge_adjacent(self.walk_boundaries())

	#============================
	def boundaries(self) -> list:
		times = {0}
		for clip in self.clips:
			times.add(clip.start)
			times.add(clip.end)
		return sorted(times)

	#============================
	def walk_boundaries(self) -> list:
		if len(self.clips) == 0:
			return []
		times = self.boundaries()
		segments = []
		for start, end in zip(times, times[1:]):
			if end <= start:
				continue
			active = [clip for clip in self.clips if clip.start <= start < clip.end]
			if len(active) == 0:
				segments.append(Segment(start, end))
				continue
			audio_clip = self._topmost(active)
			video_clip = self._topmost([clip for clip in active
				if clip.visible and self.is_video_capable(clip)])
			segments.append(Segment(start, end,
				[video_clip] if video_clip is not None else [],
				[audio_clip]))
		return segments

	#============================
	def is_video_capable(self, clip) -> bool:
		media = self.media_by_id.get(clip.media_id)
		if media is None:
			return False
		info = model.lookup_media_info(self.media_info, media.id)
		return model.media_has_video(media, info)

	#============================
	def _topmost(self, active: list):
		topmost = None
		for clip in active:
			if topmost is None or clip.track_id < topmost.track_id:
				topmost = clip
		return topmost

#============================================

def merge_adjacent(segments: list) -> list:
	"""
	Collapse neighbours whose video and audio winners are unchanged.
	"""
	merged = []
	for segment in segments:
		last = merged[-1] if merged else None
		if (last is not None
			and clip_id(last.video_clip) == clip_id(segment.video_clip)
			and clip_id(last.audio_clip) == clip_id(segment.audio_clip)):
			last.end = segment.end
			continue
		merged.append(segment.with_bounds(segment.start, segment.end))
	return merged
