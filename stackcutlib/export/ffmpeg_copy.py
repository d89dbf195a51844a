#!/usr/bin/env python3

"""
Stream-copy export plan.

When every segment plays an untouched window of one source file, the
export can skip re-encoding and hand ffmpeg a concat script of inpoint
and outpoint pairs instead.
"""

from stackcutlib.core import filters
from stackcutlib.core import model
from stackcutlib.core import timing
from stackcutlib.core import utils

#============================================

class CopyPlan():
	def __init__(self, media: model.Media, windows: list,
		export_audio_warning: bool = False):
		self.media = media
		self.windows = windows
		self.export_audio_warning = export_audio_warning

	#============================
	def script_lines(self) -> list:
		lines = []
		path = utils.escape_concat_file_path(self.media.name)
		for window in self.windows:
			lines.append(f"file 'file:{path}'")
			lines.append(f"inpoint {window.start_sec}")
			lines.append(f"outpoint {window.end_sec}")
		return lines

	#============================
	def script_payload(self) -> str:
		"""
		Concat script with literal backslash-n separators, expanded by printf %b.
		"""
		return '\\n'.join(self.script_lines()) + '\\n'

#============================================

class LosslessCopyPlanner():
	def __init__(self, segments: list, media_by_id: dict, media_info: dict,
		defaults: filters.DefaultFilters, resolve=None):
		self.segments = segments
		self.media_by_id = media_by_id
		self.media_info = media_info or {}
		self.defaults = defaults
		self.resolve = resolve or filters.resolve_filters

	#============================
	def plan(self) -> CopyPlan:
		"""
		Return a CopyPlan, or None when any segment needs re-encoding.
		"""
		if len(self.segments) == 0:
			return None
		source_media_id = None
		windows = []
		for segment in self.segments:
			if not self.is_copy_safe_segment(segment):
				return None
			for clip in segment.video_clips:
				if source_media_id is None:
					source_media_id = clip.media_id
				elif clip.media_id != source_media_id:
					return None
			windows.append(timing.clip_source_window(segment.video_clip,
				segment.start, segment.duration))
		media = self.media_by_id.get(source_media_id)
		if media is None or media.offline:
			return None
		info = model.lookup_media_info(self.media_info, media.id)
		if not model.media_has_video(media, info):
			return None
		(has_audio, inferred) = model.media_audio_presence(media, info)
		if not has_audio:
			return None
		return CopyPlan(media, windows, export_audio_warning=inferred)

	#============================
	def is_copy_safe_segment(self, segment) -> bool:
		if segment.duration <= 0:
			return False
		if not segment.video_clips or not segment.audio_clips:
			return False
		video_ids = [clip.id for clip in segment.video_clips]
		audio_ids = [clip.id for clip in segment.audio_clips]
		if video_ids != audio_ids:
			return False
		for clip in segment.video_clips:
			if not self.is_copy_safe_clip(clip):
				return False
		return True

	#============================
	def is_copy_safe_clip(self, clip) -> bool:
		if timing.clip_speed(clip) != 1:
			return False
		if clip.reversed or clip.muted or not clip.visible:
			return False
		return self.resolve(clip, self.defaults).is_neutral()
