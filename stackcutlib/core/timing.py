#!/usr/bin/env python3

from stackcutlib.core import utils

#============================================

class SourceWindow():
	def __init__(self, start_ms: float, end_ms: float, speed: float):
		self.start_ms = start_ms
		self.end_ms = end_ms
		self.speed = speed

	#============================
	@property
	def start_sec(self) -> str:
		return utils.format_seconds(self.start_ms)

	#============================
	@property
	def end_sec(self) -> str:
		return utils.format_seconds(self.end_ms)

#============================================

def clip_speed(clip) -> float:
	return clip.speed or 1

#============================================

def clip_source_window(clip, segment_start: float, duration: float) -> SourceWindow:
	"""
	Map a timeline slice [segment_start, segment_start + duration) of a clip
	to the matching window in source media time.
	"""
	speed = clip_speed(clip)
	offset = segment_start - clip.start
	source_duration = duration * speed
	trim_start = clip.trim_start or 0
	if clip.reversed:
		source_length = clip.duration * speed
		reverse_start = source_length - (offset + duration) * speed
		source_start = trim_start + max(0, reverse_start)
	else:
		source_start = trim_start + offset * speed
	return SourceWindow(source_start, source_start + source_duration, speed)

#============================================

def timeline_duration(clips: list) -> float:
	if len(clips) == 0:
		return 0
	return max(clip.end for clip in clips)

