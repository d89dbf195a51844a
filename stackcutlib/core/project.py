#!/usr/bin/env python3

import sys
from stackcutlib.core import timing
from stackcutlib.core import utils
from stackcutlib.core.loader import ProjectLoader
from stackcutlib.export import compiler
from stackcutlib.export import settings as export_settings

#============================================

AUDIO_WARNING = ("warning: audio presence is unknown for some media; "
	"the export assumes audio streams exist")

#============================================

class StackcutProject():
	def __init__(self, yaml_file: str, output_override: str = None,
		preset: str = None):
		loader = ProjectLoader(yaml_file, output_override=output_override,
			preset=preset)
		self.yaml_file = yaml_file
		self.snapshot = loader.load()
		self.settings = self.snapshot.export_settings
		self._result = None
		self._compiled = False

	#============================
	def compile(self):
		if not self._compiled:
			self._result = compiler.compile_export(self.snapshot)
			self._compiled = True
		return self._result

	#============================
	def run(self) -> bool:
		"""
		Print the export command. Returns False when there is nothing to export.
		"""
		result = self.compile()
		if result is None:
			print("nothing to export", file=sys.stderr)
			return False
		if result.export_audio_warning:
			print(AUDIO_WARNING, file=sys.stderr)
		if not utils.is_quiet_mode():
			mode = 'stream copy' if result.used_lossless_copy else 'filter graph'
			print(f"# {len(result.segments)} segments, {mode}")
		print(result.command)
		return True

	#============================
	def plan(self) -> dict:
		result = self.compile()
		segments = []
		if result is not None:
			for segment in result.segments:
				segments.append({
					'start': segment.start,
					'end': segment.end,
					'start_tc': utils.format_timecode(segment.start),
					'end_tc': utils.format_timecode(segment.end),
					'video': [clip.id for clip in segment.video_clips],
					'audio': [clip.id for clip in segment.audio_clips],
				})
		return {
			'timeline_duration': timing.timeline_duration(self.snapshot.clips),
			'preset': export_settings.match_preset(self.settings) or 'custom',
			'output': self.settings.output_name,
			'used_lossless_copy': bool(result and result.used_lossless_copy),
			'export_audio_warning': bool(result and result.export_audio_warning),
			'merge_blocked_by_other_tracks': bool(
				result and result.merge_blocked_by_other_tracks),
			'segments': segments,
		}
