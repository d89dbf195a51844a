#!/usr/bin/env python3

import shlex
from stackcutlib.core import model
from stackcutlib.core import utils
from stackcutlib.export import ffmpeg_graph

#============================================

MIN_AUTO_WIDTH = 1280
MIN_AUTO_HEIGHT = 720
FASTSTART_FORMATS = ('mp4', 'mov', 'm4v')
CONCAT_PROTOCOLS = 'file,pipe,fd,crypto,data'

#============================================

class ExportResult():
	def __init__(self, command: str, export_audio_warning: bool = False,
		used_lossless_copy: bool = False,
		merge_blocked_by_other_tracks: bool = False, segments: list = None,
		inputs: list = None, width: int = 0, height: int = 0):
		self.command = command
		self.export_audio_warning = export_audio_warning
		self.used_lossless_copy = used_lossless_copy
		self.merge_blocked_by_other_tracks = merge_blocked_by_other_tracks
		self.segments = list(segments or [])
		self.inputs = list(inputs or [])
		self.width = width
		self.height = height

	#============================
	def __repr__(self) -> str:
		mode = 'copy' if self.used_lossless_copy else 'filter'
		return f"ExportResult({mode}, segments={len(self.segments)})"

#============================================

def resolve_output_resolution(settings: model.ExportSettings, clips: list,
	media_by_id: dict) -> tuple:
	"""
	Pick the output frame size.

	'auto' takes the largest source dimensions over every clip on the
	timeline, never going below 1280x720.
	"""
	resolution = settings.resolution
	if isinstance(resolution, model.Resolution):
		width = resolution.width or MIN_AUTO_WIDTH
		height = resolution.height or MIN_AUTO_HEIGHT
		return (int(width), int(height))
	width = MIN_AUTO_WIDTH
	height = MIN_AUTO_HEIGHT
	if resolution == 'auto':
		for clip in clips:
			media = media_by_id.get(clip.media_id)
			if media is None:
				continue
			width = max(width, int(media.width or 0))
			height = max(height, int(media.height or 0))
	return (width, height)

#============================================

def uses_crf(video_codec: str) -> bool:
	codec = video_codec or ''
	return '264' in codec or '265' in codec

#============================================

def container_flags(output_format: str) -> list:
	if (output_format or '').lower() in FASTSTART_FORMATS:
		return ['-movflags', '+faststart']
	return []

#============================================

def video_codec_flags(settings: model.ExportSettings) -> list:
	flags = []
	if settings.video_codec:
		flags.extend(['-c:v', settings.video_codec])
	if settings.video_bitrate:
		flags.extend(['-b:v', settings.video_bitrate])
	elif uses_crf(settings.video_codec):
		crf = settings.crf if settings.crf is not None else 23
		flags.extend(['-crf', utils.format_number(crf)])
		if settings.preset:
			flags.extend(['-preset', settings.preset])
	flags.extend(['-r', utils.format_number(settings.fps or 30)])
	return flags

#============================================

def audio_codec_flags(settings: model.ExportSettings) -> list:
	flags = []
	if settings.audio_codec:
		flags.extend(['-c:a', settings.audio_codec])
	if settings.audio_bitrate:
		flags.extend(['-b:a', settings.audio_bitrate])
	flags.extend(['-ar', utils.format_number(settings.sample_rate or 44100)])
	return flags

#============================================

class CommandAssembler():
	def __init__(self, settings: model.ExportSettings):
		self.settings = settings

	#============================
	def output_flags(self) -> list:
		flags = container_flags(self.settings.format or 'mp4')
		flags.extend(['-y', shlex.quote(self.settings.output_name)])
		return flags

	#============================
	def filter_command(self, plan: ffmpeg_graph.GraphPlan) -> str:
		parts = ['ffmpeg']
		for media in plan.inputs:
			parts.extend(['-i', f'"{utils.escape_shell_arg(media.name)}"'])
		parts.extend(['-filter_complex', f'"{plan.render()}"'])
		parts.extend(['-map', f'"[{ffmpeg_graph.OUTPUT_VIDEO_LABEL}]"'])
		parts.extend(['-map', f'"[{ffmpeg_graph.OUTPUT_AUDIO_LABEL}]"'])
		parts.extend(video_codec_flags(self.settings))
		parts.extend(audio_codec_flags(self.settings))
		parts.extend(self.output_flags())
		return ' '.join(parts)

	#============================
	def copy_command(self, plan) -> str:
		payload = utils.escape_for_single_quotes(plan.script_payload())
		parts = [
			'printf', "'%b'", f"'{payload}'", '|',
			'ffmpeg', '-f', 'concat', '-safe', '0',
			'-protocol_whitelist', CONCAT_PROTOCOLS,
			'-i', '-', '-c', 'copy',
		]
		parts.extend(self.output_flags())
		return ' '.join(parts)
