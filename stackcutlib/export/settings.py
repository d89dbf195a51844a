#!/usr/bin/env python3

from stackcutlib.core.model import ExportSettings
from stackcutlib.core.model import Resolution

#============================================

EXPORT_PRESETS = {
	'universal-h264': {
		'label': 'Universal (H.264)',
		'resolution': 'auto',
		'fps': 30,
		'video_codec': 'libx264',
		'video_bitrate': '',
		'crf': 23,
		'preset': 'medium',
		'audio_codec': 'aac',
		'audio_bitrate': '192k',
		'sample_rate': 44100,
	},
	'small-share': {
		'label': 'Small Share (720p)',
		'resolution': Resolution(1280, 720),
		'fps': 30,
		'video_codec': 'libx264',
		'video_bitrate': '',
		'crf': 28,
		'preset': 'veryfast',
		'audio_codec': 'aac',
		'audio_bitrate': '96k',
		'sample_rate': 44100,
	},
	'youtube-1080p': {
		'label': 'YouTube 1080p',
		'resolution': Resolution(1920, 1080),
		'fps': 30,
		'video_codec': 'libx264',
		'video_bitrate': '',
		'crf': 20,
		'preset': 'slow',
		'audio_codec': 'aac',
		'audio_bitrate': '192k',
		'sample_rate': 48000,
	},
	'youtube-4k': {
		'label': 'YouTube 4K (H.265)',
		'resolution': Resolution(3840, 2160),
		'fps': 30,
		'video_codec': 'libx265',
		'video_bitrate': '',
		'crf': 20,
		'preset': 'slow',
		'audio_codec': 'aac',
		'audio_bitrate': '256k',
		'sample_rate': 48000,
	},
}

NUMBER_KEYS = ('fps', 'crf', 'sample_rate')
TEXT_KEYS = ('video_codec', 'video_bitrate', 'preset', 'audio_codec',
	'audio_bitrate')

#============================================

def preset_settings(preset_id: str) -> dict:
	preset = EXPORT_PRESETS.get(preset_id)
	if preset is None:
		raise KeyError(f"unknown export preset: {preset_id}")
	values = dict(preset)
	values.pop('label')
	return values

#============================================

def apply_preset(settings: ExportSettings, preset_id: str) -> ExportSettings:
	return settings.copy(**preset_settings(preset_id))

#============================================

def settings_match_preset(settings: ExportSettings, preset_id: str) -> bool:
	preset = preset_settings(preset_id)
	if preset['resolution'] == 'auto':
		if settings.resolution != 'auto':
			return False
	elif settings.resolution != preset['resolution']:
		return False
	for key in NUMBER_KEYS:
		try:
			if float(getattr(settings, key)) != float(preset[key]):
				return False
		except (TypeError, ValueError):
			return False
	for key in TEXT_KEYS:
		if str(getattr(settings, key) or '') != str(preset[key] or ''):
			return False
	return True

#============================================

def match_preset(settings: ExportSettings) -> str:
	for preset_id in EXPORT_PRESETS:
		if settings_match_preset(settings, preset_id):
			return preset_id
	return ''
