#!/usr/bin/env python3

import os
import yaml
from stackcutlib.core import filters
from stackcutlib.core import model
from stackcutlib.export import settings as export_settings

#============================================

MIN_SPEED = 0.25
MAX_SPEED = 4.0

EXPORT_KEYS = (
	'preset',
	'resolution',
	'fps',
	'video_codec',
	'video_bitrate',
	'crf',
	'encoder_preset',
	'audio_codec',
	'audio_bitrate',
	'sample_rate',
	'format',
	'range_start',
	'range_end',
	'de_click',
	'allow_lossless_copy',
	'output_file',
)

#============================================

def _parse_number(value, label: str) -> float:
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		raise RuntimeError(f"{label} must be a number")
	return value

#============================================

def _parse_bool(value, label: str) -> bool:
	if not isinstance(value, bool):
		raise RuntimeError(f"{label} must be true or false")
	return value

#============================================

def _parse_text(value, label: str) -> str:
	if value is None:
		return ''
	if isinstance(value, bool) or not isinstance(value, (str, int, float)):
		raise RuntimeError(f"{label} must be text")
	return str(value)

#============================================

def _require_list(value, label: str) -> list:
	if value is None:
		return []
	if not isinstance(value, list):
		raise RuntimeError(f"{label} must be a list")
	return value

#============================================

def _require_mapping(value, label: str) -> dict:
	if value is None:
		return {}
	if not isinstance(value, dict):
		raise RuntimeError(f"{label} must be a mapping")
	return value

#============================================

class ProjectLoader():
	def __init__(self, yaml_file: str, output_override: str = None,
		preset: str = None):
		self.yaml_file = yaml_file
		self.output_override = output_override
		self.preset = preset

	#============================
	def load(self) -> model.TimelineSnapshot:
		data = self._load_yaml()
		self._validate_required_keys(data)
		(media, media_info) = self._parse_media(data.get('media'))
		tracks = self._parse_tracks(data.get('tracks'))
		clips = self._parse_clips(data.get('clips'), tracks)
		default_filters = self._parse_defaults(data.get('defaults'))
		settings = self._parse_export(data.get('export'))
		return model.TimelineSnapshot(clips=clips, tracks=tracks, media=media,
			media_info=media_info, export_settings=settings,
			default_filters=default_filters)

	#============================
	def _load_yaml(self) -> dict:
		file_size = os.path.getsize(self.yaml_file)
		if file_size > 10 ** 7:
			raise RuntimeError("yaml file is larger than 10MB")
		with open(self.yaml_file, 'r') as data_file:
			data = yaml.safe_load(data_file)
		if not isinstance(data, dict):
			raise RuntimeError("snapshot yaml must be a mapping at the top level")
		return data

	#============================
	def _validate_required_keys(self, data: dict) -> None:
		if data.get('stackcut') != 1:
			raise RuntimeError("stackcut must be set to 1")
		for key in ('media', 'clips'):
			if key not in data:
				raise RuntimeError(f"missing required key: {key}")

	#============================
	def _parse_media(self, entries) -> tuple:
		media = []
		media_info = {}
		seen = set()
		for index, entry in enumerate(_require_list(entries, 'media')):
			label = f"media[{index}]"
			if not isinstance(entry, dict):
				raise RuntimeError(f"{label} must be a mapping")
			media_id = entry.get('id')
			name = entry.get('name')
			if media_id is None or not name:
				raise RuntimeError(f"{label} requires id and name")
			media_id = str(media_id)
			if media_id in seen:
				raise RuntimeError(f"duplicate media id: {media_id}")
			seen.add(media_id)
			item = model.Media(
				media_id,
				str(name),
				mime_type=_parse_text(entry.get('type'), f"{label}.type"),
				duration=_parse_number(entry.get('duration', 0), f"{label}.duration"),
				width=int(_parse_number(entry.get('width', 0), f"{label}.width")),
				height=int(_parse_number(entry.get('height', 0), f"{label}.height")),
				offline=_parse_bool(entry.get('offline', False), f"{label}.offline"),
			)
			media.append(item)
			media_info[media_id] = model.MediaInfo(
				has_video=model.Presence.from_value(entry.get('has_video')),
				has_audio=model.Presence.from_value(entry.get('has_audio')),
			)
		return (media, media_info)

	#============================
	def _parse_tracks(self, entries) -> list:
		tracks = []
		for index, entry in enumerate(_require_list(entries, 'tracks')):
			label = f"tracks[{index}]"
			if not isinstance(entry, dict):
				raise RuntimeError(f"{label} must be a mapping")
			track_id = entry.get('id')
			if isinstance(track_id, bool) or not isinstance(track_id, int):
				raise RuntimeError(f"{label}.id must be an integer")
			tracks.append(model.Track(
				track_id,
				name=_parse_text(entry.get('name'), f"{label}.name"),
				muted=_parse_bool(entry.get('muted', False), f"{label}.muted"),
				locked=_parse_bool(entry.get('locked', False), f"{label}.locked"),
				visible=_parse_bool(entry.get('visible', True), f"{label}.visible"),
			))
		return tracks

	#============================
	def _parse_clips(self, entries, tracks: list) -> list:
		track_ids = {track.id for track in tracks}
		clips = []
		seen = set()
		for index, entry in enumerate(_require_list(entries, 'clips')):
			label = f"clips[{index}]"
			if not isinstance(entry, dict):
				raise RuntimeError(f"{label} must be a mapping")
			clip = self._parse_clip(entry, label)
			if clip.id in seen:
				raise RuntimeError(f"duplicate clip id: {clip.id}")
			seen.add(clip.id)
			if track_ids and clip.track_id not in track_ids:
				raise RuntimeError(f"clip {clip.id} references unknown track {clip.track_id}")
			clips.append(clip)
		return clips

	#============================
	def _parse_clip(self, entry: dict, label: str) -> model.Clip:
		clip_id = entry.get('id')
		media_id = entry.get('media')
		if clip_id is None or media_id is None:
			raise RuntimeError(f"{label} requires id and media")
		track_id = entry.get('track', 0)
		if isinstance(track_id, bool) or not isinstance(track_id, int):
			raise RuntimeError(f"{label}.track must be an integer")
		start = _parse_number(entry.get('start', 0), f"{label}.start")
		if start < 0:
			raise RuntimeError(f"{label}.start must be >= 0")
		duration = _parse_number(entry.get('duration'), f"{label}.duration")
		if duration <= 0:
			raise RuntimeError(f"{label}.duration must be > 0")
		trim_start = _parse_number(entry.get('trim_start', 0), f"{label}.trim_start")
		if trim_start < 0:
			raise RuntimeError(f"{label}.trim_start must be >= 0")
		speed = _parse_number(entry.get('speed', 1), f"{label}.speed")
		if speed < MIN_SPEED or speed > MAX_SPEED:
			raise RuntimeError(f"{label}.speed must be between {MIN_SPEED} and {MAX_SPEED}")
		volume = entry.get('volume')
		if volume is not None:
			volume = _parse_number(volume, f"{label}.volume")
		return model.Clip(
			str(clip_id),
			str(media_id),
			track_id,
			start,
			duration,
			trim_start=trim_start,
			speed=speed,
			reversed=_parse_bool(entry.get('reversed', False), f"{label}.reversed"),
			muted=_parse_bool(entry.get('muted', False), f"{label}.muted"),
			visible=_parse_bool(entry.get('visible', True), f"{label}.visible"),
			volume=volume,
			video_filters=filters.VideoFilterOverrides.from_mapping(
				entry.get('video_filters'), f"{label}.video_filters"),
			audio_filters=filters.AudioFilterOverrides.from_mapping(
				entry.get('audio_filters'), f"{label}.audio_filters"),
			name=_parse_text(entry.get('name'), f"{label}.name"),
			trim_end=_parse_number(entry.get('trim_end', 0), f"{label}.trim_end"),
			color=entry.get('color'),
		)

	#============================
	def _parse_defaults(self, defaults) -> filters.DefaultFilters:
		defaults = _require_mapping(defaults, 'defaults')
		video = filters.VideoFilters.from_mapping(defaults.get('video'),
			'defaults.video')
		audio = filters.AudioFilters.from_mapping(defaults.get('audio'),
			'defaults.audio')
		return filters.DefaultFilters(video=video, audio=audio)

	#============================
	def _parse_export(self, export) -> model.ExportSettings:
		export = _require_mapping(export, 'export')
		for key in export:
			if key not in EXPORT_KEYS:
				raise RuntimeError(f"export has unknown key: {key}")
		settings = model.ExportSettings()
		preset_id = self.preset or export.get('preset')
		if preset_id:
			if preset_id not in export_settings.EXPORT_PRESETS:
				raise RuntimeError(f"unknown export preset: {preset_id}")
			settings = export_settings.apply_preset(settings, preset_id)
		changes = {}
		if 'resolution' in export:
			changes['resolution'] = self._parse_resolution(export['resolution'])
		for key in ('fps', 'crf', 'sample_rate', 'range_start'):
			if key in export:
				changes[key] = _parse_number(export[key], f"export.{key}")
		if export.get('range_end') is not None:
			changes['range_end'] = _parse_number(export['range_end'], 'export.range_end')
		for key in ('video_codec', 'video_bitrate', 'audio_codec',
			'audio_bitrate', 'format', 'output_file'):
			if key in export:
				changes[key] = _parse_text(export[key], f"export.{key}")
		if 'encoder_preset' in export:
			changes['preset'] = _parse_text(export['encoder_preset'],
				'export.encoder_preset')
		for key in ('de_click', 'allow_lossless_copy'):
			if key in export:
				changes[key] = _parse_bool(export[key], f"export.{key}")
		if self.output_override:
			changes['output_file'] = self.output_override
		return settings.copy(**changes)

	#============================
	def _parse_resolution(self, value):
		if value is None or value == 'auto':
			return 'auto'
		if not isinstance(value, list) or len(value) != 2:
			raise RuntimeError("export.resolution must be auto or [width, height]")
		width = int(_parse_number(value[0], 'export.resolution width'))
		height = int(_parse_number(value[1], 'export.resolution height'))
		if width <= 0 or height <= 0:
			raise RuntimeError("export.resolution must be positive")
		return model.Resolution(width, height)
