#!/usr/bin/env python3

"""
Timeline snapshot types read by the export compiler.

All times are milliseconds. Timeline times are measured from the start
of the timeline; trim offsets are measured in source media time.
"""

import enum
from stackcutlib.core.filters import AudioFilterOverrides
from stackcutlib.core.filters import DefaultFilters
from stackcutlib.core.filters import VideoFilterOverrides

#============================================

class Presence(enum.Enum):
	TRUE = 'true'
	FALSE = 'false'
	UNKNOWN = 'unknown'

	#============================
	@property
	def known(self) -> bool:
		return self is not Presence.UNKNOWN

	#============================
	@classmethod
	def from_value(cls, value):
		if isinstance(value, Presence):
			return value
		if value is None:
			return cls.UNKNOWN
		if value is True:
			return cls.TRUE
		if value is False:
			return cls.FALSE
		text = str(value).strip().lower()
		if text in ('true', 'yes'):
			return cls.TRUE
		if text in ('false', 'no'):
			return cls.FALSE
		if text in ('unknown', 'null', ''):
			return cls.UNKNOWN
		raise RuntimeError(f"presence must be true, false, or unknown: {value}")

#============================================

class MediaInfo():
	def __init__(self, has_video: Presence = Presence.UNKNOWN,
		has_audio: Presence = Presence.UNKNOWN):
		self.has_video = has_video
		self.has_audio = has_audio

UNKNOWN_MEDIA_INFO = MediaInfo()

#============================================

class Media():
	def __init__(self, media_id: str, name: str, mime_type: str = '',
		duration: float = 0, width: int = 0, height: int = 0,
		offline: bool = False):
		self.id = media_id
		self.name = name
		self.type = mime_type or ''
		self.duration = duration
		self.width = width
		self.height = height
		self.offline = offline

	#============================
	@property
	def is_audio_type(self) -> bool:
		return self.type.startswith('audio/')

	#============================
	@property
	def is_video_type(self) -> bool:
		return self.type.startswith('video/')

#============================================

class Track():
	def __init__(self, track_id: int, name: str = '', muted: bool = False,
		locked: bool = False, visible: bool = True):
		self.id = track_id
		self.name = name
		self.muted = muted
		self.locked = locked
		self.visible = visible

#============================================

class Clip():
	def __init__(self, clip_id: str, media_id: str, track_id: int, start: float,
		duration: float, trim_start: float = 0, speed: float = 1.0,
		reversed: bool = False, muted: bool = False, visible: bool = True,
		volume: float = None, video_filters: VideoFilterOverrides = None,
		audio_filters: AudioFilterOverrides = None, name: str = '',
		trim_end: float = 0, color: str = None):
		self.id = clip_id
		self.media_id = media_id
		self.track_id = track_id
		self.start = start
		self.duration = duration
		self.trim_start = trim_start
		self.trim_end = trim_end
		self.speed = speed
		self.reversed = reversed
		self.muted = muted
		self.visible = visible
		self.volume = volume
		self.video_filters = video_filters or VideoFilterOverrides()
		self.audio_filters = audio_filters or AudioFilterOverrides()
		self.name = name
		self.color = color

	#============================
	@property
	def end(self) -> float:
		return self.start + self.duration

	#============================
	def __repr__(self) -> str:
		return (f"Clip({self.id!r}, media={self.media_id!r}, track={self.track_id}, "
			f"start={self.start}, duration={self.duration})")

#============================================

class Resolution():
	def __init__(self, width: int, height: int):
		self.width = width
		self.height = height

	#============================
	def __eq__(self, other) -> bool:
		if not isinstance(other, Resolution):
			return NotImplemented
		return (self.width, self.height) == (other.width, other.height)

	#============================
	def __hash__(self) -> int:
		return hash((self.width, self.height))

	#============================
	def __repr__(self) -> str:
		return f"Resolution({self.width}, {self.height})"

#============================================

class ExportSettings():
	def __init__(self, resolution='auto', fps: float = 30,
		video_codec: str = 'libx264', video_bitrate: str = '', crf: int = 23,
		preset: str = 'medium', audio_codec: str = 'aac',
		audio_bitrate: str = '192k', sample_rate: int = 44100,
		format: str = 'mp4', range_start: float = 0, range_end: float = None,
		de_click: bool = True, allow_lossless_copy: bool = True,
		output_file: str = None):
		self.resolution = resolution
		self.fps = fps
		self.video_codec = video_codec
		self.video_bitrate = video_bitrate
		self.crf = crf
		self.preset = preset
		self.audio_codec = audio_codec
		self.audio_bitrate = audio_bitrate
		self.sample_rate = sample_rate
		self.format = format
		self.range_start = range_start
		self.range_end = range_end
		self.de_click = de_click
		self.allow_lossless_copy = allow_lossless_copy
		self.output_file = output_file

	#============================
	def copy(self, **changes):
		values = dict(vars(self))
		values.update(changes)
		return ExportSettings(**values)

	#============================
	@property
	def output_name(self) -> str:
		if self.output_file:
			return self.output_file
		return f"output.{self.format or 'mp4'}"

#============================================

class TimelineSnapshot():
	def __init__(self, clips: list = None, tracks: list = None,
		media: list = None, media_info: dict = None,
		export_settings: ExportSettings = None,
		default_filters: DefaultFilters = None):
		self.clips = list(clips or [])
		self.tracks = list(tracks or [])
		self.media = list(media or [])
		self.media_info = dict(media_info or {})
		self.export_settings = export_settings or ExportSettings()
		self.default_filters = default_filters or DefaultFilters()

	#============================
	def media_by_id(self) -> dict:
		return {media.id: media for media in self.media}

#============================================

def lookup_media_info(media_info: dict, media_id: str) -> MediaInfo:
	if media_info is None:
		return UNKNOWN_MEDIA_INFO
	return media_info.get(media_id, UNKNOWN_MEDIA_INFO)

#============================================

def media_has_video(media: Media, info: MediaInfo) -> bool:
	if info.has_video.known:
		return info.has_video is Presence.TRUE
	return not media.is_audio_type

#============================================

def media_audio_presence(media: Media, info: MediaInfo) -> tuple:
	"""
	Return (present, inferred) for the audio channel of a media item.

	Known presence is used as is. Unknown presence is inferred from the
	mime type: audio and video containers are assumed to carry audio,
	anything else is treated as silent.
	"""
	if info.has_audio.known:
		return (info.has_audio is Presence.TRUE, False)
	if media.is_audio_type or media.is_video_type:
		return (True, True)
	return (False, True)
