#!/usr/bin/env python3

"""
Video and audio filter settings.

Resolved filter sets are fully populated; override sets carry None for
every key the clip does not override. A clip's effective filters are the
global defaults merged with its overrides, override winning per key.
"""

#============================================

VIDEO_FILTER_KEYS = (
	'brightness',
	'contrast',
	'saturation',
	'hue',
	'gamma',
	'rotate',
	'flip_h',
	'flip_v',
	'blur',
	'sharpen',
	'denoise',
	'fade_in',
	'fade_out',
)

AUDIO_FILTER_KEYS = (
	'volume',
	'bass',
	'treble',
	'normalize',
	'pan',
	'pitch',
	'fade_in',
	'fade_out',
)

BOOLEAN_FILTER_KEYS = ('flip_h', 'flip_v', 'normalize')

#============================================

class FilterSet():
	KEYS = ()

	#============================
	def as_dict(self) -> dict:
		return {key: getattr(self, key) for key in self.KEYS}

	#============================
	def as_tuple(self) -> tuple:
		return tuple(getattr(self, key) for key in self.KEYS)

	#============================
	def merged(self, overrides):
		values = self.as_dict()
		if overrides is not None:
			for key, value in overrides.as_dict().items():
				if value is not None:
					values[key] = value
		return self.__class__(**values)

	#============================
	def __eq__(self, other) -> bool:
		if not isinstance(other, self.__class__):
			return NotImplemented
		return self.as_tuple() == other.as_tuple()

	#============================
	def __hash__(self) -> int:
		return hash((self.__class__.__name__,) + self.as_tuple())

	#============================
	def __repr__(self) -> str:
		parts = [f"{key}={value!r}" for key, value in self.as_dict().items()]
		return f"{self.__class__.__name__}({', '.join(parts)})"

	#============================
	@classmethod
	def from_mapping(cls, data: dict, label: str):
		if data is None:
			return cls()
		if not isinstance(data, dict):
			raise RuntimeError(f"{label} must be a mapping")
		values = {}
		for key, value in data.items():
			if key not in cls.KEYS:
				raise RuntimeError(f"{label} has unknown filter key: {key}")
			if value is None:
				continue
			if key in BOOLEAN_FILTER_KEYS:
				if not isinstance(value, bool):
					raise RuntimeError(f"{label}.{key} must be true or false")
				values[key] = value
				continue
			if isinstance(value, bool) or not isinstance(value, (int, float)):
				raise RuntimeError(f"{label}.{key} must be a number")
			values[key] = value
		return cls(**values)

#============================================

class VideoFilters(FilterSet):
	KEYS = VIDEO_FILTER_KEYS

	def __init__(self, brightness: float = 0, contrast: float = 1,
		saturation: float = 1, hue: float = 0, gamma: float = 1, rotate: int = 0,
		flip_h: bool = False, flip_v: bool = False, blur: float = 0,
		sharpen: float = 0, denoise: float = 0, fade_in: float = 0,
		fade_out: float = 0):
		self.brightness = brightness
		self.contrast = contrast
		self.saturation = saturation
		self.hue = hue
		self.gamma = gamma
		self.rotate = rotate
		self.flip_h = flip_h
		self.flip_v = flip_v
		self.blur = blur
		self.sharpen = sharpen
		self.denoise = denoise
		self.fade_in = fade_in
		self.fade_out = fade_out

#============================================

class AudioFilters(FilterSet):
	KEYS = AUDIO_FILTER_KEYS

	def __init__(self, volume: float = 1, bass: float = 0, treble: float = 0,
		normalize: bool = False, pan: float = 0, pitch: float = 0,
		fade_in: float = 0, fade_out: float = 0):
		self.volume = volume
		self.bass = bass
		self.treble = treble
		self.normalize = normalize
		self.pan = pan
		self.pitch = pitch
		self.fade_in = fade_in
		self.fade_out = fade_out

#============================================

class VideoFilterOverrides(FilterSet):
	KEYS = VIDEO_FILTER_KEYS

	def __init__(self, brightness=None, contrast=None, saturation=None,
		hue=None, gamma=None, rotate=None, flip_h=None, flip_v=None, blur=None,
		sharpen=None, denoise=None, fade_in=None, fade_out=None):
		self.brightness = brightness
		self.contrast = contrast
		self.saturation = saturation
		self.hue = hue
		self.gamma = gamma
		self.rotate = rotate
		self.flip_h = flip_h
		self.flip_v = flip_v
		self.blur = blur
		self.sharpen = sharpen
		self.denoise = denoise
		self.fade_in = fade_in
		self.fade_out = fade_out

#============================================

class AudioFilterOverrides(FilterSet):
	KEYS = AUDIO_FILTER_KEYS

	def __init__(self, volume=None, bass=None, treble=None, normalize=None,
		pan=None, pitch=None, fade_in=None, fade_out=None):
		self.volume = volume
		self.bass = bass
		self.treble = treble
		self.normalize = normalize
		self.pan = pan
		self.pitch = pitch
		self.fade_in = fade_in
		self.fade_out = fade_out

#============================================

NEUTRAL_VIDEO_FILTERS = VideoFilters()
NEUTRAL_AUDIO_FILTERS = AudioFilters()

#============================================

class DefaultFilters():
	def __init__(self, video: VideoFilters = None, audio: AudioFilters = None):
		self.video = video if video is not None else VideoFilters()
		self.audio = audio if audio is not None else AudioFilters()

#============================================

class ResolvedFilters():
	def __init__(self, video: VideoFilters, audio: AudioFilters, volume: float):
		self.video = video
		self.audio = audio
		self.volume = volume

	#============================
	def is_neutral(self) -> bool:
		if self.video != NEUTRAL_VIDEO_FILTERS:
			return False
		if self.audio != NEUTRAL_AUDIO_FILTERS:
			return False
		return self.volume == 1

#============================================

def resolve_video_filters(clip, defaults: DefaultFilters) -> VideoFilters:
	return defaults.video.merged(clip.video_filters)

#============================================

def resolve_audio_filters(clip, defaults: DefaultFilters) -> AudioFilters:
	return defaults.audio.merged(clip.audio_filters)

#============================================

def resolve_clip_volume(clip, defaults: DefaultFilters) -> float:
	if clip.volume is not None:
		return clip.volume
	if clip.audio_filters is not None and clip.audio_filters.volume is not None:
		return clip.audio_filters.volume
	if defaults.audio.volume is not None:
		return defaults.audio.volume
	return 1

#============================================

def resolve_filters(clip, defaults: DefaultFilters) -> ResolvedFilters:
	return ResolvedFilters(
		resolve_video_filters(clip, defaults),
		resolve_audio_filters(clip, defaults),
		resolve_clip_volume(clip, defaults),
	)
