#!/usr/bin/env python3

from stackcutlib.core import filters
from stackcutlib.core import model
from stackcutlib.core import timing
from stackcutlib.export import ffmpeg_filters as ff

#============================================

OUTPUT_VIDEO_LABEL = 'outv'
OUTPUT_AUDIO_LABEL = 'outa'

#============================================

class GraphPlan():
	def __init__(self, inputs: list, chains: list, export_audio_warning: bool):
		self.inputs = inputs
		self.chains = chains
		self.export_audio_warning = export_audio_warning

	#============================
	def render(self) -> str:
		return ff.render_graph(self.chains)

#============================================

def video_effect_stages(video: filters.VideoFilters, duration_ms: float) -> list:
	stages = []
	eq = ff.Eq(video.brightness, video.contrast, video.saturation, video.gamma)
	if len(eq.parts()) > 0:
		stages.append(eq)
	if video.hue != 0:
		stages.append(ff.Hue(video.hue))
	if video.rotate == 90:
		stages.append(ff.Transpose(1))
	elif video.rotate == 180:
		stages.extend([ff.Transpose(2), ff.Transpose(2)])
	elif video.rotate == 270:
		stages.append(ff.Transpose(2))
	if video.flip_h:
		stages.append(ff.HFlip())
	if video.flip_v:
		stages.append(ff.VFlip())
	if video.blur > 0:
		stages.append(ff.BoxBlur(video.blur))
	if video.sharpen > 0:
		stages.append(ff.Unsharp(video.sharpen))
	if video.denoise > 0:
		stages.append(ff.Hqdn3d(video.denoise))
	if video.fade_in > 0:
		stages.append(ff.Fade('in', 0, video.fade_in))
	if video.fade_out > 0:
		start = max(0.0, duration_ms / 1000.0 - video.fade_out)
		stages.append(ff.Fade('out', start, video.fade_out))
	return stages

#============================================

def audio_effect_stages(audio: filters.AudioFilters, duration_ms: float) -> list:
	stages = []
	if audio.bass:
		stages.append(ff.Bass(audio.bass))
	if audio.treble:
		stages.append(ff.Treble(audio.treble))
	if audio.normalize:
		stages.append(ff.DynAudNorm())
	if audio.pan:
		stages.append(ff.StereoPan(audio.pan))
	if audio.fade_in > 0:
		stages.append(ff.AFade('in', 0, audio.fade_in))
	if audio.fade_out > 0:
		start = max(0.0, duration_ms / 1000.0 - audio.fade_out)
		stages.append(ff.AFade('out', start, audio.fade_out))
	return stages

#============================================

def tempo_stages(speed: float, pitch: float, sample_rate: int) -> list:
	"""
	Decompose a speed change with a pitch shift into asetrate + atempo.

	Resampling by 2^(pitch/12) shifts pitch and speed together, so the
	tempo stretch only covers speed / pitch_ratio.
	"""
	stages = []
	pitch = pitch or 0
	pitch_ratio = 2 ** (pitch / 12.0)
	tempo = (speed or 1) / pitch_ratio
	if pitch != 0:
		stages.append(ff.ASetRate(sample_rate * pitch_ratio))
	stages.extend(ff.build_atempo_chain(tempo))
	return stages

#============================================

class FilterGraphSynthesizer():
	def __init__(self, segments: list, media_by_id: dict, media_info: dict,
		settings: model.ExportSettings, defaults: filters.DefaultFilters,
		width: int, height: int, resolve=None):
		self.segments = segments
		self.media_by_id = media_by_id
		self.media_info = media_info or {}
		self.settings = settings
		self.defaults = defaults
		self.width = width
		self.height = height
		self.resolve = resolve or filters.resolve_filters
		self.fps = settings.fps or 30
		self.sample_rate = settings.sample_rate or 44100
		self.input_index = {}
		self.inputs = []
		self.export_audio_warning = False

	#============================
	def build(self) -> GraphPlan:
		self.collect_inputs()
		if len(self.inputs) == 0:
			return None
		chains = []
		pad_labels = []
		for index, segment in enumerate(self.segments):
			if segment.duration <= 0 or not self._segment_media_available(segment):
				continue
			video_label = f"v{index}"
			audio_label = f"a{index}"
			chains.append(self.build_video_chain(segment, video_label))
			chains.append(self.build_audio_chain(segment, audio_label))
			pad_labels.extend([video_label, audio_label])
		if len(pad_labels) == 0:
			return None
		count = len(pad_labels) // 2
		chains.append(ff.FilterChain(pad_labels, [ff.Concat(count)],
			[OUTPUT_VIDEO_LABEL, OUTPUT_AUDIO_LABEL]))
		return GraphPlan(self.inputs, chains, self.export_audio_warning)

	#============================
	def collect_inputs(self) -> None:
		for segment in self.segments:
			if segment.duration <= 0 or not self._segment_media_available(segment):
				continue
			for clip in (segment.video_clip, segment.audio_clip):
				if clip is None:
					continue
				media = self._media_for(clip)
				if media is None or media.id in self.input_index:
					continue
				self.input_index[media.id] = len(self.inputs)
				self.inputs.append(media)

	#============================
	def build_video_chain(self, segment, label: str) -> ff.FilterChain:
		clip = segment.video_clip
		if clip is None:
			return self.black_chain(segment.duration, label)
		media = self._media_for(clip)
		info = model.lookup_media_info(self.media_info, media.id)
		if not model.media_has_video(media, info):
			return self.black_chain(segment.duration, label)
		window = timing.clip_source_window(clip, segment.start, segment.duration)
		stages = [ff.Trim(window.start_sec, window.end_sec), ff.SetPts()]
		if clip.reversed:
			stages.extend([ff.Reverse(), ff.SetPts()])
		if window.speed != 1:
			stages.append(ff.SpeedPts(window.speed))
		resolved = self.resolve(clip, self.defaults)
		stages.extend(video_effect_stages(resolved.video, segment.duration))
		stages.extend([
			ff.Scale(self.width, self.height),
			ff.Pad(self.width, self.height),
			ff.SetSar(),
			ff.PixelFormat('yuv420p'),
		])
		source_pad = f"{self.input_index[media.id]}:v"
		return ff.FilterChain([source_pad], stages, [label])

	#============================
	def build_audio_chain(self, segment, label: str) -> ff.FilterChain:
		clip = segment.audio_clip
		if clip is None:
			return self.silence_chain(segment.duration, label)
		media = self._media_for(clip)
		info = model.lookup_media_info(self.media_info, media.id)
		(present, inferred) = model.media_audio_presence(media, info)
		if inferred:
			self.export_audio_warning = True
		if not present:
			return self.silence_chain(segment.duration, label)
		window = timing.clip_source_window(clip, segment.start, segment.duration)
		stages = [ff.ATrim(window.start_sec, window.end_sec), ff.ASetPts()]
		if clip.reversed:
			stages.extend([ff.AReverse(), ff.ASetPts()])
		resolved = self.resolve(clip, self.defaults)
		stages.extend(tempo_stages(window.speed, resolved.audio.pitch,
			self.sample_rate))
		stages.extend(audio_effect_stages(resolved.audio, segment.duration))
		# a muted winner keeps its slot and contributes silence
		volume = 0 if clip.muted else resolved.volume
		if volume != 1:
			stages.append(ff.Volume(volume))
		if self.settings.de_click:
			stages.extend(ff.build_declick_fades(segment.duration))
		source_pad = f"{self.input_index[media.id]}:a"
		return ff.FilterChain([source_pad], stages, [label])

	#============================
	def black_chain(self, duration_ms: float, label: str) -> ff.FilterChain:
		stages = [
			ff.ColorSource(self.width, self.height, self.fps, duration_ms),
			ff.PixelFormat('yuv420p'),
			ff.SetSar(),
		]
		return ff.FilterChain([], stages, [label])

	#============================
	def silence_chain(self, duration_ms: float, label: str) -> ff.FilterChain:
		stages = [ff.ANullSrc(self.sample_rate, duration_ms)]
		return ff.FilterChain([], stages, [label])

	#============================
	def _media_for(self, clip):
		media = self.media_by_id.get(clip.media_id)
		if media is None or media.offline:
			return None
		return media

	#============================
	def _segment_media_available(self, segment) -> bool:
		for clip in (segment.video_clip, segment.audio_clip):
			if clip is not None and self._media_for(clip) is None:
				return False
		return True
