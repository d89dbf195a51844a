#!/usr/bin/env python3

"""
Typed ffmpeg filter stages.

Each stage is a small value object that knows how to render itself as
filter-graph text. Chains of stages are assembled by the graph builder
and only turned into text when the command is written.
"""

import math
from stackcutlib.core import utils

#============================================

ATEMPO_MIN = 0.5
ATEMPO_MAX = 2.0
ATEMPO_TOLERANCE = 0.001

#============================================

class FilterStage():
	name = ''

	#============================
	def render(self) -> str:
		return self.name

	#============================
	def __eq__(self, other) -> bool:
		if not isinstance(other, FilterStage):
			return NotImplemented
		return self.render() == other.render()

	#============================
	def __hash__(self) -> int:
		return hash(self.render())

	#============================
	def __repr__(self) -> str:
		return f"{self.__class__.__name__}({self.render()!r})"

#============================================
# video stages
#============================================

class Trim(FilterStage):
	name = 'trim'

	def __init__(self, start_sec: str, end_sec: str):
		self.start_sec = start_sec
		self.end_sec = end_sec

	def render(self) -> str:
		return f"{self.name}=start={self.start_sec}:end={self.end_sec}"

#============================================

class SetPts(FilterStage):
	name = 'setpts'

	def __init__(self, expression: str = 'PTS-STARTPTS'):
		self.expression = expression

	def render(self) -> str:
		return f"{self.name}={self.expression}"

#============================================

class SpeedPts(SetPts):
	"""Rescale reset timestamps so the chain plays `speed` times faster."""
	def __init__(self, speed: float):
		self.speed = speed
		super().__init__(f"(PTS-STARTPTS)/{utils.format_number(speed)}")

#============================================

class Reverse(FilterStage):
	name = 'reverse'

#============================================

class Eq(FilterStage):
	name = 'eq'

	def __init__(self, brightness: float = 0, contrast: float = 1,
		saturation: float = 1, gamma: float = 1):
		self.brightness = brightness
		self.contrast = contrast
		self.saturation = saturation
		self.gamma = gamma

	def parts(self) -> list:
		parts = []
		if self.brightness != 0:
			parts.append(f"brightness={utils.format_number(self.brightness)}")
		if self.contrast != 1:
			parts.append(f"contrast={utils.format_number(self.contrast)}")
		if self.saturation != 1:
			parts.append(f"saturation={utils.format_number(self.saturation)}")
		if self.gamma != 1:
			parts.append(f"gamma={utils.format_number(self.gamma)}")
		return parts

	def render(self) -> str:
		return f"{self.name}={':'.join(self.parts())}"

#============================================

class Hue(FilterStage):
	name = 'hue'

	def __init__(self, degrees: float):
		self.degrees = degrees

	def render(self) -> str:
		return f"{self.name}=h={utils.format_number(self.degrees)}"

#============================================

class Transpose(FilterStage):
	name = 'transpose'

	def __init__(self, direction: int):
		self.direction = direction

	def render(self) -> str:
		return f"{self.name}={self.direction}"

#============================================

class HFlip(FilterStage):
	name = 'hflip'

#============================================

class VFlip(FilterStage):
	name = 'vflip'

#============================================

class BoxBlur(FilterStage):
	name = 'boxblur'

	def __init__(self, radius: float):
		self.radius = radius

	def render(self) -> str:
		return f"{self.name}=lr={utils.format_number(self.radius)}:lp=1"

#============================================

class Unsharp(FilterStage):
	name = 'unsharp'

	def __init__(self, amount: float):
		self.amount = amount

	def render(self) -> str:
		return f"{self.name}=5:5:{utils.format_number(self.amount)}:5:5:0.0"

#============================================

class Hqdn3d(FilterStage):
	name = 'hqdn3d'

	def __init__(self, denoise: float):
		self.luma = utils.format_fixed(denoise / 2, 2)
		self.chroma = utils.format_fixed(denoise / 2 * 1.5, 2)

	def render(self) -> str:
		return f"{self.name}={self.luma}:{self.luma}:{self.chroma}:{self.chroma}"

#============================================

class Fade(FilterStage):
	name = 'fade'

	def __init__(self, direction: str, start_sec: float, duration_sec: float):
		self.direction = direction
		self.start_sec = start_sec
		self.duration_sec = duration_sec

	def start_text(self) -> str:
		if self.direction == 'in':
			return utils.format_number(self.start_sec)
		return utils.format_fixed(self.start_sec, 3)

	def render(self) -> str:
		return (f"{self.name}={self.direction}:st={self.start_text()}"
			f":d={utils.format_number(self.duration_sec)}")

#============================================

class Scale(FilterStage):
	name = 'scale'

	def __init__(self, width: int, height: int):
		self.width = width
		self.height = height

	def render(self) -> str:
		return (f"{self.name}={self.width}:{self.height}"
			":force_original_aspect_ratio=decrease")

#============================================

class Pad(FilterStage):
	name = 'pad'

	def __init__(self, width: int, height: int):
		self.width = width
		self.height = height

	def render(self) -> str:
		return f"{self.name}={self.width}:{self.height}:(ow-iw)/2:(oh-ih)/2"

#============================================

class SetSar(FilterStage):
	name = 'setsar'

	def render(self) -> str:
		return f"{self.name}=1"

#============================================

class PixelFormat(FilterStage):
	name = 'format'

	def __init__(self, pixel_format: str = 'yuv420p'):
		self.pixel_format = pixel_format

	def render(self) -> str:
		return f"{self.name}={self.pixel_format}"

#============================================

class ColorSource(FilterStage):
	name = 'color'

	def __init__(self, width: int, height: int, fps, duration_ms: float,
		color: str = 'black'):
		self.width = width
		self.height = height
		self.fps = fps
		self.duration_ms = duration_ms
		self.color = color

	def render(self) -> str:
		return (f"{self.name}=c={self.color}:s={self.width}x{self.height}"
			f":r={utils.format_number(self.fps)}"
			f":d={utils.format_seconds(self.duration_ms)}")

#============================================
# audio stages
#============================================

class ATrim(Trim):
	name = 'atrim'

#============================================

class ASetPts(SetPts):
	name = 'asetpts'

#============================================

class AReverse(FilterStage):
	name = 'areverse'

#============================================

class ASetRate(FilterStage):
	name = 'asetrate'

	def __init__(self, rate: float):
		self.rate = rate

	def render(self) -> str:
		return f"{self.name}={utils.format_fixed(self.rate, 2)}"

#============================================

class ATempo(FilterStage):
	name = 'atempo'

	def __init__(self, factor: float):
		self.factor = factor

	def render(self) -> str:
		return f"{self.name}={utils.format_fixed(self.factor, 3)}"

#============================================

class Bass(FilterStage):
	name = 'bass'

	def __init__(self, gain: float):
		self.gain = gain

	def render(self) -> str:
		return f"{self.name}=g={utils.format_number(self.gain)}"

#============================================

class Treble(Bass):
	name = 'treble'

#============================================

class DynAudNorm(FilterStage):
	name = 'dynaudnorm'

#============================================

class StereoPan(FilterStage):
	name = 'pan'

	def __init__(self, pan: float):
		self.pan = pan

	def render(self) -> str:
		left = utils.format_fixed((1 - self.pan) / 2, 3)
		right = utils.format_fixed((1 + self.pan) / 2, 3)
		return (f"{self.name}=stereo|c0={left}*c0+{left}*c1"
			f"|c1={right}*c0+{right}*c1")

#============================================

class AFade(FilterStage):
	name = 'afade'

	def __init__(self, direction: str, start_sec: float, duration_sec: float,
		fixed_duration: bool = False):
		self.direction = direction
		self.start_sec = start_sec
		self.duration_sec = duration_sec
		self.fixed_duration = fixed_duration

	def render(self) -> str:
		if self.direction == 'in':
			start = utils.format_number(self.start_sec)
		else:
			start = utils.format_fixed(self.start_sec, 3)
		if self.fixed_duration:
			duration = utils.format_fixed(self.duration_sec, 3)
		else:
			duration = utils.format_number(self.duration_sec)
		return f"{self.name}=t={self.direction}:st={start}:d={duration}"

#============================================

class Volume(FilterStage):
	name = 'volume'

	def __init__(self, level: float):
		self.level = level

	def render(self) -> str:
		return f"{self.name}={utils.format_number(self.level)}"

#============================================

class ANullSrc(FilterStage):
	name = 'anullsrc'

	def __init__(self, sample_rate: int, duration_ms: float,
		channel_layout: str = 'stereo'):
		self.sample_rate = sample_rate
		self.duration_ms = duration_ms
		self.channel_layout = channel_layout

	def render(self) -> str:
		return (f"{self.name}=channel_layout={self.channel_layout}"
			f":sample_rate={utils.format_number(self.sample_rate)}"
			f":d={utils.format_seconds(self.duration_ms)}")

#============================================

class Concat(FilterStage):
	name = 'concat'

	def __init__(self, count: int, video: int = 1, audio: int = 1):
		self.count = count
		self.video = video
		self.audio = audio

	def render(self) -> str:
		return f"{self.name}=n={self.count}:v={self.video}:a={self.audio}"

#============================================

class FilterChain():
	"""
	A linear run of stages between labelled input and output pads.
	"""
	def __init__(self, inputs: list, stages: list, outputs: list):
		self.inputs = list(inputs)
		self.stages = list(stages)
		self.outputs = list(outputs)

	#============================
	def names(self) -> list:
		return [stage.name for stage in self.stages]

	#============================
	def render(self) -> str:
		in_pads = ''.join(f"[{label}]" for label in self.inputs)
		out_pads = ''.join(f"[{label}]" for label in self.outputs)
		body = ','.join(stage.render() for stage in self.stages)
		return f"{in_pads}{body}{out_pads}"

#============================================

def render_graph(chains: list) -> str:
	return '; '.join(chain.render() for chain in chains)

#============================================

def build_atempo_chain(tempo: float) -> list:
	"""
	Split a tempo factor into atempo stages within [0.5, 2.0].

	Whole 0.5 or 2.0 stages are emitted until the residual fits in range,
	then the residual itself unless it is within 0.001 of 1.
	"""
	stages = []
	if tempo is None or not math.isfinite(tempo) or tempo <= 0 or tempo == 1:
		return stages
	remaining = tempo
	while remaining < ATEMPO_MIN:
		stages.append(ATempo(ATEMPO_MIN))
		remaining /= ATEMPO_MIN
	while remaining > ATEMPO_MAX:
		stages.append(ATempo(ATEMPO_MAX))
		remaining /= ATEMPO_MAX
	if abs(remaining - 1) > ATEMPO_TOLERANCE:
		stages.append(ATempo(remaining))
	return stages

#============================================

def build_declick_fades(duration_ms: float) -> list:
	"""
	Micro fades at both ends of a segment, min(5 ms, half the segment).
	"""
	duration_sec = duration_ms / 1000.0
	if not math.isfinite(duration_sec) or duration_sec <= 0:
		return []
	fade = min(0.005, duration_sec / 2)
	if fade <= 0:
		return []
	start = max(0.0, duration_sec - fade)
	return [
		AFade('in', 0, fade, fixed_duration=True),
		AFade('out', start, fade, fixed_duration=True),
	]
