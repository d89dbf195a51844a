#!/usr/bin/env python3

"""
Unit tests for typed ffmpeg filter stages.
"""

# Standard Library
import math
import os
import sys

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from stackcutlib.export import ffmpeg_filters as ff

#============================================

@pytest.mark.parametrize("tempo", [0.25, 0.26, 0.3, 0.75, 0.9, 1.5, 2.5, 3.7, 4.0])
def test_atempo_chain_product(tempo: float) -> None:
	"""
	Ensure atempo stages stay in range and multiply back to the tempo.
	"""
	stages = ff.build_atempo_chain(tempo)
	assert len(stages) > 0
	product = 1.0
	for stage in stages:
		assert ff.ATEMPO_MIN <= stage.factor <= ff.ATEMPO_MAX
		product *= float(stage.render().split("=")[1])
	assert product == pytest.approx(tempo, rel=1e-3)

#============================================

def test_atempo_chain_identity_and_invalid() -> None:
	assert ff.build_atempo_chain(1) == []
	assert ff.build_atempo_chain(None) == []
	assert ff.build_atempo_chain(0) == []
	assert ff.build_atempo_chain(-2) == []
	assert ff.build_atempo_chain(math.inf) == []
	assert ff.build_atempo_chain(1.0005) == []

#============================================

def test_atempo_chain_extremes() -> None:
	assert [stage.render() for stage in ff.build_atempo_chain(4.0)] == [
		"atempo=2", "atempo=2"]
	assert [stage.render() for stage in ff.build_atempo_chain(0.25)] == [
		"atempo=0.5", "atempo=0.5"]

#============================================

def test_speed_setpts_parenthesized() -> None:
	assert ff.SpeedPts(2).render() == "setpts=(PTS-STARTPTS)/2"
	assert ff.SpeedPts(0.5).render() == "setpts=(PTS-STARTPTS)/0.5"

#============================================

def test_pitch_resample_rate() -> None:
	rate = 44100 * 2 ** (1 / 12.0)
	assert ff.ASetRate(rate).render() == "asetrate=46722.32"

#============================================

def test_video_effect_stage_text() -> None:
	assert ff.Hqdn3d(4).render() == "hqdn3d=2:2:3:3"
	assert ff.BoxBlur(2).render() == "boxblur=lr=2:lp=1"
	assert ff.Unsharp(1.5).render() == "unsharp=5:5:1.5:5:5:0.0"
	assert ff.Eq(brightness=0.1).render() == "eq=brightness=0.1"
	assert ff.Eq().parts() == []
	assert ff.Fade('in', 0, 1).render() == "fade=in:st=0:d=1"
	assert ff.Fade('out', 4.5, 0.5).render() == "fade=out:st=4.5:d=0.5"

#============================================

def test_audio_effect_stage_text() -> None:
	assert ff.Bass(3).render() == "bass=g=3"
	assert ff.Treble(-2).render() == "treble=g=-2"
	assert ff.Volume(0).render() == "volume=0"
	assert ff.StereoPan(0.5).render() == (
		"pan=stereo|c0=0.25*c0+0.25*c1|c1=0.75*c0+0.75*c1")

#============================================

def test_sources_and_concat() -> None:
	assert ff.ColorSource(1280, 720, 30, 1500).render() == (
		"color=c=black:s=1280x720:r=30:d=1.5")
	assert ff.ANullSrc(44100, 2000).render() == (
		"anullsrc=channel_layout=stereo:sample_rate=44100:d=2")
	assert ff.Concat(3).render() == "concat=n=3:v=1:a=1"

#============================================

def test_declick_fades() -> None:
	stages = ff.build_declick_fades(2000)
	assert [stage.render() for stage in stages] == [
		"afade=t=in:st=0:d=0.005",
		"afade=t=out:st=1.995:d=0.005",
	]
	short = ff.build_declick_fades(6)
	assert [stage.render() for stage in short] == [
		"afade=t=in:st=0:d=0.003",
		"afade=t=out:st=0.003:d=0.003",
	]
	assert ff.build_declick_fades(0) == []

#============================================

def test_filter_chain_render() -> None:
	chain = ff.FilterChain(["0:v"], [ff.Trim("0", "1"), ff.SetPts()], ["v0"])
	assert chain.render() == "[0:v]trim=start=0:end=1,setpts=PTS-STARTPTS[v0]"
	assert chain.names() == ["trim", "setpts"]
	source = ff.FilterChain([], [ff.ANullSrc(48000, 1000)], ["a1"])
	graph = ff.render_graph([chain, source])
	assert graph == (
		"[0:v]trim=start=0:end=1,setpts=PTS-STARTPTS[v0]; "
		"anullsrc=channel_layout=stereo:sample_rate=48000:d=1[a1]")

#============================================

def test_stage_equality() -> None:
	assert ff.ATempo(2.0) == ff.ATempo(2)
	assert ff.SetPts() != ff.ASetPts()
