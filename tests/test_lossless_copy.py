#!/usr/bin/env python3

# Standard Library
import os
import sys
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from stackcutlib.core import filters
from stackcutlib.core import model
from stackcutlib.export.compiler import compile_export

#============================================

COPY_PREFIX = "printf '%b' '"
COPY_SUFFIX = (" | ffmpeg -f concat -safe 0 -protocol_whitelist "
	"file,pipe,fd,crypto,data -i - -c copy -movflags +faststart -y output.mp4")

#============================================

def _known_info(media: list) -> dict:
	info = {}
	for item in media:
		info[item.id] = model.MediaInfo(model.Presence.TRUE, model.Presence.TRUE)
	return info

#============================================

def _snapshot(clips: list, media: list = None, media_info: dict = None,
	defaults: filters.DefaultFilters = None, **settings) -> model.TimelineSnapshot:
	if media is None:
		media = [model.Media('m1', 'clip.mp4', mime_type='video/mp4',
			width=1920, height=1080)]
	if media_info is None:
		media_info = _known_info(media)
	settings.setdefault('de_click', False)
	return model.TimelineSnapshot(clips=clips, media=media,
		media_info=media_info, export_settings=model.ExportSettings(**settings),
		default_filters=defaults)

#============================================

class LosslessCopyTest(unittest.TestCase):
	#============================================
	def test_single_clip_uses_stream_copy(self) -> None:
		"""One untouched clip becomes a concat copy with one window."""
		result = compile_export(_snapshot([model.Clip('c1', 'm1', 0, 0, 5000)]))
		self.assertIsNotNone(result)
		self.assertTrue(result.used_lossless_copy)
		self.assertFalse(result.export_audio_warning)
		command = result.command
		self.assertTrue(command.startswith(COPY_PREFIX))
		self.assertTrue(command.endswith(COPY_SUFFIX))
		self.assertEqual(command.count("inpoint "), 1)
		self.assertEqual(command.count("outpoint "), 1)
		self.assertIn("file '\\''file:clip.mp4'\\''\\n", command)
		self.assertIn("inpoint 0\\n", command)
		self.assertIn("outpoint 5\\n", command)

	#============================================
	def test_range_applies_to_copy_window(self) -> None:
		clip = model.Clip('c1', 'm1', 0, 0, 10000, trim_start=1000)
		result = compile_export(_snapshot([clip], range_start=2000, range_end=5000))
		self.assertTrue(result.used_lossless_copy)
		self.assertIn("inpoint 3\\n", result.command)
		self.assertIn("outpoint 6\\n", result.command)

	#============================================
	def test_split_clip_copies_merged_window(self) -> None:
		clips = [
			model.Clip('c1', 'm1', 0, 0, 1000),
			model.Clip('c2', 'm1', 0, 1000, 1000, trim_start=1000),
		]
		result = compile_export(_snapshot(clips))
		self.assertTrue(result.used_lossless_copy)
		self.assertEqual(result.command.count("inpoint "), 1)
		self.assertIn("outpoint 2\\n", result.command)

	#============================================
	def test_cut_out_middle_copies_two_windows(self) -> None:
		clips = [
			model.Clip('c1', 'm1', 0, 0, 1000),
			model.Clip('c2', 'm1', 0, 1000, 1000, trim_start=3000),
		]
		result = compile_export(_snapshot(clips))
		self.assertTrue(result.used_lossless_copy)
		self.assertEqual(result.command.count("file '\\''file:clip.mp4'\\''"), 2)
		self.assertIn("inpoint 3\\noutpoint 4\\n", result.command)

	#============================================
	def test_quotes_in_path_are_escaped(self) -> None:
		media = [model.Media('m1', "it's.mp4", mime_type='video/mp4')]
		result = compile_export(_snapshot([model.Clip('c1', 'm1', 0, 0, 1000)], media))
		self.assertTrue(result.used_lossless_copy)
		self.assertIn("file:it\\'\\''s.mp4", result.command)

	#============================================
	def test_unknown_audio_presence_warns(self) -> None:
		result = compile_export(_snapshot([model.Clip('c1', 'm1', 0, 0, 1000)],
			media_info={}))
		self.assertTrue(result.used_lossless_copy)
		self.assertTrue(result.export_audio_warning)

	#============================================
	def test_non_neutral_clips_force_filter_graph(self) -> None:
		changes = [
			{'speed': 2},
			{'reversed': True},
			{'muted': True},
			{'visible': False},
			{'volume': 0.5},
			{'video_filters': filters.VideoFilterOverrides(brightness=0.1)},
			{'audio_filters': filters.AudioFilterOverrides(pitch=2)},
		]
		for change in changes:
			clip = model.Clip('c1', 'm1', 0, 0, 2000, **change)
			result = compile_export(_snapshot([clip]))
			self.assertIsNotNone(result, change)
			self.assertFalse(result.used_lossless_copy, change)
			self.assertTrue(result.command.startswith("ffmpeg -i "), change)

	#============================================
	def test_non_neutral_defaults_force_filter_graph(self) -> None:
		defaults = filters.DefaultFilters(video=filters.VideoFilters(saturation=1.3))
		result = compile_export(_snapshot([model.Clip('c1', 'm1', 0, 0, 2000)],
			defaults=defaults))
		self.assertFalse(result.used_lossless_copy)

	#============================================
	def test_declick_or_disallowed_forces_filter_graph(self) -> None:
		clip = model.Clip('c1', 'm1', 0, 0, 2000)
		result = compile_export(_snapshot([clip], de_click=True))
		self.assertFalse(result.used_lossless_copy)
		result = compile_export(_snapshot([clip], allow_lossless_copy=False))
		self.assertFalse(result.used_lossless_copy)

	#============================================
	def test_two_sources_force_filter_graph(self) -> None:
		media = [
			model.Media('m1', 'a.mp4', mime_type='video/mp4'),
			model.Media('m2', 'b.mp4', mime_type='video/mp4'),
		]
		clips = [
			model.Clip('c1', 'm1', 0, 0, 1000),
			model.Clip('c2', 'm2', 0, 1000, 1000),
		]
		result = compile_export(_snapshot(clips, media))
		self.assertFalse(result.used_lossless_copy)

	#============================================
	def test_leading_gap_forces_filter_graph(self) -> None:
		result = compile_export(_snapshot([model.Clip('c1', 'm1', 0, 500, 1000)]))
		self.assertFalse(result.used_lossless_copy)

	#============================================
	def test_silent_source_forces_filter_graph(self) -> None:
		media = [model.Media('m1', 'clip.mp4', mime_type='video/mp4')]
		info = {'m1': model.MediaInfo(model.Presence.TRUE, model.Presence.FALSE)}
		result = compile_export(_snapshot([model.Clip('c1', 'm1', 0, 0, 1000)],
			media, info))
		self.assertFalse(result.used_lossless_copy)
		self.assertIn("anullsrc=", result.command)

#============================================

if __name__ == '__main__':
	unittest.main()
