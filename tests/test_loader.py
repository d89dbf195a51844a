#!/usr/bin/env python3

# Standard Library
import os
import sys
import tempfile
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from stackcutlib.core import model
from stackcutlib.core.loader import ProjectLoader

#============================================

def _base_lines(clip_line: str = None) -> list:
	lines = []
	lines.append("stackcut: 1")
	lines.append("")
	lines.append("media:")
	lines.append("  - {id: m1, name: clip.mp4, type: video/mp4, width: 1920,")
	lines.append("     height: 1080, duration: 10000, has_video: true, has_audio: unknown}")
	lines.append("")
	lines.append("tracks:")
	lines.append("  - {id: 0, name: Track 1}")
	lines.append("  - {id: 1, name: Track 2}")
	lines.append("")
	lines.append("clips:")
	if clip_line is None:
		clip_line = "  - {id: c1, media: m1, track: 0, start: 0, duration: 5000}"
	lines.append(clip_line)
	return lines

#============================================

class ProjectLoaderTest(unittest.TestCase):
	#============================================
	def _load(self, lines: list, **kwargs) -> model.TimelineSnapshot:
		with tempfile.TemporaryDirectory() as temp_dir:
			yaml_path = os.path.join(temp_dir, "timeline.yaml")
			with open(yaml_path, "w") as yaml_file:
				yaml_file.write("\n".join(lines) + "\n")
			loader = ProjectLoader(yaml_path, **kwargs)
			return loader.load()

	#============================================
	def _assert_load_fails(self, lines: list, fragment: str) -> None:
		with self.assertRaises(RuntimeError) as context:
			self._load(lines)
		self.assertIn(fragment, str(context.exception))

	#============================================
	def test_minimal_snapshot(self) -> None:
		snapshot = self._load(_base_lines())
		self.assertEqual(len(snapshot.clips), 1)
		clip = snapshot.clips[0]
		self.assertEqual(clip.id, 'c1')
		self.assertEqual(clip.media_id, 'm1')
		self.assertEqual(clip.speed, 1)
		self.assertTrue(clip.visible)
		info = snapshot.media_info['m1']
		self.assertIs(info.has_video, model.Presence.TRUE)
		self.assertIs(info.has_audio, model.Presence.UNKNOWN)
		self.assertEqual(snapshot.export_settings.output_name, 'output.mp4')
		self.assertEqual(snapshot.export_settings.resolution, 'auto')

	#============================================
	def test_clip_filters_and_defaults(self) -> None:
		lines = _base_lines(
			"  - {id: c1, media: m1, track: 1, start: 0, duration: 5000, speed: 2,"
			" video_filters: {brightness: 0.1, flip_h: true},"
			" audio_filters: {pitch: -3}}")
		lines.append("")
		lines.append("defaults:")
		lines.append("  video: {contrast: 1.1}")
		lines.append("  audio: {volume: 0.8}")
		snapshot = self._load(lines)
		clip = snapshot.clips[0]
		self.assertEqual(clip.track_id, 1)
		self.assertEqual(clip.video_filters.brightness, 0.1)
		self.assertTrue(clip.video_filters.flip_h)
		self.assertIsNone(clip.video_filters.contrast)
		self.assertEqual(clip.audio_filters.pitch, -3)
		self.assertEqual(snapshot.default_filters.video.contrast, 1.1)
		self.assertEqual(snapshot.default_filters.audio.volume, 0.8)

	#============================================
	def test_export_preset_then_explicit_keys(self) -> None:
		lines = _base_lines()
		lines.append("")
		lines.append("export:")
		lines.append("  preset: small-share")
		lines.append("  crf: 30")
		lines.append("  de_click: false")
		settings = self._load(lines).export_settings
		self.assertEqual(settings.resolution, model.Resolution(1280, 720))
		self.assertEqual(settings.audio_bitrate, '96k')
		self.assertEqual(settings.crf, 30)
		self.assertFalse(settings.de_click)

	#============================================
	def test_preset_and_output_overrides(self) -> None:
		lines = _base_lines()
		lines.append("")
		lines.append("export:")
		lines.append("  preset: small-share")
		lines.append("  resolution: [1920, 1080]")
		lines.append("  output_file: from_yaml.mp4")
		settings = self._load(lines, output_override='cli.mp4',
			preset='youtube-4k').export_settings
		self.assertEqual(settings.video_codec, 'libx265')
		self.assertEqual(settings.resolution, model.Resolution(1920, 1080))
		self.assertEqual(settings.output_name, 'cli.mp4')

	#============================================
	def test_range_and_encoder_preset(self) -> None:
		lines = _base_lines()
		lines.append("")
		lines.append("export:")
		lines.append("  range_start: 1000")
		lines.append("  range_end: null")
		lines.append("  encoder_preset: fast")
		lines.append("  format: mov")
		settings = self._load(lines).export_settings
		self.assertEqual(settings.range_start, 1000)
		self.assertIsNone(settings.range_end)
		self.assertEqual(settings.preset, 'fast')
		self.assertEqual(settings.output_name, 'output.mov')

	#============================================
	def test_version_required(self) -> None:
		lines = _base_lines()
		lines[0] = "stackcut: 2"
		self._assert_load_fails(lines, "stackcut must be set to 1")

	#============================================
	def test_top_level_must_be_mapping(self) -> None:
		self._assert_load_fails(["- just", "- a list"], "mapping at the top level")

	#============================================
	def test_invalid_clip_values(self) -> None:
		cases = [
			("duration: 0", "duration must be > 0"),
			("duration: 1000, trim_start: -1", "trim_start must be >= 0"),
			("duration: 1000, speed: 5", "speed must be between"),
			("duration: 1000, speed: 0.1", "speed must be between"),
			("duration: 1000, track: 7", "unknown track"),
			("duration: 1000, video_filters: {sparkle: 1}", "unknown filter key"),
			("duration: 1000, reversed: 1", "must be true or false"),
		]
		for fields, fragment in cases:
			line = f"  - {{id: c1, media: m1, start: 0, {fields}}}"
			self._assert_load_fails(_base_lines(line), fragment)

	#============================================
	def test_duplicate_clip_ids(self) -> None:
		lines = _base_lines()
		lines.append("  - {id: c1, media: m1, track: 0, start: 5000, duration: 1000}")
		self._assert_load_fails(lines, "duplicate clip id: c1")

	#============================================
	def test_bad_presence(self) -> None:
		lines = _base_lines()
		lines[4] = "     height: 1080, duration: 10000, has_video: true, has_audio: maybe}"
		self._assert_load_fails(lines, "presence must be")

	#============================================
	def test_unknown_preset(self) -> None:
		lines = _base_lines()
		lines.append("")
		lines.append("export:")
		lines.append("  preset: vhs-tape")
		self._assert_load_fails(lines, "unknown export preset: vhs-tape")

	#============================================
	def test_dangling_media_reference_loads(self) -> None:
		line = "  - {id: c1, media: m9, track: 0, start: 0, duration: 1000}"
		snapshot = self._load(_base_lines(line))
		self.assertEqual(snapshot.clips[0].media_id, 'm9')

#============================================

if __name__ == '__main__':
	unittest.main()
