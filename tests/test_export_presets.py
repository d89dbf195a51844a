#!/usr/bin/env python3

# Standard Library
import os
import sys

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from stackcutlib.core import model
from stackcutlib.export import settings

#============================================

def test_default_settings_match_universal_preset() -> None:
	assert settings.match_preset(model.ExportSettings()) == 'universal-h264'

#============================================

@pytest.mark.parametrize("preset_id", sorted(settings.EXPORT_PRESETS))
def test_applied_preset_matches_itself(preset_id: str) -> None:
	applied = settings.apply_preset(model.ExportSettings(), preset_id)
	assert settings.match_preset(applied) == preset_id

#============================================

def test_apply_preset_returns_new_settings() -> None:
	original = model.ExportSettings(format='mkv', de_click=False)
	applied = settings.apply_preset(original, 'youtube-4k')
	assert applied is not original
	assert original.video_codec == 'libx264'
	assert applied.video_codec == 'libx265'
	assert applied.resolution == model.Resolution(3840, 2160)
	assert applied.format == 'mkv'
	assert applied.de_click is False

#============================================

def test_edited_settings_match_no_preset() -> None:
	applied = settings.apply_preset(model.ExportSettings(), 'youtube-1080p')
	assert settings.match_preset(applied.copy(crf=18)) == ''
	assert settings.match_preset(applied.copy(resolution='auto')) == ''

#============================================

def test_unknown_preset_raises() -> None:
	with pytest.raises(KeyError):
		settings.preset_settings('vhs-tape')
