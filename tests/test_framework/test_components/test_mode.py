import json
import pytest
from pydantic import ValidationError
from vnframework.components.mode import ModeConfig, load_mode_config, save_mode_config

def test_defaults(mode):
    assert mode.sound_volume == 1.0
    assert mode.music_volume == 1.0
    assert mode.speed_multiplier == 1.0
    assert mode.auto_advance_delay == 5000
    assert not any([
        mode.auto_advance,
        mode.skip_requested,
        mode.box_hidden,
        mode.settings_open,
        mode.log_open,
    ])

def test_validation_on_assignment(mode):
    with pytest.raises(ValidationError):
        mode.speed_multiplier = 0
    with pytest.raises(ValidationError):
        mode.sound_volume = -0.1
    with pytest.raises(ValidationError):
        mode.auto_advance_delay = -1

def test_unknown_fields_rejected():
    with pytest.raises(ValidationError):
        ModeConfig(turbo=True)

def test_settings_only_cover_persisted_fields(mode):
    mode.auto_advance = True
    mode.music_volume = 0.5

    settings = mode.to_settings()

    assert settings == {
        "sound_volume": 1.0,
        "music_volume": 0.5,
        "speed_multiplier": 1.0,
        "auto_advance_delay": 5000,
    }

def test_apply_settings_ignores_unknown_keys(mode):
    mode.apply_settings({"speed_multiplier": 2.0, "skip_requested": True, "other": 1})
    assert mode.speed_multiplier == 2.0
    assert not mode.skip_requested

def test_save_and_load(tmp_path, mode):
    path = tmp_path / "config" / "settings.json"
    mode.sound_volume = 0.0
    mode.auto_advance_delay = 1500
    mode.log_open = True

    save_mode_config(mode, path)
    loaded = load_mode_config(path)

    assert json.loads(path.read_text())["auto_advance_delay"] == 1500
    assert loaded.sound_volume == 0.0
    assert loaded.auto_advance_delay == 1500
    assert not loaded.log_open

def test_load_missing_file_gives_defaults(tmp_path):
    assert load_mode_config(tmp_path / "none.json") == ModeConfig()

def test_clone_is_independent(mode):
    copy = mode.clone()
    copy.auto_advance = True
    assert not mode.auto_advance

def test_rejected_setting_leaves_field_unchanged(mode):
    with pytest.raises(ValidationError):
        mode.apply_settings({"speed_multiplier": -1.0})
    assert mode.speed_multiplier == 1.0
