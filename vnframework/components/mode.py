"""
Mode components - process-wide dialogue configuration.

One ModeConfig instance is created by the application and handed to every
reveal engine and story box. Engines read it fresh on every tick, so a
change made by an input handler takes effect on the next tick.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import Field

from vnengine.core.component import Component

logger = logging.getLogger(__name__)

# Fields stored by the settings file; the mode flags are transient
PERSISTED_FIELDS = ("sound_volume", "music_volume", "speed_multiplier", "auto_advance_delay")


class ModeConfig(Component):
    """
    Shared reveal/playback configuration.

    Attributes:
        sound_volume: Effect volume, 0 disables dialogue sound triggers
        music_volume: Background music volume
        speed_multiplier: Divides every per-character reveal delay
        auto_advance_delay: Idle time (ms) before auto-advance commits
        auto_advance: Auto-advance mode enabled
        skip_requested: Skip (fast-forward) requested by the user
        box_hidden: Message box hidden
        settings_open: Settings view open (reveal paused)
        log_open: History log open (reveal paused)
    """
    sound_volume: float = Field(default=1.0, ge=0.0)
    music_volume: float = Field(default=1.0, ge=0.0)
    speed_multiplier: float = Field(default=1.0, gt=0.0)
    auto_advance_delay: int = Field(default=5000, ge=0)

    auto_advance: bool = False
    skip_requested: bool = False
    box_hidden: bool = False
    settings_open: bool = False
    log_open: bool = False

    def to_settings(self) -> dict[str, Any]:
        """Persistable subset (volumes, speed, auto delay)."""
        return self.dump_fields(PERSISTED_FIELDS)

    def apply_settings(self, settings: dict[str, Any]) -> None:
        """Apply persisted settings; unknown keys are ignored."""
        self.assign_fields(settings, PERSISTED_FIELDS)


def load_mode_config(path: str | Path) -> ModeConfig:
    """
    Load settings from a JSON file into a fresh ModeConfig.

    A missing file yields the defaults.
    """
    config = ModeConfig()
    settings_file = Path(path)
    if not settings_file.exists():
        logger.info("No settings file at %s, using defaults", settings_file)
        return config

    with open(settings_file, "r", encoding="utf-8") as f:
        data = json.load(f)

    config.apply_settings(data)
    return config


def save_mode_config(config: ModeConfig, path: str | Path) -> None:
    """Write the persistable settings as JSON."""
    settings_file = Path(path)
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    with open(settings_file, "w", encoding="utf-8") as f:
        json.dump(config.to_settings(), f, indent=2)
