"""
Framework components - data containers for dialogue text and reveal state.
"""

from vnframework.components.text import (
    FixedStyle,
    FontStyle,
    FontWeight,
    RandomMinMaxStyle,
    RunSequence,
    StyleGenerator,
    TextRun,
    format_min_max,
)
from vnframework.components.mode import ModeConfig, load_mode_config, save_mode_config
from vnframework.components.reveal import RevealState, StoryLog

__all__ = [
    # Text
    "FixedStyle",
    "FontStyle",
    "FontWeight",
    "RandomMinMaxStyle",
    "RunSequence",
    "StyleGenerator",
    "TextRun",
    "format_min_max",
    # Mode
    "ModeConfig",
    "load_mode_config",
    "save_mode_config",
    # Reveal
    "RevealState",
    "StoryLog",
]
