"""
Audio module - dialogue sound effects and background music.
"""

from vnengine.audio.effects import (
    AnimalCrossingSound,
    SoundAssetError,
    SoundEffect,
    SoundRegistry,
)
from vnengine.audio.manager import AudioManager

__all__ = [
    "AnimalCrossingSound",
    "AudioManager",
    "SoundAssetError",
    "SoundEffect",
    "SoundRegistry",
]
