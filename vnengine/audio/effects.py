"""
Sound effect descriptions, the sound asset registry and sound triggers.

A SoundEffect is a description only (raw audio bytes plus playback
parameters); the AudioManager turns it into an actual pygame Sound.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class SoundAssetError(KeyError):
    """Raised when a sound key is not present in the registry."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"sound asset not registered: {self.key!r}"


@dataclass(frozen=True)
class SoundEffect:
    """
    A playable sound effect description.

    Attributes:
        data: Raw encoded audio (wav/ogg bytes)
        pitch: Pitch factor (carried, not rendered by the mixer backend)
        speed: Playback rate multiplier
        volume: Volume multiplier before category/master volumes
        reverse: Play the samples backwards
        reverb: Reverb amount (carried, not rendered by the mixer backend)
    """
    data: bytes
    pitch: float = 1.0
    speed: float = 1.0
    volume: float = 1.0
    reverse: bool = False
    reverb: float = 0.0

    def with_speed(self, speed: float) -> SoundEffect:
        return replace(self, speed=speed)

    def with_volume(self, volume: float) -> SoundEffect:
        return replace(self, volume=volume)

    def with_pitch(self, pitch: float) -> SoundEffect:
        return replace(self, pitch=pitch)

    def with_reverb(self, reverb: float) -> SoundEffect:
        return replace(self, reverb=reverb)

    def with_reverse(self, reverse: bool) -> SoundEffect:
        return replace(self, reverse=reverse)


class SoundRegistry:
    """
    Maps sound keys to raw audio bytes.

    Populated by the application before any dialogue runs; looked up lazily
    when a run's sound trigger fires.
    """

    def __init__(self, sounds: Optional[dict[str, bytes]] = None):
        self._sounds: dict[str, bytes] = dict(sounds or {})

    def register(self, key: str, data: bytes) -> None:
        self._sounds[key] = bytes(data)

    def register_file(self, key: str, path: str | Path) -> None:
        """Register the contents of an audio file under ``key``."""
        self.register(key, Path(path).read_bytes())

    def load_directory(self, path: str | Path, pattern: str = "*.wav") -> int:
        """
        Register every matching file in a directory, keyed by file stem.

        Returns:
            Number of sounds registered
        """
        directory = Path(path)
        if not directory.exists():
            logger.warning("Sound directory not found: %s", directory)
            return 0

        count = 0
        for file_path in sorted(directory.glob(pattern)):
            try:
                self.register_file(file_path.stem, file_path)
                count += 1
            except OSError as e:
                logger.error("Failed to read sound %s: %s", file_path, e)
        return count

    def get(self, key: str) -> bytes:
        try:
            return self._sounds[key]
        except KeyError:
            raise SoundAssetError(key) from None

    def __contains__(self, key: object) -> bool:
        return key in self._sounds

    def __len__(self) -> int:
        return len(self._sounds)

    def __iter__(self) -> Iterator[str]:
        return iter(self._sounds)


@dataclass(frozen=True)
class AnimalCrossingSound:
    """
    Babble-style voice blip bound to a run by ``sound:animal_crossing(key)``.

    Every resolve builds a fresh effect: reversed playback of the asset at a
    random rate in [1.0, 3.0), volume 2.0 and reverb 0.5.
    """
    key: str

    MIN_SPEED = 1.0
    MAX_SPEED = 3.0
    VOLUME = 2.0
    REVERB = 0.5

    def resolve(
        self,
        registry: SoundRegistry,
        rng: Optional[random.Random] = None,
    ) -> SoundEffect:
        """
        Build the playable effect.

        Raises:
            SoundAssetError: the key is not registered
        """
        rng = rng or random
        data = registry.get(self.key)
        speed = self.MIN_SPEED + (self.MAX_SPEED - self.MIN_SPEED) * rng.random()
        return SoundEffect(
            data=data,
            speed=speed,
            volume=self.VOLUME,
            reverse=True,
            reverb=self.REVERB,
        )
