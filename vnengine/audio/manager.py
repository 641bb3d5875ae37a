"""
Audio output for the dialogue layer.

Dialogue blips arrive as SoundEffect values decoded from raw bytes, the
scene track streams through pygame.mixer.music and plain effect files are
cached by path. Every playback failure is logged and reported on the event
bus; none of them reach the reveal loop.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import pygame

from vnengine.audio.effects import SoundEffect
from vnengine.core.events import EventBus, AudioEvent

if TYPE_CHECKING:
    from vnframework.components.mode import ModeConfig


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class AudioManager:
    """
    Mixer front end shared by every story box.

    Volumes multiply: master, then the category ("sfx", "bgm" or "ui"),
    then the effect's own volume. Category volumes follow the dialogue mode
    and may go above 1.0; only the product is clamped.
    """

    CATEGORIES = ("sfx", "bgm", "ui")

    def __init__(self, event_bus: EventBus | None = None):
        self.event_bus = event_bus
        self.master_volume: float = 1.0
        self.volumes: dict[str, float] = dict.fromkeys(self.CATEGORIES, 1.0)

        self._file_sounds: dict[str, pygame.mixer.Sound] = {}
        self._track: str | None = None
        self._ready = False

    def init(self, frequency: int = 44100, channels: int = 2, buffer: int = 512) -> bool:
        """Open the mixer unless something else already did."""
        if not pygame.mixer.get_init():
            try:
                pygame.mixer.init(frequency=frequency, size=-16, channels=channels, buffer=buffer)
            except pygame.error as e:
                logging.error(f"Audio unavailable, dialogue stays silent: {e}")
                return False
            logging.info("Mixer opened at %d Hz", frequency)

        # Blips overlap heavily while a sequence reveals quickly
        pygame.mixer.set_num_channels(32)
        self._ready = True
        return True

    def quit(self) -> None:
        pygame.mixer.quit()
        self._file_sounds.clear()
        self._track = None
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    # --- Volumes ---

    def set_volume(self, category: str, volume: float) -> None:
        """Set a category volume; unknown categories are ignored."""
        if category not in self.volumes:
            logging.debug(f"Ignoring volume for unknown category '{category}'")
            return
        self.volumes[category] = max(0.0, volume)
        if category == "bgm":
            self._sync_track_volume()

    def set_master_volume(self, volume: float) -> None:
        self.master_volume = _clamp(volume)
        self._sync_track_volume()

    def apply_mode(self, mode: ModeConfig) -> None:
        """Follow the dialogue mode's sound and music sliders."""
        self.set_volume("sfx", mode.sound_volume)
        self.set_volume("bgm", mode.music_volume)

    @property
    def track_volume(self) -> float:
        return _clamp(self.master_volume * self.volumes["bgm"])

    def volume_settings(self) -> dict:
        return {"master": self.master_volume, "categories": dict(self.volumes)}

    def apply_volume_settings(self, settings: dict) -> None:
        self.set_master_volume(settings.get("master", 1.0))
        for category, volume in settings.get("categories", {}).items():
            self.set_volume(category, volume)

    def _sync_track_volume(self) -> None:
        if pygame.mixer.get_init():
            pygame.mixer.music.set_volume(self.track_volume)

    # --- Scene track ---

    @property
    def current_track(self) -> str | None:
        return self._track

    def play_bgm(self, track: str, loop: bool = True, fade_ms: int = 1000) -> bool:
        """
        Start the scene track.

        Asking for the track that is already playing leaves it running, so
        consecutive pages of one scene do not restart their music.

        Returns:
            True if the track is playing afterwards
        """
        if not pygame.mixer.get_init():
            logging.warning(f"Mixer not open, cannot play '{track}'")
            return False

        if track == self._track and pygame.mixer.music.get_busy():
            return True

        try:
            pygame.mixer.music.load(track)
            pygame.mixer.music.play(loops=-1 if loop else 0, fade_ms=fade_ms)
        except pygame.error as e:
            logging.error(f"Failed to play track '{track}': {e}")
            return False

        self._track = track
        self._sync_track_volume()
        logging.info(f"Scene track: {track}")
        if self.event_bus:
            self.event_bus.publish(AudioEvent.BGM_STARTED, file=track)
        return True

    def stop_bgm(self, fade_ms: int = 1000) -> None:
        if self._track is None:
            return

        if pygame.mixer.get_init():
            if fade_ms > 0:
                pygame.mixer.music.fadeout(fade_ms)
            else:
                pygame.mixer.music.stop()

        self._track = None
        if self.event_bus:
            self.event_bus.publish(AudioEvent.BGM_STOPPED)

    def pause_bgm(self) -> None:
        if self._track is not None and pygame.mixer.get_init():
            pygame.mixer.music.pause()

    def resume_bgm(self) -> None:
        if self._track is not None and pygame.mixer.get_init():
            pygame.mixer.music.unpause()

    # --- Effects ---

    def play_sfx(self, path: str, category: str = "ui", volume: float = 1.0) -> pygame.mixer.Channel | None:
        """Play an effect file, loading it on first use."""
        if not self._ready:
            return None

        sound = self._file_sounds.get(path)
        if sound is None:
            if not Path(path).exists():
                logging.warning(f"Sound file not found: {path}")
                return None
            try:
                sound = pygame.mixer.Sound(path)
            except pygame.error as e:
                logging.error(f"Failed to load sound {path}: {e}")
                return None
            self._file_sounds[path] = sound

        channel = self._start(sound, category, volume)
        if channel and self.event_bus:
            self.event_bus.publish(AudioEvent.SFX_PLAYED, file=path)
        return channel

    def play_effect(self, effect: SoundEffect, category: str = "sfx") -> pygame.mixer.Channel | None:
        """
        Play a dialogue effect built from raw bytes.

        Decoding or mixer failures are logged and published as SFX_FAILED;
        the caller only sees None.
        """
        if not self._ready:
            return None

        try:
            channel = self._start(self._build_sound(effect), category, effect.volume)
        except (pygame.error, ValueError) as e:
            logging.error(f"Failed to play sound effect: {e}")
            if self.event_bus:
                self.event_bus.publish(AudioEvent.SFX_FAILED, error=str(e))
            return None

        if channel and self.event_bus:
            self.event_bus.publish(AudioEvent.SFX_PLAYED, speed=effect.speed, reverse=effect.reverse)
        return channel

    def _start(self, sound: pygame.mixer.Sound, category: str, volume: float) -> pygame.mixer.Channel | None:
        # Forcing a channel steals the oldest one instead of dropping the blip
        channel = pygame.mixer.find_channel() or pygame.mixer.find_channel(True)
        if not channel:
            return None

        channel.set_volume(_clamp(self.master_volume * self.volumes.get(category, 1.0) * volume))
        channel.play(sound)
        return channel

    def _build_sound(self, effect: SoundEffect) -> pygame.mixer.Sound:
        """Decode the effect and apply reverse and playback rate to its samples."""
        sound = pygame.mixer.Sound(file=io.BytesIO(effect.data))
        if not effect.reverse and effect.speed == 1.0:
            return sound

        samples = self.transform_samples(pygame.sndarray.array(sound), effect.speed, effect.reverse)
        return pygame.sndarray.make_sound(samples)

    @staticmethod
    def transform_samples(samples: np.ndarray, speed: float, reverse: bool) -> np.ndarray:
        """
        Resample by nearest-neighbour index stepping and optionally reverse.

        Works on mono (n,) and multi-channel (n, channels) arrays; the
        result is C-contiguous as make_sound requires.
        """
        if speed <= 0:
            raise ValueError(f"playback speed must be positive, got {speed}")

        if reverse:
            samples = samples[::-1]

        if speed != 1.0 and len(samples) > 0:
            indices = np.arange(0, len(samples), speed).astype(np.intp)
            samples = samples[indices]

        return np.ascontiguousarray(samples)
