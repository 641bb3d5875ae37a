"""
Text run components - one styled segment of dialogue text.

A TextRun is an immutable value: every builder method returns a new run,
so a run shared between a story, the log and a renderer can never be
changed under another holder's feet.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Optional, Union

from vnengine.audio.effects import AnimalCrossingSound


@dataclass(frozen=True)
class FontWeight:
    """Font weight: normal, bold or a numeric weight."""
    kind: str = "normal"
    value: Optional[int] = None

    @classmethod
    def numeric(cls, value: int) -> FontWeight:
        return cls("numeric", value)

    def __str__(self) -> str:
        if self.kind == "numeric":
            return str(self.value)
        return self.kind


FontWeight.NORMAL = FontWeight("normal")
FontWeight.BOLD = FontWeight("bold")


@dataclass(frozen=True)
class FontStyle:
    """Font style: normal, italic or oblique by a number of degrees."""
    kind: str = "normal"
    degrees: Optional[int] = None

    @classmethod
    def oblique(cls, degrees: int) -> FontStyle:
        return cls("oblique", degrees)

    def __str__(self) -> str:
        if self.kind == "oblique":
            return f"oblique {self.degrees}deg"
        return self.kind


FontStyle.NORMAL = FontStyle("normal")
FontStyle.ITALIC = FontStyle("italic")


@dataclass(frozen=True)
class FixedStyle:
    """Style generator that always returns the same declaration string."""
    value: str = ""

    def resolve(self, rng: Optional[random.Random] = None) -> str:
        return self.value


@dataclass(frozen=True)
class RandomMinMaxStyle:
    """
    Style generator sampling ``--min``/``--max`` custom properties.

    Each resolve draws min uniformly from ``min_range`` and max from
    ``max_range`` (half-open ranges), independently per call.
    """
    min_range: tuple[float, float]
    max_range: tuple[float, float]
    unit: str = "rem"

    def resolve(self, rng: Optional[random.Random] = None) -> str:
        rng = rng or random
        low = _sample(rng, self.min_range)
        high = _sample(rng, self.max_range)
        return format_min_max(low, high, self.unit)


StyleGenerator = Union[FixedStyle, RandomMinMaxStyle]
SoundTrigger = AnimalCrossingSound


def _sample(rng, bounds: tuple[float, float]) -> float:
    start, end = bounds
    return start + (end - start) * rng.random()


def format_min_max(low: float, high: float, unit: str = "rem") -> str:
    return f"--min:{low:.4f}{unit};--max:{high:.4f}{unit}"


@dataclass(frozen=True)
class TextRun:
    """
    One formatted text segment.

    Attributes:
        text: The segment text (indexed by code point)
        color: CSS color
        font: Font family
        font_weight: Normal, bold or numeric
        font_style: Normal, italic or oblique
        size: Font size in rem
        speed: Reveal delay per character (ms, before the speed multiplier)
        is_split: Render each character separately (per-character styling)
        style: Style generator for extra declarations
        class_name: CSS-like class name
        sound: Optional sound trigger fired per revealed character
    """
    text: str = ""
    color: str = "black"
    font: str = "hancom-malang"
    font_weight: FontWeight = FontWeight.NORMAL
    font_style: FontStyle = FontStyle.NORMAL
    size: float = 2.0
    speed: int = 60
    is_split: bool = False
    style: StyleGenerator = field(default_factory=FixedStyle)
    class_name: str = ""
    sound: Optional[SoundTrigger] = None

    @classmethod
    def default(cls) -> TextRun:
        """The compiled-in default attribute set."""
        return cls()

    @classmethod
    def color_bold(cls, text: str, color: str) -> TextRun:
        return cls(text=text, color=color, speed=100, font_weight=FontWeight.BOLD)

    def replace(self, **changes) -> TextRun:
        """Return a copy with the given attributes changed."""
        return replace(self, **changes)

    def with_text(self, text: str) -> TextRun:
        return replace(self, text=text)


# Ordered list of runs for one dialogue line
RunSequence = tuple[TextRun, ...]
