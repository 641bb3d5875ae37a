"""
Markup parser - converts inline-formatted dialogue into text runs.

Format:

```
{{color:red|font_weight:bold}}Hello{{}} there{{default|speed:120}}...
```

Each ``{{options}}`` marker starts a new run whose text lasts until the
next marker. Options are ``key:value`` pairs separated by ``|``. Attribute
state carries over from one run to the next; ``default`` resets it to the
compiled-in defaults. Text before the first marker is not emitted.

Recognized keys: default, color, font, font_weight, option, speed, size,
style, sound, class, is_split. Unknown keys are ignored so newer scripts
still load in older builds.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Callable, Optional

from vnengine.audio.effects import AnimalCrossingSound
from vnframework.components.text import (
    FixedStyle,
    FontStyle,
    FontWeight,
    RandomMinMaxStyle,
    RunSequence,
    TextRun,
    format_min_max,
)

logger = logging.getLogger(__name__)

OPEN = "{{"
CLOSE = "}}"

# Fallbacks for values that do not parse
FALLBACK_SPEED = 10
FALLBACK_SIZE = 1.0
FALLBACK_NUMERIC = 10
UNKNOWN_STYLE = "--min:1;--max:1"

_UINT_PATTERN = re.compile(r'^\+?[0-9]+$')
UINT_MAX = 2**32 - 1


class MarkupError(ValueError):
    """
    Malformed markup.

    Attributes:
        segment: 0-based index of the offending ``{{...}}`` segment
        option: The raw option text at fault, if any
    """

    def __init__(self, message: str, segment: int, option: Optional[str] = None):
        self.segment = segment
        self.option = option
        location = f"segment {segment}"
        if option is not None:
            location += f", option {option!r}"
        super().__init__(f"{message} ({location})")


def _parse_uint(value: str, fallback: int) -> int:
    if _UINT_PATTERN.match(value):
        number = int(value)
        if number <= UINT_MAX:
            return number
    return fallback


def _parse_float(value: str) -> float:
    # float() also takes digit separators, which are not numbers here
    if "_" in value:
        raise ValueError(f"not a number: {value!r}")
    return float(value)


def _parse_size(value: str) -> float:
    try:
        size = _parse_float(value)
    except ValueError:
        return FALLBACK_SIZE
    if not math.isfinite(size) or size <= 0:
        return FALLBACK_SIZE
    return size


def _parse_floats(text: str) -> list[float]:
    """Parse a comma list, skipping entries that are not numbers."""
    numbers = []
    for part in text.split(","):
        try:
            numbers.append(_parse_float(part.strip()))
        except ValueError:
            continue
    return numbers


class MarkupParser:
    """
    Parses markup strings into run sequences.

    In the default lenient mode a malformed segment degrades to a
    default-styled run holding the literal segment text; the error is
    logged and kept in ``errors``. With ``strict=True`` the first
    MarkupError is raised instead.
    """

    def __init__(self, strict: bool = False, defaults: Optional[TextRun] = None):
        self.strict = strict
        self.defaults = defaults or TextRun.default()
        self.errors: list[MarkupError] = []

        self._handlers: dict[str, Callable[[TextRun, str, int, str], TextRun]] = {
            "color": self._color,
            "font": self._font,
            "font_weight": self._font_weight,
            "option": self._option,
            "speed": self._speed,
            "size": self._size,
            "style": self._style,
            "sound": self._sound,
            "class": self._class,
            "is_split": self._is_split,
        }

    def parse(self, source: str) -> RunSequence:
        """Parse a markup string into an ordered run sequence."""
        self.errors = []
        current = self.defaults
        runs: list[TextRun] = []

        for index, segment in enumerate(source.split(OPEN)[1:]):
            options, sep, text = segment.partition(CLOSE)
            try:
                if not sep:
                    raise MarkupError(f"missing closing {CLOSE!r}", index)
                run = self._build_run(current, options, text, index)
            except MarkupError as e:
                if self.strict:
                    raise
                logger.warning("Malformed markup, using default style: %s", e)
                self.errors.append(e)
                runs.append(self.defaults.with_text(text if sep else segment))
                continue

            current = run
            runs.append(run)

        return tuple(runs)

    def _build_run(self, base: TextRun, options: str, text: str, index: int) -> TextRun:
        run = base.with_text(text)

        for raw in options.split("|"):
            option = raw.strip()
            if not option:
                continue

            key, sep, value = option.partition(":")
            key = key.strip()
            value = value.strip()

            if key == "default":
                run = self.defaults.with_text(text)
                continue

            if not sep:
                raise MarkupError("option has no ':' separator", index, option)

            handler = self._handlers.get(key)
            if handler is None:
                logger.debug("Ignoring unknown markup option %r", key)
                continue

            run = handler(run, value, index, option)

        return run

    # Option handlers

    def _color(self, run: TextRun, value: str, index: int, option: str) -> TextRun:
        return run.replace(color=value)

    def _font(self, run: TextRun, value: str, index: int, option: str) -> TextRun:
        return run.replace(font=value)

    def _class(self, run: TextRun, value: str, index: int, option: str) -> TextRun:
        return run.replace(class_name=value)

    def _is_split(self, run: TextRun, value: str, index: int, option: str) -> TextRun:
        return run.replace(is_split=value == "true")

    def _speed(self, run: TextRun, value: str, index: int, option: str) -> TextRun:
        return run.replace(speed=_parse_uint(value, FALLBACK_SPEED))

    def _size(self, run: TextRun, value: str, index: int, option: str) -> TextRun:
        return run.replace(size=_parse_size(value))

    def _font_weight(self, run: TextRun, value: str, index: int, option: str) -> TextRun:
        if value == "normal":
            weight = FontWeight.NORMAL
        elif value == "bold":
            weight = FontWeight.BOLD
        else:
            _, argument = self._split_call(value, index, option)
            weight = FontWeight.numeric(_parse_uint(argument, FALLBACK_NUMERIC))
        return run.replace(font_weight=weight)

    def _option(self, run: TextRun, value: str, index: int, option: str) -> TextRun:
        if value == "normal":
            style = FontStyle.NORMAL
        elif value == "italic":
            style = FontStyle.ITALIC
        else:
            _, argument = self._split_call(value, index, option)
            style = FontStyle.oblique(_parse_uint(argument, FALLBACK_NUMERIC))
        return run.replace(font_style=style)

    def _style(self, run: TextRun, value: str, index: int, option: str) -> TextRun:
        command = value.partition("(")[0].strip()

        if command == "min_max4":
            _, argument = self._split_call(value, index, option)
            numbers = self._numbers(argument, 4, index, option)
            style = RandomMinMaxStyle(
                min_range=(numbers[0], numbers[1]),
                max_range=(numbers[2], numbers[3]),
            )
        elif command == "min_max2":
            _, argument = self._split_call(value, index, option)
            numbers = self._numbers(argument, 2, index, option)
            style = FixedStyle(format_min_max(numbers[0], numbers[1]))
        else:
            style = FixedStyle(UNKNOWN_STYLE)

        return run.replace(style=style)

    def _sound(self, run: TextRun, value: str, index: int, option: str) -> TextRun:
        command, sep, rest = value.partition("(")
        command = command.strip()

        if sep and command == "animal_crossing":
            argument = rest.split(")", 1)[0].strip()
            return run.replace(sound=AnimalCrossingSound(argument))

        logger.debug("Ignoring unknown sound command %r", value)
        return run

    # Helpers

    @staticmethod
    def _split_call(value: str, index: int, option: str) -> tuple[str, str]:
        """Split ``name(argument)`` into its parts."""
        name, sep, rest = value.partition("(")
        if not sep:
            raise MarkupError("expected name(argument)", index, option)
        argument = rest.split(")", 1)[0].strip()
        return name.strip(), argument

    @staticmethod
    def _numbers(argument: str, count: int, index: int, option: str) -> list[float]:
        numbers = _parse_floats(argument)
        if len(numbers) < count:
            raise MarkupError(f"expected {count} numbers, got {len(numbers)}", index, option)
        return numbers


def parse_markup(source: str, strict: bool = False) -> RunSequence:
    """Parse a markup string with a throwaway parser."""
    return MarkupParser(strict=strict).parse(source)
