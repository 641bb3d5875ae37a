"""
Script authoring format and the story file compiler.

A script is plain text: the first line is the title, every other
non-blank line is either ``speaker: message`` or bare narration.

    Test script
    Two friends who like the same game talk.
    Alice: Hi?
    Bob: How are you?

``compile_script_file`` turns a script into a story file (see
vnframework.dialog.library) and is exposed as the ``vn-compile-script``
command.
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence

import jsonschema

from vnframework.dialog.library import STORY_FILE_SCHEMA
from vnframework.dialog.markup import MarkupParser
from vnframework.dialog.story import Story

logger = logging.getLogger(__name__)

# Color used for speakers the caller gave no color for
PLACEHOLDER_COLOR = "black"


class ScriptError(ValueError):
    """The script text cannot be turned into stories."""


@dataclass(frozen=True)
class ScriptLine:
    """One script line; narration has no speaker."""
    speaker: Optional[str]
    message: str

    @property
    def is_narration(self) -> bool:
        return self.speaker is None


@dataclass
class Script:
    """A parsed script: its title and lines in order."""
    title: str
    lines: list[ScriptLine] = field(default_factory=list)

    @property
    def story_id(self) -> str:
        return self.title.strip().replace(" ", "_")

    @property
    def speakers(self) -> list[str]:
        return sorted({line.speaker for line in self.lines if line.speaker is not None})

    def markup_lines(self, speaker_colors: Optional[dict[str, str]] = None) -> list[tuple[str, str]]:
        """
        Title and message markup for each line.

        Narration keeps the base style; a speaker's lines get the speaker's
        name as title and the speaker's color.
        """
        colors = speaker_colors or {}
        result = []
        for line in self.lines:
            if line.speaker is None:
                result.append(("", "{{}}" + line.message))
            else:
                color = colors.get(line.speaker, PLACEHOLDER_COLOR)
                result.append(("{{}}" + line.speaker, f"{{{{color:{color}}}}}{line.message}"))
        return result

    def to_story_data(self, speaker_colors: Optional[dict[str, str]] = None) -> dict[str, Any]:
        """Story file content for this script."""
        stories = []
        for title, msg in self.markup_lines(speaker_colors):
            entry = {"msg": msg}
            if title:
                entry["title"] = title
            stories.append(entry)
        return {"id": self.story_id, "title": self.title, "stories": stories}

    def to_stories(self, speaker_colors: Optional[dict[str, str]] = None, strict: bool = False) -> list[Story]:
        """Parse every line into a Story derived from one base story."""
        parser = MarkupParser(strict=strict)
        base = Story()
        speaker_stories: dict[str, Story] = {}
        stories = []

        for line, (title, msg) in zip(self.lines, self.markup_lines(speaker_colors)):
            if line.speaker is None:
                story = base
            else:
                if line.speaker not in speaker_stories:
                    speaker_stories[line.speaker] = base.with_title(parser.parse(title))
                story = speaker_stories[line.speaker]
            stories.append(story.with_msg(parser.parse(msg)))
        return stories


class ScriptParser:
    """Reads the plain-text script format."""

    def parse_string(self, text: str) -> Script:
        lines = text.splitlines()
        if not lines or not lines[0].strip():
            raise ScriptError("script has no title line")

        script = Script(title=lines[0].strip())
        for raw in lines[1:]:
            if not raw.strip():
                continue
            parts = raw.split(":")
            if len(parts) == 2:
                script.lines.append(ScriptLine(parts[0].strip(), parts[1].strip()))
            else:
                # Zero or several colons: the whole line is narration
                script.lines.append(ScriptLine(None, raw))

        logger.debug("Parsed script %r: %d lines, speakers %s", script.title, len(script.lines), script.speakers)
        return script

    def parse_file(self, path: Path | str) -> Script:
        return self.parse_string(Path(path).read_text(encoding="utf-8"))


def compile_script_file(
    input_path: Path | str,
    output_path: Path | str | None = None,
    speaker_colors: Optional[dict[str, str]] = None,
) -> Path:
    """
    Compile a script into a story file.

    Args:
        input_path: Script text file
        output_path: Target JSON file (default: next to the input)
        speaker_colors: Speaker name -> color

    Returns:
        Path of the written story file
    """
    input_path = Path(input_path)
    output = Path(output_path) if output_path is not None else input_path.with_suffix(".json")

    script = ScriptParser().parse_file(input_path)
    missing = [s for s in script.speakers if s not in (speaker_colors or {})]
    if missing:
        logger.warning("No color for %s; using %r", ", ".join(missing), PLACEHOLDER_COLOR)

    data = script.to_story_data(speaker_colors)
    jsonschema.validate(instance=data, schema=STORY_FILE_SCHEMA)

    output.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Wrote %d stories to %s", len(data["stories"]), output)
    return output


def _parse_color(value: str) -> tuple[str, str]:
    name, sep, color = value.partition("=")
    if not sep or not name.strip() or not color.strip():
        raise argparse.ArgumentTypeError(f"expected NAME=COLOR, got {value!r}")
    return name.strip(), color.strip()


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Compile a dialogue script into a story file.")
    p.add_argument("input", help="Input script (.txt)")
    p.add_argument("-o", "--output", default=None, help="Output .json (default: alongside input)")
    p.add_argument(
        "--color",
        action="append",
        type=_parse_color,
        default=[],
        metavar="NAME=COLOR",
        help="Text color for a speaker (repeatable)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    args = build_argparser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        compile_script_file(args.input, args.output, dict(args.color))
    except (OSError, ScriptError) as e:
        logger.error("Failed to compile %s: %s", args.input, e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
