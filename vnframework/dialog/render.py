"""
Render projection - what of a run is visible, and how it is laid out.

Pure functions; nothing here touches reveal state. The external renderer
receives a RevealSnapshot per tick and lays each run out with
``layout_run``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional, Sequence

from vnframework.components.text import RunSequence, TextRun


@dataclass(frozen=True)
class RenderSpan:
    """A piece of text with its own class and extra style."""
    text: str
    class_name: str = ""
    style: str = ""


@dataclass(frozen=True)
class RenderedRun:
    """
    A run laid out for display.

    Attributes:
        class_name: Class of the enclosing element (empty for split runs)
        style: Declarations for the enclosing element
        lines: Visually stacked lines, each a list of spans
    """
    class_name: str
    style: str
    lines: list[list[RenderSpan]] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join("".join(span.text for span in line) for line in self.lines)


@dataclass(frozen=True)
class RevealSnapshot:
    """
    What is visible right now.

    Attributes:
        title: Title runs (always fully shown)
        revealed: Runs of the active sequence that are completely visible
        current: Visible prefix of the run being revealed, if any
    """
    title: RunSequence = ()
    revealed: RunSequence = ()
    current: Optional[TextRun] = None

    @property
    def runs(self) -> RunSequence:
        """Body runs in display order."""
        if self.current is None:
            return self.revealed
        return self.revealed + (self.current,)

    def plain_text(self) -> str:
        return "".join(run.text for run in self.runs)


def visible_prefix(run: TextRun, limit: int) -> TextRun:
    """Truncate a run to its first ``limit`` code points."""
    return run.with_text(run.text[:max(0, limit)])


def run_style(run: TextRun) -> str:
    """Base declarations of a run's enclosing element."""
    return (
        f"font-style: {run.font_style};"
        f"font-size: {run.size:g}rem;"
        f'font-family: "{run.font}";'
        f"color: {run.color};"
        f"font-weight: {run.font_weight};"
    )


def layout_run(run: TextRun, rng: Optional[random.Random] = None) -> RenderedRun:
    """
    Lay a run out into lines and spans.

    ``\\n`` starts a new line. Split runs explode every line into one span
    per character, and every span resolves the style generator again, so
    randomized styles differ from character to character.
    """
    lines: list[list[RenderSpan]] = []

    if run.is_split:
        for line in run.text.split("\n"):
            lines.append([
                RenderSpan(ch, run.class_name, run.style.resolve(rng))
                for ch in line
            ])
        return RenderedRun(class_name="", style=run_style(run), lines=lines)

    for line in run.text.split("\n"):
        lines.append([RenderSpan(line)])
    return RenderedRun(
        class_name=run.class_name,
        style=run_style(run) + run.style.resolve(rng),
        lines=lines,
    )


def layout_runs(runs: Sequence[TextRun], rng: Optional[random.Random] = None) -> list[RenderedRun]:
    return [layout_run(run, rng) for run in runs]
