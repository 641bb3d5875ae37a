"""
Reveal components - per-engine reveal progress and the shared history log.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from pydantic import Field

from vnengine.core.component import Component
from vnframework.components.text import RunSequence, TextRun


class RevealState(Component):
    """
    Reveal progress of one run sequence.

    Attributes:
        run_index: Index of the run being revealed; equal to the sequence
            length once everything is visible
        revealed_chars: Code points of the current run made visible
    """
    run_index: int = Field(default=0, ge=0)
    revealed_chars: int = Field(default=0, ge=0)

    def reset(self) -> None:
        self.run_index = 0
        self.revealed_chars = 0

    def is_at_end(self, sequence_length: int) -> bool:
        return self.run_index >= sequence_length


class StoryLog:
    """
    Append-only history of committed run sequences.

    Shared by every story box of the application; iterating yields the
    oldest entry first, ``newest_first()`` gives the order the log view
    shows them in.
    """

    def __init__(self):
        self._entries: list[RunSequence] = []

    def append(self, runs: Sequence[TextRun]) -> None:
        self._entries.append(tuple(runs))

    def newest_first(self) -> list[RunSequence]:
        return list(reversed(self._entries))

    @property
    def entries(self) -> list[RunSequence]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RunSequence]:
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> RunSequence:
        return self._entries[index]
