"""
Reveal engine - time-driven, interruptible character-by-character reveal.

The engine owns the reveal progress of one run sequence at a time and is
advanced by ``tick(elapsed_ms)`` calls from an external scheduler. It never
sleeps; every wait of the reveal loop (per-character delay, the idle wait
at the end of a sequence, the auto-advance delay) is expressed as elapsed
time the engine must be fed before it moves on. ModeConfig is re-read on
every logical step, so user changes apply from the next step on.

Usage:
    engine = RevealEngine(mode, log, parse_markup(line), on_advance=next_line)
    engine.tick(16.7)
    renderer.draw(engine.snapshot())
"""

from __future__ import annotations

import logging
import random
from enum import Enum, auto
from typing import Any, Callable, Optional, Sequence

from vnengine.audio.effects import SoundAssetError, SoundEffect, SoundRegistry
from vnengine.core.events import AudioEvent, EventBus
from vnframework.components.mode import ModeConfig
from vnframework.components.reveal import RevealState, StoryLog
from vnframework.components.text import RunSequence, TextRun
from vnframework.dialog.render import RevealSnapshot, visible_prefix

logger = logging.getLogger(__name__)

# Receives a resolved effect; AudioManager.play_effect fits
SoundSink = Callable[[SoundEffect], Any]


class RevealEvent(Enum):
    """Reveal progress events."""
    CHARACTER_REVEALED = auto()   # One more code point of the current run is visible
    RUN_COMPLETED = auto()        # A run is fully visible, the next one starts
    SEQUENCE_REVEALED = auto()    # Every run of the sequence is visible
    SKIPPED_TO_END = auto()       # Click revealed the rest at once
    SOUND_TRIGGERED = auto()      # A run's sound trigger fired for a character
    SEQUENCE_COMMITTED = auto()   # Sequence appended to the log, caller advances


class RevealEngine:
    """
    State machine revealing one run sequence.

    The state is two counters (run index, revealed characters); the
    sequence is "at end" once the run index equals its length.

    Attributes:
        mode: Shared mode configuration, read every step
        log: Shared history log, appended on commit
        can_skip: Whether this box allows skipping and click-to-complete
        skip_len: Sequences with an index below this were seen before and
            may be fast-forwarded
        sequence_index: Index of the bound sequence within its page
        on_advance: Called after each commit so the owner can bind the
            next sequence
    """

    # Per-character delay while fast-forwarding (ms)
    SKIP_DELAY_MS = 5.0
    # Idle wait at the end of a sequence before skip/auto act (ms)
    IDLE_MS = 10.0

    def __init__(
        self,
        mode: ModeConfig,
        log: StoryLog,
        runs: Sequence[TextRun] = (),
        *,
        sounds: Optional[SoundRegistry] = None,
        play_sound: Optional[SoundSink] = None,
        event_bus: Optional[EventBus] = None,
        can_skip: bool = True,
        skip_len: int = 0,
        sequence_index: int = 0,
        on_advance: Optional[Callable[[], None]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.mode = mode
        self.log = log
        self.sounds = sounds
        self.play_sound = play_sound
        self.event_bus = event_bus
        self.can_skip = can_skip
        self.skip_len = skip_len
        self.sequence_index = sequence_index
        self.on_advance = on_advance
        self._rng = rng or random.Random()

        self.state = RevealState()
        self._runs: Optional[RunSequence] = None
        self._timer = 0.0
        self._auto_elapsed = 0.0
        self._muted_runs: set[int] = set()

        self.restart(runs)

    # Properties

    @property
    def runs(self) -> RunSequence:
        return self._runs if self._runs is not None else ()

    @property
    def is_detached(self) -> bool:
        """True when no sequence is bound (the owning page ran out)."""
        return self._runs is None

    @property
    def is_at_end(self) -> bool:
        return self.state.is_at_end(len(self.runs))

    @property
    def current_run(self) -> Optional[TextRun]:
        if self.is_at_end:
            return None
        return self.runs[self.state.run_index]

    @property
    def skip_permitted(self) -> bool:
        """Skipping is allowed for previously seen sequences only."""
        return self.can_skip and self.sequence_index < self.skip_len

    # Binding

    def restart(self, runs: Sequence[TextRun], sequence_index: Optional[int] = None) -> None:
        """Bind a new run sequence and start revealing it from the top."""
        self._runs = tuple(runs)
        if sequence_index is not None:
            self.sequence_index = sequence_index
        self.reset()

    def reset(self) -> None:
        """
        Return to the first character of the bound sequence.

        Unspent tick time is kept, so a commit in the middle of a tick
        hands the rest of that tick to the next sequence.
        """
        self.state.reset()
        self._auto_elapsed = 0.0
        self._muted_runs.clear()
        self._settle()

    def detach(self) -> None:
        """Unbind the sequence; ticks and clicks become no-ops."""
        self._runs = None
        self.state.reset()
        self._timer = 0.0
        self._auto_elapsed = 0.0

    # Time

    def tick(self, elapsed_ms: float) -> int:
        """
        Feed elapsed time and run every step it pays for.

        Returns:
            Number of logical steps taken (reveals and commits)
        """
        if elapsed_ms < 0:
            raise ValueError(f"elapsed time must not be negative, got {elapsed_ms}")

        if self.mode.settings_open:
            # Everything waits while the settings view is up
            self._timer = 0.0
            return 0

        self._timer += elapsed_ms
        steps = 0

        while not self.is_detached:
            if not self.is_at_end:
                self._auto_elapsed = 0.0
                if self.mode.log_open:
                    self._timer = 0.0
                    break

                fast_forward = self._fast_forwarding()
                delay = self.SKIP_DELAY_MS if fast_forward else self._char_delay()
                if self._timer < delay:
                    break

                self._timer -= delay
                self._reveal_next(play_sound=not fast_forward)
                steps += 1
            else:
                if not self._idle_at_end():
                    break
                steps += 1

        return steps

    def _fast_forwarding(self) -> bool:
        if not self.mode.skip_requested:
            return False
        if self.skip_permitted:
            return True

        # Unseen content: drop the request instead of skipping it
        self.mode.skip_requested = False
        logger.debug("Skip refused for unseen sequence %d", self.sequence_index)
        return False

    def _char_delay(self) -> float:
        return self.current_run.speed / self.mode.speed_multiplier

    def _idle_at_end(self) -> bool:
        """
        Handle time spent at the end of the sequence.

        Returns:
            True if the sequence was committed
        """
        mode = self.mode

        if self.on_advance is None and not any(run.text for run in self.runs):
            # No text and nobody to bind a successor; only a click commits
            self._timer = 0.0
            self._auto_elapsed = 0.0
            return False

        if mode.skip_requested and self.skip_permitted:
            if self._timer < self.IDLE_MS:
                return False
            self._timer -= self.IDLE_MS
            return self.commit()

        if mode.skip_requested:
            mode.skip_requested = False

        if mode.auto_advance:
            self._auto_elapsed += self._timer
            self._timer = 0.0
            wait = self.IDLE_MS + mode.auto_advance_delay
            if self._auto_elapsed < wait:
                return False
            self._timer = self._auto_elapsed - wait
            self._auto_elapsed = 0.0
            return self.commit()

        # Waiting for the reader; idle time is not banked
        self._auto_elapsed = 0.0
        self._timer = 0.0
        return False

    # Reveal

    def step(self) -> bool:
        """
        Reveal one character regardless of timing.

        Returns:
            False if there was nothing left to reveal
        """
        if self.is_detached or self.is_at_end:
            return False
        self._reveal_next(play_sound=True)
        return True

    def _reveal_next(self, play_sound: bool) -> None:
        run = self.current_run
        state = self.state

        if state.revealed_chars < len(run.text):
            state.revealed_chars += 1
            self._publish(
                RevealEvent.CHARACTER_REVEALED,
                run_index=state.run_index,
                revealed_chars=state.revealed_chars,
            )
            if play_sound:
                self._trigger_sound(run)

        self._settle()

    def _settle(self) -> None:
        """Move past every run that is completely visible."""
        runs = self.runs
        state = self.state

        while state.run_index < len(runs) and state.revealed_chars >= len(runs[state.run_index].text):
            state.revealed_chars = 0
            state.run_index += 1
            self._publish(RevealEvent.RUN_COMPLETED, run_index=state.run_index - 1)

            if state.run_index == len(runs):
                self._publish(RevealEvent.SEQUENCE_REVEALED, sequence_index=self.sequence_index)

    def _trigger_sound(self, run: TextRun) -> None:
        if run.sound is None or self.mode.sound_volume == 0:
            return
        if self.sounds is None or self.play_sound is None:
            return

        run_index = self.state.run_index
        if run_index in self._muted_runs:
            return

        try:
            effect = run.sound.resolve(self.sounds, self._rng)
        except SoundAssetError as e:
            logger.warning("%s; run %d continues without sound", e, run_index)
            self._muted_runs.add(run_index)
            self._publish(AudioEvent.SFX_FAILED, key=e.key, run_index=run_index)
            return

        self.play_sound(effect)
        self._publish(RevealEvent.SOUND_TRIGGERED, run_index=run_index)

    def skip_to_end(self) -> None:
        """Reveal the whole sequence at once, without sound triggers."""
        if self.is_detached or self.is_at_end:
            return

        self.state.revealed_chars = 0
        self.state.run_index = len(self.runs)
        self._timer = 0.0
        self._publish(RevealEvent.SKIPPED_TO_END, sequence_index=self.sequence_index)
        self._publish(RevealEvent.SEQUENCE_REVEALED, sequence_index=self.sequence_index)

    # Manual interaction

    def click(self) -> bool:
        """
        Reader clicked the box.

        Commits a fully revealed sequence; otherwise reveals the rest
        immediately if this box allows skipping.

        Returns:
            True if the click changed anything
        """
        if self.is_detached:
            return False
        if self.is_at_end:
            return self.commit()
        if self.can_skip:
            self.skip_to_end()
            return True
        return False

    def commit(self) -> bool:
        """
        Log the fully revealed sequence and hand over to the owner.

        Returns:
            False if the sequence is not at its end (nothing committed)
        """
        if self.is_detached or not self.is_at_end:
            return False

        runs = self.runs
        self.log.append(runs)
        logger.debug("Committed sequence %d (%d runs)", self.sequence_index, len(runs))
        self._publish(RevealEvent.SEQUENCE_COMMITTED, runs=runs, sequence_index=self.sequence_index)

        self.reset()
        if self.on_advance:
            self.on_advance()
        return True

    def press_skip(self) -> bool:
        """Skip key held down; only honoured for previously seen sequences."""
        if not self.skip_permitted:
            return False
        self.mode.skip_requested = True
        return True

    def release_skip(self) -> None:
        self.mode.skip_requested = False

    # Output

    def snapshot(self, title: Sequence[TextRun] = ()) -> RevealSnapshot:
        """What the renderer should show right now."""
        runs = self.runs
        index = self.state.run_index
        current = None
        if index < len(runs):
            current = visible_prefix(runs[index], self.state.revealed_chars)
        return RevealSnapshot(title=tuple(title), revealed=runs[:index], current=current)

    def _publish(self, event_type: Enum, **data: Any) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)
