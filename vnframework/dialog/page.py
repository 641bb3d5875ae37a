"""
Story box and story page - the interactive shell around a reveal engine.

StoryBox turns reader input (keys, clicks, the box buttons) into mode
changes and engine operations. StoryPage walks a list of stories through
one box, advancing whenever the box commits a sequence.

Usage:
    page = StoryPage(stories, mode, log, skip_len=seen, on_finished=next_scene)
    driver.add(page.update)
    for event in pygame.event.get():
        page.handle_event(event)
"""

from __future__ import annotations

import logging
import random
from enum import Enum, auto
from typing import Callable, Optional, Sequence

import pygame

from vnengine.audio.effects import SoundRegistry
from vnengine.core.actions import (
    DEFAULT_KEY_BINDINGS,
    DEFAULT_MOUSE_BINDINGS,
    Action,
    action_for_key,
)
from vnengine.core.events import EventBus, UIEvent
from vnframework.components.mode import ModeConfig
from vnframework.components.reveal import StoryLog
from vnframework.components.text import RunSequence, TextRun
from vnframework.dialog.render import RevealSnapshot
from vnframework.dialog.reveal import RevealEngine, SoundSink
from vnframework.dialog.story import Story

logger = logging.getLogger(__name__)


class StoryEvent(Enum):
    """Story page progress events."""
    PAGE_ADVANCED = auto()
    PAGE_FINISHED = auto()


class StoryBox:
    """
    Message box bound to one reveal engine.

    Mode flags live on the shared ModeConfig, so toggling auto or skip in
    one box affects every box of the application.
    """

    HIDDEN_STYLE = "visibility: collapse;"

    def __init__(
        self,
        mode: ModeConfig,
        log: StoryLog,
        runs: Sequence[TextRun] = (),
        *,
        title: Sequence[TextRun] = (),
        can_skip: bool = True,
        skip_len: int = 0,
        sequence_index: int = 0,
        show_log: bool = True,
        box_class: str = "",
        box_style: str = "",
        sounds: Optional[SoundRegistry] = None,
        play_sound: Optional[SoundSink] = None,
        event_bus: Optional[EventBus] = None,
        on_next: Optional[Callable[[], None]] = None,
        key_bindings: Optional[dict[Action, list[int]]] = None,
        mouse_bindings: Optional[dict[Action, list[int]]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.mode = mode
        self.log = log
        self.title: RunSequence = tuple(title)
        self.show_log = show_log
        self.box_class = box_class
        self.box_style = box_style
        self.event_bus = event_bus
        self.on_next = on_next
        self.key_bindings = key_bindings if key_bindings is not None else DEFAULT_KEY_BINDINGS.copy()
        self.mouse_bindings = mouse_bindings if mouse_bindings is not None else DEFAULT_MOUSE_BINDINGS.copy()

        self.engine = RevealEngine(
            mode,
            log,
            runs,
            sounds=sounds,
            play_sound=play_sound,
            event_bus=event_bus,
            can_skip=can_skip,
            skip_len=skip_len,
            sequence_index=sequence_index,
            on_advance=self._on_commit,
            rng=rng,
        )

    @property
    def can_skip(self) -> bool:
        return self.engine.can_skip

    @property
    def style(self) -> str:
        """Box style, collapsed while the reader has hidden it."""
        if self.mode.box_hidden:
            return self.box_style + self.HIDDEN_STYLE
        return self.box_style

    def bind(self, title: Sequence[TextRun], runs: Sequence[TextRun], sequence_index: int) -> None:
        """Show a new title and message."""
        self.title = tuple(title)
        self.engine.restart(runs, sequence_index)

    def _on_commit(self) -> None:
        if self.on_next:
            self.on_next()

    # Reader operations

    def click(self) -> bool:
        """
        Click on the box.

        A hidden box is only brought back; the click does not reach the
        text. Clicks are ignored while the log or settings cover the box.
        """
        if self.mode.box_hidden:
            self.show()
            return True
        if self.mode.settings_open or self.mode.log_open:
            return False
        return self.engine.click()

    def press_skip(self) -> bool:
        if not self.can_skip:
            return False
        return self.engine.press_skip()

    def release_skip(self) -> None:
        if self.can_skip:
            self.engine.release_skip()

    def toggle_auto(self) -> bool:
        """Flip auto-advance. Only boxes that allow skipping offer it."""
        if not self.can_skip:
            return False
        self.mode.auto_advance = not self.mode.auto_advance
        self._publish(UIEvent.AUTO_TOGGLED, enabled=self.mode.auto_advance)
        return True

    def toggle_skip(self) -> bool:
        """Flip skip mode, allowed only for previously seen sequences."""
        if not self.engine.skip_permitted:
            return False
        self.mode.skip_requested = not self.mode.skip_requested
        self._publish(UIEvent.SKIP_TOGGLED, enabled=self.mode.skip_requested)
        return True

    def open_log(self) -> bool:
        if not self.show_log:
            return False
        self.mode.log_open = True
        self._publish(UIEvent.LOG_OPENED)
        return True

    def close_log(self) -> None:
        self.mode.log_open = False
        self._publish(UIEvent.LOG_CLOSED)

    def hide(self) -> None:
        self.mode.box_hidden = True
        self._publish(UIEvent.BOX_HIDDEN)

    def show(self) -> None:
        self.mode.box_hidden = False
        self._publish(UIEvent.BOX_SHOWN)

    def open_settings(self) -> None:
        self.mode.settings_open = True
        self._publish(UIEvent.SETTINGS_OPENED)

    def close_settings(self) -> None:
        self.mode.settings_open = False
        self._publish(UIEvent.SETTINGS_CLOSED)

    # Raw input

    def handle_key_down(self, key: int) -> bool:
        """Dispatch a pressed key through the key bindings."""
        action = action_for_key(key, self.key_bindings)
        if action is None:
            return False

        if action == Action.ADVANCE:
            return self.click()
        if action == Action.SKIP:
            return self.press_skip()
        if action == Action.AUTO:
            return self.toggle_auto()
        if action == Action.LOG:
            if self.mode.log_open:
                self.close_log()
                return True
            return self.open_log()
        if action == Action.HIDE:
            if self.mode.box_hidden:
                self.show()
            else:
                self.hide()
            return True
        if action == Action.SETTINGS:
            if self.mode.settings_open:
                self.close_settings()
            else:
                self.open_settings()
            return True
        return False

    def handle_key_up(self, key: int) -> bool:
        if action_for_key(key, self.key_bindings) == Action.SKIP:
            self.release_skip()
            return True
        return False

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Process a pygame event. Returns True if the box used it."""
        if event.type == pygame.KEYDOWN:
            return self.handle_key_down(event.key)

        elif event.type == pygame.KEYUP:
            return self.handle_key_up(event.key)

        elif event.type == pygame.MOUSEBUTTONDOWN:
            if event.button in self.mouse_bindings.get(Action.ADVANCE, []):
                return self.click()

        return False

    # Frame update

    def update(self, dt: float) -> int:
        """Advance the reveal by dt seconds."""
        return self.engine.tick(dt * 1000.0)

    def snapshot(self) -> RevealSnapshot:
        return self.engine.snapshot(self.title)

    def log_entries(self) -> list[RunSequence]:
        """History in the order the log view shows it (newest first)."""
        return self.log.newest_first()

    def _publish(self, event_type: Enum, **data) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)


class StoryPage:
    """
    A list of stories shown one after another in a single box.

    Each story's message is bound with its index as the sequence index, so
    ``skip_len`` counts how many stories of this page the reader has
    already seen. When the stories run out the box is detached and
    ``on_finished`` fires once.
    """

    def __init__(
        self,
        stories: Sequence[Story],
        mode: ModeConfig,
        log: StoryLog,
        *,
        skip_len: int = 0,
        start: int = 0,
        can_skip: bool = True,
        show_log: bool = True,
        box_class: str = "",
        box_style: str = "",
        sounds: Optional[SoundRegistry] = None,
        play_sound: Optional[SoundSink] = None,
        event_bus: Optional[EventBus] = None,
        on_next: Optional[Callable[[int], None]] = None,
        on_finished: Optional[Callable[[], None]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.stories: tuple[Story, ...] = tuple(stories)
        self.index = max(start, 0)
        self.event_bus = event_bus
        self.on_next = on_next
        self.on_finished = on_finished
        self._finished = False

        self.box = StoryBox(
            mode,
            log,
            can_skip=can_skip,
            skip_len=skip_len,
            show_log=show_log,
            box_class=box_class,
            box_style=box_style,
            sounds=sounds,
            play_sound=play_sound,
            event_bus=event_bus,
            on_next=self._advance,
            rng=rng,
        )
        self._bind_current()

    @property
    def story(self) -> Optional[Story]:
        """The story on screen, or None once the page is finished."""
        if 0 <= self.index < len(self.stories):
            return self.stories[self.index]
        return None

    @property
    def is_finished(self) -> bool:
        return self._finished

    @property
    def skip_len(self) -> int:
        return self.box.engine.skip_len

    @skip_len.setter
    def skip_len(self, value: int) -> None:
        self.box.engine.skip_len = value

    @property
    def background(self) -> str:
        return self.story.background if self.story else ""

    @property
    def class_name(self) -> str:
        return self.story.class_name if self.story else ""

    def _bind_current(self) -> None:
        story = self.story
        if story is None:
            self._finish()
            return
        self.box.bind(story.title, story.msg, self.index)

    def _advance(self) -> None:
        finished_index = self.index
        logger.debug("Story %d of %d committed", finished_index, len(self.stories))
        if self.event_bus:
            self.event_bus.publish(StoryEvent.PAGE_ADVANCED, index=finished_index)
        if self.on_next:
            self.on_next(finished_index)

        self.index += 1
        self._bind_current()

    def _finish(self) -> None:
        self.box.engine.detach()
        if self._finished:
            return
        self._finished = True
        logger.info("Story page finished after %d stories", len(self.stories))
        if self.event_bus:
            self.event_bus.publish(StoryEvent.PAGE_FINISHED, count=len(self.stories))
        if self.on_finished:
            self.on_finished()

    # Delegation to the box

    def click(self) -> bool:
        return self.box.click()

    def handle_event(self, event: pygame.event.Event) -> bool:
        return self.box.handle_event(event)

    def update(self, dt: float) -> int:
        if self._finished:
            return 0
        return self.box.update(dt)

    def snapshot(self) -> RevealSnapshot:
        return self.box.snapshot()
