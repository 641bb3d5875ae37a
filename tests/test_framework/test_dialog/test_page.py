import pytest
import pygame
from unittest.mock import MagicMock
from vnengine.core.events import UIEvent
from vnframework.dialog.markup import parse_markup
from vnframework.dialog.page import StoryBox, StoryEvent, StoryPage
from vnframework.dialog.story import Story

pytestmark = pytest.mark.usefixtures("mock_pygame")

@pytest.fixture
def stories():
    bob = Story().with_title(parse_markup("{{}}Bob"))
    return [
        Story().with_msg(parse_markup("{{speed:10}}ab")),
        bob.with_msg(parse_markup("{{speed:10|color:blue}}cd")),
    ]

@pytest.fixture
def box(mode, log, event_bus):
    return StoryBox(mode, log, parse_markup("{{speed:10}}abcd"), skip_len=1, event_bus=event_bus)

def key_event(event_type, key):
    return MagicMock(type=event_type, key=key)

# StoryBox

def test_click_on_hidden_box_only_shows_it(box, mode, recorder):
    received = recorder(UIEvent.BOX_SHOWN)
    mode.box_hidden = True

    assert box.click()

    assert not mode.box_hidden
    assert not box.engine.is_at_end
    assert len(received) == 1

def test_hidden_box_style(box, mode):
    box.box_style = "color: white;"
    assert box.style == "color: white;"
    box.hide()
    assert box.style == "color: white;visibility: collapse;"

def test_hidden_box_keeps_revealing(box, mode):
    box.hide()
    assert box.update(0.015) == 1

def test_click_ignored_under_log_or_settings(box, mode):
    mode.log_open = True
    assert not box.click()
    mode.log_open = False
    mode.settings_open = True
    assert not box.click()
    assert not box.engine.is_at_end

def test_click_completes_then_commits(box, log):
    next_called = MagicMock()
    box.on_next = next_called

    box.click()
    assert box.engine.is_at_end
    box.click()

    assert len(log) == 1
    next_called.assert_called_once()

def test_toggle_auto(box, mode, recorder):
    received = recorder(UIEvent.AUTO_TOGGLED)

    assert box.toggle_auto()
    assert mode.auto_advance
    assert box.toggle_auto()
    assert not mode.auto_advance
    assert [e["enabled"] for e in received] == [True, False]

def test_toggle_auto_needs_skippable_box(mode, log):
    box = StoryBox(mode, log, can_skip=False)
    assert not box.toggle_auto()
    assert not mode.auto_advance

def test_toggle_skip_gated_by_seen_content(mode, log):
    seen = StoryBox(mode, log, skip_len=1, sequence_index=0)
    assert seen.toggle_skip()
    assert mode.skip_requested

    mode.skip_requested = False
    unseen = StoryBox(mode, log, skip_len=1, sequence_index=1)
    assert not unseen.toggle_skip()
    assert not mode.skip_requested

def test_log_view(box, mode, log, recorder):
    received = recorder(UIEvent.LOG_OPENED, UIEvent.LOG_CLOSED)
    log.append(parse_markup("{{}}first"))
    log.append(parse_markup("{{}}second"))

    assert box.open_log()
    assert mode.log_open
    assert [entry[0].text for entry in box.log_entries()] == ["second", "first"]
    box.close_log()

    assert not mode.log_open
    assert [e.type for e in received] == [UIEvent.LOG_OPENED, UIEvent.LOG_CLOSED]

def test_log_view_disabled(mode, log):
    box = StoryBox(mode, log, show_log=False)
    assert not box.open_log()
    assert not mode.log_open

def test_settings_view(box, mode, recorder):
    received = recorder(UIEvent.SETTINGS_OPENED, UIEvent.SETTINGS_CLOSED)

    box.open_settings()
    assert box.update(1.0) == 0
    box.close_settings()

    assert not mode.settings_open
    assert len(received) == 2

def test_key_bindings(box, mode):
    assert box.handle_key_down(pygame.K_a)
    assert mode.auto_advance

    assert box.handle_key_down(pygame.K_l)
    assert mode.log_open
    assert box.handle_key_down(pygame.K_l)
    assert not mode.log_open

    assert box.handle_key_down(pygame.K_h)
    assert mode.box_hidden
    assert box.handle_key_down(pygame.K_h)
    assert not mode.box_hidden

    assert box.handle_key_down(pygame.K_ESCAPE)
    assert mode.settings_open
    assert box.handle_key_down(pygame.K_ESCAPE)
    assert not mode.settings_open

    assert not box.handle_key_down(pygame.K_q)

def test_skip_key_hold_and_release(box, mode):
    assert box.handle_key_down(pygame.K_LCTRL)
    assert mode.skip_requested
    assert box.handle_key_up(pygame.K_LCTRL)
    assert not mode.skip_requested
    assert not box.handle_key_up(pygame.K_a)

def test_confirm_key_clicks(box):
    box.handle_key_down(pygame.K_RETURN)
    assert box.engine.is_at_end

def test_handle_pygame_events(box, mode):
    assert box.handle_event(key_event(pygame.KEYDOWN, pygame.K_RCTRL))
    assert mode.skip_requested
    assert box.handle_event(key_event(pygame.KEYUP, pygame.K_RCTRL))
    assert not mode.skip_requested

    assert not box.handle_event(MagicMock(type=pygame.MOUSEBUTTONDOWN, button=3))
    assert box.handle_event(MagicMock(type=pygame.MOUSEBUTTONDOWN, button=1))
    assert box.engine.is_at_end

    assert not box.handle_event(MagicMock(type=pygame.MOUSEMOTION))

def test_snapshot_includes_title(mode, log):
    box = StoryBox(mode, log, parse_markup("{{speed:10}}hey"), title=parse_markup("{{}}Alice"))
    box.update(0.025)

    snapshot = box.snapshot()
    assert snapshot.title[0].text == "Alice"
    assert snapshot.plain_text() == "he"

# StoryPage

def test_page_walks_through_stories(stories, mode, log):
    on_next = MagicMock()
    on_finished = MagicMock()
    page = StoryPage(stories, mode, log, on_next=on_next, on_finished=on_finished)

    page.update(1.0)
    assert page.snapshot().plain_text() == "ab"
    assert page.click()

    assert page.index == 1
    assert page.snapshot().title[0].text == "Bob"
    assert page.box.engine.sequence_index == 1
    on_next.assert_called_once_with(0)

    page.update(1.0)
    page.click()

    assert page.is_finished
    assert page.story is None
    assert len(log) == 2
    on_finished.assert_called_once()

def test_finished_page_ignores_input(stories, mode, log):
    on_finished = MagicMock()
    page = StoryPage(stories, mode, log, on_finished=on_finished)
    for _ in range(4):
        page.click()

    assert page.is_finished
    assert not page.click()
    assert page.update(10.0) == 0
    assert len(log) == 2
    on_finished.assert_called_once()
    assert page.background == ""
    assert page.class_name == ""

def test_page_start_index(stories, mode, log):
    page = StoryPage(stories, mode, log, start=1)
    assert page.snapshot().title[0].text == "Bob"

    finished = MagicMock()
    empty = StoryPage(stories, mode, log, start=5, on_finished=finished)
    assert empty.is_finished
    finished.assert_called_once()
    assert empty.box.engine.is_detached

def test_page_skip_len_applies_per_story(stories, mode, log):
    page = StoryPage(stories, mode, log, skip_len=1)

    assert page.box.press_skip()
    page.box.release_skip()

    page.click()
    page.click()
    assert page.index == 1
    assert not page.box.press_skip()

    page.skip_len = 2
    assert page.box.press_skip()

def test_page_auto_advance_runs_to_the_end(stories, mode, log):
    mode.auto_advance = True
    mode.auto_advance_delay = 100
    on_finished = MagicMock()
    page = StoryPage(stories, mode, log, on_finished=on_finished)

    for _ in range(20):
        page.update(0.05)

    assert page.is_finished
    assert len(log) == 2
    on_finished.assert_called_once()

def test_page_events_on_bus(stories, mode, log, event_bus, recorder):
    received = recorder(StoryEvent.PAGE_ADVANCED, StoryEvent.PAGE_FINISHED)
    page = StoryPage(stories, mode, log, event_bus=event_bus)

    for _ in range(4):
        page.click()

    assert [e.type for e in received] == [
        StoryEvent.PAGE_ADVANCED,
        StoryEvent.PAGE_ADVANCED,
        StoryEvent.PAGE_FINISHED,
    ]
    assert received[0]["index"] == 0

def test_page_background_and_class(mode, log):
    story = Story().with_background("bg.png").with_class("night").with_msg(parse_markup("{{}}x"))
    page = StoryPage([story], mode, log)
    assert page.background == "bg.png"
    assert page.class_name == "night"
