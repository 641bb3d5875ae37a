"""
Dialog module - markup, reveal and the story pages built on them.
"""

from vnframework.dialog.markup import MarkupError, MarkupParser, parse_markup
from vnframework.dialog.render import (
    RenderedRun,
    RenderSpan,
    RevealSnapshot,
    layout_run,
    layout_runs,
    run_style,
    visible_prefix,
)
from vnframework.dialog.reveal import RevealEngine, RevealEvent
from vnframework.dialog.story import ImagePrint, Story
from vnframework.dialog.page import StoryBox, StoryEvent, StoryPage
from vnframework.dialog.library import STORY_FILE_SCHEMA, StoryLibrary
from vnframework.dialog.script import (
    Script,
    ScriptError,
    ScriptLine,
    ScriptParser,
    compile_script_file,
)

__all__ = [
    # Markup
    "MarkupError",
    "MarkupParser",
    "parse_markup",
    # Rendering
    "RenderedRun",
    "RenderSpan",
    "RevealSnapshot",
    "layout_run",
    "layout_runs",
    "run_style",
    "visible_prefix",
    # Reveal
    "RevealEngine",
    "RevealEvent",
    # Stories
    "ImagePrint",
    "Story",
    "StoryBox",
    "StoryEvent",
    "StoryPage",
    "STORY_FILE_SCHEMA",
    "StoryLibrary",
    # Scripts
    "Script",
    "ScriptError",
    "ScriptLine",
    "ScriptParser",
    "compile_script_file",
]
