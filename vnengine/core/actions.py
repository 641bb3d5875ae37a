"""
Input action definitions.

Actions abstract raw input (keys, mouse buttons) into semantic actions
for the dialogue box. Box logic should use Actions, not raw keys, so
bindings can be changed without touching the reveal code.
"""

from enum import Enum, auto

import pygame


class Action(Enum):
    """Semantic dialogue box actions."""

    ADVANCE = auto()    # click / confirm: complete the sequence or commit it
    SKIP = auto()       # held: fast-forward previously seen text
    AUTO = auto()       # toggle auto-advance
    LOG = auto()        # toggle the history log
    HIDE = auto()       # hide the message box
    SETTINGS = auto()   # toggle the settings view


DEFAULT_KEY_BINDINGS: dict[Action, list[int]] = {
    Action.ADVANCE: [pygame.K_RETURN, pygame.K_SPACE, pygame.K_z],
    Action.SKIP: [pygame.K_LCTRL, pygame.K_RCTRL],
    Action.AUTO: [pygame.K_a],
    Action.LOG: [pygame.K_l],
    Action.HIDE: [pygame.K_h],
    Action.SETTINGS: [pygame.K_ESCAPE],
}

# Mouse button 1 (left click) advances like the confirm keys
DEFAULT_MOUSE_BINDINGS: dict[Action, list[int]] = {
    Action.ADVANCE: [1],
}


def action_for_key(
    key: int,
    bindings: dict[Action, list[int]] | None = None,
) -> Action | None:
    """Look up the action bound to a key code, if any."""
    bindings = bindings if bindings is not None else DEFAULT_KEY_BINDINGS
    for action, keys in bindings.items():
        if key in keys:
            return action
    return None
