"""
Visual Novel Engine

Engine layer: event bus, validated components, input actions, the fixed
timestep tick driver and audio playback. The dialogue logic itself
(markup, runs, reveal) lives in ``vnframework``.
"""

__version__ = "0.1.0"

from vnengine.core import (
    Component,
    EventBus,
    Event,
    AudioEvent,
    UIEvent,
    Action,
    TickDriver,
)

__all__ = [
    "Component",
    "EventBus",
    "Event",
    "AudioEvent",
    "UIEvent",
    "Action",
    "TickDriver",
]
