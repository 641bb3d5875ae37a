"""
Core engine module.

Exports:
- Component: validated data component base
- EventBus, Event, AudioEvent, UIEvent: Event system
- Action, action_for_key: Input actions
- TickDriver: fixed timestep scheduler
"""

from vnengine.core.component import Component
from vnengine.core.events import EventBus, Event, AudioEvent, UIEvent
from vnengine.core.actions import Action, DEFAULT_KEY_BINDINGS, action_for_key
from vnengine.core.clock import TickDriver

__all__ = [
    "Component",
    # Events
    "EventBus",
    "Event",
    "AudioEvent",
    "UIEvent",
    # Input
    "Action",
    "DEFAULT_KEY_BINDINGS",
    "action_for_key",
    # Scheduling
    "TickDriver",
]
