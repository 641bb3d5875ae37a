import os
import sys
import random
import pytest
from unittest.mock import MagicMock, patch

# Ensure engine modules can be imported
sys.path.append(os.getcwd())

@pytest.fixture(autouse=True)
def mock_pygame():
    """
    Global mock for pygame to allow headless testing.
    Autoused for all tests to prevent accidental window or mixer creation.
    """
    with patch('pygame.init'), \
         patch('pygame.display'), \
         patch('pygame.event'), \
         patch('pygame.time'), \
         patch('pygame.mixer'), \
         patch('pygame.key'), \
         patch('pygame.mouse'):

        import pygame
        pygame.time.get_ticks = MagicMock(return_value=0)

        yield

@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from vnengine.core.events import EventBus
    return EventBus()

@pytest.fixture
def mode():
    """Default mode configuration."""
    from vnframework.components.mode import ModeConfig
    return ModeConfig()

@pytest.fixture
def log():
    """Empty story log."""
    from vnframework.components.reveal import StoryLog
    return StoryLog()

@pytest.fixture
def sounds():
    """Registry holding one dialogue blip."""
    from vnengine.audio.effects import SoundRegistry
    return SoundRegistry({"blip": b"RIFF-blip"})

@pytest.fixture
def rng():
    return random.Random(1234)

@pytest.fixture
def recorder(event_bus):
    """Collects every published event of the given types."""
    received = []

    def watch(*event_types):
        for event_type in event_types:
            event_bus.subscribe(event_type, received.append, weak=False)
        return received

    return watch
