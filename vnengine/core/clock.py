"""
Fixed timestep tick driver.

The reveal engine never sleeps or owns a thread; something outside it has
to call ``update(dt)`` on a schedule. TickDriver is that something: it
accumulates real frame time and hands it out in fixed steps, the same way
a game loop keeps logic deterministic while frames arrive irregularly.

Usage:
    driver = TickDriver(fixed_timestep=1 / 60)
    driver.add(story_box.update)
    driver.run(should_stop=lambda: page.is_finished)
"""

from __future__ import annotations

import time
from typing import Callable

# Callable receiving the fixed delta time in seconds
Tickable = Callable[[float], object]


class TickDriver:
    """
    Drives registered tickables with a fixed timestep.

    Attributes:
        fixed_timestep: Seconds handed to each tickable per step
        max_frame_skip: Maximum steps per frame before the backlog is dropped
    """

    # Frames longer than this are clamped (prevents the spiral of death)
    MAX_FRAME_TIME = 0.25

    def __init__(
        self,
        fixed_timestep: float = 1 / 60,
        max_frame_skip: int = 5,
        time_source: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if fixed_timestep <= 0:
            raise ValueError("fixed_timestep must be positive")
        self.fixed_timestep = fixed_timestep
        self.max_frame_skip = max_frame_skip
        self._time_source = time_source
        self._sleep = sleep
        self._tickables: list[Tickable] = []
        self._accumulator = 0.0
        self._running = False
        self.paused = False

    def add(self, tickable: Tickable) -> None:
        if tickable not in self._tickables:
            self._tickables.append(tickable)

    def remove(self, tickable: Tickable) -> None:
        if tickable in self._tickables:
            self._tickables.remove(tickable)

    @property
    def accumulator(self) -> float:
        return self._accumulator

    def advance(self, frame_time: float) -> int:
        """
        Feed one frame worth of time and run the fixed updates it pays for.

        Returns:
            Number of fixed steps executed
        """
        frame_time = min(max(frame_time, 0.0), self.MAX_FRAME_TIME)
        self._accumulator += frame_time

        updates = 0
        while self._accumulator >= self.fixed_timestep:
            if not self.paused:
                for tickable in list(self._tickables):
                    tickable(self.fixed_timestep)
            self._accumulator -= self.fixed_timestep
            updates += 1

            if updates >= self.max_frame_skip:
                self._accumulator = 0.0
                break

        return updates

    def run(self, should_stop: Callable[[], bool]) -> None:
        """Run a real-time loop until ``should_stop()`` returns True or stop() is called."""
        self._running = True
        current = self._time_source()

        while self._running and not should_stop():
            new_time = self._time_source()
            self.advance(new_time - current)
            current = new_time
            self._sleep(self.fixed_timestep)

        self._running = False

    def stop(self) -> None:
        """Request the run loop to exit."""
        self._running = False
