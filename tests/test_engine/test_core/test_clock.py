import pytest
from vnengine.core.clock import TickDriver

def test_advance_runs_fixed_steps():
    driver = TickDriver(fixed_timestep=0.01)
    received = []
    driver.add(received.append)

    updates = driver.advance(0.035)

    assert updates == 3
    assert received == [0.01, 0.01, 0.01]
    assert driver.accumulator == pytest.approx(0.005)

def test_leftover_time_carries_to_next_frame():
    driver = TickDriver(fixed_timestep=0.01)
    received = []
    driver.add(received.append)

    driver.advance(0.006)
    assert received == []
    driver.advance(0.006)
    assert len(received) == 1

def test_frame_skip_limit_drops_backlog():
    driver = TickDriver(fixed_timestep=0.01, max_frame_skip=5)
    received = []
    driver.add(received.append)

    updates = driver.advance(0.2)

    assert updates == 5
    assert driver.accumulator == 0.0

def test_long_frames_are_clamped():
    driver = TickDriver(fixed_timestep=0.1, max_frame_skip=100)
    assert driver.advance(10.0) == 2

def test_paused_driver_consumes_time_without_updates():
    driver = TickDriver(fixed_timestep=0.01)
    received = []
    driver.add(received.append)
    driver.paused = True

    assert driver.advance(0.035) == 3
    assert received == []

def test_add_remove_tickable():
    driver = TickDriver(fixed_timestep=0.01)
    received = []
    driver.add(received.append)
    driver.add(received.append)
    driver.advance(0.01)
    assert len(received) == 1

    driver.remove(received.append)
    driver.advance(0.01)
    assert len(received) == 1

def test_invalid_timestep():
    with pytest.raises(ValueError):
        TickDriver(fixed_timestep=0)

def test_run_until_stopped():
    now = [0.0]

    def fake_sleep(seconds):
        now[0] += seconds

    driver = TickDriver(fixed_timestep=0.01, time_source=lambda: now[0], sleep=fake_sleep)
    received = []
    driver.add(received.append)

    driver.run(should_stop=lambda: len(received) >= 3)

    assert len(received) >= 3

def test_stop_from_tickable():
    now = [0.0]
    driver = TickDriver(fixed_timestep=0.01, time_source=lambda: now[0],
                        sleep=lambda s: now.__setitem__(0, now[0] + s))
    driver.add(lambda dt: driver.stop())

    driver.run(should_stop=lambda: False)
    # Loop returned because the tickable stopped it
