from __future__ import annotations

import pytest
import simpy

from route_sim.core.scheduler import TickScheduler


def test_ticks_on_fixed_period() -> None:
    env = simpy.Environment()
    times = []
    scheduler = TickScheduler(env, 50.0, times.append)
    scheduler.start()
    env.run(until=251.0)
    assert times == [50.0, 100.0, 150.0, 200.0, 250.0]
    assert scheduler.ticks == 5


def test_start_twice_is_an_error() -> None:
    scheduler = TickScheduler(simpy.Environment(), 50.0, lambda now: None)
    scheduler.start()
    with pytest.raises(RuntimeError):
        scheduler.start()


def test_stop_releases_pending_timer() -> None:
    env = simpy.Environment()
    scheduler = TickScheduler(env, 50.0, lambda now: None)
    process = scheduler.start()
    env.run(until=120.0)

    scheduler.stop()
    env.run(until=400.0)
    assert scheduler.ticks == 2
    assert not process.is_alive
    assert not scheduler.running


def test_stop_from_inside_tick() -> None:
    env = simpy.Environment()
    ticks = []

    def on_tick(now: float) -> None:
        ticks.append(now)
        if len(ticks) == 3:
            scheduler.stop()

    scheduler = TickScheduler(env, 50.0, on_tick)
    scheduler.start()
    env.run(until=1000.0)
    assert ticks == [50.0, 100.0, 150.0]


def test_restart_after_stop() -> None:
    env = simpy.Environment()
    times = []
    scheduler = TickScheduler(env, 50.0, times.append)
    scheduler.start()
    env.run(until=60.0)
    scheduler.stop()
    scheduler.start()
    env.run(until=170.0)
    assert times == [50.0, 110.0, 160.0]
    assert scheduler.running


def test_invalid_period() -> None:
    with pytest.raises(ValueError):
        TickScheduler(simpy.Environment(), 0, lambda now: None)
