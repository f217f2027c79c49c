from __future__ import annotations

from typing import Iterator, List, Tuple

import matplotlib
import pytest

matplotlib.use("Agg")

from route_sim.core.config import EngineConfig
from route_sim.core.engine import ForwardingEngine, TickResult
from route_sim.core.simulator import NetworkSimulator
from route_sim.core.state import SimulationState
from route_sim.core import topology

TICK = 50.0


def chain_state(missing_route_at_r1: bool = False) -> SimulationState:
    """Starter topology H1 - R1 - R2 - H2 routed for H1 -> H2."""
    state = topology.default_state()
    state = topology.set_route(state, "H1", "H2", "R1")
    if not missing_route_at_r1:
        state = topology.set_route(state, "R1", "H2", "R2")
    state = topology.set_route(state, "R2", "H2", "H2")
    return state


def run_ticks(
    engine: ForwardingEngine, state: SimulationState, ticks: int, start_tick: int = 1
) -> Tuple[SimulationState, List[TickResult]]:
    """Advance a snapshot tick by tick, with tick k happening at k * TICK."""
    results = []
    for k in range(start_tick, start_tick + ticks):
        state, result = engine.advance(state, k * TICK)
        results.append(result)
    return state, results


@pytest.fixture
def engine() -> ForwardingEngine:
    return ForwardingEngine(EngineConfig())


@pytest.fixture
def routed_state() -> SimulationState:
    return chain_state()


@pytest.fixture
def simulator() -> Iterator[NetworkSimulator]:
    sim = NetworkSimulator()
    sim.set_routing_table("H1", {"H2": "R1"})
    sim.set_routing_table("R1", {"H2": "R2"})
    sim.set_routing_table("R2", {"H2": "H2"})
    yield sim
    sim.stop()
