from __future__ import annotations

import pytest
import simpy

from route_sim.core.config import EngineConfig
from route_sim.core.enums import DropReason, NodeKind, PacketStatus
from route_sim.core.simulator import NetworkSimulator, create_realtime_simulator
from route_sim.traffic.generators import constant_traffic

# The 154th tick delivers an H1 -> H2 packet on the starter chain.
DELIVERY_TIME = 154 * 50.0


def test_send_packet_updates_sent_synchronously(simulator: NetworkSimulator) -> None:
    first = simulator.send_packet("H1", "H2")
    second = simulator.send_packet("H2", "H1")
    assert simulator.stats.sent == 2
    assert second.id > first.id
    assert simulator.packets == (first, second)


def test_send_packet_from_unknown_source(simulator: NetworkSimulator) -> None:
    with pytest.raises(ValueError):
        simulator.send_packet("H9", "H2")
    assert simulator.stats.sent == 0


def test_chain_scenario_delivers(simulator: NetworkSimulator) -> None:
    hops = []
    arrivals = []
    simulator.register_hook("packet_hop", lambda p, a, b, now: hops.append((a, b)))
    simulator.register_hook("packet_arrived", lambda p, node, now: arrivals.append((p.id, node, now)))

    simulator.send_packet("H1", "H2")
    metrics = simulator.run(DELIVERY_TIME + 1)

    assert hops == [("H1", "R1"), ("R1", "R2"), ("R2", "H2")]
    assert arrivals == [(1, "H2", DELIVERY_TIME)]
    assert metrics["delivered"] == 1
    assert metrics["dropped"] == 0
    assert metrics["average_delay"] == DELIVERY_TIME
    assert metrics["average_hops"] == 3


def test_missing_route_scenario(simulator: NetworkSimulator) -> None:
    drops = []
    simulator.register_hook(
        "packet_dropped", lambda p, node, reason, now: drops.append((node, reason))
    )
    simulator.update_routing_table("R1", "H2", None)

    simulator.send_packet("H1", "H2")
    metrics = simulator.run(DELIVERY_TIME + 1)

    assert drops == [("R1", DropReason.NO_ROUTE)]
    assert metrics["dropped"] == 1
    assert metrics["delivered"] == 0
    assert metrics["packet_drops"] == {"R1": 1}
    assert metrics["drop_reasons"] == {"no-route": 1}
    assert metrics["packet_loss_rate"] == 1


def test_node_deleted_mid_flight(simulator: NetworkSimulator) -> None:
    simulator.send_packet("H1", "H2")
    simulator.run(30 * 50.0 + 1)
    simulator.remove_node("R1")

    assert all(not link.touches("R1") for link in simulator.links)
    simulator.run(50.0)
    assert simulator.stats.dropped == 1
    assert simulator.packets[0].status is PacketStatus.DROPPED


def test_step_uses_environment_clock(simulator: NetworkSimulator) -> None:
    simulator.send_packet("H1", "H2")
    result = simulator.step()
    assert result.packets[0].progress == pytest.approx(0.02)
    assert simulator.scheduler.ticks == 0


def test_add_node_and_link(simulator: NetworkSimulator) -> None:
    node = simulator.add_node(NodeKind.HOST, (250.0, 350.0))
    simulator.add_link("R1", node.id)
    simulator.update_routing_table("H1", node.id, "R1")
    simulator.update_routing_table("R1", node.id, node.id)

    simulator.send_packet("H1", node.id)
    metrics = simulator.run(103 * 50.0 + 1)
    assert metrics["delivered"] == 1


def test_move_node_changes_interpolated_position(simulator: NetworkSimulator) -> None:
    packet = simulator.send_packet("H1", "H2")
    simulator.move_node("R1", 100.0, 300.0)
    for _ in range(25):
        simulator.step()
    packet = simulator.state.get_packet(packet.id)
    assert simulator.packet_position(packet) == pytest.approx((100.0, 200.0))


def test_packet_generator(simulator: NetworkSimulator) -> None:
    simulator.packet_generator("H1", "H2", constant_traffic(10), count=3)
    simulator.run(350.0)
    assert simulator.stats.sent == 3
    assert [p.timestamp for p in simulator.packets] == [100.0, 200.0, 300.0]


def test_register_unknown_hook(simulator: NetworkSimulator) -> None:
    with pytest.raises(ValueError):
        simulator.register_hook("packet_lost", print)


def test_stop_fires_sim_end(simulator: NetworkSimulator) -> None:
    ended = []
    simulator.register_hook("sim_end", ended.append)
    simulator.send_packet("H1", "H2")

    with simulator:
        simulator.run(101.0)
        assert simulator.running

    assert not simulator.running
    assert len(ended) == 1
    assert ended[0]["sent"] == 1
    assert ended[0]["ticks"] == 2


def test_stopped_simulator_does_not_tick(simulator: NetworkSimulator) -> None:
    simulator.send_packet("H1", "H2")
    simulator.start()
    simulator.stop()
    simulator.env.run(until=500.0)
    assert simulator.scheduler.ticks == 0
    assert simulator.packets[0].progress == 0.0


def test_hook_error_tears_down_scheduler(simulator: NetworkSimulator) -> None:
    def explode(state, now):
        raise RuntimeError("renderer failed")

    simulator.register_hook("tick", explode)
    with pytest.raises(RuntimeError):
        simulator.run(200.0)
    assert not simulator.running


def test_hook_error_still_fires_sim_end(simulator: NetworkSimulator) -> None:
    ended = []

    def explode(state, now):
        raise RuntimeError("renderer failed")

    simulator.register_hook("tick", explode)
    simulator.register_hook("sim_end", ended.append)
    with pytest.raises(RuntimeError):
        with simulator:
            simulator.run(200.0)

    assert len(ended) == 1
    assert ended[0]["ticks"] == 1


def test_custom_tick_period() -> None:
    sim = NetworkSimulator(config=EngineConfig(TICK_PERIOD_MS=10.0, STEPS_PER_EDGE=5))
    sim.update_routing_table("H1", "R1", "R1")
    sim.send_packet("H1", "R1")
    metrics = sim.run(7 * 10.0 + 1)
    assert metrics["delivered"] == 1
    assert metrics["ticks"] == 7


def test_realtime_simulator_follows_wall_clock() -> None:
    sim = create_realtime_simulator()
    assert isinstance(sim.env, simpy.rt.RealtimeEnvironment)
    with sim:
        metrics = sim.run(120.0)
    assert metrics["ticks"] == 2
    assert sim.now == pytest.approx(120.0)
