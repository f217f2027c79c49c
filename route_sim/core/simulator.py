"""Network simulator class for network simulation.

This module defines the NetworkSimulator class, which owns the current
simulation snapshot, the SimPy environment and the tick scheduler, and
exposes the topology, routing-table and packet-injection editors used by
the surrounding application.
"""

import itertools
import logging
import random
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import simpy
import simpy.rt

from route_sim.core.config import EngineConfig
from route_sim.core.engine import ForwardingEngine, TickResult
from route_sim.core.enums import NodeKind
from route_sim.core.link import Link
from route_sim.core.node import Node, Position
from route_sim.core.packet import Packet
from route_sim.core.positions import packet_position
from route_sim.core.scheduler import TickScheduler
from route_sim.core.state import SimulationState, Statistics
from route_sim.core import topology
from route_sim.traffic import generators

logger = logging.getLogger(__name__)


class NetworkSimulator:
    """Interactive packet forwarding simulation.

    Time is measured in milliseconds of simulation time.

    Attributes:
        env: SimPy environment.
        config: Timing constants for the engine and the scheduler.
        engine: The forwarding engine.
        scheduler: Periodic driver calling step().
        state: Current simulation snapshot.
        metrics: Running metrics collected from tick events.
    """

    def __init__(
        self,
        env: Optional[simpy.Environment] = None,
        config: EngineConfig = EngineConfig(),
        state: Optional[SimulationState] = None,
        seed: int = 42,
    ):
        """Initialize the network simulator.

        Args:
            env: SimPy environment; a plain discrete-event one when omitted.
            config: Timing constants.
            state: Initial snapshot; the starter topology when omitted.
            seed: Random seed for node placement and traffic generators.
        """
        self.env = env if env is not None else simpy.Environment()
        self.config = config
        self.engine = ForwardingEngine(config)
        self.scheduler = TickScheduler(self.env, config.TICK_PERIOD_MS, self.step)
        self.state = state if state is not None else topology.default_state()
        self.rng = random.Random(seed)
        self.np_rng = np.random.default_rng(seed)
        self._packet_ids = itertools.count(self._first_packet_id())

        self.metrics: Dict[str, Any] = {
            "delivery_delays": [],
            "hop_counts": [],
            "packet_drops": defaultdict(int),
            "drop_reasons": defaultdict(int),
        }

        self.hooks: Dict[str, List[Callable[..., Any]]] = {
            "tick": [],  # a tick has been applied
            "packet_hop": [],  # packet moves between nodes
            "packet_arrived": [],  # packet reaches destination
            "packet_dropped": [],  # packet dropped
            "sim_end": [],  # the scheduler was torn down
        }

    def _first_packet_id(self) -> int:
        return max((p.id for p in self.state.packets), default=0) + 1

    @property
    def now(self) -> float:
        return self.env.now

    @property
    def nodes(self) -> Dict[str, Node]:
        return dict(self.state.nodes)

    @property
    def links(self) -> Tuple[Link, ...]:
        return self.state.links

    @property
    def packets(self) -> Tuple[Packet, ...]:
        return self.state.packets

    @property
    def stats(self) -> Statistics:
        return self.state.stats

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def add_node(self, kind: NodeKind, position: Optional[Position] = None) -> Node:
        """Add a router or host to the network.

        Args:
            kind: Router or host.
            position: Where to place the node; random when omitted.

        Returns:
            The created Node object.
        """
        self.state, node = topology.add_node(self.state, kind, position, rng=self.rng)
        return node

    def remove_node(self, node_id: str) -> None:
        self.state = topology.remove_node(self.state, node_id)

    def move_node(self, node_id: str, x: float, y: float) -> None:
        self.state = topology.move_node(self.state, node_id, x, y)

    def add_link(self, source: str, destination: str) -> Link:
        """Add a BIDIRECTIONAL link between nodes.

        Args:
            source: Source node ID.
            destination: Destination node ID.

        Returns:
            The created Link object.
        """
        self.state, link = topology.add_link(self.state, source, destination)
        return link

    def remove_link(self, source: str, destination: str) -> None:
        self.state = topology.remove_link(self.state, source, destination)

    def update_routing_table(
        self, node_id: str, destination: str, next_hop: Optional[str]
    ) -> None:
        """Write or clear a routing entry; takes effect on the next tick.

        Args:
            node_id: Node whose routing table is edited.
            destination: Destination node ID.
            next_hop: Next hop node ID, or empty/None to clear the entry.
        """
        self.state = topology.set_route(self.state, node_id, destination, next_hop)

    def set_routing_table(self, node_id: str, routing_table: Dict[str, str]) -> None:
        for destination, next_hop in routing_table.items():
            self.update_routing_table(node_id, destination, next_hop)

    def send_packet(self, source: str, destination: str) -> Packet:
        """Inject a new packet at its source.

        The sent counter is updated immediately, not on the next tick.

        Args:
            source: Source node ID.
            destination: Destination node ID.

        Returns:
            The created Packet object.
        """
        self.state, packet = topology.inject_packet(
            self.state, source, destination, next(self._packet_ids), self.env.now
        )
        logger.debug("Packet %s sent from %s to %s", packet.id, source, destination)
        return packet

    def packet_generator(
        self,
        source: str,
        destination: str,
        interval: Callable[[], float],
        count: Optional[int] = None,
    ) -> simpy.events.Process:
        """Inject packets periodically.

        Args:
            source: Source node ID.
            destination: Destination node ID.
            interval: Time until the next packet, in milliseconds.
            count: Number of packets to send; unbounded when omitted.

        Returns:
            SimPy process for the packet generator.
        """

        def generator_process():
            sent = 0
            while count is None or sent < count:
                yield self.env.timeout(interval())
                self.send_packet(source, destination)
                sent += 1

        return self.env.process(generator_process())

    def poisson_traffic(self, rate: float) -> Callable[[], float]:
        """Poisson intervals drawn from the simulator's seeded generator.

        Args:
            rate: Average rate of packet generation in packets per second.
        """
        return generators.poisson_traffic(rate, rng=self.np_rng)

    def variable_traffic(self, min_rate: float, max_rate: float) -> Callable[[], float]:
        return generators.variable_traffic(min_rate, max_rate, rng=self.np_rng)

    def packet_position(self, packet: Packet) -> Position:
        """Position of a packet along the edge it is traversing."""
        return packet_position(packet, self.state.nodes)

    def step(self, now: Optional[float] = None) -> TickResult:
        """Apply one tick to the current snapshot.

        Args:
            now: Time of the tick; the environment's clock when omitted.

        Returns:
            The result of the tick.
        """
        if now is None:
            now = self.env.now
        self.state, result = self.engine.advance(self.state, now)

        for hop in result.hops:
            self.call_hooks("packet_hop", hop.packet, hop.from_node, hop.to_node, now)
        for packet in result.delivered:
            self.packet_arrived(packet, now)
        for packet in result.dropped:
            self.packet_dropped(packet, now)
        self.call_hooks("tick", self.state, now)
        return result

    def packet_arrived(self, packet: Packet, now: float) -> None:
        """Record a delivery and notify hooks.

        Args:
            packet: The packet that arrived.
            now: Time of delivery.
        """
        self.metrics["delivery_delays"].append(packet.get_total_delay())
        self.metrics["hop_counts"].append(packet.get_hop_count())
        self.call_hooks("packet_arrived", packet, packet.current_node, now)

    def packet_dropped(self, packet: Packet, now: float) -> None:
        """Record a drop and notify hooks.

        Args:
            packet: The packet that was dropped.
            now: Time of the drop.
        """
        self.metrics["packet_drops"][packet.current_node] += 1
        self.metrics["drop_reasons"][packet.drop_reason.value] += 1
        self.call_hooks(
            "packet_dropped", packet, packet.current_node, packet.drop_reason, now
        )

    def calculate_metrics(self) -> Dict[str, Any]:
        """Calculate performance metrics.

        Returns:
            Dictionary of calculated metrics.
        """
        stats = self.state.stats
        finished = stats.delivered + stats.dropped
        delays = self.metrics["delivery_delays"]
        hop_counts = self.metrics["hop_counts"]

        return {
            "time": self.env.now,
            "ticks": self.scheduler.ticks,
            "sent": stats.sent,
            "delivered": stats.delivered,
            "dropped": stats.dropped,
            "in_transit": len(self.state.in_transit()),
            "delivery_ratio": stats.delivered / stats.sent if stats.sent > 0 else 0,
            "packet_loss_rate": stats.dropped / finished if finished > 0 else 0,
            "average_delay": sum(delays) / len(delays) if delays else 0,
            "average_hops": sum(hop_counts) / len(hop_counts) if hop_counts else 0,
            "packet_drops": dict(self.metrics["packet_drops"]),
            "drop_reasons": dict(self.metrics["drop_reasons"]),
        }

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback function for a specific event type.

        Args:
            event_type: The type of event to register for.
            callback: The function to call when the event occurs.
        """
        if event_type not in self.hooks:
            raise ValueError(f"Unknown hook type: {event_type}")
        self.hooks[event_type].append(callback)

    def call_hooks(self, event_type: str, *args: Any, **kwargs: Any) -> None:
        """Call all registered callbacks for the given event type.

        Args:
            event_type: The type of event that occurred.
            *args, **kwargs: Arguments to pass to the callback functions.
        """
        if event_type in self.hooks:
            for callback in self.hooks[event_type]:
                callback(*args, **kwargs)

    def start(self) -> None:
        """Start the periodic tick scheduler."""
        self.scheduler.start()

    def stop(self) -> None:
        """Stop the periodic tick scheduler and notify sim_end hooks."""
        if not self.scheduler.running:
            return
        self.scheduler.stop()
        self.call_hooks("sim_end", self.calculate_metrics())

    def run(self, duration: float) -> Dict[str, Any]:
        """Run the simulation for a specified duration.

        Starts the scheduler if needed. Ticks falling exactly on the end time
        are not processed.

        Args:
            duration: Simulation duration in milliseconds.

        Returns:
            Dictionary of calculated metrics.
        """
        if not self.scheduler.running:
            self.start()
        try:
            self.env.run(until=self.env.now + duration)
        except BaseException:
            if self.scheduler.running:
                self.stop()
            else:
                # A failing tick has already torn the scheduler down.
                self.call_hooks("sim_end", self.calculate_metrics())
            raise
        return self.calculate_metrics()

    def __enter__(self) -> "NetworkSimulator":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()


def create_realtime_simulator(
    config: EngineConfig = EngineConfig(),
    state: Optional[SimulationState] = None,
    seed: int = 42,
    strict: bool = False,
) -> NetworkSimulator:
    """Create a simulator whose clock follows the wall clock in milliseconds.

    Args:
        config: Timing constants.
        state: Initial snapshot.
        seed: Random seed.
        strict: Raise if a tick falls behind the wall clock.

    Returns:
        The configured simulator.
    """
    env = simpy.rt.RealtimeEnvironment(factor=0.001, strict=strict)
    return NetworkSimulator(env=env, config=config, state=state, seed=seed)
