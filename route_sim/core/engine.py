"""Forwarding engine for network simulation.

This module defines the ForwardingEngine class, which advances every active
packet by one simulation step. A tick is a pure function of the node, link
and packet snapshot it is given: it never mutates its inputs and never
raises for a misconfigured topology. Missing nodes, routes and links are
reported as dropped packets.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Sequence, Tuple

from route_sim.core.config import EngineConfig
from route_sim.core.enums import DropReason, PacketStatus, RetentionAnchor
from route_sim.core.link import Link, has_link
from route_sim.core.node import Node
from route_sim.core.packet import Packet
from route_sim.core.state import SimulationState, Statistics

logger = logging.getLogger(__name__)

# Absorbs float drift so that STEPS_PER_EDGE increments land exactly on 1.
_PROGRESS_EPSILON = 1e-9


@dataclass(frozen=True)
class HopEvent:
    packet: Packet
    from_node: str
    to_node: str


@dataclass
class TickResult:
    """Outcome of a single tick.

    Attributes:
        packets: The new packet collection, after the retention filter.
        deltas: Counter increments produced by this tick.
        hops: Node transitions performed during the tick.
        delivered: Packets that reached their destination during the tick.
        dropped: Packets dropped during the tick.
        expired: Terminal packets removed by the retention filter.
    """

    packets: Tuple[Packet, ...]
    deltas: Statistics = Statistics()
    hops: List[HopEvent] = field(default_factory=list)
    delivered: List[Packet] = field(default_factory=list)
    dropped: List[Packet] = field(default_factory=list)
    expired: List[Packet] = field(default_factory=list)


class ForwardingEngine:
    """Hop-by-hop packet forwarder driven by per-node routing tables.

    Attributes:
        config: Timing constants for progress and retention.
    """

    def __init__(self, config: EngineConfig = EngineConfig()) -> None:
        self.config = config

    def tick(
        self,
        nodes: Mapping[str, Node],
        links: Sequence[Link],
        packets: Iterable[Packet],
        now: float,
    ) -> TickResult:
        """Advance every in-transit packet by one step.

        Args:
            nodes: Nodes keyed by ID, with their routing tables.
            links: Links of the topology.
            packets: Current packet collection.
            now: Current simulation time.

        Returns:
            The new packet collection together with the counter deltas and
            the events of this tick.
        """
        hops: List[HopEvent] = []
        delivered: List[Packet] = []
        dropped: List[Packet] = []

        updated: List[Packet] = []
        for packet in packets:
            if packet.is_terminal:
                updated.append(packet)
                continue

            new_packet = self.forward_packet(packet, nodes, links, now)
            if new_packet.status is PacketStatus.DELIVERED:
                delivered.append(new_packet)
            elif new_packet.status is PacketStatus.DROPPED:
                dropped.append(new_packet)
            elif new_packet.current_node != packet.current_node:
                hops.append(HopEvent(new_packet, packet.current_node, new_packet.current_node))
            updated.append(new_packet)

        kept, expired = self.apply_retention(updated, now)

        return TickResult(
            packets=kept,
            deltas=Statistics(delivered=len(delivered), dropped=len(dropped)),
            hops=hops,
            delivered=delivered,
            dropped=dropped,
            expired=expired,
        )

    def forward_packet(
        self,
        packet: Packet,
        nodes: Mapping[str, Node],
        links: Sequence[Link],
        now: float,
    ) -> Packet:
        """Compute the next state of a single in-transit packet.

        Args:
            packet: The packet to forward.
            nodes: Nodes keyed by ID.
            links: Links of the topology.
            now: Current simulation time.

        Returns:
            The advanced, hopped, delivered or dropped packet.
        """
        current_node = nodes.get(packet.current_node)
        if current_node is None:
            return self._drop(packet, DropReason.NODE_MISSING, now)

        # Arrival wins over whatever the destination's own table says.
        if current_node.id == packet.destination:
            logger.debug("Packet %s delivered at %s", packet.id, current_node.id)
            return packet.delivered(now)

        next_hop = current_node.next_hop(packet.destination)
        if next_hop is None:
            return self._drop(packet, DropReason.NO_ROUTE, now)

        if not has_link(links, current_node.id, next_hop):
            return self._drop(packet, DropReason.NO_LINK, now)

        if packet.progress < 1.0:
            progress = packet.progress + self.config.progress_increment
            if progress >= 1.0 - _PROGRESS_EPSILON:
                progress = 1.0
            return packet.advanced(progress)

        return packet.hopped(next_hop)

    def apply_retention(
        self, packets: Iterable[Packet], now: float
    ) -> Tuple[Tuple[Packet, ...], List[Packet]]:
        """Remove terminal packets that have been on display for too long.

        Args:
            packets: Packet collection after the forwarding pass.
            now: Current simulation time.

        Returns:
            The packets to keep and the packets that expired.
        """
        kept: List[Packet] = []
        expired: List[Packet] = []
        for packet in packets:
            if packet.is_terminal and self.age(packet, now) > self.config.RETENTION_MS:
                expired.append(packet)
            else:
                kept.append(packet)
        return tuple(kept), expired

    def age(self, packet: Packet, now: float) -> float:
        """Display age of a packet, measured from the configured anchor."""
        if (
            self.config.RETENTION_ANCHOR is RetentionAnchor.TERMINATION
            and packet.terminated_at is not None
        ):
            return now - packet.terminated_at
        return now - packet.timestamp

    def advance(self, state: SimulationState, now: float) -> Tuple[SimulationState, TickResult]:
        """Run one tick over a whole simulation snapshot.

        Args:
            state: The snapshot to advance.
            now: Current simulation time.

        Returns:
            The next snapshot and the tick result it was built from.
        """
        result = self.tick(state.nodes, state.links, state.packets, now)
        next_state = state.evolve(packets=result.packets, stats=state.stats + result.deltas)
        return next_state, result

    def _drop(self, packet: Packet, reason: DropReason, now: float) -> Packet:
        logger.debug(
            "Packet %s dropped at %s: %s", packet.id, packet.current_node, reason.value
        )
        return packet.dropped(reason, now)
