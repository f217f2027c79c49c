"""Simulation state for network simulation.

This module defines the snapshot passed into every tick: the topology
(nodes and links), the packet collection, and the aggregate statistics.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional, Tuple

from route_sim.core.enums import PacketStatus
from route_sim.core.link import Link
from route_sim.core.node import Node
from route_sim.core.packet import Packet


@dataclass(frozen=True)
class Statistics:
    """Aggregate packet counters.

    Attributes:
        sent: Packets injected.
        delivered: Packets that reached their destination.
        dropped: Packets that could not be forwarded.
    """

    sent: int = 0
    delivered: int = 0
    dropped: int = 0

    def __add__(self, other: "Statistics") -> "Statistics":
        if not isinstance(other, Statistics):
            return NotImplemented
        return Statistics(
            sent=self.sent + other.sent,
            delivered=self.delivered + other.delivered,
            dropped=self.dropped + other.dropped,
        )

    def as_dict(self) -> Dict[str, int]:
        return {"sent": self.sent, "delivered": self.delivered, "dropped": self.dropped}


@dataclass(frozen=True)
class SimulationState:
    """Consistent snapshot of everything a tick reads and writes.

    Attributes:
        nodes: Nodes keyed by ID, in insertion order.
        links: Links of the topology.
        packets: Packets in flight or still on display.
        stats: Aggregate counters.
    """

    nodes: Mapping[str, Node] = field(default_factory=dict)
    links: Tuple[Link, ...] = ()
    packets: Tuple[Packet, ...] = ()
    stats: Statistics = Statistics()

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def get_packet(self, packet_id: int) -> Optional[Packet]:
        for packet in self.packets:
            if packet.id == packet_id:
                return packet
        return None

    def in_transit(self) -> Tuple[Packet, ...]:
        """Packets that have not reached a terminal status yet."""
        return tuple(p for p in self.packets if p.status is PacketStatus.IN_TRANSIT)

    def evolve(self, **changes) -> "SimulationState":
        return replace(self, **changes)
