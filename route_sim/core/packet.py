"""Packet class for network simulation.

This module defines the Packet class, which represents a network packet
traveling hop by hop through the simulated topology.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from route_sim.core.enums import DropReason, PacketStatus


@dataclass(frozen=True)
class Packet:
    """Represents a network packet.

    Packets are immutable: the forwarding engine produces a new packet on
    every change instead of updating one in place.

    Attributes:
        id: Unique identifier for the packet.
        source: Source node ID.
        destination: Destination node ID.
        current_node: Node the packet occupies or is departing from.
        progress: Fraction of the current edge already traversed, in [0, 1].
        status: Lifecycle state of the packet.
        timestamp: Time when the packet was created.
        drop_reason: Why the packet was dropped, if it was.
        terminated_at: Time when the packet was delivered or dropped.
        hops: Node IDs visited by the packet, starting with the source.
    """

    id: int
    source: str
    destination: str
    current_node: str
    timestamp: float = 0.0
    progress: float = 0.0
    status: PacketStatus = PacketStatus.IN_TRANSIT
    drop_reason: Optional[DropReason] = None
    terminated_at: Optional[float] = None
    hops: Tuple[str, ...] = ()

    @classmethod
    def create(
        cls, packet_id: int, source: str, destination: str, now: float
    ) -> "Packet":
        """Create a freshly injected packet sitting at its source.

        Args:
            packet_id: Unique identifier for the packet.
            source: Source node ID.
            destination: Destination node ID.
            now: Current simulation time.

        Returns:
            A new in-transit packet with zero progress.
        """
        return cls(
            id=packet_id,
            source=source,
            destination=destination,
            current_node=source,
            timestamp=now,
            hops=(source,),
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def advanced(self, progress: float) -> "Packet":
        return replace(self, progress=progress)

    def hopped(self, next_hop: str) -> "Packet":
        """Move the packet onto the next node with its progress reset."""
        return replace(
            self,
            current_node=next_hop,
            progress=0.0,
            hops=self.hops + (next_hop,),
        )

    def delivered(self, now: float) -> "Packet":
        return replace(
            self, status=PacketStatus.DELIVERED, progress=1.0, terminated_at=now
        )

    def dropped(self, reason: DropReason, now: float) -> "Packet":
        return replace(
            self, status=PacketStatus.DROPPED, drop_reason=reason, terminated_at=now
        )

    def get_total_delay(self) -> Optional[float]:
        """Calculate total delay if packet has been delivered.

        Returns:
            Time from creation to delivery or None if not delivered.
        """
        if self.status is not PacketStatus.DELIVERED or self.terminated_at is None:
            return None
        return self.terminated_at - self.timestamp

    def get_hop_count(self) -> int:
        """Get number of hops taken.

        Returns:
            Number of node transitions performed by the packet.
        """
        return max(len(self.hops) - 1, 0)
