"""Enumerations for network simulation.

This module defines enumerations used throughout the forwarding simulator.
"""

from enum import Enum


class NodeKind(Enum):
    """Enum for the kinds of node that can be placed in a topology.

    Attributes:
        ROUTER: Intermediate forwarding node.
        HOST: End host.
    """

    ROUTER = "router"
    HOST = "host"

    @property
    def prefix(self) -> str:
        """Prefix used when generating node identifiers."""
        return "R" if self is NodeKind.ROUTER else "H"


class PacketStatus(Enum):
    """Enum for the lifecycle state of a packet.

    Attributes:
        IN_TRANSIT: Packet is still being forwarded.
        DELIVERED: Packet reached its destination.
        DROPPED: Packet could not be forwarded any further.
    """

    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"
    DROPPED = "dropped"

    @property
    def is_terminal(self) -> bool:
        return self is not PacketStatus.IN_TRANSIT


class DropReason(Enum):
    """Enum for the reasons a packet can be dropped.

    Attributes:
        NODE_MISSING: The node the packet occupies no longer exists.
        NO_ROUTE: The routing table has no entry for the destination.
        NO_LINK: The next hop is not linked to the current node.
    """

    NODE_MISSING = "node-missing"
    NO_ROUTE = "no-route"
    NO_LINK = "no-link"


class RetentionAnchor(Enum):
    """Point in time from which a terminal packet's display age is measured."""

    CREATION = "creation"
    TERMINATION = "termination"
