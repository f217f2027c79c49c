"""Node class for network simulation.

This module defines the Node class, which represents a router or host in the
simulated topology together with its manually configured routing table.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from route_sim.core.enums import NodeKind


Position = Tuple[float, float]


@dataclass(frozen=True)
class Node:
    """Represents a network node (router or host).

    Attributes:
        id: Unique identifier for the node.
        kind: Whether the node is a router or a host.
        x: Horizontal position, used for rendering and interpolation only.
        y: Vertical position, used for rendering and interpolation only.
        routing_table: Next hop for each destination, as a read-only mapping.

    Nodes are hashable; two nodes with equal fields and tables hash alike.
    """

    id: str
    kind: NodeKind = NodeKind.ROUTER
    x: float = 0.0
    y: float = 0.0
    routing_table: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only view over a private copy, so a node can never change after creation.
        object.__setattr__(
            self, "routing_table", MappingProxyType(dict(self.routing_table))
        )

    def __hash__(self) -> int:
        return hash(
            (self.id, self.kind, self.x, self.y, tuple(sorted(self.routing_table.items())))
        )

    @property
    def position(self) -> Position:
        return (self.x, self.y)

    def next_hop(self, destination: str) -> Optional[str]:
        """Look up the next hop towards a destination.

        An entry that is missing or set to an empty value is a miss.

        Args:
            destination: Destination node ID.

        Returns:
            The next hop node ID, or None when the table has no usable entry.
        """
        next_hop = self.routing_table.get(destination)
        if not next_hop:
            return None
        return next_hop

    def with_route(self, destination: str, next_hop: Optional[str]) -> "Node":
        """Return a copy of the node with one routing entry written or cleared.

        Args:
            destination: Destination node ID.
            next_hop: Next hop node ID; empty or None clears the entry.

        Returns:
            The updated node.
        """
        routing_table: Dict[str, str] = dict(self.routing_table)
        if next_hop:
            routing_table[destination] = next_hop
        else:
            routing_table.pop(destination, None)
        return replace(self, routing_table=routing_table)

    def moved_to(self, x: float, y: float) -> "Node":
        return replace(self, x=x, y=y)

    def __repr__(self) -> str:
        return f"Node({self.id}, {self.kind.value})"
