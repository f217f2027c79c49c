"""Link class for network simulation.

This module defines the Link class, which represents an undirected
connection between two nodes in the simulated topology.
"""

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Link:
    """Represents a network link between nodes.

    Links are usable in both directions; the order of the endpoints only
    records how the link was drawn.

    Attributes:
        source: Node ID the link was drawn from.
        target: Node ID the link was drawn to.
    """

    source: str
    target: str

    def joins(self, a: str, b: str) -> bool:
        """Check whether this link connects two nodes, in either direction."""
        return (self.source == a and self.target == b) or (
            self.source == b and self.target == a
        )

    def touches(self, node_id: str) -> bool:
        return node_id in (self.source, self.target)

    def __repr__(self) -> str:
        return f"Link({self.source}<->{self.target})"


def has_link(links: Iterable[Link], a: str, b: str) -> bool:
    """Check whether any link connects two nodes.

    Args:
        links: Links of the topology.
        a: First node ID.
        b: Second node ID.

    Returns:
        True if a link exists between the nodes in either direction.
    """
    return any(link.joins(a, b) for link in links)
