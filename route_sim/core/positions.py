"""Packet placement for rendering.

Read-only helpers that place a packet along the edge it is currently
traversing. They tolerate the same missing-node and missing-route
conditions as the forwarding engine and fall back to a best-effort
position instead of raising.
"""

from typing import Mapping

import numpy as np

from route_sim.core.node import Node, Position
from route_sim.core.packet import Packet


def node_position(nodes: Mapping[str, Node], node_id: str) -> Position:
    """Get the position of a node.

    Args:
        nodes: Nodes keyed by ID.
        node_id: Node to look up.

    Returns:
        The node's position, or the origin if the node does not exist.
    """
    node = nodes.get(node_id)
    if node is None:
        return (0.0, 0.0)
    return node.position


def packet_position(packet: Packet, nodes: Mapping[str, Node]) -> Position:
    """Interpolate a packet's position between its current node and next hop.

    Args:
        packet: The packet to place.
        nodes: Nodes keyed by ID.

    Returns:
        current + (next - current) * progress, or the current node's
        position when no next hop can be resolved.
    """
    current = node_position(nodes, packet.current_node)
    if packet.progress >= 1.0:
        return current

    current_node = nodes.get(packet.current_node)
    if current_node is None:
        return current
    next_hop = current_node.next_hop(packet.destination)
    if next_hop is None or next_hop not in nodes:
        return current

    start = np.asarray(current, dtype=float)
    end = np.asarray(node_position(nodes, next_hop), dtype=float)
    x, y = start + (end - start) * packet.progress
    return (float(x), float(y))
