"""Topology, routing-table and packet-injection editors.

Every function takes a simulation snapshot and returns a new one; nothing is
modified in place. Misuse (unknown nodes, empty identifiers) raises
ValueError, while stale routing entries and dangling links are allowed and
resolved by the forwarding engine as drops.
"""

import random
from typing import Dict, Optional, Tuple

from route_sim.core.enums import NodeKind
from route_sim.core.link import Link
from route_sim.core.node import Node, Position
from route_sim.core.packet import Packet
from route_sim.core.state import SimulationState, Statistics

# Area in which nodes without an explicit position are placed.
PLACEMENT_X = (100.0, 500.0)
PLACEMENT_Y = (100.0, 400.0)


def default_state() -> SimulationState:
    """Build the starter topology: H1 - R1 - R2 - H2 with empty tables."""
    nodes = [
        Node("R1", NodeKind.ROUTER, 200.0, 200.0),
        Node("R2", NodeKind.ROUTER, 400.0, 200.0),
        Node("H1", NodeKind.HOST, 100.0, 100.0),
        Node("H2", NodeKind.HOST, 500.0, 100.0),
    ]
    links = (Link("H1", "R1"), Link("R1", "R2"), Link("R2", "H2"))
    return SimulationState(nodes={n.id: n for n in nodes}, links=links)


def next_node_id(state: SimulationState, kind: NodeKind) -> str:
    """Generate an unused identifier such as R3 or H2 for a new node.

    Numbering starts at one past the number of nodes of that kind and skips
    identifiers that are already taken.
    """
    count = sum(1 for node in state.nodes.values() if node.kind is kind)
    index = count + 1
    while f"{kind.prefix}{index}" in state.nodes:
        index += 1
    return f"{kind.prefix}{index}"


def add_node(
    state: SimulationState,
    kind: NodeKind,
    position: Optional[Position] = None,
    rng: Optional[random.Random] = None,
    node_id: Optional[str] = None,
) -> Tuple[SimulationState, Node]:
    """Add a node to the topology.

    Args:
        state: Current snapshot.
        kind: Router or host.
        position: Where to place the node; random within the placement area
            when omitted.
        rng: Random source for placement.
        node_id: Explicit identifier; generated from the kind when omitted.

    Returns:
        The new snapshot and the created node.
    """
    if node_id is None:
        node_id = next_node_id(state, kind)
    elif not node_id:
        raise ValueError("Node ID must not be empty")
    if node_id in state.nodes:
        raise ValueError(f"Node {node_id} already exists")

    if position is None:
        rng = rng or random.Random()
        position = (rng.uniform(*PLACEMENT_X), rng.uniform(*PLACEMENT_Y))

    node = Node(node_id, kind, float(position[0]), float(position[1]))
    nodes: Dict[str, Node] = dict(state.nodes)
    nodes[node_id] = node
    return state.evolve(nodes=nodes), node


def remove_node(state: SimulationState, node_id: str) -> SimulationState:
    """Remove a node and every link touching it.

    Routing entries on other nodes that name the removed node are kept; they
    turn into drops when a packet uses them.
    """
    _require_node(state, node_id)
    nodes = {nid: node for nid, node in state.nodes.items() if nid != node_id}
    links = tuple(link for link in state.links if not link.touches(node_id))
    return state.evolve(nodes=nodes, links=links)


def move_node(state: SimulationState, node_id: str, x: float, y: float) -> SimulationState:
    node = _require_node(state, node_id)
    nodes = dict(state.nodes)
    nodes[node_id] = node.moved_to(float(x), float(y))
    return state.evolve(nodes=nodes)


def add_link(state: SimulationState, source: str, target: str) -> Tuple[SimulationState, Link]:
    """Add an undirected link between two existing nodes.

    Args:
        state: Current snapshot.
        source: First node ID.
        target: Second node ID.

    Returns:
        The new snapshot and the created link.
    """
    if source not in state.nodes or target not in state.nodes:
        raise ValueError(f"Nodes {source} and/or {target} do not exist")
    if source == target:
        raise ValueError(f"Cannot link node {source} to itself")
    link = Link(source, target)
    return state.evolve(links=state.links + (link,)), link


def remove_link(state: SimulationState, source: str, target: str) -> SimulationState:
    """Remove every link joining two nodes, in either direction."""
    links = tuple(link for link in state.links if not link.joins(source, target))
    return state.evolve(links=links)


def set_route(
    state: SimulationState, node_id: str, destination: str, next_hop: Optional[str]
) -> SimulationState:
    """Write or clear one routing table entry.

    Args:
        state: Current snapshot.
        node_id: Node whose table is edited.
        destination: Destination node ID.
        next_hop: Next hop node ID; empty or None clears the entry.

    Returns:
        The new snapshot.
    """
    node = _require_node(state, node_id)
    if not destination:
        raise ValueError("Destination must not be empty")
    nodes = dict(state.nodes)
    nodes[node_id] = node.with_route(destination, next_hop)
    return state.evolve(nodes=nodes)


def inject_packet(
    state: SimulationState,
    source: str,
    destination: str,
    packet_id: int,
    now: float,
) -> Tuple[SimulationState, Packet]:
    """Create a packet at its source and count it as sent.

    Args:
        state: Current snapshot.
        source: Source node ID, which must exist.
        destination: Destination node ID.
        packet_id: Unique identifier for the packet.
        now: Current simulation time.

    Returns:
        The new snapshot, with `sent` already incremented, and the packet.
    """
    if not source or not destination:
        raise ValueError("Both source and destination are required")
    _require_node(state, source)
    packet = Packet.create(packet_id, source, destination, now)
    next_state = state.evolve(
        packets=state.packets + (packet,),
        stats=state.stats + Statistics(sent=1),
    )
    return next_state, packet


def _require_node(state: SimulationState, node_id: str) -> Node:
    node = state.nodes.get(node_id)
    if node is None:
        raise ValueError(f"Node {node_id} does not exist")
    return node
