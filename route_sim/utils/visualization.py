"""Visualization utilities for network simulation.

This module draws a snapshot of the simulated network: links, nodes, and
packets at their interpolated positions, colored by status.
"""

import os
from typing import Dict, Tuple

import matplotlib.pyplot as plt
import networkx as nx

from route_sim.core.enums import NodeKind, PacketStatus
from route_sim.core.simulator import NetworkSimulator
from route_sim.core.state import SimulationState

NODE_COLORS: Dict[NodeKind, str] = {
    NodeKind.ROUTER: "#3b82f6",
    NodeKind.HOST: "#10b981",
}

SNAPSHOT_FIGURE = "route_sim snapshot"

PACKET_COLORS: Dict[PacketStatus, str] = {
    PacketStatus.IN_TRANSIT: "#f59e0b",
    PacketStatus.DELIVERED: "#22c55e",
    PacketStatus.DROPPED: "#ef4444",
}


def build_graph(state: SimulationState) -> nx.Graph:
    """Build an undirected graph of the topology.

    Links pointing at nodes that no longer exist are skipped.

    Args:
        state: Simulation snapshot.

    Returns:
        Graph with a "pos" and "kind" attribute on every node.
    """
    graph = nx.Graph()
    for node in state.nodes.values():
        graph.add_node(node.id, pos=node.position, kind=node.kind)
    for link in state.links:
        if link.source in graph and link.target in graph:
            graph.add_edge(link.source, link.target)
    return graph


def save_network_visualization(
    simulator: NetworkSimulator,
    filename: str | None = None,
    figsize: Tuple[int, int] = (10, 8),
    block: bool = True,
) -> None:
    """Save a snapshot of the network and its packets to a file.

    Args:
        simulator: NetworkSimulator instance.
        filename: Output filename, or None to show it immediately.
        figsize: Figure size as (width, height) in inches.
        block: Whether to block until the window is closed when showing.
            A non-blocking call redraws the same live window every time.
    """
    fig, ax = plt.subplots(figsize=figsize, num=SNAPSHOT_FIGURE, clear=True)

    graph = build_graph(simulator.state)
    pos = nx.get_node_attributes(graph, "pos")

    nx.draw_networkx_edges(graph, pos, ax=ax, edge_color="#4b5563", width=2)
    nx.draw_networkx_nodes(
        graph,
        pos,
        ax=ax,
        node_size=900,
        node_color=[NODE_COLORS[kind] for _, kind in graph.nodes(data="kind")],
    )
    nx.draw_networkx_labels(graph, pos, ax=ax, font_color="white", font_weight="bold")

    for packet in simulator.packets:
        x, y = simulator.packet_position(packet)
        ax.scatter(
            [x],
            [y],
            s=80,
            color=PACKET_COLORS[packet.status],
            alpha=1.0 if packet.status is PacketStatus.IN_TRANSIT else 0.5,
            zorder=3,
        )

    stats = simulator.stats
    ax.set_title(
        f"t={simulator.now:.0f}ms  sent={stats.sent}  "
        f"delivered={stats.delivered}  dropped={stats.dropped}"
    )
    # Screen coordinates grow downwards
    ax.invert_yaxis()
    ax.axis("off")
    fig.tight_layout()

    if filename:
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.savefig(filename)
        plt.close(fig)
    else:
        plt.show(block=block)
        if block:
            plt.close(fig)
        else:
            plt.pause(0.001)
