"""Core components for network simulation.

This module contains the fundamental classes and functions for network simulation,
including Packet, Link, Node, the ForwardingEngine and the NetworkSimulator.
"""

from route_sim.core.config import EngineConfig
from route_sim.core.engine import ForwardingEngine, HopEvent, TickResult
from route_sim.core.enums import DropReason, NodeKind, PacketStatus, RetentionAnchor
from route_sim.core.link import Link
from route_sim.core.node import Node
from route_sim.core.packet import Packet
from route_sim.core.positions import node_position, packet_position
from route_sim.core.scheduler import TickScheduler
from route_sim.core.simulator import NetworkSimulator, create_realtime_simulator
from route_sim.core.state import SimulationState, Statistics

__all__ = [
    "EngineConfig",
    "ForwardingEngine",
    "HopEvent",
    "TickResult",
    "DropReason",
    "NodeKind",
    "PacketStatus",
    "RetentionAnchor",
    "Link",
    "Node",
    "Packet",
    "node_position",
    "packet_position",
    "TickScheduler",
    "NetworkSimulator",
    "create_realtime_simulator",
    "SimulationState",
    "Statistics",
]
