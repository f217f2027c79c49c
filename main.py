#!/usr/bin/env python3
"""Run the starter topology H1 - R1 - R2 - H2 and report forwarding statistics."""

import argparse
import logging
import os
from typing import List, Optional

from route_sim.core.config import EngineConfig
from route_sim.core.enums import RetentionAnchor
from route_sim.core.simulator import NetworkSimulator, create_realtime_simulator
from route_sim.traffic.generators import constant_traffic
from route_sim.utils.metrics import format_metrics, save_metrics_to_json
from route_sim.utils.visualization import save_network_visualization


def configure_routes(simulator: NetworkSimulator, missing_route: bool = False) -> None:
    """Fill the routing tables for traffic from H1 to H2 and back.

    Args:
        simulator: Simulator holding the starter topology.
        missing_route: Leave R1 without an entry for H2.
    """
    simulator.update_routing_table("H1", "H2", "R1")
    if not missing_route:
        simulator.update_routing_table("R1", "H2", "R2")
    simulator.update_routing_table("R2", "H2", "H2")

    simulator.update_routing_table("H2", "H1", "R2")
    simulator.update_routing_table("R2", "H1", "R1")
    simulator.update_routing_table("R1", "H1", "H1")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Packet Forwarding Simulator")
    parser.add_argument(
        "--duration", type=float, default=10000.0, help="Simulated time in milliseconds"
    )
    parser.add_argument(
        "--ticks", type=int, default=None, help="Number of ticks to run; overrides --duration"
    )
    parser.add_argument(
        "--tick-period", type=float, default=50.0, help="Time between ticks in milliseconds"
    )
    parser.add_argument(
        "--steps-per-edge", type=int, default=50, help="Ticks needed to cross one link"
    )
    parser.add_argument(
        "--retention", type=float, default=2000.0, help="Display window for finished packets"
    )
    parser.add_argument(
        "--retain-from-termination",
        action="store_true",
        help="Measure the display window from delivery/drop instead of creation",
    )
    parser.add_argument(
        "--rate", type=float, default=0.0, help="Extra H1 -> H2 packets per second"
    )
    parser.add_argument(
        "--poisson", action="store_true", help="Draw --rate intervals from a Poisson process"
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed for traffic")
    parser.add_argument(
        "--missing-route", action="store_true", help="Leave R1 without a route to H2"
    )
    parser.add_argument("--realtime", action="store_true", help="Follow the wall clock")
    parser.add_argument("--output", default=None, help="Directory for metrics and snapshot")
    parser.add_argument("--verbose", action="store_true", help="Log every packet event")
    args = parser.parse_args(argv)
    if args.ticks is not None and args.ticks < 0:
        parser.error(f"--ticks must not be negative, got {args.ticks}")
    return args


def build_config(args: argparse.Namespace) -> EngineConfig:
    return EngineConfig(
        TICK_PERIOD_MS=args.tick_period,
        STEPS_PER_EDGE=args.steps_per_edge,
        RETENTION_MS=args.retention,
        RETENTION_ANCHOR=(
            RetentionAnchor.TERMINATION
            if args.retain_from_termination
            else RetentionAnchor.CREATION
        ),
    )


def run_duration(args: argparse.Namespace, config: EngineConfig) -> float:
    """Simulated time to run, in milliseconds.

    With --ticks N the run ends just after the Nth tick, since a tick falling
    exactly on the end time is not processed.
    """
    if args.ticks is None:
        return args.duration
    return args.ticks * config.TICK_PERIOD_MS + 1


def build_simulator(args: argparse.Namespace) -> NetworkSimulator:
    """Create the simulator, fill its routes and start its traffic."""
    config = build_config(args)
    if args.realtime:
        simulator = create_realtime_simulator(config, seed=args.seed)
    else:
        simulator = NetworkSimulator(config=config, seed=args.seed)
    configure_routes(simulator, missing_route=args.missing_route)

    simulator.send_packet("H1", "H2")
    if args.rate > 0:
        interval = (
            simulator.poisson_traffic(args.rate)
            if args.poisson
            else constant_traffic(args.rate)
        )
        simulator.packet_generator("H1", "H2", interval)
    return simulator


def main(argv: Optional[List[str]] = None):
    """Main function to run the forwarding simulation"""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    simulator = build_simulator(args)
    simulator.register_hook(
        "packet_arrived",
        lambda packet, node, now: print(f"[{now:.0f}ms] Packet {packet.id} delivered at {node}"),
    )
    simulator.register_hook(
        "packet_dropped",
        lambda packet, node, reason, now: print(
            f"[{now:.0f}ms] Packet {packet.id} dropped at {node} ({reason.value})"
        ),
    )

    print("\n=== Running Forwarding Simulation ===")
    with simulator:
        metrics = simulator.run(run_duration(args, simulator.config))

    for line in format_metrics(metrics):
        print(line)

    if args.output:
        os.makedirs(args.output, exist_ok=True)
        save_metrics_to_json(metrics, os.path.join(args.output, "metrics.json"))
        save_network_visualization(
            simulator, filename=os.path.join(args.output, "snapshot.png")
        )
    return metrics


if __name__ == "__main__":
    main()
