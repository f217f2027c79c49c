"""Metrics utilities for network simulation.

This module provides functions for exporting and summarising the metrics
collected by the forwarding simulator.
"""

import json
import os
from typing import Any, Dict, List

from route_sim.core.simulator import NetworkSimulator


def save_metrics_to_json(
    metrics: Dict[str, Any], filename: str = "results/metrics.json"
) -> None:
    """Save metrics to a JSON file.

    Args:
        metrics: Dictionary of metrics to save.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    serializable_metrics = {}
    for key, value in metrics.items():
        if isinstance(value, dict):
            # Drop reason enums and node IDs both become plain string keys
            serializable_metrics[key] = {str(k): v for k, v in value.items()}
        else:
            serializable_metrics[key] = value

    with open(filename, "w") as f:
        json.dump(serializable_metrics, f, indent=2)


def check_conservation(simulator: NetworkSimulator) -> bool:
    """Check that no packet disappeared before being classified.

    Args:
        simulator: NetworkSimulator instance.

    Returns:
        True if sent == delivered + dropped + packets still in transit.
    """
    stats = simulator.stats
    return stats.sent == stats.delivered + stats.dropped + len(
        simulator.state.in_transit()
    )


def format_metrics(metrics: Dict[str, Any]) -> List[str]:
    """Format the headline metrics as printable lines.

    Args:
        metrics: Metrics returned by NetworkSimulator.calculate_metrics().

    Returns:
        One line per metric.
    """
    lines = [
        f"Sent:           {metrics['sent']}",
        f"Delivered:      {metrics['delivered']}",
        f"Dropped:        {metrics['dropped']}",
        f"In transit:     {metrics['in_transit']}",
        f"Delivery ratio: {metrics['delivery_ratio'] * 100:.2f}%",
        f"Average delay:  {metrics['average_delay']:.1f}ms",
        f"Average hops:   {metrics['average_hops']:.2f}",
    ]
    for reason, count in sorted(metrics["drop_reasons"].items()):
        lines.append(f"Drops ({reason}): {count}")
    return lines
