"""Traffic generators for network simulation.

This module provides interval functions for periodic packet injection.
Every function returns a callable producing the time until the next packet,
in milliseconds of simulation time.
"""

from typing import Callable, Optional

import numpy as np


def constant_traffic(rate: float) -> Callable[[], float]:
    """Generate packets at a constant rate.

    Args:
        rate: Rate of packet generation in packets per second.

    Returns:
        Function that returns constant interval between packets.
    """
    if rate <= 0:
        raise ValueError(f"Rate must be positive, got {rate}")
    return lambda: 1000.0 / rate


def variable_traffic(
    min_rate: float, max_rate: float, rng: Optional[np.random.Generator] = None
) -> Callable[[], float]:
    """Generate packets at a rate drawn uniformly for every packet.

    Args:
        min_rate: Minimum rate of packet generation in packets per second.
        max_rate: Maximum rate of packet generation in packets per second.
        rng: Random generator; a fresh default one when omitted.

    Returns:
        Function that returns variable interval between packets.
    """
    if min_rate <= 0 or max_rate < min_rate:
        raise ValueError(f"Invalid rate range [{min_rate}, {max_rate}]")
    rng = rng or np.random.default_rng()
    return lambda: 1000.0 / rng.uniform(min_rate, max_rate)


def poisson_traffic(
    rate: float, rng: Optional[np.random.Generator] = None
) -> Callable[[], float]:
    """Generate Poisson traffic.

    Args:
        rate: Average rate of packet generation in packets per second.
        rng: Random generator; a fresh default one when omitted.

    Returns:
        Function that returns exponentially distributed interval between packets.
    """
    if rate <= 0:
        raise ValueError(f"Rate must be positive, got {rate}")
    rng = rng or np.random.default_rng()
    return lambda: float(rng.exponential(1000.0 / rate))
