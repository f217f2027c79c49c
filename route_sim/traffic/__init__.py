"""Traffic generation for network simulation.

This module provides interval functions for injecting packets periodically,
including constant, uniform-rate and Poisson patterns.
"""

from route_sim.traffic.generators import (
    constant_traffic,
    poisson_traffic,
    variable_traffic,
)

__all__ = [
    "constant_traffic",
    "poisson_traffic",
    "variable_traffic",
]
