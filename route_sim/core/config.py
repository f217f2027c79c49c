from __future__ import annotations

from dataclasses import dataclass

from route_sim.core.enums import RetentionAnchor


@dataclass(frozen=True)
class EngineConfig:
    """
    Tunable timing constants for the forwarding engine.

    All times are expressed in simulation time units. With the realtime
    environment one unit is one wall-clock millisecond.
    """

    # Time between two scheduler ticks.
    TICK_PERIOD_MS: float = 50.0

    # Number of ticks needed to traverse one edge, regardless of its length.
    STEPS_PER_EDGE: int = 50

    # How long delivered / dropped packets stay visible before removal.
    RETENTION_MS: float = 2000.0

    # Whether the retention window starts at creation or at the terminal transition.
    RETENTION_ANCHOR: RetentionAnchor = RetentionAnchor.CREATION

    def __post_init__(self) -> None:
        if self.TICK_PERIOD_MS <= 0:
            raise ValueError(f"TICK_PERIOD_MS must be positive, got {self.TICK_PERIOD_MS}")
        if self.STEPS_PER_EDGE < 1:
            raise ValueError(f"STEPS_PER_EDGE must be at least 1, got {self.STEPS_PER_EDGE}")
        if self.RETENTION_MS < 0:
            raise ValueError(f"RETENTION_MS must not be negative, got {self.RETENTION_MS}")

    @property
    def progress_increment(self) -> float:
        """Progress gained by a packet on every tick while crossing an edge."""
        return 1.0 / self.STEPS_PER_EDGE
