"""Data models for camtop."""

from dataclasses import dataclass
from enum import Enum


class NetworkStatus(Enum):
    """Connectivity as last reported by the network monitor."""

    CONNECTED = "Connected"
    DISCONNECTED = "Disconnected"
    UNKNOWN = "Unknown"


@dataclass(slots=True, frozen=True)
class CpuTickSample:
    """Cumulative CPU ticks since boot, read from the aggregate counter line."""

    total_ticks: int
    idle_ticks: int

    def __post_init__(self) -> None:
        if self.total_ticks < 0 or self.idle_ticks < 0:
            raise ValueError("tick counters must be non-negative")


@dataclass(slots=True, frozen=True)
class MetricsSnapshot:
    """Point-in-time CPU and RAM usage percentages."""

    cpu_percent: float = 0.0
    ram_percent: float = 0.0


@dataclass(slots=True, frozen=True)
class FaceBox:
    """Axis-aligned rectangle around a detected face."""

    x: int
    y: int
    width: int
    height: int

    @property
    def top_left(self) -> tuple[int, int]:
        return (self.x, self.y)

    @property
    def bottom_right(self) -> tuple[int, int]:
        return (self.x + self.width, self.y + self.height)
