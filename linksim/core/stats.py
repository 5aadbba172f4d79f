"""Per-source statistics for link simulation.

This module defines the counters updated while a run is in progress and
the frozen snapshot handed to reporting once it has finished.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from linksim.core.enums import Discipline
from linksim.core.packet import Packet


@dataclass
class SourceStats:
    """Counters for one traffic source.

    Attributes:
        generated: Packets produced by the source.
        transmitted: Packets that finished transmission.
        dropped: Packets lost to a full buffer.
        bytes_transmitted: Bytes that finished transmission.
        total_delay: Sum of delays of transmitted packets in seconds.
        backlog: Packets still buffered or in service when the run ended.
    """

    generated: int = 0
    transmitted: int = 0
    dropped: int = 0
    bytes_transmitted: float = 0.0
    total_delay: float = 0.0
    backlog: int = 0

    @property
    def average_delay(self) -> float:
        return self.total_delay / self.transmitted if self.transmitted > 0 else 0.0

    @property
    def drop_rate(self) -> float:
        return self.dropped / self.generated if self.generated > 0 else 0.0


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Final statistics of a run plus the configuration needed to derive metrics.

    Attributes:
        discipline: Scheduling discipline of the run.
        link_capacity: Link capacity in bytes per second.
        simulation_time: Horizon in seconds.
        weights: Weight of each source.
        sources: Statistics of each source.
        busy_time: Total time the link spent on completed transmissions.
    """

    discipline: Discipline
    link_capacity: float
    simulation_time: float
    weights: Tuple[float, ...]
    sources: Tuple[SourceStats, ...]
    busy_time: float = 0.0

    @property
    def num_sources(self) -> int:
        return len(self.sources)

    def total(self, name: str) -> float:
        """Sum one counter over all sources.

        Args:
            name: Attribute name of SourceStats, e.g. "dropped".

        Returns:
            The sum across sources.
        """
        return sum(getattr(s, name) for s in self.sources)


class StatisticsCollector:
    """Collects per-source statistics during a run.

    Attributes:
        discipline: Scheduling discipline of the run.
        link_capacity: Link capacity in bytes per second.
        simulation_time: Horizon in seconds.
        weights: Weight of each source.
        stats: Live statistics of each source.
    """

    def __init__(
        self,
        discipline: Discipline,
        link_capacity: float,
        simulation_time: float,
        weights: List[float],
    ):
        self.discipline = discipline
        self.link_capacity = link_capacity
        self.simulation_time = simulation_time
        self.weights = list(weights)
        self.stats: List[SourceStats] = [SourceStats() for _ in weights]

    def record_generated(self, packet: Packet) -> None:
        self.stats[packet.source_id].generated += 1

    def record_drop(self, packet: Packet) -> None:
        """Count a lost packet against the source that generated it."""
        self.stats[packet.source_id].dropped += 1

    def record_departure(self, packet: Packet, now: float) -> None:
        """Account for a completed transmission.

        Args:
            packet: The transmitted packet.
            now: Departure time.
        """
        stats = self.stats[packet.source_id]
        stats.bytes_transmitted += packet.size
        stats.transmitted += 1
        stats.total_delay += packet.get_delay(now)

    def snapshot(
        self, backlog: Optional[List[int]] = None, busy_time: float = 0.0
    ) -> StatisticsSnapshot:
        """Freeze the current statistics.

        Args:
            backlog: Packets left in the system per source, if known.
            busy_time: Total link busy time.

        Returns:
            An immutable copy of the statistics.
        """
        backlog = backlog or [0] * len(self.stats)
        return StatisticsSnapshot(
            discipline=self.discipline,
            link_capacity=self.link_capacity,
            simulation_time=self.simulation_time,
            weights=tuple(self.weights),
            sources=tuple(replace(s, backlog=b) for s, b in zip(self.stats, backlog)),
            busy_time=busy_time,
        )
