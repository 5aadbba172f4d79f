"""Traffic generators for link simulation.

This module provides the interval and size generators used by traffic
sources, and the RandomTrafficSource class that combines them with an
activity window.
"""

from typing import Callable, Optional

import numpy as np

from linksim.config import SourceConfig


def poisson_traffic(rate: float, rng: np.random.Generator) -> Callable[[], float]:
    """Generate Poisson traffic.

    Args:
        rate: Average rate of packet generation in packets per second.
        rng: Random generator owned by the source.

    Returns:
        Function that returns exponentially distributed interval between packets.
    """
    return lambda: float(rng.exponential(1 / rate))


def variable_size(
    min_size: int, max_size: int, rng: np.random.Generator
) -> Callable[[], int]:
    """Generate variable size packets.

    Args:
        min_size: Minimum size of packets in bytes.
        max_size: Maximum size of packets in bytes.
        rng: Random generator owned by the source.

    Returns:
        Function that returns random packet size between min_size and max_size,
        both inclusive.
    """
    return lambda: int(rng.integers(min_size, max_size, endpoint=True))


class RandomTrafficSource:
    """A traffic source emitting Poisson arrivals inside a time window.

    Attributes:
        id: Source index.
        rate: Mean arrival rate in packets per second.
        min_size: Smallest packet size in bytes.
        max_size: Largest packet size in bytes.
        weight: WFQ weight of the source.
        start_time: Time of the first arrival.
        end_time: Arrivals must occur strictly before this time.
        last_finish_time: Virtual finish time of the source's latest packet (WFQ).
        exhausted: Whether the source has stopped generating for good.
    """

    def __init__(
        self,
        source_id: int,
        rate: float,
        min_size: int,
        max_size: int,
        weight: float,
        start_time: float,
        end_time: float,
        rng: np.random.Generator,
    ) -> None:
        """Initialize a traffic source.

        Args:
            source_id: Source index.
            rate: Mean arrival rate in packets per second.
            min_size: Smallest packet size in bytes.
            max_size: Largest packet size in bytes.
            weight: WFQ weight of the source.
            start_time: Absolute start of the active window in seconds.
            end_time: Absolute end of the active window in seconds (exclusive).
            rng: Random generator owned by this source.
        """
        self.id = source_id
        self.rate = rate
        self.min_size = min_size
        self.max_size = max_size
        self.weight = weight
        self.start_time = start_time
        self.end_time = end_time
        self.rng = rng
        self.last_finish_time = 0.0
        self.exhausted = not start_time < end_time

        self.interval = poisson_traffic(rate, rng)
        self.packet_size = variable_size(min_size, max_size, rng)

    @classmethod
    def from_config(
        cls, source_id: int, config: SourceConfig, rng: np.random.Generator
    ) -> "RandomTrafficSource":
        """Build a source from its configuration entry.

        Args:
            source_id: Source index.
            config: Validated source configuration with absolute window times.
            rng: Random generator owned by the new source.

        Returns:
            The configured source.
        """
        return cls(
            source_id,
            config.rate,
            config.min_size,
            config.max_size,
            config.weight,
            config.start_time,
            config.end_time,
            rng,
        )

    @property
    def mean_size(self) -> float:
        """Expected packet size in bytes."""
        return (self.min_size + self.max_size) / 2

    def next_arrival(self, now: float) -> Optional[float]:
        """Draw the gap to the source's next arrival.

        Once a drawn arrival lands at or after the end of the window the
        source is exhausted and every later call returns None.

        Args:
            now: Current simulation time.

        Returns:
            Delay until the next arrival, or None if there is none.
        """
        if self.exhausted:
            return None
        gap = self.interval()
        if not now + gap < self.end_time:
            self.exhausted = True
            return None
        return gap

    def __repr__(self) -> str:
        return (
            f"RandomTrafficSource({self.id}, {self.rate:g}pkt/s, "
            f"{self.min_size}-{self.max_size}B, w={self.weight:g})"
        )
