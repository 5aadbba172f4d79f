"""Packet class for link simulation.

This module defines the Packet class, which represents a packet offered
to the shared link by one of the traffic sources.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Packet:
    """Represents a network packet.

    Attributes:
        id: Unique identifier for the packet within its run.
        source_id: ID of the source that generated the packet.
        size: Size of packet in bytes.
        arrival_time: Time when the packet reached the link buffer.
        weight: Weight of the generating source (used by WFQ).
        virtual_finish_time: WFQ virtual finish time, stamped on admission.
    """

    id: int
    source_id: int
    size: int
    arrival_time: float
    weight: float = 1.0
    virtual_finish_time: Optional[float] = None

    @property
    def virtual_start_time(self) -> Optional[float]:
        """Virtual time at which the packet starts service under GPS emulation.

        Returns:
            VFT minus the packet's normalised length, or None if no VFT is set.
        """
        if self.virtual_finish_time is None:
            return None
        return self.virtual_finish_time - self.size / self.weight

    def get_delay(self, departure_time: float) -> float:
        """Calculate time spent in the system.

        Args:
            departure_time: Time when the packet left the link.

        Returns:
            Delay in seconds, queueing plus transmission.
        """
        return departure_time - self.arrival_time
