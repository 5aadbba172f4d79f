"""Admission queues for the shared link buffer.

This module defines the bounded buffer contract and its two disciplines:
FIFOQueue for first-come-first-served with tail-drop, and VFTQueue for
weighted fair queuing with minimum virtual finish time eviction.
"""

import heapq
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Deque, Iterator, List, Optional, Tuple

from linksim.core.enums import Discipline
from linksim.core.packet import Packet

if TYPE_CHECKING:
    from linksim.traffic.generators import RandomTrafficSource


@dataclass(frozen=True)
class Admission:
    """Outcome of offering a packet to the buffer.

    Attributes:
        accepted: Whether the offered packet is now in the buffer.
        dropped: The packet that was lost, if any. Under tail-drop this is
            the offered packet; under WFQ eviction it is a resident.
    """

    accepted: bool
    dropped: Optional[Packet] = None


class AdmissionQueue(ABC):
    """Abstract base class for bounded link buffers"""

    def __init__(self, capacity: int):
        """
        Initialize the buffer

        Args:
            capacity: Maximum number of packets held, excluding the one in service
        """
        self.capacity = capacity
        self.name = "Base Queue"

    @abstractmethod
    def __len__(self) -> int:
        pass

    @abstractmethod
    def __iter__(self) -> Iterator[Packet]:
        """Iterate over resident packets in no particular order"""
        pass

    def is_full(self) -> bool:
        """Check whether another packet would exceed the capacity"""
        return len(self) >= self.capacity

    @abstractmethod
    def admit(self, packet: Packet, source: "RandomTrafficSource") -> Admission:
        """
        Offer an arriving packet to the buffer

        Args:
            packet: Newly generated packet
            source: Source that generated it

        Returns:
            Whether the packet was accepted and which packet, if any, was dropped
        """
        pass

    @abstractmethod
    def take_next(self) -> Optional[Packet]:
        """
        Remove and return the packet to transmit next

        Returns:
            Selected packet or None if the buffer is empty
        """
        pass

    def __repr__(self) -> str:
        return f"{self.name}({len(self)}/{self.capacity})"


class FIFOQueue(AdmissionQueue):
    """First-come-first-served buffer with tail-drop"""

    def __init__(self, capacity: int):
        super().__init__(capacity)
        self.name = "FCFS"
        self.queue: Deque[Packet] = deque()

    def __len__(self) -> int:
        return len(self.queue)

    def __iter__(self):
        return iter(self.queue)

    def admit(self, packet, source):
        """Append the packet, or drop it when the buffer is full"""
        if self.is_full():
            return Admission(accepted=False, dropped=packet)
        self.queue.append(packet)
        return Admission(accepted=True)

    def take_next(self):
        """Select the earliest-arrived packet"""
        if not self.queue:
            return None
        return self.queue.popleft()


class VFTQueue(AdmissionQueue):
    """Weighted fair queuing buffer ordered by virtual finish time.

    Residents sit in a heap keyed by ``(vft, packet id)``; equal finish times
    are served oldest packet first.

    Attributes:
        system_virtual_time: Virtual start time of the packet most recently
            taken into service.
    """

    def __init__(self, capacity: int):
        super().__init__(capacity)
        self.name = "WFQ"
        self.heap: List[Tuple[float, int, Packet]] = []
        self.system_virtual_time = 0.0

    def __len__(self) -> int:
        return len(self.heap)

    def __iter__(self):
        return (packet for _, _, packet in self.heap)

    def stamp(self, packet: Packet, source: "RandomTrafficSource") -> float:
        """Assign the packet's virtual finish time and advance the source's.

        Args:
            packet: Packet to stamp.
            source: Source that generated it.

        Returns:
            The packet's virtual finish time.
        """
        virtual_start = max(self.system_virtual_time, source.last_finish_time)
        packet.virtual_finish_time = virtual_start + packet.size / packet.weight
        source.last_finish_time = packet.virtual_finish_time
        return packet.virtual_finish_time

    def peek(self) -> Optional[Packet]:
        """Resident with the smallest virtual finish time, without removing it."""
        return self.heap[0][2] if self.heap else None

    def admit(self, packet, source):
        """Insert the packet, evicting the smallest-VFT resident when full.

        The arriving packet is always kept, even when its own finish time is
        lower than every resident's. Only a zero-capacity buffer turns it away.
        """
        self.stamp(packet, source)

        if self.capacity <= 0:
            return Admission(accepted=False, dropped=packet)

        evicted = None
        if self.is_full():
            evicted = heapq.heappop(self.heap)[2]
        heapq.heappush(self.heap, (packet.virtual_finish_time, packet.id, packet))
        return Admission(accepted=True, dropped=evicted)

    def take_next(self):
        """Select the smallest-VFT packet and move system virtual time to its start"""
        if not self.heap:
            return None
        packet = heapq.heappop(self.heap)[2]
        self.system_virtual_time = packet.virtual_start_time
        return packet


def admission_queue_factory(discipline: Discipline, capacity: int) -> AdmissionQueue:
    """
    Factory function to create the buffer for a scheduling discipline

    Args:
        discipline: Scheduling discipline
        capacity: Buffer size in packets

    Returns:
        An empty buffer implementing the discipline
    """
    if discipline is Discipline.WFQ:
        return VFTQueue(capacity)
    return FIFOQueue(capacity)
