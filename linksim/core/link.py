"""Link server for link simulation.

This module defines the LinkServer class, which represents the single
transmission resource shared by every traffic source.
"""

from typing import Optional

from linksim.core.enums import EventKind
from linksim.core.packet import Packet
from linksim.core.queues import AdmissionQueue
from linksim.core.scheduler import EventScheduler


class LinkServer:
    """Represents the shared outgoing link.

    Attributes:
        scheduler: Event scheduler used to book departures.
        queue: Buffer the link pulls packets from.
        capacity: Link capacity in bytes per second.
        busy: Whether the link is currently transmitting.
        in_service: Packet currently being transmitted, if any.
        packets_sent: Number of packets fully transmitted.
        bytes_sent: Number of bytes fully transmitted.
        busy_time: Total time spent on completed transmissions.
    """

    def __init__(
        self,
        scheduler: EventScheduler,
        queue: AdmissionQueue,
        capacity: float,
    ):
        """Initialize the link.

        Args:
            scheduler: Event scheduler used to book departures.
            queue: Buffer the link pulls packets from.
            capacity: Link capacity in bytes per second.
        """
        self.scheduler = scheduler
        self.queue = queue
        self.capacity = capacity
        self.busy = False
        self.in_service: Optional[Packet] = None
        self.packets_sent = 0
        self.bytes_sent = 0
        self.busy_time = 0.0

    def calculate_transmission_delay(self, packet_size: int) -> float:
        """Calculate transmission delay based on packet size and link capacity.

        Args:
            packet_size: Size of the packet in bytes.

        Returns:
            Transmission delay in seconds.
        """
        return packet_size / self.capacity

    def start_next_transmission(self) -> Optional[Packet]:
        """Begin sending the next buffered packet if the link is idle.

        Returns:
            The packet put into service, or None if the link is busy or the
            buffer is empty.
        """
        if self.busy or len(self.queue) == 0:
            return None

        packet = self.queue.take_next()
        self.busy = True
        self.in_service = packet
        self.scheduler.schedule(
            EventKind.DEPARTURE,
            self.calculate_transmission_delay(packet.size),
            packet.source_id,
            packet,
        )
        return packet

    def finish_transmission(self, packet: Packet) -> None:
        """Release the link after a departure.

        Args:
            packet: The packet whose transmission completed.
        """
        self.busy = False
        self.in_service = None
        self.packets_sent += 1
        self.bytes_sent += packet.size
        self.busy_time += self.calculate_transmission_delay(packet.size)

    def __repr__(self) -> str:
        """Return string representation of the link.

        Returns:
            String representation of the link.
        """
        state = "busy" if self.busy else "idle"
        return f"LinkServer({self.capacity/1000:.1f}KB/s, {self.queue!r}, {state})"
