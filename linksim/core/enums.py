"""Enumerations for link simulation.

This module defines enumerations used throughout the link simulator.
"""

from enum import Enum


class Discipline(Enum):
    """Enum for the link scheduling disciplines.

    Attributes:
        FCFS: First-come-first-served with tail-drop buffering.
        WFQ: Weighted fair queuing with minimum-VFT eviction.
    """

    FCFS = "fcfs"
    WFQ = "wfq"

    @classmethod
    def parse(cls, value: "str | Discipline") -> "Discipline":
        """Look up a discipline by name, case-insensitively.

        Args:
            value: Discipline name such as "fcfs" or "WFQ", or a Discipline.

        Returns:
            The matching Discipline.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(f"Unknown discipline: {value}") from None


class EventKind(Enum):
    """Enum for simulation event types.

    Attributes:
        ARRIVAL: A source emits a packet towards the link.
        DEPARTURE: The link finishes transmitting a packet.
    """

    ARRIVAL = 1
    DEPARTURE = 2
