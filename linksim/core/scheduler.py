"""Event scheduler for link simulation.

This module defines the Event record and the EventScheduler class, which
keeps the time-ordered queue of pending arrivals and departures and drives
the simulation loop on top of a SimPy environment.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

import simpy

from linksim.core.enums import EventKind
from linksim.core.packet import Packet


@dataclass(frozen=True)
class Event:
    """A pending simulation event.

    Attributes:
        kind: Whether this is an arrival or a departure.
        time: Simulation time at which the event fires.
        source_id: Source the event belongs to.
        packet: Packet being transmitted (departures only).
    """

    kind: EventKind
    time: float
    source_id: int
    packet: Optional[Packet] = None


class EventScheduler:
    """Time-ordered event queue with a fixed simulation horizon.

    Events are kept in the SimPy environment's heap, keyed by
    ``(time, priority, insertion id)``. Every event is scheduled at normal
    priority, so events sharing a timestamp fire in insertion order.

    Attributes:
        env: SimPy environment providing the clock and the event heap.
        horizon: Last simulation time at which events are processed.
        handlers: Callback per event kind.
        events_scheduled: Number of events accepted into the queue.
        events_discarded: Number of events dropped for lying past the horizon.
        events_processed: Number of events dispatched so far.
    """

    def __init__(self, horizon: float, env: Optional[simpy.Environment] = None):
        """Initialize the scheduler.

        Args:
            horizon: Simulation end time in seconds.
            env: SimPy environment to use; a fresh one is created if omitted.
        """
        self.env = env if env is not None else simpy.Environment()
        self.horizon = horizon
        self.handlers: Dict[EventKind, Callable[[Event], None]] = {}
        self.events_scheduled = 0
        self.events_discarded = 0
        self.events_processed = 0

    @property
    def now(self) -> float:
        """Current simulation time."""
        return self.env.now

    def set_handler(self, kind: EventKind, handler: Callable[[Event], None]) -> None:
        """Register the callback that processes events of one kind.

        Args:
            kind: Event kind to handle.
            handler: Function called with each event of that kind.
        """
        self.handlers[kind] = handler

    def schedule(
        self,
        kind: EventKind,
        delay: float,
        source_id: int,
        packet: Optional[Packet] = None,
    ) -> Optional[Event]:
        """Schedule an event ``delay`` seconds from now.

        The event time is computed exactly as SimPy computes the heap key,
        so ``Event.time`` always equals the clock value at dispatch.

        Args:
            kind: Event kind.
            delay: Non-negative offset from the current time.
            source_id: Source the event belongs to.
            packet: Packet carried by a departure.

        Returns:
            The scheduled event, or None if it falls beyond the horizon.
        """
        time = self.env.now + delay
        if time > self.horizon:
            self.events_discarded += 1
            return None

        event = Event(kind, time, source_id, packet)
        timeout = self.env.timeout(delay, value=event)
        timeout.callbacks.append(self._dispatch)
        self.events_scheduled += 1
        return event

    def _dispatch(self, timeout: simpy.events.Timeout) -> None:
        event: Event = timeout.value
        self.events_processed += 1
        self.handlers[event.kind](event)

    def pending(self) -> bool:
        """Check whether an event within the horizon is still queued.

        Returns:
            True if the next queued event would be processed by ``run``.
        """
        return self.env.peek() <= self.horizon

    def run(self) -> None:
        """Process events in time order until the queue drains or the horizon passes."""
        # peek() is infinite once the heap is empty
        while self.pending():
            self.env.step()
