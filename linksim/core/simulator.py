"""Link simulator class for link simulation.

This module defines the LinkSimulator class, which owns all state of one
simulation run and implements the arrival and departure handlers.
"""

import itertools
import logging
from typing import Any, Callable, Dict, List, Optional

import numpy as np
import simpy

from linksim.config import SimulationConfig, validate_config
from linksim.core.enums import Discipline, EventKind
from linksim.core.link import LinkServer
from linksim.core.packet import Packet
from linksim.core.queues import admission_queue_factory
from linksim.core.scheduler import Event, EventScheduler
from linksim.core.stats import StatisticsCollector, StatisticsSnapshot
from linksim.traffic.generators import RandomTrafficSource
from linksim.utils.rng import spawn_generators

logger = logging.getLogger(__name__)


class LinkSimulator:
    """Single-link simulation environment.

    Nothing here is shared between instances, so independent runs can be
    executed side by side.

    Attributes:
        config: Configuration of the run.
        discipline: Scheduling discipline of the link buffer.
        scheduler: Event queue and clock.
        queue: Link buffer.
        link: Link server.
        sources: Traffic sources indexed by source ID.
        stats: Statistics collector.
    """

    def __init__(
        self,
        config: SimulationConfig,
        discipline: Discipline = Discipline.FCFS,
        seed: Optional[int] = 42,
        rngs: Optional[List[np.random.Generator]] = None,
    ):
        """Initialize the simulator.

        Args:
            config: Validated configuration.
            discipline: Scheduling discipline.
            seed: Root seed from which each source's generator is spawned.
            rngs: Explicit generator per source; overrides ``seed``.
        """
        errors = validate_config(config, discipline)
        if errors:
            raise ValueError(f"Invalid configuration: {'; '.join(errors)}")

        self.config = config
        self.discipline = discipline
        self.seed = seed

        if rngs is None:
            rngs = spawn_generators(seed, config.num_sources)
        elif len(rngs) != config.num_sources:
            raise ValueError(f"Expected {config.num_sources} generators, got {len(rngs)}")

        self.scheduler = EventScheduler(config.simulation_time, simpy.Environment())
        self.scheduler.set_handler(EventKind.ARRIVAL, self.handle_arrival)
        self.scheduler.set_handler(EventKind.DEPARTURE, self.handle_departure)
        self.queue = admission_queue_factory(discipline, config.buffer_size)
        self.link = LinkServer(self.scheduler, self.queue, config.link_capacity)
        self.sources = [
            RandomTrafficSource.from_config(i, source, rng)
            for i, (source, rng) in enumerate(zip(config.sources, rngs))
        ]
        self.stats = StatisticsCollector(
            discipline,
            config.link_capacity,
            config.simulation_time,
            [source.weight for source in config.sources],
        )
        self._packet_ids = itertools.count(1)
        self.finished = False

        self.hooks: Dict[str, List[Callable[..., Any]]] = {
            "packet_arrived": [],  # packet generated by a source
            "packet_dropped": [],  # packet lost to a full buffer
            "transmission_started": [],  # packet enters service
            "packet_departed": [],  # packet fully transmitted
            "sim_end": [],  # the simulation ends
        }

    @property
    def now(self) -> float:
        return self.scheduler.now

    def create_packet(self, source: RandomTrafficSource) -> Packet:
        """Create a new packet from a source.

        Args:
            source: The generating source.

        Returns:
            The created Packet object.
        """
        return Packet(
            id=next(self._packet_ids),
            source_id=source.id,
            size=source.packet_size(),
            arrival_time=self.now,
            weight=source.weight,
        )

    def handle_arrival(self, event: Event) -> None:
        """Generate a packet, offer it to the buffer and book the next arrival.

        Args:
            event: The arrival event.
        """
        source = self.sources[event.source_id]

        gap = source.next_arrival(self.now)
        if gap is not None:
            self.scheduler.schedule(EventKind.ARRIVAL, gap, source.id)

        packet = self.create_packet(source)
        self.stats.record_generated(packet)
        self.call_hooks("packet_arrived", packet, self.now)

        admission = self.queue.admit(packet, source)
        if admission.dropped is not None:
            self.stats.record_drop(admission.dropped)
            self.call_hooks("packet_dropped", admission.dropped, self.now)

        self.start_next_transmission()

    def handle_departure(self, event: Event) -> None:
        """Account for a finished transmission and keep the link busy.

        Args:
            event: The departure event carrying the transmitted packet.
        """
        packet = event.packet
        self.link.finish_transmission(packet)
        self.stats.record_departure(packet, self.now)
        self.call_hooks("packet_departed", packet, self.now)

        self.start_next_transmission()

    def start_next_transmission(self) -> None:
        packet = self.link.start_next_transmission()
        if packet is not None:
            self.call_hooks("transmission_started", packet, self.now)

    def backlog(self) -> List[int]:
        """Count packets still buffered or in service, per source.

        Returns:
            Number of packets left in the system for each source.
        """
        counts = [0] * len(self.sources)
        for packet in self.queue:
            counts[packet.source_id] += 1
        if self.link.in_service is not None:
            counts[self.link.in_service.source_id] += 1
        return counts

    def snapshot(self) -> StatisticsSnapshot:
        return self.stats.snapshot(self.backlog(), self.link.busy_time)

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback function for a specific event type.

        Args:
            event_type: The type of event to register for.
            callback: The function to call when the event occurs.
        """
        if event_type not in self.hooks:
            raise ValueError(f"Unknown hook type: {event_type}")
        self.hooks[event_type].append(callback)

    def call_hooks(self, event_type: str, *args: Any, **kwargs: Any) -> None:
        """Call all registered callbacks for the given event type.

        Args:
            event_type: The type of event that occurred.
            *args, **kwargs: Arguments to pass to the callback functions.
        """
        for callback in self.hooks[event_type]:
            callback(*args, **kwargs)

    def run(self) -> StatisticsSnapshot:
        """Run the simulation up to the configured horizon.

        Returns:
            Final statistics of the run.
        """
        if self.finished:
            raise RuntimeError("A LinkSimulator can only be run once")

        logger.info(
            "Starting %s run: %d sources, %.3fs, %g B/s, buffer %d",
            self.discipline.name,
            self.config.num_sources,
            self.config.simulation_time,
            self.config.link_capacity,
            self.config.buffer_size,
        )

        for source in self.sources:
            if not source.exhausted:
                self.scheduler.schedule(EventKind.ARRIVAL, source.start_time, source.id)

        self.scheduler.run()
        self.finished = True

        snapshot = self.snapshot()
        logger.info(
            "Finished %s run after %d events: %d generated, %d transmitted, %d dropped",
            self.discipline.name,
            self.scheduler.events_processed,
            snapshot.total("generated"),
            snapshot.total("transmitted"),
            snapshot.total("dropped"),
        )
        self.call_hooks("sim_end", snapshot)
        return snapshot


def run_simulation(
    config: SimulationConfig,
    discipline: Discipline = Discipline.FCFS,
    seed: Optional[int] = 42,
) -> StatisticsSnapshot:
    """Build and run one simulation.

    Args:
        config: Validated configuration.
        discipline: Scheduling discipline.
        seed: Root random seed.

    Returns:
        Final statistics of the run.
    """
    return LinkSimulator(config, discipline, seed).run()
