"""Configuration loading and validation for link simulation.

A configuration describes the link (capacity, buffer size, horizon) and one
entry per traffic source. Loading never raises: the caller receives a
ConfigResult holding either a validated configuration or the list of
problems found.

Two on-disk formats are understood. The plain text format has a header
line ``num_sources simulation_time link_capacity buffer_size`` followed by
one line per source ``rate min_size max_size weight start end``, where
``start`` and ``end`` are fractions of the simulation time. Files ending in
``.json`` hold the same fields as an object with a ``sources`` list.
"""

import json
import logging
import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from linksim.core.enums import Discipline

logger = logging.getLogger(__name__)


@dataclass
class SourceConfig:
    """Parameters of one traffic source.

    Attributes:
        rate: Mean arrival rate in packets per second.
        min_size: Smallest packet size in bytes.
        max_size: Largest packet size in bytes.
        weight: WFQ weight.
        start_time: Start of the active window in seconds.
        end_time: End of the active window in seconds (exclusive).
    """

    rate: float
    min_size: int
    max_size: int
    weight: float = 1.0
    start_time: float = 0.0
    end_time: float = float("inf")

    @classmethod
    def from_fractions(
        cls,
        rate: float,
        min_size: int,
        max_size: int,
        weight: float,
        start_fraction: float,
        end_fraction: float,
        simulation_time: float,
    ) -> "SourceConfig":
        """Build a source whose window is given as fractions of the run length."""
        return cls(
            rate,
            min_size,
            max_size,
            weight,
            start_fraction * simulation_time,
            end_fraction * simulation_time,
        )


@dataclass
class SimulationConfig:
    """Parameters of a single-link simulation run.

    Attributes:
        simulation_time: Horizon in seconds.
        link_capacity: Link capacity in bytes per second.
        buffer_size: Buffer capacity in packets.
        sources: Traffic source parameters, indexed by source ID.
    """

    simulation_time: float
    link_capacity: float
    buffer_size: int
    sources: List[SourceConfig] = field(default_factory=list)

    @property
    def num_sources(self) -> int:
        return len(self.sources)


@dataclass
class ConfigResult:
    """Outcome of loading a configuration.

    Attributes:
        config: The loaded configuration, or None if it could not be built.
        errors: Problems found while reading or validating.
    """

    config: Optional[SimulationConfig] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.config is not None and not self.errors


def validate_config(
    config: SimulationConfig, discipline: Optional[Discipline] = None
) -> List[str]:
    """Check a configuration for values the simulator cannot run with.

    Args:
        config: Configuration to check.
        discipline: Discipline the run will use. Source weights are only
            checked for WFQ; None checks the discipline-independent fields.

    Returns:
        Human readable descriptions of every violation; empty if valid.
    """
    errors: List[str] = []

    if config.num_sources <= 0:
        errors.append("number of sources must be positive")
    if not (config.simulation_time > 0 and math.isfinite(config.simulation_time)):
        errors.append(f"simulation time must be positive and finite, got {config.simulation_time}")
    if not (config.link_capacity > 0 and math.isfinite(config.link_capacity)):
        errors.append(f"link capacity must be positive and finite, got {config.link_capacity}")
    if config.buffer_size < 0:
        errors.append(f"buffer size must not be negative, got {config.buffer_size}")

    check_weights = discipline is Discipline.WFQ
    for i, source in enumerate(config.sources):
        if not source.rate > 0:
            errors.append(f"source {i}: arrival rate must be positive, got {source.rate}")
        if source.min_size <= 0:
            errors.append(f"source {i}: minimum size must be positive, got {source.min_size}")
        if source.min_size > source.max_size:
            errors.append(
                f"source {i}: minimum size {source.min_size} exceeds maximum size {source.max_size}"
            )
        if check_weights and not source.weight > 0:
            errors.append(f"source {i}: weight must be positive, got {source.weight}")
        if not 0 <= source.start_time <= source.end_time:
            errors.append(
                f"source {i}: window [{source.start_time}, {source.end_time}) is invalid"
            )

    return errors


def _parse_numbers(line: str, types: Tuple[type, ...], what: str) -> List[Any]:
    fields = line.split()
    if len(fields) < len(types):
        raise ValueError(f"{what}: expected {len(types)} values, got {len(fields)}")
    try:
        return [t(v) for t, v in zip(types, fields)]
    except ValueError:
        raise ValueError(f"{what}: malformed number in '{line.strip()}'") from None


def parse_config_text(text: str) -> ConfigResult:
    """Parse the plain text configuration format.

    Blank lines and lines starting with ``#`` are ignored.

    Args:
        text: File contents.

    Returns:
        The parse result, validated without a specific discipline.
    """
    lines = [
        line for line in text.splitlines() if line.strip() and not line.lstrip().startswith("#")
    ]
    if not lines:
        return ConfigResult(errors=["empty configuration"])

    try:
        num_sources, simulation_time, link_capacity, buffer_size = _parse_numbers(
            lines[0], (int, float, float, int), "header"
        )
        if len(lines) - 1 < num_sources:
            raise ValueError(
                f"missing source configurations: expected {num_sources}, got {len(lines) - 1}"
            )

        sources = []
        for i in range(num_sources):
            rate, min_size, max_size, weight, start, end = _parse_numbers(
                lines[i + 1], (float, int, int, float, float, float), f"source {i}"
            )
            sources.append(
                SourceConfig.from_fractions(
                    rate, min_size, max_size, weight, start, end, simulation_time
                )
            )
    except ValueError as e:
        return ConfigResult(errors=[str(e)])

    config = SimulationConfig(simulation_time, link_capacity, buffer_size, sources)
    return ConfigResult(config, validate_config(config))


def parse_config_dict(data: Dict[str, Any]) -> ConfigResult:
    """Build a configuration from a decoded JSON object.

    Args:
        data: Mapping with ``simulation_time``, ``link_capacity``,
            ``buffer_size`` and a ``sources`` list.

    Returns:
        The parse result, validated without a specific discipline.
    """
    try:
        simulation_time = float(data["simulation_time"])
        sources = [
            SourceConfig.from_fractions(
                float(s["rate"]),
                int(s["min_size"]),
                int(s["max_size"]),
                float(s.get("weight", 1.0)),
                float(s.get("start", 0.0)),
                float(s.get("end", 1.0)),
                simulation_time,
            )
            for s in data["sources"]
        ]
        config = SimulationConfig(
            simulation_time,
            float(data["link_capacity"]),
            int(data["buffer_size"]),
            sources,
        )
    except KeyError as e:
        return ConfigResult(errors=[f"missing field {e}"])
    except (AttributeError, TypeError, ValueError) as e:
        return ConfigResult(errors=[f"malformed configuration: {e}"])

    return ConfigResult(config, validate_config(config))


def load_config(filename: str) -> ConfigResult:
    """Load a configuration file.

    Args:
        filename: Path to a text or ``.json`` configuration file.

    Returns:
        The load result. Unreadable files are reported as errors.
    """
    try:
        with open(filename) as f:
            text = f.read()
    except OSError as e:
        return ConfigResult(errors=[f"Could not open input file: {filename} ({e.strerror})"])

    if os.path.splitext(filename)[1].lower() == ".json":
        try:
            result = parse_config_dict(json.loads(text))
        except json.JSONDecodeError as e:
            result = ConfigResult(errors=[f"invalid JSON: {e}"])
    else:
        result = parse_config_text(text)

    if not result.ok:
        logger.warning("Configuration %s rejected: %s", filename, "; ".join(result.errors))
    return result
