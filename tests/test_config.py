import json

import pytest

from linksim.config import (
    SimulationConfig,
    SourceConfig,
    load_config,
    parse_config_dict,
    parse_config_text,
    validate_config,
)
from linksim.core.enums import Discipline

CONFIG_TEXT = """\
2 10.0 1000000 5
100 500 1500 1.0 0.0 1.0
50 64 64 2.0 0.25 0.75
"""


def test_parse_text_resolves_window_fractions():
    result = parse_config_text(CONFIG_TEXT)

    assert result.ok
    config = result.config
    assert config.num_sources == 2
    assert config.simulation_time == 10.0
    assert config.link_capacity == 1_000_000.0
    assert config.buffer_size == 5
    assert config.sources[0] == SourceConfig(100.0, 500, 1500, 1.0, 0.0, 10.0)
    assert config.sources[1] == SourceConfig(50.0, 64, 64, 2.0, 2.5, 7.5)


def test_parse_text_skips_comments_and_blank_lines():
    text = "# link\n\n" + CONFIG_TEXT.replace("\n50", "\n# second source\n50")
    result = parse_config_text(text)
    assert result.ok
    assert result.config.sources[1].weight == 2.0


@pytest.mark.parametrize(
    "text, message",
    [
        ("", "empty configuration"),
        ("2 10.0 1000000 5\n100 500 1500 1.0 0.0 1.0\n", "missing source configurations"),
        ("1 ten 1000000 5\n100 500 1500 1.0 0.0 1.0\n", "malformed number"),
        ("1 10.0 1000000\n", "expected 4 values"),
        ("1 10.0 1000000 5\n100 500 1500 1.0\n", "expected 6 values"),
        ("1 10.0 0 5\n100 500 1500 1.0 0.0 1.0\n", "link capacity must be positive"),
        ("0 10.0 1000 5\n", "number of sources must be positive"),
        ("1 10.0 1000 -1\n100 500 1500 1.0 0.0 1.0\n", "buffer size must not be negative"),
        ("1 10.0 1000 5\n100 1500 500 1.0 0.0 1.0\n", "exceeds maximum size"),
        ("1 10.0 1000 5\n0 500 1500 1.0 0.0 1.0\n", "arrival rate must be positive"),
        ("1 10.0 1000 5\n10 500 1500 1.0 0.8 0.2\n", "window"),
    ],
)
def test_parse_text_reports_errors(text, message):
    result = parse_config_text(text)

    assert not result.ok
    assert any(message in error for error in result.errors)


def test_weights_only_matter_for_wfq():
    config = SimulationConfig(
        10.0, 1000.0, 2, [SourceConfig(rate=1.0, min_size=10, max_size=10, weight=0.0)]
    )

    assert validate_config(config) == []
    assert validate_config(config, Discipline.FCFS) == []
    (error,) = validate_config(config, Discipline.WFQ)
    assert "weight must be positive" in error


def test_load_text_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text(CONFIG_TEXT)

    result = load_config(str(path))

    assert result.ok
    assert result.config.num_sources == 2


def test_load_json_file(tmp_path):
    path = tmp_path / "input.json"
    path.write_text(
        json.dumps(
            {
                "simulation_time": 20.0,
                "link_capacity": 5000,
                "buffer_size": 3,
                "sources": [
                    {"rate": 4, "min_size": 100, "max_size": 200, "weight": 3, "start": 0.5, "end": 1.0},
                    {"rate": 2, "min_size": 50, "max_size": 50},
                ],
            }
        )
    )

    result = load_config(str(path))

    assert result.ok
    first, second = result.config.sources
    assert (first.start_time, first.end_time, first.weight) == (10.0, 20.0, 3.0)
    assert (second.start_time, second.end_time, second.weight) == (0.0, 20.0, 1.0)


def test_load_json_reports_missing_fields():
    result = parse_config_dict({"simulation_time": 1.0, "sources": []})
    assert not result.ok
    assert "missing field" in result.errors[0]


def test_load_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    result = load_config(str(path))

    assert not result.ok
    assert "invalid JSON" in result.errors[0]


def test_load_missing_file(tmp_path):
    result = load_config(str(tmp_path / "nope.txt"))

    assert result.config is None
    assert not result.ok
    assert "Could not open input file" in result.errors[0]


@pytest.mark.parametrize("field", ["simulation_time", "link_capacity"])
def test_load_json_rejects_infinite_values(tmp_path, field):
    data = {
        "simulation_time": 10.0,
        "link_capacity": 1000,
        "buffer_size": 2,
        "sources": [{"rate": 5, "min_size": 100, "max_size": 100}],
    }
    data[field] = float("inf")
    path = tmp_path / "infinite.json"
    path.write_text(json.dumps(data))

    result = load_config(str(path))

    assert not result.ok
    assert "must be positive and finite, got inf" in result.errors[0]
