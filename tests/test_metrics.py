import csv
import json

import pytest

from linksim.core.enums import Discipline
from linksim.core.stats import SourceStats, StatisticsSnapshot
from linksim.utils.metrics import (
    calculate_fairness_index,
    calculate_metrics,
    save_metrics_to_csv,
    save_metrics_to_json,
)
from linksim.utils.report import format_report, output_filename, write_report


def make_snapshot(discipline=Discipline.WFQ, weights=(1.0, 2.0), sources=None):
    if sources is None:
        sources = (
            SourceStats(generated=12, transmitted=10, dropped=2, bytes_transmitted=1000.0, total_delay=2.0),
            SourceStats(generated=25, transmitted=20, dropped=4, bytes_transmitted=2000.0, total_delay=1.0, backlog=1),
        )
    return StatisticsSnapshot(
        discipline=discipline,
        link_capacity=100.0,
        simulation_time=60.0,
        weights=tuple(weights),
        sources=tuple(sources),
        busy_time=30.0,
    )


@pytest.mark.parametrize(
    "values, expected",
    [
        ([1.0, 1.0, 1.0], 1.0),
        ([1.0, 0.0, 0.0], 1 / 3),
        ([3.0, 1.0], 16 / 20),
        ([], 0.0),
        ([0.0, 0.0], 0.0),
    ],
)
def test_fairness_index(values, expected):
    assert calculate_fairness_index(values) == pytest.approx(expected)


def test_system_metrics():
    metrics = calculate_metrics(make_snapshot())

    assert metrics["discipline"] == "WFQ"
    assert metrics["utilization"] == pytest.approx(0.5)
    assert metrics["average_delay"] == pytest.approx(0.1)
    assert metrics["drop_probability"] == pytest.approx(6 / 37)
    assert metrics["throughput"] == pytest.approx(50.0)
    assert (metrics["generated"], metrics["transmitted"], metrics["dropped"]) == (37, 30, 6)


def test_fairness_is_weight_normalised_only_for_wfq():
    assert calculate_metrics(make_snapshot(Discipline.WFQ))["fairness_index"] == pytest.approx(1.0)
    assert calculate_metrics(make_snapshot(Discipline.FCFS))["fairness_index"] == pytest.approx(0.9)


def test_per_source_metrics():
    first, second = calculate_metrics(make_snapshot())["sources"]

    assert first["drop_rate"] == pytest.approx(2 / 12)
    assert first["average_delay"] == pytest.approx(0.2)
    assert first["throughput"] == pytest.approx(1000.0 / 60.0)
    assert second["weight"] == 2.0
    assert second["backlog"] == 1


def test_degenerate_run_reports_zeros():
    metrics = calculate_metrics(make_snapshot(sources=(SourceStats(), SourceStats())))

    assert metrics["utilization"] == 0.0
    assert metrics["average_delay"] == 0.0
    assert metrics["drop_probability"] == 0.0
    assert metrics["fairness_index"] == 0.0
    assert metrics["sources"][0]["drop_rate"] == 0.0


def test_format_report():
    report = format_report(make_snapshot())
    lines = report.splitlines()

    assert lines[0] == "## System-Level Performance Metrics (WFQ)"
    assert lines[1] == "1. Server Utilization:   0.500000"
    assert lines[2] == "2. Avg. Packet Delay:    0.100000 s"
    assert lines[4] == "4. Fairness Index:       1.000000"
    assert lines[10].split("|")[0].strip() == "0"
    assert [c.strip() for c in lines[11].split("|")] == [
        "1", "2", "25", "20", "4", "0.1600", "0.050000", "33.33",
    ]
    assert report.endswith("-\n")


def test_output_filename():
    assert output_filename("configs/input1.txt", "WFQ", "out") == "out/wfq_output_input1.txt"


def test_write_report(tmp_path):
    filename = tmp_path / "reports" / "fcfs_output_x.txt"
    write_report("hello\n", str(filename))
    assert filename.read_text() == "hello\n"


def test_save_metrics_to_json(tmp_path):
    metrics = calculate_metrics(make_snapshot())
    filename = tmp_path / "results" / "metrics.json"

    save_metrics_to_json(metrics, str(filename))

    assert json.loads(filename.read_text()) == metrics


def test_save_metrics_to_csv(tmp_path):
    first = calculate_metrics(make_snapshot(Discipline.FCFS))
    second = calculate_metrics(make_snapshot(Discipline.WFQ))
    second["buffer_size"] = 4
    filename = tmp_path / "comparison.csv"

    save_metrics_to_csv([first, second], str(filename))

    with open(filename, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0][0] == "Discipline"
    assert [row[0] for row in rows[1:]] == ["FCFS", "WFQ"]
    assert [row[1] for row in rows[1:]] == ["", "4"]
