from linksim.core.enums import Discipline
from linksim.utils.sweep import buffer_sweep, compare_disciplines


def test_compare_disciplines_uses_same_arrivals(two_source_config):
    results = compare_disciplines(two_source_config, seed=5)

    assert list(results) == [Discipline.FCFS, Discipline.WFQ]
    fcfs, wfq = results[Discipline.FCFS], results[Discipline.WFQ]
    assert fcfs["discipline"] == "FCFS"
    assert wfq["discipline"] == "WFQ"
    assert fcfs["generated"] == wfq["generated"]
    assert [s["generated"] for s in fcfs["sources"]] == [s["generated"] for s in wfq["sources"]]


def test_buffer_sweep_runs_full_grid(two_source_config):
    results = buffer_sweep(two_source_config, [0, 1, 20], seed=6)

    assert [(r["buffer_size"], r["discipline"]) for r in results] == [
        (0, "FCFS"),
        (0, "WFQ"),
        (1, "FCFS"),
        (1, "WFQ"),
        (20, "FCFS"),
        (20, "WFQ"),
    ]
    for result in results[:2]:
        assert result["transmitted"] == 0
        assert result["drop_probability"] == 1.0

    fcfs = [r for r in results if r["discipline"] == "FCFS"]
    assert fcfs[1]["drop_probability"] > fcfs[2]["drop_probability"]
    # the base configuration is left untouched
    assert two_source_config.buffer_size == 5


def test_buffer_sweep_single_discipline(two_source_config):
    results = buffer_sweep(two_source_config, [2], [Discipline.WFQ], seed=7)
    assert len(results) == 1
    assert results[0]["discipline"] == "WFQ"
