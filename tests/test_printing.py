import pytest

from bn_enum.errors import MissingCPTRowError
from bn_enum.inference_discrete import InferenceEngine
from bn_enum.parsers import load_network
from bn_enum.printing import (
    cpt_to_ascii_table,
    format_cpt,
    format_cpt_file,
    format_cpts,
    format_distribution,
    format_query_result,
    format_structure,
    write_network,
)


def test_format_structure(sprinkler_network):
    assert format_structure(sprinkler_network) == (
        "Structure (predecessors):\n"
        "- Cloudy <- (root)\n"
        "- Sprinkler <- Cloudy\n"
        "- Rain <- Cloudy\n"
        "- WetGrass <- Sprinkler,Rain"
    )


def test_format_cpt_prior(rain_network):
    assert format_cpt(rain_network["Rain"].cpt) == "P(Rain)\nValues: true, false\n <prior> : 0.2 0.8"


def test_format_cpt_conditional(rain_network):
    assert format_cpt(rain_network["WetGrass"].cpt) == (
        "P(WetGrass | Rain)\n"
        "Values: true, false\n"
        " Rain=true : 0.9 0.1\n"
        " Rain=false : 0.1 0.9"
    )


def test_format_cpt_marks_missing_rows(rain_network):
    del rain_network["WetGrass"].cpt.table["Rain=false,WetGrass=true"]
    assert " Rain=false : nan 0.9" in format_cpt(rain_network["WetGrass"].cpt)


def test_format_cpt_first_parent_changes_slowest(sprinkler_network):
    lines = format_cpt(sprinkler_network["WetGrass"].cpt).splitlines()
    assert lines[2:] == [
        " Sprinkler=T,Rain=T : 0.99 0.01",
        " Sprinkler=T,Rain=F : 0.9 0.1",
        " Sprinkler=F,Rain=T : 0.9 0.1",
        " Sprinkler=F,Rain=F : 0 1",
    ]


def test_format_cpts_in_topological_order(rain_network):
    text = format_cpts(rain_network)
    assert text.index("P(Rain)") < text.index("P(WetGrass | Rain)")
    assert "\n\nP(WetGrass" in text
    assert text.endswith("\n")


def test_ascii_prior_table(rain_network):
    table = cpt_to_ascii_table(rain_network["Rain"].cpt)
    lines = table.splitlines()
    assert lines[0] == lines[-1] == "+-------------+-------------+"
    assert "| Node(Value) | Probability |" in lines
    assert "| Rain(true)  | 0.2000      |" in lines
    assert "| Rain(false) | 0.8000      |" in lines


def test_ascii_conditional_table(sprinkler_network):
    table = cpt_to_ascii_table(sprinkler_network["WetGrass"].cpt, precision=2)
    assert "Sprinkler(T)" in table
    assert "Rain(F)" in table
    row = next(line for line in table.splitlines() if line.startswith("| WetGrass(T)"))
    cells = [c.strip() for c in row.strip("|").split("|")]
    assert cells == ["WetGrass(T)", "0.99", "0.90", "0.90", "0.00"]


def test_format_cpts_ascii_style(rain_network):
    assert "| WetGrass(true)" in format_cpts(rain_network, style="ascii")


def test_format_distribution():
    assert format_distribution([("true", 0.26), ("false", 0.74)]) == "true: 0.260000\nfalse: 0.740000"
    assert format_distribution([("a", 1 / 3)], precision=2) == "a: 0.33"


def test_format_query_result(rain_network):
    dist = InferenceEngine(rain_network).query("Rain", {"WetGrass": "true"})
    assert format_query_result("Rain", {"WetGrass": "true"}, dist) == (
        "P(Rain | WetGrass=true)\ntrue: 0.692308\nfalse: 0.307692"
    )
    assert format_query_result("Rain", {}, dist, precision=2).startswith("P(Rain)\n")


def test_cpt_file_format(rain_network):
    text = format_cpt_file(rain_network)
    assert "NODE Rain\nVALUES: true false\nTABLE\np: 0.2 0.8\nEND\n" in text
    assert "PARENTS: Rain\nTABLE\nRain=true: 0.9 0.1\nRain=false: 0.1 0.9\nEND" in text


def test_write_and_reload_preserves_every_entry(sprinkler_network, tmp_path):
    structure = tmp_path / "structure.txt"
    cpts = tmp_path / "cpts.txt"
    write_network(sprinkler_network, structure, cpts)

    reloaded = load_network(structure, cpts)
    assert reloaded.edges() == sprinkler_network.edges()
    for var in sprinkler_network:
        assert reloaded[var.name].domain == var.domain
        assert reloaded[var.name].cpt.parent_names == var.cpt.parent_names
        assert reloaded[var.name].cpt.table == var.cpt.table

    before = InferenceEngine(sprinkler_network).query("Rain", {"WetGrass": "T"})
    after = InferenceEngine(reloaded).query("Rain", {"WetGrass": "T"})
    assert after == before


def test_incomplete_row_stays_missing_after_reload(rain_network, tmp_path):
    del rain_network["WetGrass"].cpt.table["Rain=false,WetGrass=true"]
    structure = tmp_path / "structure.txt"
    cpts = tmp_path / "cpts.txt"
    with pytest.warns(UserWarning, match="incomplete"):
        write_network(rain_network, structure, cpts)
    assert "nan" not in cpts.read_text(encoding="utf-8")

    reloaded = load_network(structure, cpts)
    assert len(reloaded["WetGrass"].cpt) == 2
    with pytest.raises(MissingCPTRowError):
        InferenceEngine(reloaded).query("WetGrass")
