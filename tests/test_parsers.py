import warnings
from pathlib import Path

import pytest

from bn_enum.errors import NetworkParseError, NonNormalizedRowError, NonNormalizedRowWarning
from bn_enum.inference_discrete import InferenceEngine
from bn_enum.network import BayesianNetwork
from bn_enum.parsers import (
    load_network,
    load_structure,
    parse_cpts,
    parse_evidence,
    parse_query,
    parse_structure,
)

from conftest import RAIN_CPTS, RAIN_STRUCTURE


def rain_structure():
    return parse_structure(RAIN_STRUCTURE.splitlines())


class TestStructure:
    def test_edges_and_comments(self):
        bn = parse_structure([
            "# comment",
            "",
            "  Cloudy -> Rain  ",
            "Cloudy->Sprinkler",
            "Rain -> WetGrass",
        ])
        assert bn.nodes() == ["Cloudy", "Rain", "Sprinkler", "WetGrass"]
        assert bn.edges() == [("Cloudy", "Rain"), ("Cloudy", "Sprinkler"), ("Rain", "WetGrass")]

    @pytest.mark.parametrize("line", ["A B", "A -> ", "-> B", "A -> B -> C"])
    def test_invalid_line(self, line):
        with pytest.raises(NetworkParseError) as exc_info:
            parse_structure(["A -> B", line])
        assert exc_info.value.line == 2
        assert "Invalid structure format" in str(exc_info.value)

    def test_extends_given_network(self):
        bn = BayesianNetwork()
        bn.get_or_create("Z")
        parse_structure(["A -> B"], bn)
        assert bn.nodes() == ["Z", "A", "B"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(NetworkParseError, match="cannot open structure file"):
            load_structure(tmp_path / "nope.txt")

    def test_verbose_load_reports(self, rain_files, capsys):
        structure, _ = rain_files
        load_structure(structure, verbose=True)
        assert "✓ Loaded structure: 2 variables, 1 edges" in capsys.readouterr().out


class TestCPTs:
    def test_rain_file(self):
        bn = parse_cpts(RAIN_CPTS.splitlines(), rain_structure())
        assert bn["Rain"].domain == ["true", "false"]
        assert bn["WetGrass"].cpt.parent_names == ["Rain"]
        assert bn["WetGrass"].cpt.conditional({"Rain": "false"}, "false") == 0.9
        assert bn.check_model()

    def test_parents_line_only_orders_columns(self):
        bn = parse_structure(["A -> C", "B -> C"])
        parse_cpts([
            "NODE A", "VALUES: a0 a1", "TABLE", "p: 0.5 0.5", "END",
            "NODE B", "VALUES: b0 b1", "TABLE", "p: 0.5 0.5", "END",
            "NODE C", "VALUES: c0 c1", "PARENTS: B A", "TABLE",
            "A=a0,B=b0: 0.1 0.9",
            "B=b1,A=a0: 0.2 0.8",
            "A=a1,B=b0: 0.3 0.7",
            "A=a1,B=b1: 0.4 0.6",
            "END",
        ], bn)
        assert bn["C"].cpt.parent_names == ["B", "A"]
        assert bn["C"].cpt.conditional({"A": "a0", "B": "b1"}, "c0") == 0.2
        assert bn.check_model()

    def test_end_rebinds_pending_parents_after_prior_row(self):
        bn = parse_cpts([
            "NODE A", "VALUES: x y", "PARENTS: B", "TABLE", "p: 0.4 0.6", "END",
        ], BayesianNetwork())
        assert bn["A"].cpt.parent_names == ["B"]
        assert bn["A"].cpt.table["A=x"] == 0.4

    def test_node_without_structure_edges_is_created(self):
        bn = parse_cpts(["NODE Solo", "VALUES: on off", "TABLE", "p: 1 0", "END"], BayesianNetwork())
        assert "Solo" in bn
        assert InferenceEngine(bn).query("Solo") == [("on", 1.0), ("off", 0.0)]

    @pytest.mark.parametrize(
        "lines, message",
        [
            (["VALUES: a b"], "VALUES outside a NODE block"),
            (["TABLE"], "TABLE outside a NODE block"),
            (["p: 0.5 0.5"], "p: outside a NODE block"),
            (["NODE A", "VALUES: a b", "TABLE", "p: 0.5 half"], "Invalid probability"),
            (["NODE A", "VALUES: a b", "TABLE", "p: nan 0.9"], "Invalid probability"),
            (["NODE A", "VALUES: a b", "PARENTS: B", "TABLE", "B=b: inf 0"], "Invalid probability"),
            (["NODE A", "VALUES: a b", "TABLE", "garbage"], "Missing ':'"),
            (["NODE A", "VALUES: a b", "TABLE", "B: 0.5 0.5"], "Missing '='"),
        ],
    )
    def test_malformed_lines(self, lines, message):
        with pytest.raises(NetworkParseError, match=message):
            parse_cpts(lines, BayesianNetwork())

    def test_error_reports_line_number(self):
        with pytest.raises(NetworkParseError) as exc_info:
            parse_cpts(["# header", "NODE A", "VALUES: a b", "TABLE", "p: x y"], BayesianNetwork())
        assert exc_info.value.line == 5
        assert str(exc_info.value) == "Invalid probability at line 5: p: x y"

    def test_non_normalized_row_warns(self):
        with pytest.warns(NonNormalizedRowWarning):
            bn = parse_cpts(["NODE A", "VALUES: a b", "TABLE", "p: 0.5 0.6", "END"], BayesianNetwork())
        assert bn["A"].cpt.table["A=b"] == 0.6


class TestLoadNetwork:
    def test_from_files(self, rain_files):
        structure, cpts = rain_files
        bn = load_network(structure, cpts)
        dist = dict(InferenceEngine(bn).query("Rain", {"WetGrass": "true"}))
        assert dist["true"] == pytest.approx(0.692308, abs=1e-6)

    def test_strict_mode(self, tmp_path, rain_files):
        structure, _ = rain_files
        cpts = tmp_path / "bad.txt"
        cpts.write_text("NODE Rain\nVALUES: true false\nTABLE\np: 0.3 0.8\nEND\n", encoding="utf-8")
        with pytest.raises(NonNormalizedRowError):
            load_network(structure, cpts, strict=True)

    def test_custom_tolerance(self, tmp_path, rain_files):
        structure, _ = rain_files
        cpts = tmp_path / "loose.txt"
        cpts.write_text("NODE Rain\nVALUES: true false\nTABLE\np: 0.2 0.79\nEND\n", encoding="utf-8")
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            load_network(structure, cpts, row_sum_tolerance=0.05)

    def test_missing_cpt_file(self, rain_files, tmp_path):
        structure, _ = rain_files
        with pytest.raises(NetworkParseError, match="cannot open CPT file"):
            load_network(structure, tmp_path / "missing.txt")


class TestEvidence:
    def test_parse_evidence(self):
        assert parse_evidence("WetGrass=true, Cloudy = F") == {"WetGrass": "true", "Cloudy": "F"}

    def test_items_without_equals_are_skipped(self):
        assert parse_evidence("A=a,junk,,B=b") == {"A": "a", "B": "b"}
        assert parse_evidence("") == {}

    def test_value_may_contain_equals(self):
        assert parse_evidence("A=x=y") == {"A": "x=y"}

    def test_parse_query(self):
        assert parse_query("Rain | WetGrass=true") == ("Rain", "WetGrass=true")
        assert parse_query(" Rain ") == ("Rain", "")
        assert parse_query("Rain|") == ("Rain", "")


DATA = Path(__file__).resolve().parent.parent / "data"


@pytest.mark.parametrize("name", ["rain", "sprinkler"])
def test_bundled_networks_load(name):
    network = load_network(DATA / name / "structure.txt", DATA / name / "cpts.txt")
    assert network.check_model()


def test_bundled_sprinkler_posterior():
    network = load_network(DATA / "sprinkler" / "structure.txt", DATA / "sprinkler" / "cpts.txt")
    assert InferenceEngine(network).probability("Rain", "T", {"WetGrass": "T"}) == pytest.approx(0.4581 / 0.6471)
