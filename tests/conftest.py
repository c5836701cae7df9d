import matplotlib

matplotlib.use("Agg")

import pytest

from bn_enum.network import BayesianNetwork

RAIN_STRUCTURE = """\
# two-node example
Rain -> WetGrass
"""

RAIN_CPTS = """\
NODE Rain
VALUES: true false
TABLE
p: 0.2 0.8
END

NODE WetGrass
VALUES: true false
PARENTS: Rain
TABLE
Rain=true: 0.9 0.1
Rain=false: 0.1 0.9
END
"""


def build_rain_network(**kwargs) -> BayesianNetwork:
    """Rain -> WetGrass with P(Rain=true)=0.2."""
    bn = BayesianNetwork(**kwargs)
    bn.add_edge("Rain", "WetGrass")
    bn.set_domain("Rain", ["true", "false"])
    bn.set_domain("WetGrass", ["true", "false"])
    bn.set_cpt_structure("Rain", [])
    bn.add_cpt_row("Rain", [], [0.2, 0.8])
    bn.set_cpt_structure("WetGrass", ["Rain"])
    bn.add_cpt_row("WetGrass", {"Rain": "true"}, [0.9, 0.1])
    bn.add_cpt_row("WetGrass", {"Rain": "false"}, [0.1, 0.9])
    return bn


def build_sprinkler_network() -> BayesianNetwork:
    """Cloudy -> {Sprinkler, Rain} -> WetGrass with the textbook numbers."""
    bn = BayesianNetwork()
    bn.add_edges_from([
        ("Cloudy", "Sprinkler"),
        ("Cloudy", "Rain"),
        ("Sprinkler", "WetGrass"),
        ("Rain", "WetGrass"),
    ])
    for name in ("Cloudy", "Sprinkler", "Rain", "WetGrass"):
        bn.set_domain(name, ["T", "F"])

    bn.set_cpt_structure("Cloudy", [])
    bn.add_cpt_row("Cloudy", [], [0.5, 0.5])

    bn.set_cpt_structure("Sprinkler", ["Cloudy"])
    bn.add_cpt_row("Sprinkler", {"Cloudy": "T"}, [0.1, 0.9])
    bn.add_cpt_row("Sprinkler", {"Cloudy": "F"}, [0.5, 0.5])

    bn.set_cpt_structure("Rain", ["Cloudy"])
    bn.add_cpt_row("Rain", {"Cloudy": "T"}, [0.8, 0.2])
    bn.add_cpt_row("Rain", {"Cloudy": "F"}, [0.2, 0.8])

    bn.set_cpt_structure("WetGrass", ["Sprinkler", "Rain"])
    bn.add_cpt_row("WetGrass", {"Sprinkler": "T", "Rain": "T"}, [0.99, 0.01])
    bn.add_cpt_row("WetGrass", {"Sprinkler": "T", "Rain": "F"}, [0.90, 0.10])
    bn.add_cpt_row("WetGrass", {"Sprinkler": "F", "Rain": "T"}, [0.90, 0.10])
    bn.add_cpt_row("WetGrass", {"Sprinkler": "F", "Rain": "F"}, [0.0, 1.0])
    return bn


@pytest.fixture
def rain_network():
    return build_rain_network()


@pytest.fixture
def sprinkler_network():
    return build_sprinkler_network()


@pytest.fixture
def rain_files(tmp_path):
    structure = tmp_path / "structure.txt"
    cpts = tmp_path / "cpts.txt"
    structure.write_text(RAIN_STRUCTURE, encoding="utf-8")
    cpts.write_text(RAIN_CPTS, encoding="utf-8")
    return structure, cpts
