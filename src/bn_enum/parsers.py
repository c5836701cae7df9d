"""
Text loaders for network structure, CPTs and evidence strings.

Structure file: one edge per line, ``parent -> child``. Blank lines and lines
starting with ``#`` are ignored.

CPT file: line-oriented blocks::

    NODE WetGrass
    VALUES: true false
    PARENTS: Rain
    TABLE
    Rain=true: 0.9 0.1
    Rain=false: 0.1 0.9
    END

A parentless node uses a single prior row ``p: 0.2 0.8``. ``PARENTS:`` only fixes
the column order of the table; edges come from the structure file.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .cpt import DEFAULT_ROW_SUM_TOLERANCE
from .errors import NetworkParseError
from .network import BayesianNetwork, Variable

PathLike = Union[str, Path]


def _read_lines(path: PathLike, kind: str) -> List[str]:
    try:
        return Path(path).read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise NetworkParseError(f"cannot open {kind} file: {path} ({e.strerror})") from e


def _meaningful(lines: Iterable[str]) -> Iterable[Tuple[int, str]]:
    for ln, raw in enumerate(lines, start=1):
        line = raw.strip()
        if line and not line.startswith("#"):
            yield ln, line


# ------------------------------
# Structure
# ------------------------------

def parse_structure(lines: Iterable[str], network: Optional[BayesianNetwork] = None) -> BayesianNetwork:
    """Add every ``parent -> child`` edge in ``lines`` to ``network`` (created if None)."""
    if network is None:
        network = BayesianNetwork()
    for ln, line in _meaningful(lines):
        parts = line.split("->")
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise NetworkParseError("Invalid structure format", ln, line)
        network.add_edge(parts[0].strip(), parts[1].strip())
    return network


def load_structure(
    path: PathLike,
    network: Optional[BayesianNetwork] = None,
    verbose: bool = False,
) -> BayesianNetwork:
    network = parse_structure(_read_lines(path, "structure"), network)
    if verbose:
        print(f"✓ Loaded structure: {len(network)} variables, {network.number_of_edges()} edges from {path}")
    return network


# ------------------------------
# CPTs
# ------------------------------

def _parse_probabilities(text: str, ln: int, line: str) -> List[float]:
    try:
        probs = [float(tok) for tok in text.split()]
    except ValueError:
        raise NetworkParseError("Invalid probability", ln, line) from None
    if not all(math.isfinite(p) for p in probs):
        raise NetworkParseError("Invalid probability", ln, line)
    return probs


def _parse_assignment(text: str, ln: int, line: str) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for item in text.split(","):
        if not item.strip():
            continue
        if "=" not in item:
            raise NetworkParseError("Missing '=' in assignment", ln, line)
        name, value = item.split("=", 1)
        pairs.append((name.strip(), value.strip()))
    return pairs


def parse_cpts(lines: Iterable[str], network: BayesianNetwork) -> BayesianNetwork:
    """Fill the CPTs of ``network`` from CPT-file ``lines``.

    Directive handling mirrors the block structure: ``NODE`` opens a block,
    ``TABLE`` and ``END`` bind the pending parent order, ``p:`` adds a prior row
    (dropping any declared parents), any other ``...: ...`` line is a conditional row.
    """
    current: Optional[Variable] = None
    parents: List[str] = []

    def require_node(directive: str, ln: int, line: str) -> Variable:
        if current is None:
            raise NetworkParseError(f"{directive} outside a NODE block", ln, line)
        return current

    for ln, line in _meaningful(lines):
        if line.startswith("NODE "):
            current = network.get_or_create(line[5:].strip())
            parents = []
            network.ensure_cpt(current.name)
        elif line.startswith("VALUES:"):
            var = require_node("VALUES", ln, line)
            network.set_domain(var.name, line[7:].split())
        elif line.startswith("PARENTS:"):
            require_node("PARENTS", ln, line)
            parents = line[8:].split()
            for p in parents:
                network.get_or_create(p)
        elif line == "TABLE":
            var = require_node("TABLE", ln, line)
            network.set_cpt_structure(var.name, parents)
        elif line == "END":
            var = require_node("END", ln, line)
            network.set_cpt_structure(var.name, parents)
            current = None
            parents = []
        elif line.startswith("p:"):
            var = require_node("p:", ln, line)
            probs = _parse_probabilities(line[2:], ln, line)
            network.set_cpt_structure(var.name, [])
            network.add_cpt_row(var.name, [], probs)
        else:
            var = require_node("Row", ln, line)
            if ":" not in line:
                raise NetworkParseError("Missing ':'", ln, line)
            left, right = line.split(":", 1)
            assignment = _parse_assignment(left, ln, line)
            probs = _parse_probabilities(right, ln, line)
            network.add_cpt_row(var.name, assignment, probs)
    return network


def load_cpts(path: PathLike, network: BayesianNetwork, verbose: bool = False) -> BayesianNetwork:
    network = parse_cpts(_read_lines(path, "CPT"), network)
    if verbose:
        n_tables = sum(1 for var in network if var.cpt is not None)
        print(f"✓ Loaded {n_tables} CPTs from {path}")
    return network


def load_network(
    structure_path: PathLike,
    cpt_path: PathLike,
    strict: bool = False,
    row_sum_tolerance: float = DEFAULT_ROW_SUM_TOLERANCE,
    verbose: bool = False,
) -> BayesianNetwork:
    """Build a network from a structure file and a CPT file."""
    network = BayesianNetwork(strict=strict, row_sum_tolerance=row_sum_tolerance)
    load_structure(structure_path, network, verbose=verbose)
    load_cpts(cpt_path, network, verbose=verbose)
    return network


# ------------------------------
# Evidence and queries
# ------------------------------

def parse_evidence(text: str) -> Dict[str, str]:
    """Parse ``"A=a,B=b"`` into ``{"A": "a", "B": "b"}``. Items without ``=`` are skipped."""
    evidence: Dict[str, str] = {}
    for item in text.strip().split(","):
        if "=" not in item:
            continue
        name, value = item.split("=", 1)
        evidence[name.strip()] = value.strip()
    return evidence


def parse_query(text: str) -> Tuple[str, str]:
    """Split ``"Var | A=a,B=b"`` into the variable name and the raw evidence string."""
    var, sep, evs = text.partition("|")
    return var.strip(), evs.strip() if sep else ""


__all__ = [
    "parse_structure",
    "load_structure",
    "parse_cpts",
    "load_cpts",
    "load_network",
    "parse_evidence",
    "parse_query",
]
