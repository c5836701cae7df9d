from __future__ import annotations

import math
import warnings
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from .cpt import Assignment, ConditionalProbabilityTable
from .inference_discrete import Distribution, format_probability_query
from .network import BayesianNetwork
from .topology import topological_order


def _fmt(p: float) -> str:
    return "nan" if math.isnan(p) else f"{p:g}"


def format_structure(network: BayesianNetwork) -> str:
    """List every variable in topological order with its parents."""
    lines = ["Structure (predecessors):"]
    for name in topological_order(network):
        parents = network.variables[name].parents
        lines.append(f"- {name} <- {','.join(parents) if parents else '(root)'}")
    return "\n".join(lines)


def format_cpt(cpt: ConditionalProbabilityTable) -> str:
    """Human-readable listing: one line per parent combination, ``nan`` for missing rows."""
    target = cpt.target
    header = f"P({target.name}"
    if cpt.parents:
        header += " | " + ",".join(cpt.parent_names)
    lines = [header + ")", "Values: " + ", ".join(target.domain)]
    for row in cpt.enumerate_rows():
        cond = ",".join(f"{n}={v}" for n, v in row.assignment) or "<prior>"
        lines.append(f" {cond} : " + " ".join(_fmt(p) for p in row.probabilities))
    return "\n".join(lines)


# ------------------------------
# ASCII grid tables
# ------------------------------

def _format_table(rows: List[List[str]]) -> str:
    widths: List[int] = []
    for row in rows:
        for i, cell in enumerate(row):
            if i >= len(widths):
                widths.append(len(cell))
            else:
                widths[i] = max(widths[i], len(cell))

    def horiz() -> str:
        parts = ["+" + "-" * (w + 2) for w in widths]
        return "".join(parts) + "+"

    def fmt_row(row: List[str]) -> str:
        cells = [f" {cell.ljust(w)} " for cell, w in zip(row, widths)]
        return "|" + "|".join(cells) + "|"

    out: List[str] = []
    out.append(horiz())
    for r in rows:
        out.append(fmt_row(r))
        out.append(horiz())
    return "\n".join(out)


def cpt_to_ascii_table(cpt: ConditionalProbabilityTable, precision: int = 4) -> str:
    """Grid table with one column per parent assignment and one row per target value."""
    var = cpt.target.name
    var_states = list(cpt.target.domain)
    table_rows = cpt.enumerate_rows()

    rows: List[List[str]] = []
    if not cpt.parents:
        rows.append(["Node(Value)", "Probability"])  # header
        probs = table_rows[0].probabilities
        for s_idx, s in enumerate(var_states):
            rows.append([f"{var}({s})", f"{probs[s_idx]:.{precision}f}"])
        return _format_table(rows)

    # Header rows listing parent assignments as columns
    for i, p in enumerate(cpt.parent_names):
        header = [p]
        for row in table_rows:
            header.append(f"{p}({row.assignment[i][1]})")
        rows.append(header)

    for s_idx, s in enumerate(var_states):
        row = [f"{var}({s})"]
        for trow in table_rows:
            row.append(f"{trow.probabilities[s_idx]:.{precision}f}")
        rows.append(row)

    return _format_table(rows)


def format_cpts(network: BayesianNetwork, style: str = "listing") -> str:
    """Every CPT in topological order, separated by blank lines."""
    render = cpt_to_ascii_table if style == "ascii" else format_cpt
    blocks = []
    for name in topological_order(network):
        cpt = network.variables[name].cpt
        if cpt is not None:
            blocks.append(render(cpt))
    return "\n\n".join(blocks) + "\n"


def format_distribution(dist: Distribution, precision: int = 6) -> str:
    return "\n".join(f"{value}: {p:.{precision}f}" for value, p in dist)


def format_query_result(
    variable: str,
    evidence: Optional[Mapping[str, str]],
    dist: Distribution,
    precision: int = 6,
) -> str:
    return format_probability_query(variable, evidence=evidence) + "\n" + format_distribution(dist, precision)


# ------------------------------
# File writers (inverse of parsers)
# ------------------------------

def format_structure_file(network: BayesianNetwork) -> str:
    return "".join(f"{parent} -> {child}\n" for parent, child in network.edges())


def format_cpt_file(network: BayesianNetwork) -> str:
    """Serialize every CPT in the CPT-file format accepted by ``parsers.parse_cpts``.

    Probabilities are written with ``repr`` so reloading reproduces each stored
    entry exactly. A parent assignment that lacks a value for some domain entry
    cannot be expressed as a row; it is skipped with a warning, so it stays
    missing after a reload.
    """
    out: List[str] = []
    for var in network:
        cpt = var.cpt
        if cpt is None:
            continue
        out.append(f"NODE {var.name}")
        out.append("VALUES: " + " ".join(var.domain))
        if cpt.parents:
            out.append("PARENTS: " + " ".join(cpt.parent_names))
        out.append("TABLE")

        groups: Dict[Assignment, Dict[str, float]] = {}
        for assignment, value, prob in cpt.entries():
            groups.setdefault(assignment, {})[value] = prob
        for assignment, by_value in groups.items():
            cond = ",".join(f"{n}={v}" for n, v in assignment)
            if any(v not in by_value for v in var.domain):
                warnings.warn(
                    f"CPT row for {var.name} given {cond or '<prior>'} is incomplete; not written",
                    stacklevel=2,
                )
                continue
            probs = " ".join(repr(by_value[v]) for v in var.domain)
            if assignment:
                out.append(f"{cond}: {probs}")
            else:
                out.append(f"p: {probs}")
        out.append("END")
        out.append("")
    return "\n".join(out)


def write_network(network: BayesianNetwork, structure_path: Union[str, Path], cpt_path: Union[str, Path]) -> None:
    Path(structure_path).write_text(format_structure_file(network), encoding="utf-8")
    Path(cpt_path).write_text(format_cpt_file(network), encoding="utf-8")


__all__ = [
    "format_structure",
    "format_cpt",
    "format_cpts",
    "cpt_to_ascii_table",
    "format_distribution",
    "format_query_result",
    "format_structure_file",
    "format_cpt_file",
    "write_network",
]
