"""
Variable registry for discrete Bayesian networks.

The ``BayesianNetwork`` owns every ``Variable`` for the lifetime of a loaded network.
Parent and child relations are stored as variable names and resolved through the
registry, so variables never own each other. The registry keeps insertion order,
which is also the tie-break order used by the topological sequencer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import product
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .cpt import DEFAULT_ROW_SUM_TOLERANCE, ConditionalProbabilityTable, pack_key
from .errors import ModelValidationError, UnknownVariableError


@dataclass
class Variable:
    name: str
    domain: List[str] = field(default_factory=list)
    parents: List[str] = field(default_factory=list)
    children: List[str] = field(default_factory=list)
    cpt: Optional[ConditionalProbabilityTable] = field(default=None, repr=False, compare=False)


class BayesianNetwork:
    """Registry of variables plus the directed edges between them.

    Args:
        strict: passed to every CPT created through ``ensure_cpt``.
        row_sum_tolerance: passed to every CPT created through ``ensure_cpt``.
    """

    def __init__(self, strict: bool = False, row_sum_tolerance: float = DEFAULT_ROW_SUM_TOLERANCE):
        self.variables: Dict[str, Variable] = {}
        self.strict = strict
        self.row_sum_tolerance = row_sum_tolerance

    def __repr__(self) -> str:
        return f"BayesianNetwork({len(self.variables)} variables, {self.number_of_edges()} edges)"

    def __contains__(self, name: object) -> bool:
        return name in self.variables

    def __len__(self) -> int:
        return len(self.variables)

    def __iter__(self) -> Iterator[Variable]:
        return iter(self.variables.values())

    # ------------------------------
    # Registry
    # ------------------------------

    def get_or_create(self, name: str) -> Variable:
        var = self.variables.get(name)
        if var is None:
            var = Variable(name)
            self.variables[name] = var
        return var

    def get(self, name: str) -> Optional[Variable]:
        return self.variables.get(name)

    def __getitem__(self, name: str) -> Variable:
        try:
            return self.variables[name]
        except KeyError:
            raise UnknownVariableError(name) from None

    def nodes(self) -> List[str]:
        return list(self.variables)

    # ------------------------------
    # Structure
    # ------------------------------

    def add_edge(self, parent: str, child: str) -> None:
        """Register ``parent -> child`` in both directions. No cycle check here."""
        u = self.get_or_create(parent)
        v = self.get_or_create(child)
        if u.name in v.parents:
            return
        v.parents.append(u.name)
        u.children.append(v.name)

    def add_edges_from(self, edges: Sequence[Tuple[str, str]]) -> None:
        for parent, child in edges:
            self.add_edge(parent, child)

    def edges(self) -> List[Tuple[str, str]]:
        return [(p, var.name) for var in self.variables.values() for p in var.parents]

    def number_of_edges(self) -> int:
        return sum(len(var.parents) for var in self.variables.values())

    def parents_of(self, name: str) -> List[Variable]:
        return [self.variables[p] for p in self[name].parents]

    def children_of(self, name: str) -> List[Variable]:
        return [self.variables[c] for c in self[name].children]

    # ------------------------------
    # Domains and CPTs
    # ------------------------------

    def set_domain(self, name: str, values: Sequence[str]) -> Variable:
        var = self.get_or_create(name)
        var.domain = [str(v) for v in values]
        return var

    def ensure_cpt(self, name: str) -> ConditionalProbabilityTable:
        """Return the CPT of ``name``, creating an empty one bound to it if needed."""
        var = self.get_or_create(name)
        if var.cpt is None:
            var.cpt = ConditionalProbabilityTable(strict=self.strict, row_sum_tolerance=self.row_sum_tolerance)
            var.cpt.set_target(var, [])
        return var.cpt

    def set_cpt_structure(self, name: str, parents: Sequence[str]) -> ConditionalProbabilityTable:
        """Bind the CPT of ``name`` to an ordered parent list (names are get-or-created)."""
        cpt = self.ensure_cpt(name)
        cpt.set_target(self.variables[name], [self.get_or_create(p) for p in parents])
        return cpt

    def add_cpt_row(self, name: str, parent_assignment, probabilities: Sequence[float]) -> None:
        """Add a row over the current domain of ``name``."""
        var = self[name]
        self.ensure_cpt(name).add_row(parent_assignment, var.domain, probabilities)

    def cpt(self, name: str) -> Optional[ConditionalProbabilityTable]:
        return self[name].cpt

    def check_model(self) -> bool:
        """Validate that every variable has a complete CPT consistent with the structure.

        Checks, for each variable: a CPT exists, its parent set equals the structural
        parent set, and every combination of parent values has an entry for every
        value of the variable. Row sums are not re-checked here.

        Raises:
            ModelValidationError: on the first problem found.
        """
        for var in self.variables.values():
            if not var.domain:
                raise ModelValidationError(f"Variable {var.name} has an empty domain")
            if var.cpt is None:
                raise ModelValidationError(f"Variable {var.name} has no CPT")
            cpt_parents = set(var.cpt.parent_names)
            if cpt_parents != set(var.parents):
                raise ModelValidationError(
                    f"CPT parents {sorted(cpt_parents)} of {var.name} do not match "
                    f"structural parents {sorted(var.parents)}"
                )
            domains = [[(p, v) for v in self.variables[p].domain] for p in var.cpt.parent_names]
            for combo in product(*domains):
                for value in var.domain:
                    key = pack_key(combo + ((var.name, value),))
                    if key not in var.cpt.table:
                        raise ModelValidationError(f"CPT of {var.name} has no entry for {key}")
        return True


__all__ = ["Variable", "BayesianNetwork"]
