"""
Conditional Probability Tables keyed by canonical assignment strings.

A table stores ``P(target = value | parents)`` for one target variable. Every entry
is addressed by a canonical key built from the parent assignment plus the target
assignment: the ``(name, value)`` pairs are sorted by variable name and joined as
``name=value`` items separated by commas, e.g. ``Rain=true,WetGrass=false``. Because
the key is canonical, the order in which parents are declared only affects how rows
are enumerated for display, never how probabilities are looked up.

Example:
    >>> rain = Variable("Rain", ["true", "false"])
    >>> wet = Variable("WetGrass", ["true", "false"])
    >>> cpt = ConditionalProbabilityTable()
    >>> cpt.set_target(wet, [rain])
    >>> cpt.add_row({"Rain": "true"}, wet.domain, [0.9, 0.1])
    >>> cpt.conditional({"Rain": "true"}, "true")
    0.9
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from itertools import product
from typing import TYPE_CHECKING, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import (
    IncompleteEvidenceError,
    MissingCPTRowError,
    NonNormalizedRowError,
    NonNormalizedRowWarning,
    ShapeMismatchError,
)

if TYPE_CHECKING:  # pragma: no cover
    from .network import Variable

Assignment = Tuple[Tuple[str, str], ...]
AssignmentLike = Union[Mapping[str, str], Sequence[Tuple[str, str]]]

DEFAULT_ROW_SUM_TOLERANCE = 1e-6


def pack_key(assignments: AssignmentLike) -> str:
    """Build the canonical lookup key for a set of ``(variable, value)`` pairs."""
    pairs = assignments.items() if isinstance(assignments, Mapping) else assignments
    return ",".join(f"{name}={value}" for name, value in sorted(pairs))


def _as_pairs(assignment: AssignmentLike) -> Assignment:
    if isinstance(assignment, Mapping):
        return tuple((str(k), str(v)) for k, v in assignment.items())
    return tuple((str(k), str(v)) for k, v in assignment)


@dataclass(frozen=True)
class CPTRow:
    # Parent assignment in parent-declaration order; empty for a prior
    assignment: Assignment
    # One probability per target domain value, nan where nothing is stored
    probabilities: np.ndarray


class ConditionalProbabilityTable:
    """Table of ``P(target | parents)`` entries with exact-match lookup.

    Args:
        strict: raise ``NonNormalizedRowError`` when a row does not sum to 1 instead
            of emitting a ``NonNormalizedRowWarning``.
        row_sum_tolerance: absolute tolerance used for the row-sum check.
    """

    def __init__(self, strict: bool = False, row_sum_tolerance: float = DEFAULT_ROW_SUM_TOLERANCE):
        self.target: Optional["Variable"] = None
        self.parents: List["Variable"] = []
        self.strict = strict
        self.row_sum_tolerance = row_sum_tolerance
        self.table: Dict[str, float] = {}
        # key -> (parent assignment as given, target value); kept for re-serialization
        self._rows: Dict[str, Tuple[Assignment, str]] = {}

    def __repr__(self) -> str:
        name = self.target.name if self.target is not None else None
        parents = [p.name for p in self.parents]
        return f"ConditionalProbabilityTable(target={name!r}, parents={parents!r}, entries={len(self.table)})"

    def __len__(self) -> int:
        return len(self.table)

    @property
    def parent_names(self) -> List[str]:
        return [p.name for p in self.parents]

    def set_target(self, variable: "Variable", ordered_parents: Sequence["Variable"]) -> None:
        """Bind (or rebind) the target variable and the parent order. Rows are kept."""
        self.target = variable
        self.parents = list(ordered_parents)

    def _require_target(self) -> "Variable":
        if self.target is None:
            raise ValueError("CPT has no target variable; call set_target() first")
        return self.target

    def add_row(
        self,
        parent_assignment: AssignmentLike,
        domain_values: Sequence[str],
        probabilities: Sequence[float],
    ) -> None:
        """Store one probability per target value for a single parent assignment.

        Existing entries with the same key are overwritten. A row whose probabilities
        do not sum to 1 within ``row_sum_tolerance`` is reported but still stored,
        unless the table is strict. Non-finite probabilities are always rejected.
        """
        target = self._require_target()
        if len(probabilities) != len(domain_values):
            raise ShapeMismatchError(target.name, len(probabilities), len(domain_values))

        probs = np.asarray(probabilities, dtype=float)
        total = float(probs.sum())
        if not np.isfinite(probs).all():
            raise NonNormalizedRowError(target.name, total)
        if abs(total - 1.0) > self.row_sum_tolerance:
            if self.strict:
                raise NonNormalizedRowError(target.name, total)
            warnings.warn(
                f"CPT row for {target.name} given {pack_key(parent_assignment) or '<prior>'} "
                f"does not sum to 1: {total!r}",
                NonNormalizedRowWarning,
                stacklevel=2,
            )

        pairs = _as_pairs(parent_assignment)
        for value, prob in zip(domain_values, probs):
            key = pack_key(pairs + ((target.name, str(value)),))
            self.table[key] = float(prob)
            self._rows[key] = (pairs, str(value))

    def conditional(self, evidence: Mapping[str, str], value: str) -> float:
        """Return ``P(target = value | parent values read from evidence)``."""
        target = self._require_target()
        pairs: List[Tuple[str, str]] = []
        for parent in self.parents:
            if parent.name not in evidence:
                raise IncompleteEvidenceError(target.name, parent.name)
            pairs.append((parent.name, evidence[parent.name]))
        pairs.append((target.name, value))

        key = pack_key(pairs)
        try:
            return self.table[key]
        except KeyError:
            raise MissingCPTRowError(target.name, key) from None

    def enumerate_rows(self) -> List[CPTRow]:
        """Cartesian product of the parent domains, first parent changing slowest.

        Combinations without a stored probability yield ``nan`` so missing rows stay
        visible when printed.
        """
        target = self._require_target()
        domains = [[(p.name, v) for v in p.domain] for p in self.parents]
        rows: List[CPTRow] = []
        for combo in product(*domains):
            values = []
            for value in target.domain:
                key = pack_key(combo + ((target.name, value),))
                values.append(self.table.get(key, np.nan))
            rows.append(CPTRow(assignment=tuple(combo), probabilities=np.array(values, dtype=float)))
        return rows

    def entries(self) -> Iterator[Tuple[Assignment, str, float]]:
        """Yield every stored ``(parent_assignment, value, probability)`` in insertion order."""
        for key, (pairs, value) in self._rows.items():
            if key in self.table:
                yield pairs, value, self.table[key]


__all__ = ["ConditionalProbabilityTable", "CPTRow", "pack_key", "DEFAULT_ROW_SUM_TOLERANCE"]
