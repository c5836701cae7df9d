"""
Exact inference on discrete Bayesian Networks by enumeration.

This module implements the enumeration-ask algorithm: the posterior of a query
variable is obtained by computing the unnormalized joint ``P(X = x, evidence)`` for
every value ``x`` (summing the product of CPT factors over all assignments of the
hidden variables) and normalizing the results.

The work is exponential in the number of hidden variables; the engine targets
correctness, not speed.
"""

from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional, TextIO, Tuple

from .cpt import ConditionalProbabilityTable
from .errors import MissingCPTRowError, UnknownValueError, UnknownVariableError, ZeroNormalizationError
from .network import BayesianNetwork, Variable
from .topology import topological_order

Distribution = List[Tuple[str, float]]


def format_probability_query(variable, value=None, evidence=None):
    """Generate formatted query string like P(dysp=no | smoke=yes, asia=no)"""
    head = variable if value is None else f"{variable}={value}"
    if evidence:
        evidence_str = ', '.join([f"{k}={v}" for k, v in evidence.items()])
        return f"P({head} | {evidence_str})"
    return f"P({head})"


def _emit(trace: Optional[TextIO], text: str) -> None:
    if trace is not None:
        print(text, file=trace)


class InferenceEngine:
    """Enumeration-ask over a frozen ``BayesianNetwork``.

    The topological order is computed once, here; build a new engine after
    changing the network structure. The network must not be mutated while a query
    is running. Concurrent queries are safe because each one works on its own copy
    of the evidence.

    Raises:
        CyclicNetworkError: if the network cannot be ordered.
    """

    def __init__(self, network: BayesianNetwork):
        self.network = network
        self.order: List[str] = topological_order(network)

    def _cpt(self, var: Variable) -> ConditionalProbabilityTable:
        if var.cpt is None:
            raise MissingCPTRowError(var.name, "no CPT defined")
        return var.cpt

    def enumerate_all(
        self,
        index: int,
        evidence: Dict[str, str],
        trace: Optional[TextIO] = None,
        depth: int = 0,
    ) -> float:
        """Sum of the product of CPT factors for variables ``order[index:]``.

        Variables present in ``evidence`` contribute a single factor. Free variables
        are pinned to each value of their domain in turn, and the pin is removed
        before the next value is tried and before returning, so ``evidence`` holds
        the same entries on exit as on entry.
        """
        if index == len(self.order):
            return 1.0

        var = self.network.variables[self.order[index]]
        cpt = self._cpt(var)
        indent = " " * (depth * 2)

        if var.name in evidence:
            value = evidence[var.name]
            p = cpt.conditional(evidence, value)
            _emit(trace, f"{indent}Using evidence: {var.name}={value} -> P={p:g}")
            return p * self.enumerate_all(index + 1, evidence, trace, depth + 1)

        total = 0.0
        _emit(trace, f"{indent}Enumerating {var.name} over {len(var.domain)} values")
        for value in var.domain:
            evidence[var.name] = value
            try:
                p = cpt.conditional(evidence, value)
                _emit(trace, f"{indent}  Try {var.name}={value} -> P={p:g}")
                sub = self.enumerate_all(index + 1, evidence, trace, depth + 2)
            finally:
                del evidence[var.name]
            contrib = p * sub
            _emit(trace, f"{indent}  Recursive result: {sub:g} contrib={contrib:g}")
            total += contrib
        _emit(trace, f"{indent}Sum for {var.name} = {total:g}")
        return total

    def query(
        self,
        variable: str,
        evidence: Optional[Mapping[str, str]] = None,
        trace: Optional[TextIO] = None,
    ) -> Distribution:
        """Posterior distribution of ``variable`` given ``evidence``.

        Args:
            variable: name of the query variable.
            evidence: observed values, ``{name: value}``. Not modified.
            trace: optional text stream receiving a step-by-step narration.

        Returns:
            ``[(value, probability), ...]`` in the variable's domain order.

        Raises:
            UnknownVariableError: the query or an evidence variable is not in the network.
            ZeroNormalizationError: every value has zero joint probability with the evidence,
                or the joint probabilities are not finite.
            UnknownValueError: from ``probability``, when ``value`` is not in the domain.
        """
        query_var = self.network.get(variable)
        if query_var is None:
            raise UnknownVariableError(variable)
        evidence = dict(evidence or {})
        for name in evidence:
            if name not in self.network:
                raise UnknownVariableError(name)

        unnormalized: Distribution = []
        for value in query_var.domain:
            extended = {str(k): str(v) for k, v in evidence.items()}
            extended[variable] = value
            _emit(trace, f"--- Computing P({variable}={value}, evidence) ---")
            joint = self.enumerate_all(0, extended, trace, 0)
            _emit(trace, f"  => P_unnorm({variable}={value}) = {joint:g}\n")
            unnormalized.append((value, joint))

        z = sum(p for _, p in unnormalized)
        if z == 0 or not math.isfinite(z):
            raise ZeroNormalizationError(variable, z)
        dist = [(value, p / z) for value, p in unnormalized]

        if trace is not None:
            _emit(trace, f"Normalization Z={z:g}")
            _emit(trace, "Normalized distribution:")
            for value, p in dist:
                _emit(trace, f"{value}: {p:g}")
        return dist

    def probability(self, variable: str, value: str, evidence: Optional[Mapping[str, str]] = None) -> float:
        """Run inference and return the posterior probability of a single value."""
        for v, p in self.query(variable, evidence):
            if v == value:
                return p
        raise UnknownValueError(variable, value)


__all__ = ["InferenceEngine", "Distribution", "format_probability_query"]
