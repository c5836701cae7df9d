"""
Conversion between ``BayesianNetwork`` and pgmpy's ``DiscreteBayesianNetwork``.

pgmpy is used as an independent reference: ``pgmpy_posterior`` answers the same
query with pgmpy's variable elimination so results of the enumeration engine can be
cross-checked.
"""

from __future__ import annotations

from itertools import product
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np
from pgmpy.factors.discrete import TabularCPD
from pgmpy.inference import VariableElimination
from pgmpy.models import DiscreteBayesianNetwork

from .cpt import DEFAULT_ROW_SUM_TOLERANCE
from .network import BayesianNetwork


def to_pgmpy(network: BayesianNetwork) -> DiscreteBayesianNetwork:
    """Build a pgmpy model with one TabularCPD per variable.

    The network must pass ``check_model()``. Columns follow pgmpy's convention: the
    cartesian product of the evidence states with the first parent changing slowest.
    """
    network.check_model()

    model = DiscreteBayesianNetwork(network.edges())
    model.add_nodes_from(network.nodes())

    cpds: List[TabularCPD] = []
    for var in network:
        cpt = var.cpt
        parents = cpt.parent_names
        rows = cpt.enumerate_rows()
        values = np.column_stack([r.probabilities for r in rows])
        state_names: Dict[str, List[str]] = {var.name: list(var.domain)}
        for p in parents:
            state_names[p] = list(network.variables[p].domain)
        if parents:
            cpds.append(TabularCPD(
                variable=var.name,
                variable_card=len(var.domain),
                values=values,
                evidence=parents,
                evidence_card=[len(network.variables[p].domain) for p in parents],
                state_names=state_names,
            ))
        else:
            cpds.append(TabularCPD(
                variable=var.name,
                variable_card=len(var.domain),
                values=values.reshape(-1, 1),
                state_names=state_names,
            ))

    model.add_cpds(*cpds)
    model.check_model()
    return model


def from_pgmpy(
    model: DiscreteBayesianNetwork,
    strict: bool = False,
    row_sum_tolerance: float = DEFAULT_ROW_SUM_TOLERANCE,
) -> BayesianNetwork:
    """Copy structure, state names and CPT values of a pgmpy model.

    State names are converted to strings.
    """
    network = BayesianNetwork(strict=strict, row_sum_tolerance=row_sum_tolerance)
    for node in model.nodes():
        network.get_or_create(str(node))
    for u, v in model.edges():
        network.add_edge(str(u), str(v))

    for cpd in model.get_cpds():
        var = str(cpd.variable)
        parents = [str(p) for p in cpd.variables[1:]]
        state_names = {str(k): [str(s) for s in v] for k, v in cpd.state_names.items()}
        network.set_domain(var, state_names[var])
        network.set_cpt_structure(var, parents)

        values = np.asarray(cpd.get_values(), dtype=float)
        combos = list(product(*[state_names[p] for p in parents]))
        for col, combo in enumerate(combos):
            network.add_cpt_row(var, list(zip(parents, combo)), values[:, col])
    return network


def pgmpy_posterior(
    model: DiscreteBayesianNetwork,
    variable: str,
    evidence: Optional[Mapping[str, str]] = None,
) -> List[Tuple[str, float]]:
    """Posterior of ``variable`` computed by pgmpy's VariableElimination."""
    inference = VariableElimination(model)
    result = inference.query(variables=[variable], evidence=dict(evidence) if evidence else None, show_progress=False)
    states = result.state_names[variable]
    return [(str(s), float(result.values[i])) for i, s in enumerate(states)]


__all__ = ["to_pgmpy", "from_pgmpy", "pgmpy_posterior"]
