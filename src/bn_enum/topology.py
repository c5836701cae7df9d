"""
Topological ordering of a Bayesian network (Kahn's algorithm).

The order places every parent strictly before its children, which is what lets the
enumeration engine evaluate ``P(X | parents(X))`` with all parents already fixed.
Variables that become available at the same time keep registry insertion order.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List

from .errors import CyclicNetworkError
from .network import BayesianNetwork


def topological_order(network: BayesianNetwork) -> List[str]:
    """Return variable names in an order where parents precede children.

    Raises:
        CyclicNetworkError: if some variables could not be ordered.
    """
    indeg: Dict[str, int] = {}
    queue: deque = deque()
    for var in network:
        indeg[var.name] = len(var.parents)
        if indeg[var.name] == 0:
            queue.append(var.name)

    order: List[str] = []
    while queue:
        name = queue.popleft()
        order.append(name)
        for child in network.variables[name].children:
            indeg[child] -= 1
            if indeg[child] == 0:
                queue.append(child)

    if len(order) != len(network):
        placed = set(order)
        raise CyclicNetworkError(n for n in network.variables if n not in placed)
    return order


def topological_layers(network: BayesianNetwork) -> Dict[str, int]:
    """Depth of each variable: roots are layer 0, children sit below their deepest parent."""
    layers: Dict[str, int] = {}
    for name in topological_order(network):
        parents = network.variables[name].parents
        layers[name] = max(layers[p] for p in parents) + 1 if parents else 0
    return layers


__all__ = ["topological_order", "topological_layers"]
