from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import networkx as nx
import numpy as np

from .bn_utils import to_networkx
from .network import BayesianNetwork


@dataclass
class QuerySpec:
    # Query variable
    target: str
    # Evidence assignments as mapping node -> state label
    evidence: Dict[str, str]
    # Metadata about difficulty dimensions
    meta: Dict[str, Any] = field(default_factory=dict)


def _shortest_undirected_distance(G: nx.DiGraph, a: str, b: str) -> int:
    UG = G.to_undirected()
    try:
        return nx.shortest_path_length(UG, a, b)
    except nx.NetworkXNoPath:
        return 10**9


def generate_queries(
    network: BayesianNetwork,
    *,
    num_queries: int = 20,
    evidence_counts: Sequence[int] = (0, 1, 2, 3),
    seed: Optional[int] = None,
) -> List[QuerySpec]:
    """Generate random query/evidence pairs over ``network``.

    Evidence states are drawn uniformly from each evidence variable's domain, so
    some queries may have zero-probability evidence when CPTs contain zeros.
    Metadata includes the number of evidence nodes, the number of hidden variables
    the engine has to sum over and the minimum undirected distance from the target
    to any evidence node.
    """
    rng = np.random.default_rng(seed)
    G = to_networkx(network)
    nodes = network.nodes()
    if not nodes:
        return []

    results: List[QuerySpec] = []
    for _ in range(num_queries):
        target = str(rng.choice(nodes))
        ek = min(int(rng.choice(evidence_counts)), len(nodes) - 1)
        pool = [n for n in nodes if n != target]
        e_nodes = [str(n) for n in rng.choice(pool, size=ek, replace=False)] if ek > 0 else []
        evidence = {n: str(rng.choice(network.variables[n].domain)) for n in e_nodes}

        if e_nodes:
            min_dist = min(_shortest_undirected_distance(G, target, e) for e in e_nodes)
        else:
            min_dist = 0

        meta = {
            "num_evidence_nodes": len(e_nodes),
            "num_hidden_vars": len(nodes) - len(e_nodes) - 1,
            "min_target_evidence_distance": int(min_dist),
        }
        results.append(QuerySpec(target=target, evidence=evidence, meta=meta))

    return results


__all__ = ["QuerySpec", "generate_queries"]
