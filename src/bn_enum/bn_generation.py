"""
Random discrete Bayesian networks for exercising the enumeration engine.

A random DAG is drawn with NetworkX, every variable gets a domain ``s0, s1, ...``
and each CPT row (one per parent combination) is sampled as:

- a Dirichlet(alpha) draw over the variable's domain (small alpha gives peaked rows,
  large alpha gives flat ones), or
- a one-hot row, for the fraction of rows selected as deterministic.

Example (API):
    >>> dag = generate_random_dag(6, edge_probability=0.4, seed=1)
    >>> bn, meta = generate_network_from_dag(dag, "range:2-3", dirichlet_alpha=0.5, seed=123)

CLI:
    bn-enum-generate --n-nodes 6 --arity fixed:2 --out-dir nets/
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from itertools import product
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import networkx as nx
import numpy as np

from .network import BayesianNetwork
from .printing import write_network


@dataclass
class ArityStrategy:
    """How many values each generated variable gets."""

    type: str  # "fixed" | "range"
    fixed: Optional[int] = None
    min: Optional[int] = None
    max: Optional[int] = None

    @classmethod
    def from_string(cls, text: str) -> "ArityStrategy":
        """``fixed:<k>`` or ``range:<min>-<max>``."""
        kind, _, arg = text.partition(":")
        if kind == "fixed" and arg:
            return cls(type="fixed", fixed=int(arg))
        if kind == "range" and "-" in arg:
            lo, hi = arg.split("-", 1)
            return cls(type="range", min=int(lo), max=int(hi))
        raise ValueError(f"Arity must be 'fixed:<k>' or 'range:<min>-<max>', got {text!r}")

    def domain_sizes(self, names: Sequence[str], rng: np.random.Generator) -> Dict[str, int]:
        if self.type == "fixed":
            if self.fixed is None or self.fixed < 2:
                raise ValueError("fixed arity must be >= 2")
            return {n: self.fixed for n in names}
        if self.type == "range":
            if self.min is None or self.max is None or not 2 <= self.min <= self.max:
                raise ValueError("range arity requires 2 <= min <= max")
            return {n: int(rng.integers(self.min, self.max + 1)) for n in names}
        raise ValueError(f"Unsupported arity strategy {self.type!r}; use 'fixed' or 'range'")


ArityLike = Union[ArityStrategy, Dict[str, Any], str]


def _as_strategy(arity: ArityLike) -> ArityStrategy:
    if isinstance(arity, ArityStrategy):
        return arity
    if isinstance(arity, str):
        return ArityStrategy.from_string(arity)
    return ArityStrategy(**arity)


def generate_random_dag(
    n_nodes: int,
    edge_probability: float = 0.3,
    max_parents: Optional[int] = None,
    seed: Optional[int] = None,
) -> nx.DiGraph:
    """Random DAG over nodes ``V0..V{n-1}``.

    An undirected G(n, p) graph is oriented along a random permutation of the
    nodes. Edges that would give a node more than ``max_parents`` parents are dropped.
    """
    if n_nodes < 1:
        raise ValueError("n_nodes must be >= 1")
    rng = np.random.default_rng(seed)
    undirected = nx.gnp_random_graph(n_nodes, edge_probability, seed=int(rng.integers(0, 2**31 - 1)))
    rank = {node: r for r, node in enumerate(rng.permutation(n_nodes).tolist())}

    dag = nx.DiGraph()
    dag.add_nodes_from(f"V{i}" for i in range(n_nodes))
    for a, b in undirected.edges():
        u, v = (a, b) if rank[a] < rank[b] else (b, a)
        if max_parents is not None and dag.in_degree(f"V{v}") >= max_parents:
            continue
        dag.add_edge(f"V{u}", f"V{v}")
    return dag


def _sample_rows(
    n_rows: int,
    n_values: int,
    dirichlet_alpha: float,
    determinism_fraction: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Matrix of shape ``(n_rows, n_values)``; every row is a distribution."""
    rows = rng.dirichlet([dirichlet_alpha] * n_values, size=n_rows)
    n_deterministic = int(round(determinism_fraction * n_rows))
    if n_deterministic > 0:
        for r in rng.choice(n_rows, size=n_deterministic, replace=False):
            rows[r] = 0.0
            rows[r, rng.integers(0, n_values)] = 1.0
    return rows


def generate_network_from_dag(
    dag: nx.DiGraph,
    arity_strategy: ArityLike,
    dirichlet_alpha: float = 1.0,
    determinism_fraction: float = 0.0,
    seed: Optional[int] = None,
) -> Tuple[BayesianNetwork, Dict[str, Any]]:
    """Turn ``dag`` into a ``BayesianNetwork`` with sampled CPTs.

    Args:
        dag: acyclic NetworkX DiGraph; node labels become variable names
        arity_strategy: ``ArityStrategy``, its dict form or its string form
        dirichlet_alpha: Dirichlet concentration for each CPT row
        determinism_fraction: share of each CPT's rows that are one-hot
        seed: RNG seed

    Returns:
        (network, metadata) with the drawn domain sizes and the generation parameters.
    """
    if not nx.is_directed_acyclic_graph(dag):
        raise ValueError("Input graph must be a DAG")

    rng = np.random.default_rng(seed)
    names = [str(n) for n in dag.nodes()]
    sizes = _as_strategy(arity_strategy).domain_sizes(names, rng)

    network = BayesianNetwork()
    for name in names:
        network.set_domain(name, [f"s{i}" for i in range(sizes[name])])
    network.add_edges_from([(str(u), str(v)) for u, v in dag.edges()])

    for name in nx.topological_sort(dag):
        var = network[str(name)]
        parents = network.parents_of(var.name)
        network.set_cpt_structure(var.name, [p.name for p in parents])
        combos = list(product(*[[(p.name, s) for s in p.domain] for p in parents]))
        rows = _sample_rows(len(combos), len(var.domain), dirichlet_alpha, determinism_fraction, rng)
        for combo, probs in zip(combos, rows):
            network.add_cpt_row(var.name, combo, probs)

    metadata: Dict[str, Any] = {
        "domain_sizes": sizes,
        "dirichlet_alpha": dirichlet_alpha,
        "determinism_fraction": determinism_fraction,
        "seed": seed,
    }
    return network, metadata


def generate_random_network(
    n_nodes: int,
    edge_probability: float = 0.3,
    arity_strategy: Optional[ArityLike] = None,
    dirichlet_alpha: float = 1.0,
    determinism_fraction: float = 0.0,
    max_parents: Optional[int] = 3,
    seed: Optional[int] = None,
) -> BayesianNetwork:
    """Random DAG plus sampled CPTs in one call."""
    dag = generate_random_dag(n_nodes, edge_probability, max_parents=max_parents, seed=seed)
    network, _ = generate_network_from_dag(
        dag,
        arity_strategy or "range:2-3",
        dirichlet_alpha=dirichlet_alpha,
        determinism_fraction=determinism_fraction,
        seed=None if seed is None else seed + 1,
    )
    return network


def _arity_arg(text: str) -> ArityStrategy:
    try:
        return ArityStrategy.from_string(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Write a random discrete Bayesian network as structure + CPT files")
    parser.add_argument("--n-nodes", type=int, default=6, help="Number of variables")
    parser.add_argument("--edge-probability", type=float, default=0.4, help="Edge probability of the underlying G(n, p) graph")
    parser.add_argument("--max-parents", type=int, default=3, help="Maximum number of parents per variable")
    parser.add_argument("--arity", type=_arity_arg, default="range:2-3", help="Domain sizes: fixed:k or range:min-max")
    parser.add_argument("--alpha", type=float, default=1.0, help="Dirichlet alpha for CPT rows")
    parser.add_argument("--determinism", type=float, default=0.0, help="Share of one-hot CPT rows")
    parser.add_argument("--seed", type=int, default=42, help="Seed for reproducibility")
    parser.add_argument("--out-dir", type=Path, default=Path("."), help="Directory for structure.txt and cpts.txt")
    args = parser.parse_args(argv)

    network = generate_random_network(
        args.n_nodes,
        edge_probability=args.edge_probability,
        arity_strategy=args.arity,
        dirichlet_alpha=args.alpha,
        determinism_fraction=args.determinism,
        max_parents=args.max_parents,
        seed=args.seed,
    )

    args.out_dir.mkdir(parents=True, exist_ok=True)
    structure_path = args.out_dir / "structure.txt"
    cpt_path = args.out_dir / "cpts.txt"
    write_network(network, structure_path, cpt_path)
    print(f"✓ Generated {len(network)} variables, {network.number_of_edges()} edges")
    print(f"✓ Structure saved to: {structure_path}")
    print(f"✓ CPTs saved to: {cpt_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
