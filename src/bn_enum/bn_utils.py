from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple, Union

import matplotlib.pyplot as plt
import networkx as nx

from .network import BayesianNetwork
from .topology import topological_layers


def to_networkx(network: BayesianNetwork) -> nx.DiGraph:
    """NetworkX DiGraph of the network; node attributes carry each domain."""
    G = nx.DiGraph()
    for var in network:
        G.add_node(var.name, domain=list(var.domain))
    G.add_edges_from(network.edges())
    return G


def draw_bayesian_network(network: BayesianNetwork,
                          path: Optional[Union[str, Path]] = None,
                          node_size: int = 3000,
                          node_color: str = 'lightblue',
                          font_size: int = 12,
                          figsize: Tuple[int, int] = (10, 6),
                          show_treewidth: bool = True) -> Dict[str, Any]:
    """
    Draw the network top-down, one row per topological layer.

    Args:
        network: acyclic BayesianNetwork
        path: image file to save to; the figure is shown interactively when None
        node_size, node_color, font_size, figsize: passed to matplotlib / nx.draw
        show_treewidth: add the min-degree treewidth estimate of the skeleton to the title

    Returns:
        Dict with ``positions``, ``layers``, ``layer_nodes`` and, when computed, ``treewidth``.
    """
    G = to_networkx(network)
    layers = topological_layers(network)

    layer_nodes: Dict[int, List[str]] = {}
    for name, depth in layers.items():
        layer_nodes.setdefault(depth, []).append(name)

    # Row y = -depth, nodes of a row centred around x = 0
    pos = {}
    for depth, names in layer_nodes.items():
        offset = len(names) / 2
        for i, name in enumerate(names):
            pos[name] = (i - offset, -depth)

    title = f"{len(network)} variables, {network.number_of_edges()} edges"
    result: Dict[str, Any] = {
        "positions": pos,
        "layers": layers,
        "layer_nodes": layer_nodes,
    }

    if show_treewidth and G.number_of_nodes() > 0:
        from networkx.algorithms.approximation import treewidth
        width, decomposition = treewidth.treewidth_min_degree(G.to_undirected())
        result["treewidth"] = {"width": width, "decomposition": decomposition}
        title += f" (treewidth ≈ {width})"

    fig = plt.figure(figsize=figsize)
    nx.draw(G, pos, with_labels=True, node_size=node_size, node_color=node_color,
            font_size=font_size, font_weight='bold', arrows=True)
    plt.title(title)
    if path is not None:
        fig.savefig(path)
        plt.close(fig)
        result["path"] = str(path)
    else:
        plt.show()

    return result


def markov_blanket(network: BayesianNetwork, name: str) -> Set[str]:
    """Parents, children and the children's other parents of ``name``."""
    var = network[name]
    blanket = set(var.parents) | set(var.children)
    for child in var.children:
        blanket.update(network.variables[child].parents)
    blanket.discard(name)
    return blanket


def compute_average_markov_blanket_size(network: BayesianNetwork) -> float:
    sizes = [len(markov_blanket(network, var.name)) for var in network]
    return sum(sizes) / len(sizes) if sizes else 0.0


__all__ = ["to_networkx", "draw_bayesian_network", "markov_blanket", "compute_average_markov_blanket_size"]
