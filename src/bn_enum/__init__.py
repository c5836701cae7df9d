"""
Exact inference by enumeration over discrete Bayesian networks.

Typical use:
    >>> from bn_enum import InferenceEngine, load_network
    >>> network = load_network("structure.txt", "cpts.txt")
    >>> InferenceEngine(network).query("Rain", {"WetGrass": "true"})
    [('true', 0.6923...), ('false', 0.3076...)]
"""

from .cpt import ConditionalProbabilityTable, CPTRow, pack_key
from .errors import (
    BayesNetError,
    CyclicNetworkError,
    IncompleteEvidenceError,
    MissingCPTRowError,
    ModelValidationError,
    NetworkParseError,
    NonNormalizedRowError,
    NonNormalizedRowWarning,
    ShapeMismatchError,
    UnknownValueError,
    UnknownVariableError,
    ZeroNormalizationError,
)
from .inference_discrete import InferenceEngine, format_probability_query
from .network import BayesianNetwork, Variable
from .parsers import load_cpts, load_network, load_structure, parse_evidence
from .topology import topological_order

__version__ = "0.1.0"

__all__ = [
    "BayesianNetwork",
    "Variable",
    "ConditionalProbabilityTable",
    "CPTRow",
    "pack_key",
    "InferenceEngine",
    "format_probability_query",
    "topological_order",
    "load_network",
    "load_structure",
    "load_cpts",
    "parse_evidence",
    "BayesNetError",
    "UnknownVariableError",
    "UnknownValueError",
    "IncompleteEvidenceError",
    "MissingCPTRowError",
    "ShapeMismatchError",
    "NonNormalizedRowError",
    "NonNormalizedRowWarning",
    "ZeroNormalizationError",
    "CyclicNetworkError",
    "NetworkParseError",
    "ModelValidationError",
]
