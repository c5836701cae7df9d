"""
Error types raised while loading and querying discrete Bayesian networks.

All hard failures derive from ``BayesNetError`` (itself a ``ValueError``) so callers
can catch every domain error with a single ``except`` clause. Row-sum deviations are
a soft diagnostic and surface as ``NonNormalizedRowWarning`` unless strict mode is on.
"""

from __future__ import annotations

from typing import Iterable, Optional


class BayesNetError(ValueError):
    """Base class for every error raised by this package."""


class UnknownVariableError(BayesNetError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown variable: {name}")


class IncompleteEvidenceError(BayesNetError):
    """A CPT lookup needed a parent value that is not in the evidence."""

    def __init__(self, target: str, missing_parent: str):
        self.target = target
        self.missing_parent = missing_parent
        super().__init__(f"Incomplete evidence for {target}: missing {missing_parent}")


class MissingCPTRowError(BayesNetError):
    """No probability is stored for a parent assignment plus target value."""

    def __init__(self, target: str, key: Optional[str] = None):
        self.target = target
        self.key = key
        detail = f" ({key})" if key else ""
        super().__init__(f"CPT row not found for {target}{detail}")


class ShapeMismatchError(BayesNetError):
    def __init__(self, target: str, num_probabilities: int, num_values: int):
        self.target = target
        super().__init__(
            f"Number of probabilities ({num_probabilities}) does not match "
            f"domain size ({num_values}) for variable {target}"
        )


class NonNormalizedRowError(BayesNetError):
    """Raised instead of a warning when a CPT is built in strict mode."""

    def __init__(self, target: str, total: float):
        self.target = target
        self.total = total
        super().__init__(f"CPT row for {target} does not sum to 1: {total!r}")


class ZeroNormalizationError(BayesNetError):
    """The normalization constant is 0, or not finite, for a query."""

    def __init__(self, variable: str, z: float = 0.0):
        self.variable = variable
        self.z = z
        if z == 0:
            detail = "evidence is inconsistent with the model"
        else:
            detail = "the model holds non-finite probabilities"
        super().__init__(f"Normalization constant is {z!r} for {variable}: {detail}")


class UnknownValueError(BayesNetError):
    def __init__(self, variable: str, value: str):
        self.variable = variable
        self.value = value
        super().__init__(f"{value!r} is not in the domain of {variable}")


class CyclicNetworkError(BayesNetError):
    def __init__(self, unordered: Iterable[str]):
        self.unordered = sorted(unordered)
        super().__init__(
            "Cyclic network: could not order " + ", ".join(self.unordered)
        )


class NetworkParseError(BayesNetError):
    """Malformed structure or CPT file. ``line`` is 1-based when known."""

    def __init__(self, message: str, line: Optional[int] = None, text: Optional[str] = None):
        self.line = line
        self.text = text
        if line is not None:
            message = f"{message} at line {line}"
            if text:
                message = f"{message}: {text}"
        super().__init__(message)


class ModelValidationError(BayesNetError):
    pass


class NonNormalizedRowWarning(UserWarning):
    pass


__all__ = [
    "BayesNetError",
    "UnknownVariableError",
    "IncompleteEvidenceError",
    "MissingCPTRowError",
    "ShapeMismatchError",
    "NonNormalizedRowError",
    "ZeroNormalizationError",
    "UnknownValueError",
    "CyclicNetworkError",
    "NetworkParseError",
    "ModelValidationError",
    "NonNormalizedRowWarning",
]
