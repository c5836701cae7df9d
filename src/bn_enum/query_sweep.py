"""
Run a list of queries through the enumeration engine and tabulate the results.

Each query contributes one row per value of its target variable. Queries that fail
(zero-probability evidence, incomplete CPTs, ...) contribute a single row whose
``error`` column holds the message, so one bad query never hides the others.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .errors import BayesNetError
from .inference_discrete import Distribution, InferenceEngine, format_probability_query
from .query_generation import QuerySpec

COLUMNS = ["query_index", "query", "variable", "evidence", "value", "probability", "error"]


def _rows_for(index: int, variable: str, evidence: Mapping[str, str], dist: Optional[Distribution], error: Optional[str]) -> List[Dict[str, Any]]:
    base = {
        "query_index": index,
        "query": format_probability_query(variable, evidence=evidence),
        "variable": variable,
        "evidence": dict(evidence),
    }
    if dist is None:
        return [{**base, "value": None, "probability": float("nan"), "error": error}]
    return [{**base, "value": value, "probability": p, "error": None} for value, p in dist]


def distributions_to_frame(results: Iterable[Tuple[str, Mapping[str, str], Distribution]]) -> pd.DataFrame:
    """DataFrame from ``(variable, evidence, distribution)`` triples."""
    rows: List[Dict[str, Any]] = []
    for i, (variable, evidence, dist) in enumerate(results):
        rows.extend(_rows_for(i, variable, evidence, dist, None))
    return pd.DataFrame(rows, columns=COLUMNS)


def run_query_sweep(
    engine: InferenceEngine,
    queries: Sequence[QuerySpec],
    verbose: bool = False,
) -> pd.DataFrame:
    """Answer every query with ``engine``; errors are recorded, not raised."""
    rows: List[Dict[str, Any]] = []
    failures = 0
    for i, q in enumerate(queries):
        try:
            dist = engine.query(q.target, q.evidence)
            rows.extend(_rows_for(i, q.target, q.evidence, dist, None))
        except BayesNetError as e:
            failures += 1
            rows.extend(_rows_for(i, q.target, q.evidence, None, str(e)))
            if verbose:
                print(f"❌ Query {i} failed: {e}")

    df = pd.DataFrame(rows, columns=COLUMNS)
    if verbose:
        print(f"✓ Answered {len(queries) - failures}/{len(queries)} queries")
    return df


__all__ = ["run_query_sweep", "distributions_to_frame"]
