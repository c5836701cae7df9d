"""
Engine and CLI settings, optionally read from a YAML file.

Example ``bn_enum.yaml``::

    precision: 4
    strict: false
    row_sum_tolerance: 1.0e-6
    cpt_style: ascii
    verbose: true
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .cpt import DEFAULT_ROW_SUM_TOLERANCE
from .yaml_utils import load_yaml

CPT_STYLES = ("listing", "ascii")


@dataclass
class EngineConfig:
    precision: int = 6
    strict: bool = False
    row_sum_tolerance: float = DEFAULT_ROW_SUM_TOLERANCE
    cpt_style: str = "listing"  # "listing" | "ascii"
    verbose: bool = False

    def __post_init__(self):
        if self.precision < 0:
            raise ValueError("precision must be >= 0")
        if self.row_sum_tolerance < 0:
            raise ValueError("row_sum_tolerance must be >= 0")
        if self.cpt_style not in CPT_STYLES:
            raise ValueError(f"Unsupported cpt_style {self.cpt_style!r}; use one of {CPT_STYLES}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)

    def updated(self, **overrides: Any) -> "EngineConfig":
        """Copy with every non-None override applied."""
        values = asdict(self)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return EngineConfig.from_dict(values)


def load_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    if path is None:
        return EngineConfig()
    return EngineConfig.from_dict(load_yaml(path))


__all__ = ["EngineConfig", "load_config", "CPT_STYLES"]
