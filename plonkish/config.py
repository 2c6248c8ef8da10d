"""Run parameters for a circuit.

Parameters come from defaults, optionally overlaid by a JSON file, optionally
overlaid by command-line flags:

    {
        "circuit": "fibonacci",
        "k": 4,
        "a": 1,
        "b": 1,
        "steps": 7,
        "field": "pasta"
    }
"""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

from plonkish.circuits import CIRCUIT_REGISTRY
from plonkish.circuits.fibonacci import DEFAULT_STEPS
from plonkish.primitives.field import FIELDS


@dataclass
class CircuitParams:
    """Parameters for one synthesis + check run."""
    circuit: str = "fibonacci"  # Registered circuit name
    k: int = 4  # Trace has 2^k rows
    a: int = 1  # First seed
    b: int = 1  # Second seed
    steps: int = DEFAULT_STEPS  # Rows after the first
    field: str = "pasta"  # Field name, see primitives.field.FIELDS

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CircuitParams":
        """Build params from a dict; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}. Expected a subset of {sorted(known)}")
        return cls(**d)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "CircuitParams":
        """Load params from a JSON file."""
        with open(path) as f:
            return cls.from_dict(json.load(f))

    def merged(self, **overrides: Any) -> "CircuitParams":
        """Copy with every non-None override applied."""
        values = asdict(self)
        values.update({key: val for key, val in overrides.items() if val is not None})
        return CircuitParams.from_dict(values)

    def validate(self) -> "CircuitParams":
        """Check ranges and names.

        Raises:
            ValueError: If any parameter is out of range or unknown
        """
        if self.circuit not in CIRCUIT_REGISTRY:
            raise ValueError(f"Unknown circuit '{self.circuit}'. Available: {list(CIRCUIT_REGISTRY.keys())}")
        if self.field not in FIELDS:
            raise ValueError(f"Unknown field '{self.field}'. Available: {list(FIELDS.keys())}")
        if self.k < 1:
            raise ValueError(f"k must be at least 1, got {self.k}")
        if self.steps < 0:
            raise ValueError(f"steps must be non-negative, got {self.steps}")
        if self.steps + 1 > (1 << self.k):
            raise ValueError(
                f"{self.steps + 1} rows do not fit in 2^{self.k} = {1 << self.k} rows; increase k"
            )
        return self
