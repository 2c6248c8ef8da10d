"""Circuits and the chips they are built from.

Each circuit pairs a configure() step (columns, selectors, gates) with a
synthesize() step that fills a trace. CIRCUIT_REGISTRY maps the names used on
the command line and in config files to circuit classes.
"""

from typing import Any

from .base import Chip, Circuit
from .fibonacci import DEFAULT_STEPS, FiboChip, FiboConfig, FibonacciCircuit, fibonacci_sequence

# Registry mapping circuit names to circuit classes
CIRCUIT_REGISTRY: dict[str, type[Circuit]] = {
    "fibonacci": FibonacciCircuit,
}


def get_circuit(name: str, **params: Any) -> Circuit:
    """Instantiate a registered circuit.

    Args:
        name: Name of the circuit (e.g., 'fibonacci')
        **params: Constructor arguments for the circuit class

    Returns:
        Circuit instance

    Raises:
        KeyError: If no circuit is registered under that name
    """
    if name in CIRCUIT_REGISTRY:
        return CIRCUIT_REGISTRY[name](**params)
    raise KeyError(
        f"No circuit named '{name}'. "
        f"Available: {list(CIRCUIT_REGISTRY.keys())}"
    )


__all__ = [
    "Chip",
    "Circuit",
    "FiboChip",
    "FiboConfig",
    "FibonacciCircuit",
    "DEFAULT_STEPS",
    "fibonacci_sequence",
    "CIRCUIT_REGISTRY",
    "get_circuit",
]
