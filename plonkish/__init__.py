"""
plonkish: an executable model of a Plonkish arithmetization.

A computation is written as a table of field elements (the trace) together
with a constraint schema: gates that must vanish on rows where their selector
is enabled, and copy constraints tying cells together. This package builds
schemas, synthesizes traces through regions, and checks a finished trace
against its schema.

This package provides:
- Prime fields (via galois): Pallas Fp and Goldilocks
- Symbolic gate expressions
- Schema builder (ConstraintSystem -> ConstraintSchema)
- Trace, regions and a sequential layouter
- Satisfiability checker and a mock proving backend
- A Fibonacci example circuit

Usage:
    from plonkish import FibonacciCircuit, MockProver

    prover = MockProver.run(k=4, circuit=FibonacciCircuit(a=1, b=1))
    prover.assert_satisfied()
"""

# Schema, trace and checking (imported first; constraints depends on it)
from plonkish.protocol import (
    Cell,
    ConfigurationError,
    ConstraintSchema,
    ConstraintSystem,
    MissingWitnessError,
    MockProver,
    PlonkishError,
    SynthesisError,
    Trace,
    VerificationReport,
    assert_satisfied,
    verify,
)

# Field arithmetic and expressions
from plonkish.primitives import FF, Fp, Rotation, Value

# Circuits
from plonkish.circuits import CIRCUIT_REGISTRY, FibonacciCircuit, get_circuit

__version__ = "0.1.0"

__all__ = [
    "Fp",
    "FF",
    "Rotation",
    "Value",
    "ConstraintSystem",
    "ConstraintSchema",
    "Cell",
    "Trace",
    "MockProver",
    "VerificationReport",
    "verify",
    "assert_satisfied",
    "PlonkishError",
    "ConfigurationError",
    "SynthesisError",
    "MissingWitnessError",
    "FibonacciCircuit",
    "CIRCUIT_REGISTRY",
    "get_circuit",
]
