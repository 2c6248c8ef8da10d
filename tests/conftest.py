"""
Pytest configuration and shared fixtures for plonkish tests.
"""

import sys
from pathlib import Path

import pytest

# Make the package importable when tests run from a source checkout
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from plonkish.circuits.fibonacci import FiboChip, FiboConfig, FibonacciCircuit
from plonkish.primitives.field import Fp
from plonkish.protocol import ConstraintSchema, ConstraintSystem, MockProver, Trace


@pytest.fixture
def fibo_setup():
    """(schema, config) for the Fibonacci chip over Fp."""
    meta = ConstraintSystem(Fp)
    config = FiboChip.configure(meta)
    return meta.build(), config


@pytest.fixture
def fibo_schema(fibo_setup) -> ConstraintSchema:
    return fibo_setup[0]


@pytest.fixture
def fibo_config(fibo_setup) -> FiboConfig:
    return fibo_setup[1]


@pytest.fixture
def empty_trace(fibo_schema) -> Trace:
    """Unsealed 16-row witness trace for the Fibonacci schema."""
    return Trace(fibo_schema, k=4)


@pytest.fixture
def fibo_prover() -> MockProver:
    """Reference run: k=4, seeds (1, 1), seven steps after the first row."""
    return MockProver.run(k=4, circuit=FibonacciCircuit(a=1, b=1))
