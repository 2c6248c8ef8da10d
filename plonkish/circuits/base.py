"""Base classes for circuits and chips."""

from abc import ABC, abstractmethod
from typing import Any

from plonkish.primitives.field import Fp, FieldType
from plonkish.protocol.layouter import Layouter
from plonkish.protocol.schema import ConstraintSystem


class Chip(ABC):
    """Reusable piece of circuit logic.

    A chip declares the columns and gates it needs (configure) and knows how to
    fill rows that satisfy them. It holds no trace state of its own; everything
    it writes goes through the layouter it is given.
    """

    def __init__(self, config: Any):
        self.config = config

    @classmethod
    @abstractmethod
    def configure(cls, meta: ConstraintSystem) -> Any:
        """Declare columns, selectors and gates; return the handles as a config object."""
        pass


class Circuit(ABC):
    """A schema plus the procedure that fills a trace satisfying it.

    Each circuit is configured once per ConstraintSystem and synthesized once
    per trace. Private inputs live on the circuit instance; without_witnesses()
    returns the same circuit with every input unknown.
    """

    field: FieldType = Fp

    @abstractmethod
    def without_witnesses(self) -> "Circuit":
        pass

    @classmethod
    @abstractmethod
    def configure(cls, meta: ConstraintSystem) -> Any:
        pass

    @abstractmethod
    def synthesize(self, config: Any, layouter: Layouter) -> None:
        """Assign every region of the circuit through `layouter`."""
        pass
