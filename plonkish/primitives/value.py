"""Witness values that may not be known yet.

Circuits are synthesized twice in practice: once with real private inputs
(witness generation) and once without them, to extract the trace shape. In the
second case every value is unknown, yet the chip code is the same. `Value`
carries that distinction through arithmetic: combining anything with an
unknown value yields an unknown value.
"""

from typing import Any, Callable, Optional


class Value:
    """Either `Value.known(x)` or `Value.unknown()`."""

    __slots__ = ("_inner", "_known")

    # Make numpy (and galois scalars) defer to our reflected operators
    __array_ufunc__ = None

    def __init__(self, inner: Any, known: bool):
        self._inner = inner
        self._known = known

    @classmethod
    def known(cls, inner: Any) -> "Value":
        return cls(inner, True)

    @classmethod
    def unknown(cls) -> "Value":
        return cls(None, False)

    @classmethod
    def from_optional(cls, inner: Optional[Any]) -> "Value":
        """None becomes unknown, anything else known."""
        if inner is None:
            return cls.unknown()
        return cls.known(inner)

    @classmethod
    def lift(cls, obj: Any) -> "Value":
        """Wrap a raw value as known; pass Value instances through."""
        return obj if isinstance(obj, Value) else cls.known(obj)

    @property
    def is_known(self) -> bool:
        return self._known

    @property
    def inner(self) -> Optional[Any]:
        """The wrapped value, or None when unknown."""
        return self._inner if self._known else None

    def map(self, fn: Callable[[Any], Any]) -> "Value":
        if not self._known:
            return Value.unknown()
        return Value.known(fn(self._inner))

    def zip(self, other: "Value") -> "Value":
        """Pair two values; unknown unless both are known."""
        if self._known and other._known:
            return Value.known((self._inner, other._inner))
        return Value.unknown()

    def _combine(self, other: Any, op: Callable[[Any, Any], Any]) -> "Value":
        return self.zip(Value.lift(other)).map(lambda pair: op(pair[0], pair[1]))

    def __add__(self, other: Any) -> "Value":
        return self._combine(other, lambda x, y: x + y)

    def __radd__(self, other: Any) -> "Value":
        return Value.lift(other)._combine(self, lambda x, y: x + y)

    def __sub__(self, other: Any) -> "Value":
        return self._combine(other, lambda x, y: x - y)

    def __rsub__(self, other: Any) -> "Value":
        return Value.lift(other)._combine(self, lambda x, y: x - y)

    def __mul__(self, other: Any) -> "Value":
        return self._combine(other, lambda x, y: x * y)

    def __rmul__(self, other: Any) -> "Value":
        return Value.lift(other)._combine(self, lambda x, y: x * y)

    def __neg__(self) -> "Value":
        return self.map(lambda x: -x)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        if not (self._known and other._known):
            return self._known == other._known
        return bool(self._inner == other._inner)

    __hash__ = None

    def __repr__(self) -> str:
        if not self._known:
            return "Value.unknown()"
        return f"Value.known({self._inner!r})"
