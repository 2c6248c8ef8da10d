"""Prime fields for witness values.

Uses galois library for all field arithmetic. Fp and FF are the field types.

Fp is the Pallas base field (the "pasta" Fp used by halo2 circuits). Its order
is a 255-bit prime, so galois stores elements in object arrays of Python ints.
FF is the Goldilocks field, whose elements fit in uint64 arrays and evaluate
much faster; it is useful for large traces.

Constructing GF(p) normally factors p - 1 to find a primitive element. For the
Pallas prime that factorization is slow, so the known generator is passed in
directly.
"""

import operator
from typing import Dict, List, Type, Union

import galois

# --- Field Construction ---

PALLAS_BASE_PRIME = 0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001
PALLAS_GENERATOR = 5

GOLDILOCKS_PRIME = 0xFFFFFFFF00000001

Fp = galois.GF(PALLAS_BASE_PRIME, primitive_element=PALLAS_GENERATOR, verify=False)
"""Pallas base field GF(p), p = 2^254 + 45560315531419706090280762371685220353."""

FF = galois.GF(GOLDILOCKS_PRIME)
"""Goldilocks prime field GF(2^64 - 2^32 + 1)."""

FieldType = Type[galois.FieldArray]

# Registry mapping field names (as used in configs and on the command line)
FIELDS: Dict[str, FieldType] = {
    "pasta": Fp,
    "goldilocks": FF,
}


def get_field(name: str) -> FieldType:
    """Look up a field class by name.

    Raises:
        KeyError: If no field is registered under that name
    """
    if name in FIELDS:
        return FIELDS[name]
    raise KeyError(f"Unknown field '{name}'. Available: {list(FIELDS.keys())}")


def field_name(field: FieldType) -> str:
    """Inverse of get_field(); falls back to the galois class name."""
    for name, registered in FIELDS.items():
        if registered is field:
            return name
    return field.name


# --- Conversions ---

def to_field(field: FieldType, value: Union[int, galois.FieldArray]) -> galois.FieldArray:
    """Coerce an int (possibly negative) or field scalar into a scalar of `field`.

    Elements of a different field are reduced through their integer value.

    Raises:
        TypeError: value is not an integer (floats and bools are rejected)
    """
    if isinstance(value, field):
        return value
    if isinstance(value, galois.FieldArray):
        return field(int(value) % field.order)
    if isinstance(value, bool):
        raise TypeError(f"Expected an integer field value, got {value!r}")
    return field(operator.index(value) % field.order)


def to_ints(values: galois.FieldArray) -> List[int]:
    """Convert a field array to a list of canonical Python ints."""
    return [int(v) for v in values]
