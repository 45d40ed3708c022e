"""Native value variants and wire type classification.

Native values form a closed set of kinds:

- ``Scalar``: one number
- ``Boolean``: one truth value
- ``Text``: a character string
- ``Vector``: a 1-D number sequence with a row/column orientation
- ``Matrix``: a row-major 2-D number array

Plain Python values (and numpy arrays) are wrapped into these variants by
:func:`as_native`; :func:`classify` then picks the wire type tag.
"""

from __future__ import annotations

import enum
import numbers
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

import numpy as np

from mpsbridge.errors import InvalidTypeError


class WireType(str, enum.Enum):
    """Type tag carried in the ``mwtype`` member of a wire value."""

    double = "double"
    single = "single"
    int8 = "int8"
    int16 = "int16"
    int32 = "int32"
    int64 = "int64"
    uint8 = "uint8"
    uint16 = "uint16"
    uint32 = "uint32"
    uint64 = "uint64"
    char = "char"
    logical = "logical"
    struct = "struct"
    cell = "cell"

    @property
    def is_numeric(self) -> bool:
        return self in NUMERIC_TYPES


NUMERIC_TYPES = frozenset(
    {
        WireType.double,
        WireType.single,
        WireType.int8,
        WireType.int16,
        WireType.int32,
        WireType.int64,
        WireType.uint8,
        WireType.uint16,
        WireType.uint32,
        WireType.uint64,
    }
)


class Orientation(str, enum.Enum):
    """Orientation of a vector: one row (1 x n) or one column (n x 1)."""

    row = "row"
    column = "column"


# ── Native variants ──────────────────────────────────────────────


@dataclass(frozen=True)
class Scalar:
    value: float | int


@dataclass(frozen=True)
class Boolean:
    value: bool


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Vector:
    values: tuple[Any, ...]
    orientation: Orientation = Orientation.row


@dataclass(frozen=True)
class Matrix:
    """Row-major 2-D array; every row has the same length."""

    rows: tuple[tuple[Any, ...], ...]

    @property
    def shape(self) -> tuple[int, int]:
        n_rows = len(self.rows)
        return (n_rows, len(self.rows[0]) if n_rows else 0)


NativeValue = Union[Scalar, Boolean, Text, Vector, Matrix]

_NATIVE_TYPES = (Scalar, Boolean, Text, Vector, Matrix)
_BYTES_TYPES = (bytes, bytearray, memoryview)


def _is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not _is_bool(value)


def plain_element(item: Any) -> bool | int | float:
    """Return one array element as a JSON-ready bool, int or float.

    numpy scalars are unwrapped; other real numbers (``Fraction``...) become
    ``float``.

    Raises:
        InvalidTypeError: The element is not a real number or a bool.
    """
    if isinstance(item, np.generic):
        item = item.item()
    if isinstance(item, bool):
        return item
    if isinstance(item, numbers.Integral):
        return int(item)
    if isinstance(item, numbers.Real):
        return float(item)
    raise InvalidTypeError(f"array element of type {type(item).__name__} is not a real number", value=item)


def as_native(value: Any, orientation: Orientation | str = Orientation.row) -> NativeValue:
    """Wrap a plain Python or numpy value into its native variant.

    Args:
        value: bool, number, str, flat sequence, nested sequence, numpy array,
            or an already-wrapped variant (returned unchanged).
        orientation: Orientation given to 1-D sequences.

    Raises:
        InvalidTypeError: The value is not one of the supported kinds.
    """
    if isinstance(value, _NATIVE_TYPES):
        return value
    orientation = Orientation(orientation)

    if _is_bool(value):
        return Boolean(bool(value))
    if isinstance(value, str):
        return Text(value)
    if _is_number(value):
        return Scalar(plain_element(value))

    if isinstance(value, np.ndarray):
        if value.ndim == 0:
            return as_native(value.item(), orientation)
        if value.ndim == 1:
            return Vector(tuple(value.tolist()), orientation)
        if value.ndim == 2:
            return Matrix(tuple(tuple(row) for row in value.tolist()))
        raise InvalidTypeError(
            f"arrays with {value.ndim} dimensions are not supported", value=value
        )

    if isinstance(value, _BYTES_TYPES):
        raise InvalidTypeError(f"{type(value).__name__} is not a native value; decode it to str first", value=value)

    if isinstance(value, Sequence):
        nested = [
            isinstance(item, np.ndarray)
            or (isinstance(item, Sequence) and not isinstance(item, (str, *_BYTES_TYPES)))
            for item in value
        ]
        if any(nested):
            if not all(nested):
                raise InvalidTypeError("sequence mixes rows and scalar elements", value=value)
            return Matrix(tuple(tuple(row) for row in value))
        return Vector(tuple(value), orientation)

    raise InvalidTypeError(f"unsupported native value of type {type(value).__name__}", value=value)


# ── Classification ───────────────────────────────────────────────


def _elements(native: NativeValue) -> list[Any]:
    if isinstance(native, Scalar):
        return [native.value]
    if isinstance(native, Vector):
        return list(native.values)
    if isinstance(native, Matrix):
        return [item for row in native.rows for item in row]
    return []


def classify(value: Any, hint: WireType | str | None = None) -> WireType:
    """Pick the wire type tag for a native value.

    Numbers default to ``double``.  A numeric ``hint`` (e.g. ``int32``) is
    honored verbatim; the value is not range-checked against it.

    Raises:
        InvalidTypeError: ``hint`` is unknown or incompatible with the value.
    """
    native = as_native(value)
    if hint is not None:
        try:
            hint = WireType(hint)
        except ValueError as exc:
            raise InvalidTypeError(f"unknown wire type {hint!r}", value=value, hint=hint) from exc

    if isinstance(native, Boolean):
        allowed, default = frozenset({WireType.logical}), WireType.logical
    elif isinstance(native, Text):
        allowed, default = frozenset({WireType.char}), WireType.char
    else:
        elements = _elements(native)
        if not all(_is_number(e) or _is_bool(e) for e in elements):
            raise InvalidTypeError("array elements must be numbers or booleans", value=value, hint=hint)
        if elements and all(_is_bool(e) for e in elements):
            # logical arrays may still be sent as 0/1 numerics
            allowed, default = NUMERIC_TYPES | {WireType.logical}, WireType.logical
        else:
            allowed, default = NUMERIC_TYPES, WireType.double

    if hint is None:
        return default
    if hint not in allowed:
        raise InvalidTypeError(
            f"wire type {hint.value!r} is incompatible with {type(native).__name__.lower()} value",
            value=value,
            hint=hint,
        )
    return hint
