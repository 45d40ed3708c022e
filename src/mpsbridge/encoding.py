"""Native value -> wire value encoding.

Matrices are converted from row-major input to the column-major ``mwdata``
layout::

    [[1, 2, 3],
     [4, 5, 6]]   ->   mwdata = [1, 4, 2, 5, 3, 6], mwsize = [2, 3]

Every encoder is pure and validates its type tag and shape before building
the wire value, so a bad argument fails before any request is sent.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np

from mpsbridge.errors import InvalidArityError, InvalidTypeError, ShapeMismatchError
from mpsbridge.models import Request, WireValue, check_layout
from mpsbridge.types import (
    Boolean,
    Matrix,
    Orientation,
    Scalar,
    Text,
    Vector,
    WireType,
    as_native,
    classify,
    plain_element,
)


def _array_tag(tag: WireType | str) -> WireType:
    try:
        tag = WireType(tag)
    except ValueError as exc:
        raise InvalidTypeError(f"unknown wire type {tag!r}", hint=tag) from exc
    if not (tag.is_numeric or tag is WireType.logical):
        raise InvalidTypeError(f"wire type {tag.value!r} cannot hold a numeric array", hint=tag)
    return tag


def encode_scalar(value: float | int, tag: WireType | str = WireType.double) -> WireValue:
    """Encode one number as a 1x1 array."""
    return WireValue(data=[plain_element(value)], shape=(1, 1), type=_array_tag(tag))


def encode_boolean(value: bool) -> WireValue:
    return WireValue(data=[bool(value)], shape=(1, 1), type=WireType.logical)


def encode_text(value: str) -> WireValue:
    """Encode a string as a char row vector.

    The whole string is the single data element; the shape counts characters.
    """
    return WireValue(data=[value], shape=(1, len(value)), type=WireType.char)


def encode_vector(
    values: Sequence[Any] | np.ndarray,
    tag: WireType | str = WireType.double,
    orientation: Orientation | str = Orientation.row,
) -> WireValue:
    """Encode a 1-D sequence as a ``1 x n`` (row) or ``n x 1`` (column) array."""
    data = [plain_element(v) for v in values]
    n = len(data)
    shape = (1, n) if Orientation(orientation) is Orientation.row else (n, 1)
    return WireValue(data=data, shape=shape, type=_array_tag(tag))


def encode_matrix(rows: Sequence[Sequence[Any]] | np.ndarray, tag: WireType | str = WireType.double) -> WireValue:
    """Encode a row-major 2-D array into column-major wire data.

    ``data[i + j*r] = rows[i][j]`` for an ``r x c`` input.

    Raises:
        ShapeMismatchError: Rows have differing lengths.
    """
    n_rows = len(rows)
    n_cols = len(rows[0]) if n_rows else 0
    for i, row in enumerate(rows):
        if len(row) != n_cols:
            raise ShapeMismatchError(
                f"row {i} has {len(row)} elements, expected {n_cols}",
                shape=(n_rows, n_cols),
                length=len(row),
            )

    # object dtype keeps ints, floats and bools exactly as given
    grid = np.empty((n_rows, n_cols), dtype=object)
    for i, row in enumerate(rows):
        for j, item in enumerate(row):
            grid[i, j] = plain_element(item)
    data = grid.ravel(order="F").tolist()
    return WireValue(data=data, shape=(n_rows, n_cols), type=_array_tag(tag))


def encode_array(
    data: Sequence[Any] | np.ndarray,
    shape: tuple[int, int],
    tag: WireType | str = WireType.double,
) -> WireValue:
    """Encode data that is already flattened column-major under *shape*.

    Raises:
        ShapeMismatchError: ``rows * cols`` differs from ``len(data)``.
    """
    rows, cols = shape
    if rows < 0 or cols < 0:
        raise ShapeMismatchError(f"shape {tuple(shape)} has a negative dimension", shape=tuple(shape))
    wire = WireValue(data=[plain_element(v) for v in data], shape=(rows, cols), type=_array_tag(tag))
    return check_layout(wire)


def encode(
    value: Any,
    hint: WireType | str | None = None,
    shape: tuple[int, int] | None = None,
) -> WireValue:
    """Encode any supported native value.

    Args:
        value: Native variant, plain Python value or numpy array.
        hint: Wire type to use instead of the default for the value's kind.
        shape: Optional explicit shape; its product must equal the number
            of elements (for text: the number of characters).

    Raises:
        InvalidTypeError: Unsupported value or incompatible hint.
        ShapeMismatchError: Shape hint disagrees with the data.
    """
    if isinstance(value, WireValue):
        return check_layout(value)

    native = as_native(value)
    tag = classify(native, hint)

    if isinstance(native, Boolean):
        wire = encode_boolean(native.value)
    elif isinstance(native, Text):
        wire = encode_text(native.value)
    elif isinstance(native, Scalar):
        wire = encode_scalar(native.value, tag)
    elif isinstance(native, Vector):
        wire = encode_vector(native.values, tag, native.orientation)
    elif isinstance(native, Matrix):
        wire = encode_matrix(native.rows, tag)
    else:  # pragma: no cover - as_native returns a closed set
        raise InvalidTypeError(f"unsupported native value {native!r}", value=value)

    if shape is None:
        return wire
    return _apply_shape(wire, shape)


def _apply_shape(wire: WireValue, shape: tuple[int, int]) -> WireValue:
    rows, cols = shape
    if wire.type is WireType.char:
        expected = len(wire.data[0])
    else:
        expected = len(wire.data)
    if rows < 0 or cols < 0 or rows * cols != expected:
        raise ShapeMismatchError(
            f"shape hint {tuple(shape)} does not fit {expected} elements",
            shape=tuple(shape),
            length=expected,
        )
    if wire.shape == (rows, cols):
        return wire
    # column-major data reads the same under any shape with the same size
    return wire.model_copy(update={"shape": (rows, cols)})


def build_request(output_count: int, arguments: Sequence[Any] = ()) -> Request:
    """Build the request body for one call.

    Arguments that are not already ``WireValue`` instances are encoded with
    :func:`encode` defaults.

    Raises:
        InvalidArityError: ``output_count < 1``.
    """
    if output_count < 1:
        raise InvalidArityError(output_count)
    return Request(output_count=output_count, arguments=tuple(encode(arg) for arg in arguments))
