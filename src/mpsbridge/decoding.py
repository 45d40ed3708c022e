"""Wire value -> native value decoding.

The inverse of ``mpsbridge.encoding``: column-major ``mwdata`` is read back
into row-major nested lists so that ``decode_matrix(encode_matrix(m)) == m``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import numpy as np
from pydantic import ValidationError

from mpsbridge.errors import (
    EmptyPayloadError,
    MissingOutputError,
    ProtocolError,
    ProtocolErrorKind,
    ShapeMismatchError,
)
from mpsbridge.models import SuccessResponse, WireValue, check_layout
from mpsbridge.types import WireType

logger = logging.getLogger(__name__)

_WIRE_KEYS = frozenset({"mwdata", "mwsize"})


def _check_payload(value: WireValue) -> WireValue:
    """Layout check that reports a missing payload as EmptyPayloadError."""
    if not value.data and (value.type is WireType.char or value.size > 0):
        raise EmptyPayloadError(f"{value.type.value} value with shape {value.shape} has no data")
    return check_layout(value)


def _validate(model: Any, payload: Any) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ProtocolError(ProtocolErrorKind.other, None, str(exc)) from exc


def decode_scalar(value: WireValue) -> Any:
    """Return the first data element (a number, bool or the whole string).

    Raises:
        EmptyPayloadError: The value carries no data.
    """
    if not value.data:
        raise EmptyPayloadError(f"{value.type.value} value with shape {value.shape} has no data")
    return value.data[0]


def decode_vector(value: WireValue) -> list[Any]:
    """Return the data unchanged; row and column vectors share one layout."""
    return list(value.data)


def decode_matrix(value: WireValue) -> list[list[Any]]:
    """Rebuild a row-major matrix: ``m[i][j] = data[i + j*rows]``."""
    _check_payload(value)
    rows, cols = value.shape
    return [[value.data[i + j * rows] for j in range(cols)] for i in range(rows)]


def decode_array(value: WireValue, dtype: Any = None) -> np.ndarray:
    """Return numeric or logical data as a ``(rows, cols)`` numpy array."""
    _check_payload(value)
    if dtype is None and value.type is WireType.logical:
        dtype = bool
    return np.asarray(value.data, dtype=dtype).reshape(value.shape, order="F")


def decode_value(value: WireValue) -> Any:
    """Decode a wire value according to its own type and shape.

    - ``char`` -> str
    - 1x1 -> scalar
    - 1xN or Nx1 -> list
    - RxC -> row-major nested list
    - ``cell`` -> list of decoded elements (column-major order)
    - ``struct`` -> dict for 1x1, list of dicts otherwise

    Raises:
        EmptyPayloadError: A non-empty shape (or a char value) has no data.
        ShapeMismatchError: The data does not fit the shape.
    """
    _check_payload(value)
    if value.type is WireType.char:
        return decode_scalar(value)
    if value.type is WireType.cell:
        return [_decode_entry(item) for item in value.data]
    if value.type is WireType.struct:
        if not all(isinstance(record, Mapping) for record in value.data):
            raise ShapeMismatchError("struct elements must be field mappings", shape=value.shape)
        records = [
            {name: _decode_entry(field) for name, field in record.items()}
            for record in value.data
        ]
        return records[0] if value.shape == (1, 1) else records
    if value.shape == (1, 1):
        return decode_scalar(value)
    if value.rows == 1 or value.cols == 1:
        return decode_vector(value)
    return decode_matrix(value)


def _is_wire_object(entry: Any) -> bool:
    return isinstance(entry, Mapping) and _WIRE_KEYS.issubset(entry)


def _decode_entry(entry: Any) -> Any:
    """Decode a nested wire object; plain JSON values pass through."""
    if isinstance(entry, WireValue):
        return decode_value(entry)
    if _is_wire_object(entry):
        return decode_value(_validate(WireValue, entry))
    return entry


def decode_outputs(response: SuccessResponse | Mapping[str, Any], output_count: int) -> list[Any]:
    """Decode the first *output_count* outputs of a success response.

    The ``lhs`` layout is detected, not assumed:

    - a list holds one entry per output;
    - a single wire object is the only output when one is requested;
    - a single wire object with several outputs requested packs them
      positionally in its ``mwdata``.

    Raises:
        MissingOutputError: Fewer outputs than requested were supplied.
        ProtocolError: The response or a nested wire object is malformed
            (``kind=other``, no status code).
    """
    if not isinstance(response, SuccessResponse):
        response = _validate(SuccessResponse, response)
    lhs = response.lhs

    if isinstance(lhs, list):
        layout, entries = "per-output", lhs
    elif output_count == 1:
        layout, entries = "single", [lhs]
    else:
        layout, entries = "packed", list(_validate(WireValue, lhs).data)
    logger.debug("Response layout %s with %d entries, %d requested", layout, len(entries), output_count)

    if len(entries) < output_count:
        raise MissingOutputError(len(entries), output_count, len(entries))
    return [_decode_entry(entry) for entry in entries[:output_count]]
