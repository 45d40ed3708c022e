"""Pydantic models for the function-call wire format.

Request body::

    {"nargout": 2, "rhs": [{"mwdata": [...], "mwsize": [r, c], "mwtype": "double"}, ...]}

Success body::

    {"lhs": [{"mwdata": [...], "mwsize": [r, c], "mwtype": "double"}, ...]}

``lhs`` is sometimes a single wire object instead of a list; see
``mpsbridge.decoding.decode_outputs`` for how both layouts are read.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

from mpsbridge.errors import ShapeMismatchError
from mpsbridge.types import WireType


class WireValue(BaseModel):
    """One argument or output: ``{data, shape, type}``.

    Numeric and logical data is column-major: ``data[r + c*rows] == m[r][c]``.
    A ``char`` value holds the whole string as its single data element while
    ``shape`` still counts characters, e.g. ``"Sine"`` -> ``(1, 4)``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data: list[Any] = Field(..., alias="mwdata")
    shape: tuple[NonNegativeInt, NonNegativeInt] = Field(..., alias="mwsize")
    type: WireType = Field(WireType.double, alias="mwtype")

    @property
    def rows(self) -> int:
        return self.shape[0]

    @property
    def cols(self) -> int:
        return self.shape[1]

    @property
    def size(self) -> int:
        return self.shape[0] * self.shape[1]

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire member names (``mwdata``/``mwsize``/``mwtype``)."""
        return self.model_dump(by_alias=True, mode="json")


def check_layout(value: WireValue) -> WireValue:
    """Verify that *value*'s shape agrees with its data.

    Raises:
        ShapeMismatchError: ``rows * cols != len(data)`` for array types, or a
            ``char`` value that is not a single string of the declared width.
    """
    length = len(value.data)
    if value.type is WireType.char:
        if length != 1 or not isinstance(value.data[0], str):
            raise ShapeMismatchError(
                f"char value must hold exactly one string token, got {length} elements",
                shape=value.shape,
                length=length,
            )
        n_chars = len(value.data[0])
        if value.rows == 1 and value.cols != n_chars:
            raise ShapeMismatchError(
                f"char shape {value.shape} does not match {n_chars} characters",
                shape=value.shape,
                length=n_chars,
            )
        return value

    if value.size != length:
        raise ShapeMismatchError(
            f"shape {value.shape} implies {value.size} elements, data has {length}",
            shape=value.shape,
            length=length,
        )
    return value


class Request(BaseModel):
    """Body of one function invocation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    output_count: int = Field(..., ge=1, alias="nargout", description="Number of outputs requested")
    arguments: tuple[WireValue, ...] = Field((), alias="rhs", description="Arguments in call order")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class SuccessResponse(BaseModel):
    """Body of a 2xx response.

    ``lhs`` is kept as parsed JSON: either a list with one wire object per
    output, or a single wire object.
    """

    model_config = ConfigDict(frozen=True)

    lhs: Union[list[Any], dict[str, Any]]
