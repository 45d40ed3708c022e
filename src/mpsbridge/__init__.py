"""Client-side marshaling for a remote numerical-function service.

Provides:
- Native value variants and wire type classification
- Column-major encoding of arguments and decoding of outputs
- A closed error taxonomy for encoding, decoding and transport failures
- Blocking and asyncio HTTP clients
- Display downsampling of long output sequences
"""

from __future__ import annotations

from mpsbridge.client import AsyncFunctionClient, FunctionClient, call_function
from mpsbridge.config import ServerConfig
from mpsbridge.decoding import decode_array, decode_matrix, decode_outputs, decode_scalar, decode_value, decode_vector
from mpsbridge.downsample import downsample
from mpsbridge.encoding import (
    build_request,
    encode,
    encode_array,
    encode_boolean,
    encode_matrix,
    encode_scalar,
    encode_text,
    encode_vector,
)
from mpsbridge.errors import (
    EmptyPayloadError,
    InvalidArityError,
    InvalidTypeError,
    MarshalError,
    MissingOutputError,
    NetworkError,
    ProtocolError,
    ProtocolErrorKind,
    ShapeMismatchError,
    TimeoutError,
)
from mpsbridge.models import Request, SuccessResponse, WireValue
from mpsbridge.types import Boolean, Matrix, Orientation, Scalar, Text, Vector, WireType, as_native, classify

__version__ = "0.1.0"

__all__ = [
    "AsyncFunctionClient",
    "Boolean",
    "EmptyPayloadError",
    "FunctionClient",
    "InvalidArityError",
    "InvalidTypeError",
    "MarshalError",
    "Matrix",
    "MissingOutputError",
    "NetworkError",
    "Orientation",
    "ProtocolError",
    "ProtocolErrorKind",
    "Request",
    "Scalar",
    "ServerConfig",
    "ShapeMismatchError",
    "SuccessResponse",
    "Text",
    "TimeoutError",
    "Vector",
    "WireType",
    "WireValue",
    "as_native",
    "build_request",
    "call_function",
    "classify",
    "decode_array",
    "decode_matrix",
    "decode_outputs",
    "decode_scalar",
    "decode_value",
    "decode_vector",
    "downsample",
    "encode",
    "encode_array",
    "encode_boolean",
    "encode_matrix",
    "encode_scalar",
    "encode_text",
    "encode_vector",
]
