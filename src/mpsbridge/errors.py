"""Error taxonomy and failure classification for function calls.

Every failure path in the marshaling layer raises exactly one of:

- Encoding time: ``InvalidTypeError``, ``ShapeMismatchError``, ``InvalidArityError``
- Decoding time: ``EmptyPayloadError``, ``MissingOutputError``
- Transport: ``NetworkError``, ``TimeoutError``, ``ProtocolError``

None of them is retried here.  The remote function is not assumed to be
idempotent, so retry policy belongs to the caller.
"""

from __future__ import annotations

import builtins
import enum
import json
from typing import Any

import httpx


class MarshalError(Exception):
    """Base class for every error raised by mpsbridge."""


# ── Encoding-time errors ─────────────────────────────────────────


class InvalidTypeError(MarshalError):
    """A value cannot be represented with the requested wire type."""

    def __init__(self, message: str, *, value: Any = None, hint: Any = None) -> None:
        super().__init__(message)
        self.value = value
        self.hint = hint


class ShapeMismatchError(MarshalError):
    """Declared shape disagrees with the number of data elements."""

    def __init__(
        self,
        message: str,
        *,
        shape: tuple[int, ...] | None = None,
        length: int | None = None,
    ) -> None:
        super().__init__(message)
        self.shape = shape
        self.length = length


class InvalidArityError(MarshalError):
    """Requested output count is below one."""

    def __init__(self, output_count: int) -> None:
        super().__init__(f"output count must be >= 1, got {output_count}")
        self.output_count = output_count


# ── Decoding-time errors ─────────────────────────────────────────


class EmptyPayloadError(MarshalError):
    """A wire value carries no data where at least one element is needed."""


class MissingOutputError(MarshalError):
    """The response holds fewer outputs than were requested."""

    def __init__(self, index: int, output_count: int, available: int) -> None:
        super().__init__(
            f"output {index} missing: requested {output_count} outputs, "
            f"response supplied {available}"
        )
        self.index = index
        self.output_count = output_count
        self.available = available


# ── Transport errors ─────────────────────────────────────────────


class NetworkError(MarshalError):
    """No response was received (connection refused, DNS, reset...)."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class TimeoutError(MarshalError, builtins.TimeoutError):  # noqa: A001
    """The request exceeded the caller's deadline."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class ProtocolErrorKind(str, enum.Enum):
    """Classification of a non-2xx (or malformed) server response."""

    not_found = "not_found"
    bad_request = "bad_request"
    server_fault = "server_fault"
    other = "other"


class ProtocolError(MarshalError):
    """The server answered, but not with a usable success envelope.

    Attributes:
        kind: Classification derived from the status code.
        status_code: HTTP status of the response, or None when the body was
            checked without one (e.g. ``decode_outputs`` on a parsed dict).
        diagnostic: Raw response body, unmodified.
        message: Error message extracted from a JSON error envelope, if any.
    """

    def __init__(
        self,
        kind: ProtocolErrorKind,
        status_code: int | None,
        diagnostic: str,
        *,
        url: str | None = None,
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        self.diagnostic = diagnostic
        self.url = url
        self.message = _extract_message(diagnostic)
        origin = "response" if status_code is None else f"HTTP {status_code}"
        super().__init__(f"{origin} ({kind.value}): {self.message or diagnostic}")


def _extract_message(diagnostic: str) -> str | None:
    """Pull ``error.message`` out of the server's JSON error envelope."""
    try:
        body = json.loads(diagnostic)
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return None


# ── Classification ───────────────────────────────────────────────


def protocol_kind(status_code: int) -> ProtocolErrorKind:
    """Map an HTTP status code onto a ProtocolErrorKind."""
    if status_code == 404:
        return ProtocolErrorKind.not_found
    if status_code == 400:
        return ProtocolErrorKind.bad_request
    if 500 <= status_code <= 599:
        return ProtocolErrorKind.server_fault
    return ProtocolErrorKind.other


def classify_failure(
    status_code: int | None,
    diagnostic: str,
    *,
    timed_out: bool = False,
    url: str | None = None,
) -> MarshalError:
    """Classify a failed transport outcome.

    Args:
        status_code: HTTP status, or None when no response was received.
        diagnostic: Response body or client-side failure description.
        timed_out: True when the deadline expired before a response arrived.
        url: Target URL, kept on the error for reproduction.

    Returns:
        The error to raise.  The diagnostic text is carried through verbatim.
    """
    if status_code is None:
        if timed_out:
            return TimeoutError(f"request timed out: {diagnostic}", url=url)
        return NetworkError(f"no response received: {diagnostic}", url=url)
    return ProtocolError(protocol_kind(status_code), status_code, diagnostic, url=url)


def classify_transport_exception(exc: httpx.RequestError, *, url: str | None = None) -> MarshalError:
    """Classify an httpx client exception raised before any response arrived."""
    return classify_failure(
        None,
        str(exc) or type(exc).__name__,
        timed_out=isinstance(exc, httpx.TimeoutException),
        url=url,
    )
