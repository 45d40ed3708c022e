"""Function-call clients: encode -> send -> decode.

Usage::

    config = ServerConfig(base_url="http://localhost:9910")
    with FunctionClient.from_config(config, "signals", "makeWave") as fn:
        t, y, rms = fn.call(50.0, "Sine", nargout=3)

The URL is always supplied by the caller; clients keep no shared state
beyond their own transport.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from pydantic import ValidationError

from mpsbridge.config import ServerConfig
from mpsbridge.decoding import decode_outputs
from mpsbridge.encoding import build_request
from mpsbridge.errors import ProtocolError, ProtocolErrorKind, classify_failure
from mpsbridge.models import SuccessResponse
from mpsbridge.transport import AsyncHttpTransport, AsyncTransport, HttpTransport, RawResponse, Transport

logger = logging.getLogger(__name__)


def read_response(raw: RawResponse, output_count: int, *, url: str | None = None) -> list[Any]:
    """Turn one transport outcome into native outputs or a classified error.

    Raises:
        ProtocolError: Non-2xx status, or a 2xx body that is not a success
            envelope.
        MissingOutputError: Fewer outputs than requested.
    """
    if not raw.ok:
        error = classify_failure(raw.status_code, raw.text, url=url)
        logger.warning("Call to %s failed: %s", url, error)
        raise error
    try:
        response = SuccessResponse.model_validate_json(raw.text)
        return decode_outputs(response, output_count)
    except ValidationError as exc:
        logger.warning("Malformed success body from %s: %s", url, exc)
        raise ProtocolError(ProtocolErrorKind.other, raw.status_code, raw.text, url=url) from exc
    except ProtocolError as exc:
        if exc.status_code is not None:
            raise
        logger.warning("Malformed success body from %s: %s", url, exc)
        raise ProtocolError(ProtocolErrorKind.other, raw.status_code, raw.text, url=url) from exc


class FunctionClient:
    """Blocking client for one remote function.

    Attributes:
        url: Full ``<base>/<archive>/<function>`` address.
        transport: Object providing ``send(url, request)``.
    """

    def __init__(self, url: str, transport: Transport | None = None) -> None:
        self.url = url
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else HttpTransport()

    @classmethod
    def from_config(
        cls,
        config: ServerConfig,
        archive: str,
        function: str,
        transport: Transport | None = None,
    ) -> FunctionClient:
        client = cls(config.function_url(archive, function), transport or HttpTransport.from_config(config))
        client._owns_transport = transport is None
        return client

    def call(self, *args: Any, nargout: int = 1) -> list[Any]:
        """Invoke the function and return its first *nargout* outputs."""
        request = build_request(nargout, args)
        start = time.perf_counter()
        raw = self.transport.send(self.url, request)
        outputs = read_response(raw, nargout, url=self.url)
        logger.info(
            "Called %s: %d args -> %d outputs in %.1f ms",
            self.url,
            len(args),
            len(outputs),
            (time.perf_counter() - start) * 1000.0,
        )
        return outputs

    def close(self) -> None:
        if self._owns_transport and isinstance(self.transport, HttpTransport):
            self.transport.close()

    def __enter__(self) -> FunctionClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AsyncFunctionClient:
    """asyncio counterpart of :class:`FunctionClient`."""

    def __init__(self, url: str, transport: AsyncTransport | None = None) -> None:
        self.url = url
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else AsyncHttpTransport()

    @classmethod
    def from_config(
        cls,
        config: ServerConfig,
        archive: str,
        function: str,
        transport: AsyncTransport | None = None,
    ) -> AsyncFunctionClient:
        client = cls(config.function_url(archive, function), transport or AsyncHttpTransport.from_config(config))
        client._owns_transport = transport is None
        return client

    async def call(self, *args: Any, nargout: int = 1) -> list[Any]:
        request = build_request(nargout, args)
        start = time.perf_counter()
        raw = await self.transport.send(self.url, request)
        outputs = read_response(raw, nargout, url=self.url)
        logger.info(
            "Called %s: %d args -> %d outputs in %.1f ms",
            self.url,
            len(args),
            len(outputs),
            (time.perf_counter() - start) * 1000.0,
        )
        return outputs

    async def aclose(self) -> None:
        if self._owns_transport and isinstance(self.transport, AsyncHttpTransport):
            await self.transport.aclose()

    async def __aenter__(self) -> AsyncFunctionClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def call_function(
    url: str,
    args: list[Any] | tuple[Any, ...] = (),
    nargout: int = 1,
    transport: Transport | None = None,
) -> list[Any]:
    """One-shot call without keeping a client around."""
    with FunctionClient(url, transport) as client:
        return client.call(*args, nargout=nargout)
