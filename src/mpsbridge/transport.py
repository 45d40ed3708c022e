"""HTTP transport for function calls.

The marshaling core only needs ``send(url, request) -> RawResponse``.  A
connection failure or timeout is raised as a classified error; any HTTP
response, successful or not, is returned for the caller to interpret.
No request is ever retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from mpsbridge.config import ServerConfig
from mpsbridge.errors import classify_transport_exception
from mpsbridge.models import Request

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class RawResponse:
    """Status and body of one HTTP response."""

    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    def send(self, url: str, request: Request) -> RawResponse: ...


class AsyncTransport(Protocol):
    async def send(self, url: str, request: Request) -> RawResponse: ...


class HttpTransport:
    """Blocking transport over ``httpx.Client``.

    Args:
        client: Client to use (e.g. a ``TestClient``); one is created and
            owned by the transport when omitted.
        timeout: Request deadline [s] for an owned client.
        headers: Extra headers sent with every request.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)
        self.headers = {**JSON_HEADERS, **(headers or {})}

    @classmethod
    def from_config(cls, config: ServerConfig) -> HttpTransport:
        return cls(timeout=config.timeout, headers=config.headers)

    def send(self, url: str, request: Request) -> RawResponse:
        payload = request.to_wire()
        logger.debug("POST %s nargout=%d rhs=%d", url, request.output_count, len(request.arguments))
        try:
            response = self._client.post(url, json=payload, headers=self.headers)
        except httpx.RequestError as exc:
            raise classify_transport_exception(exc, url=url) from exc
        return RawResponse(response.status_code, response.text)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AsyncHttpTransport:
    """Non-blocking transport over ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)
        self.headers = {**JSON_HEADERS, **(headers or {})}

    @classmethod
    def from_config(cls, config: ServerConfig) -> AsyncHttpTransport:
        return cls(timeout=config.timeout, headers=config.headers)

    async def send(self, url: str, request: Request) -> RawResponse:
        payload = request.to_wire()
        logger.debug("POST %s nargout=%d rhs=%d", url, request.output_count, len(request.arguments))
        try:
            response = await self._client.post(url, json=payload, headers=self.headers)
        except httpx.RequestError as exc:
            raise classify_transport_exception(exc, url=url) from exc
        return RawResponse(response.status_code, response.text)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncHttpTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
