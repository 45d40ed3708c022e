"""Pytest configuration and shared fixtures.

``service_app`` is a small FastAPI stand-in for the remote function server.
It speaks the same JSON body format and status codes:

    POST /<archive>/<function>   {"nargout": n, "rhs": [...]}  ->  {"lhs": [...]}
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI
from fastapi import Request as HttpRequest
from fastapi.responses import JSONResponse, PlainTextResponse

BASE_URL = "http://mps.test"


def _wire(data: list[Any], rows: int, cols: int, mwtype: str = "double") -> dict[str, Any]:
    return {"mwdata": data, "mwsize": [rows, cols], "mwtype": mwtype}


def _make_wave(rhs: list[dict[str, Any]], nargout: int) -> list[dict[str, Any]]:
    """makeWave(freq, kind) -> [t, y, rms]"""
    freq = rhs[0]["mwdata"][0]
    kind = rhs[1]["mwdata"][0]
    t = [0.0, 0.25, 0.5, 0.75]
    y = [freq * x for x in t] if kind == "Sine" else [0.0] * len(t)
    outputs = [_wire(t, 1, 4), _wire(y, 1, 4), _wire([0.5], 1, 1)]
    return outputs[:nargout]


def _echo(rhs: list[dict[str, Any]], nargout: int) -> list[dict[str, Any]]:
    return rhs[:nargout]


def _short(rhs: list[dict[str, Any]], nargout: int) -> list[dict[str, Any]]:
    """Declares three outputs but only ever returns two."""
    return [_wire([1.0], 1, 1), _wire([2.0], 1, 1)]


def _transpose(rhs: list[dict[str, Any]], nargout: int) -> list[dict[str, Any]]:
    rows, cols = rhs[0]["mwsize"]
    data = rhs[0]["mwdata"]
    flipped = [data[i + j * rows] for i in range(rows) for j in range(cols)]
    return [_wire(flipped, cols, rows)]


def _packed_stats(rhs: list[dict[str, Any]], nargout: int) -> dict[str, Any]:
    """Older servers pack every output into one wire object."""
    values = rhs[0]["mwdata"]
    return _wire([sum(values) / len(values), max(values)], 1, 2)


def _crash(rhs: list[dict[str, Any]], nargout: int) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "type": "matlaberror",
                "id": "MATLAB:badsubscript",
                "message": "Index exceeds the number of array elements.",
                "stack": [],
            }
        },
    )


def _garbage(rhs: list[dict[str, Any]], nargout: int) -> PlainTextResponse:
    return PlainTextResponse("<html>proxy page</html>", status_code=200)


# archive -> function -> (declared outputs, handler)
FUNCTIONS = {
    "signals": {
        "makeWave": (3, _make_wave),
        "echo": (8, _echo),
        "short": (3, _short),
        "garbage": (1, _garbage),
    },
    "linalg": {
        "transpose": (1, _transpose),
        "crash": (1, _crash),
    },
    "legacy": {
        "stats": (2, _packed_stats),
    },
}


def build_service_app() -> FastAPI:
    app = FastAPI(title="Function service stand-in")
    app.state.requests = []

    @app.post("/{archive}/{function}")
    async def invoke(archive: str, function: str, request: HttpRequest):
        if archive not in FUNCTIONS:
            return PlainTextResponse("archive not found", status_code=404)
        if function not in FUNCTIONS[archive]:
            return PlainTextResponse("function not found", status_code=404)

        body = await request.json()
        app.state.requests.append(body)
        if not isinstance(body.get("nargout"), int) or not isinstance(body.get("rhs"), list):
            return PlainTextResponse("body must contain nargout and rhs", status_code=400)

        arity, handler = FUNCTIONS[archive][function]
        nargout = body["nargout"]
        if nargout > arity:
            return PlainTextResponse(
                f"nargout {nargout} exceeds the {arity} declared outputs", status_code=400
            )

        result = handler(body["rhs"], nargout)
        if isinstance(result, (JSONResponse, PlainTextResponse)):
            return result
        return JSONResponse({"lhs": result})

    return app


@pytest.fixture
def base_url():
    return BASE_URL


@pytest.fixture
def service_app():
    """Fresh stand-in server with an empty request log."""
    return build_service_app()


@pytest.fixture
def test_client(service_app):
    from fastapi.testclient import TestClient

    with TestClient(service_app, base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def http_transport(test_client):
    """HttpTransport routed into the stand-in server."""
    from mpsbridge.transport import HttpTransport

    return HttpTransport(client=test_client)


@pytest.fixture
def matrix_2x3():
    """Row-major 2x3 matrix and its column-major wire data."""
    return [[1, 2, 3], [4, 5, 6]], [1, 4, 2, 5, 3, 6]
