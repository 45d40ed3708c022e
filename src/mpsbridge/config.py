"""Pydantic v2 configuration for reaching a function-call server.

A ``ServerConfig`` is an ordinary value passed to whatever builds URLs and
transports; nothing here is stored at module level.
"""

from __future__ import annotations

import json
from pathlib import Path
from urllib.parse import quote

from pydantic import BaseModel, Field, model_validator


class ServerConfig(BaseModel):
    """Server address and HTTP client settings."""

    base_url: str = Field("http://localhost:9910", description="Scheme, host and port of the server")
    timeout: float = Field(30.0, gt=0, description="Per-request deadline [s]")
    headers: dict[str, str] = Field(default_factory=dict, description="Extra request headers")

    @model_validator(mode="after")
    def check_base_url(self) -> ServerConfig:
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got '{self.base_url}'")
        self.base_url = self.base_url.rstrip("/")
        return self

    def function_url(self, archive: str, function: str) -> str:
        """Build ``<base>/<archive>/<function>``."""
        if not archive or not function:
            raise ValueError("archive and function names must be non-empty")
        return f"{self.base_url}/{quote(archive, safe='')}/{quote(function, safe='')}"

    @classmethod
    def from_file(cls, path: str | Path) -> ServerConfig:
        """Load configuration from a JSON file."""
        path = Path(path)
        with path.open() as f:
            data = json.load(f)
        return cls(**data)

    def to_json(self, path: str | Path | None = None) -> str:
        """Serialize to JSON string, optionally writing to file."""
        out = self.model_dump_json(indent=2)
        if path is not None:
            Path(path).write_text(out)
        return out
