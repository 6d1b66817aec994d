"""Client configuration and authentication."""

from __future__ import annotations

import os
from base64 import b64encode
from dataclasses import dataclass, field
from typing import Mapping, Union

from ..protocol import headers as h


@dataclass(frozen=True)
class BasicAuth:
    """HTTP basic authentication (username and password)."""

    username: str
    password: str

    def header_value(self) -> str:
        credentials = f"{self.username}:{self.password}".encode("utf-8")
        return f"Basic {b64encode(credentials).decode('ascii')}"


@dataclass(frozen=True)
class BearerAuth:
    """Bearer token authentication (JWT, OAuth2 access token...)."""

    token: str

    def header_value(self) -> str:
        return f"Bearer {self.token}"


AuthConfig = Union[BasicAuth, BearerAuth]


def normalize_headers(headers: Mapping[str, str | None] | None) -> dict[str, str | None]:
    """Lower-case header names so later merges compare them reliably."""
    if not headers:
        return {}
    return {name.lower(): value for name, value in headers.items()}


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration of a :class:`~trinoduck.client.Trino` client.

    Attributes:
        base_url: Coordinator address, e.g. ``http://localhost:8080``.
            A trailing slash is removed.
        auth: Optional credentials, sent as the ``Authorization`` header.
        headers: Default request headers sent with every request. Names are
            lower-cased; a ``None`` value means "do not send".
    """

    base_url: str
    auth: AuthConfig | None = None
    headers: Mapping[str, str | None] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url is required")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(self, "headers", normalize_headers(self.headers))

    @property
    def user(self) -> str | None:
        """The configured default user, if any."""
        return self.headers.get(h.USER)

    def authorization_header(self) -> str | None:
        if self.auth is None:
            return None
        return self.auth.header_value()

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a configuration from ``TRINO_*`` environment variables.

        Recognized variables:
            TRINO_URL: Coordinator address (default ``http://localhost:8080``)
            TRINO_USER, TRINO_SOURCE, TRINO_CATALOG, TRINO_SCHEMA: Default headers
            TRINO_TOKEN: Bearer token
            TRINO_PASSWORD: Password for basic auth (requires TRINO_USER)
        """
        env = os.environ if environ is None else environ
        user = env.get("TRINO_USER")

        auth: AuthConfig | None = None
        if env.get("TRINO_TOKEN"):
            auth = BearerAuth(env["TRINO_TOKEN"])
        elif env.get("TRINO_PASSWORD"):
            if not user:
                raise ValueError("TRINO_PASSWORD is set but TRINO_USER is not")
            auth = BasicAuth(user, env["TRINO_PASSWORD"])

        defaults = {
            h.USER: user,
            h.SOURCE: env.get("TRINO_SOURCE", "trinoduck"),
            h.CATALOG: env.get("TRINO_CATALOG"),
            h.SCHEMA: env.get("TRINO_SCHEMA"),
        }
        return cls(
            base_url=env.get("TRINO_URL", "http://localhost:8080"),
            auth=auth,
            headers={name: value for name, value in defaults.items() if value},
        )
