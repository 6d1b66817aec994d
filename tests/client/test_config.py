"""Tests for client configuration."""

from __future__ import annotations

import pytest

from trinoduck.client import BasicAuth, BearerAuth, ClientConfig


class TestClientConfig:
    def test_normalizes_base_url_and_headers(self) -> None:
        config = ClientConfig("http://localhost:8080/", headers={"X-Trino-User": "alice"})

        assert config.base_url == "http://localhost:8080"
        assert config.headers == {"x-trino-user": "alice"}
        assert config.user == "alice"

    @pytest.mark.parametrize("base_url", ["", "localhost:8080", "ftp://trino"])
    def test_rejects_invalid_base_url(self, base_url) -> None:
        with pytest.raises(ValueError):
            ClientConfig(base_url)

    def test_authorization_header(self) -> None:
        assert ClientConfig("http://x").authorization_header() is None
        assert ClientConfig("http://x", auth=BearerAuth("t")).authorization_header() == "Bearer t"
        assert (
            ClientConfig("http://x", auth=BasicAuth("user", "pass")).authorization_header()
            == "Basic dXNlcjpwYXNz"
        )


class TestFromEnv:
    def test_defaults(self) -> None:
        config = ClientConfig.from_env({})

        assert config.base_url == "http://localhost:8080"
        assert config.auth is None
        assert config.headers == {"x-trino-source": "trinoduck"}

    def test_full_environment(self) -> None:
        config = ClientConfig.from_env(
            {
                "TRINO_URL": "https://trino.example.com",
                "TRINO_USER": "alice",
                "TRINO_PASSWORD": "secret",
                "TRINO_CATALOG": "hive",
                "TRINO_SCHEMA": "web",
                "TRINO_SOURCE": "etl",
            }
        )

        assert config.base_url == "https://trino.example.com"
        assert config.auth == BasicAuth("alice", "secret")
        assert config.headers == {
            "x-trino-user": "alice",
            "x-trino-source": "etl",
            "x-trino-catalog": "hive",
            "x-trino-schema": "web",
        }

    def test_token_wins_over_password(self) -> None:
        config = ClientConfig.from_env(
            {"TRINO_USER": "alice", "TRINO_PASSWORD": "secret", "TRINO_TOKEN": "jwt"}
        )

        assert config.auth == BearerAuth("jwt")

    def test_password_requires_user(self) -> None:
        with pytest.raises(ValueError, match="TRINO_USER"):
            ClientConfig.from_env({"TRINO_PASSWORD": "secret"})
