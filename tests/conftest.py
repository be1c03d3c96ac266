# Shared fixtures: a client config, a scripted httpx transport and a frozen clock.

import httpx
import pytest

from helpers import AUTH_URL, REDIRECT_URI, TOKEN_URL, FakeServer
from oauth2_client.models import ClientConfig


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def http_client(server) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(server.handler))


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        client_id="test-client",
        authorization_url=AUTH_URL,
        token_url=TOKEN_URL,
        redirect_uri=REDIRECT_URI,
        scopes="openid profile",
    )


@pytest.fixture
def clock(monkeypatch):
    """Freeze the token clock; assign ``clock.now`` to move time."""

    class Clock:
        now = 1_700_000_000.0

    monkeypatch.setattr("oauth2_client.models._now", lambda: Clock.now)
    return Clock
