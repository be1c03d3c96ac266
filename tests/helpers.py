# Test helpers shared across modules.

from __future__ import annotations

from urllib.parse import parse_qsl

import httpx

AUTH_URL = "https://auth.example.com/authorize"
TOKEN_URL = "https://auth.example.com/token"
REVOKE_URL = "https://auth.example.com/revoke"
REDIRECT_URI = "http://localhost:8080/callback"


class FakeServer:
    """Records requests and answers them from a queue of scripted responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response | Exception] = []

    def reply(self, status_code: int = 200, **kwargs) -> FakeServer:
        self.responses.append(httpx.Response(status_code, **kwargs))
        return self

    def fail(self, exc: Exception) -> FakeServer:
        self.responses.append(exc)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request to {request.url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def form(self, index: int = -1) -> dict[str, str]:
        return dict(parse_qsl(self.requests[index].content.decode()))
