"""The browser seam: how an authorization URL becomes a code (or an error).

Displaying the authorization page is left to a ``Browser`` implementation.
The flow only needs an awaitable that takes the authorization URL and the
redirect prefix and eventually returns a BrowserResult.
"""

from __future__ import annotations

import asyncio
import logging
import os
import platform
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import parse_qsl, urlsplit

from .errors import ErrorCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrowserResult:
    success: bool
    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None

    @classmethod
    def authorized(cls, code: str, state: str | None) -> BrowserResult:
        return cls(success=True, code=code, state=state)

    @classmethod
    def denied(cls, error: str | None = None, description: str | None = None) -> BrowserResult:
        return cls(success=False, error=error, error_description=description)


class Browser(Protocol):
    async def __call__(self, authorization_url: str, redirect_prefix: str) -> BrowserResult: ...


def parse_redirect(url: str, redirect_prefix: str) -> BrowserResult | None:
    """Interpret a URL the user agent navigated to.

    Returns None when ``url`` is not under ``redirect_prefix`` (keep waiting).
    Query and fragment parameters are merged, the query winning on collision.
    """
    if not url or not url.lower().startswith(redirect_prefix.lower()):
        return None

    try:
        parts = urlsplit(url)
        params: dict[str, str] = {}
        for source in (parts.query, parts.fragment):
            for key, value in parse_qsl(source, keep_blank_values=True):
                params.setdefault(key, value)
    except ValueError as e:
        return BrowserResult.denied(ErrorCode.PARSE_ERROR, str(e))

    if "error" in params:
        return BrowserResult.denied(params["error"], params.get("error_description"))
    if "code" in params:
        return BrowserResult.authorized(params["code"], params.get("state"))
    return BrowserResult.denied(
        ErrorCode.INVALID_RESPONSE, "No authorization code or error in response"
    )


def blocking_browser(func: Callable[[str, str], BrowserResult]) -> Browser:
    """Adapt a blocking, user-paced callable to the async Browser protocol.

    The callable runs in a worker thread so the event loop stays free and the
    surrounding attempt can still be cancelled.
    """

    async def run(authorization_url: str, redirect_prefix: str) -> BrowserResult:
        return await asyncio.to_thread(func, authorization_url, redirect_prefix)

    return run


def open_browser(url: str) -> None:
    system = platform.system().lower()
    if system == "darwin":
        subprocess.Popen(["open", url], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    elif system == "windows":
        # cmd.exe would split the URL on "&"
        os.startfile(url)
    else:
        subprocess.Popen(["xdg-open", url], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)


class ConsoleBrowser:
    """Opens the system browser and asks the user to paste the redirect URL.

    Suitable for terminals: after approving access, the user copies the URL
    the provider redirected to (even if that page failed to load) and pastes
    it at the prompt. An empty answer cancels the attempt.
    """

    def __init__(
        self,
        launch: Callable[[str], None] | None = open_browser,
        prompt: Callable[[str], str] = input,
        echo: Callable[[str], None] = print,
    ):
        self._launch = launch
        self._prompt = prompt
        self._echo = echo

    async def __call__(self, authorization_url: str, redirect_prefix: str) -> BrowserResult:
        return await asyncio.to_thread(self.run, authorization_url, redirect_prefix)

    def run(self, authorization_url: str, redirect_prefix: str) -> BrowserResult:
        if self._launch is not None:
            try:
                self._launch(authorization_url)
            except OSError as e:
                logger.debug("Could not launch system browser: %s", e)

        self._echo("If the browser did not open, visit this URL:\n")
        self._echo(authorization_url)
        self._echo(f"\nAfter authorizing, paste the URL starting with {redirect_prefix}\n")

        while True:
            try:
                answer = self._prompt("Redirect URL: ").strip()
            except EOFError:
                answer = ""
            if not answer:
                return BrowserResult.denied(ErrorCode.USER_CANCELLED, "Authentication was cancelled")

            result = parse_redirect(answer, redirect_prefix)
            if result is not None:
                return result
            self._echo(f"That URL does not start with {redirect_prefix}, try again.")
