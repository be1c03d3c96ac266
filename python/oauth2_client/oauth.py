"""OAuth 2.0 Authorization Code flow orchestration (with optional PKCE)."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

import httpx

from .authorize import build_authorization_url
from .browser import Browser
from .errors import ErrorCode
from .models import ClientConfig, OperationResult, TokenResponse
from .pkce import generate_pkce
from .state import generate_state, validate_state
from .tokens import TokenManager
from .transport import TokenTransport

logger = logging.getLogger(__name__)


class FlowState(str, Enum):
    IDLE = "idle"
    STATE_GENERATED = "state_generated"
    PKCE_GENERATED = "pkce_generated"
    AUTHORIZATION_URL_BUILT = "authorization_url_built"
    AWAITING_BROWSER = "awaiting_browser"
    STATE_VALIDATED = "state_validated"
    EXCHANGING = "exchanging"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class AuthorizationRequest:
    auth_url: str
    state: str
    code_verifier: str | None = None


class OAuth2Client:
    """OAuth 2.0 client for the Authorization Code flow.

    Usage:
        async with OAuth2Client(config, browser=my_browser) as client:
            result = await client.authenticate()
            if result.success:
                print(client.access_token)

    The client holds at most one token and runs at most one authentication
    attempt at a time. Persisting the token is up to the caller, see
    ``current_token`` and ``set_token``.
    """

    def __init__(
        self,
        config: ClientConfig,
        browser: Browser | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self.browser = browser
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=config.timeout)
        self.transport = TokenTransport(config, self._http_client)
        self.tokens = TokenManager(config, self.transport)
        self.flow_state = FlowState.IDLE
        self._attempt_lock = asyncio.Lock()

    async def __aenter__(self) -> OAuth2Client:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    @property
    def access_token(self) -> str | None:
        return self.tokens.access_token

    @property
    def has_valid_token(self) -> bool:
        return self.tokens.has_valid_token

    @property
    def current_token(self) -> TokenResponse | None:
        return self.tokens.current_token

    def set_token(self, token: TokenResponse | None) -> None:
        self.tokens.set_token(token)

    def start_authorization(self) -> AuthorizationRequest:
        """Generate state (and PKCE pair if enabled) and build the authorization URL.

        Does not touch ``flow_state``, which only tracks ``authenticate`` attempts.
        """
        return self._prepare_request(track=False)

    def _prepare_request(self, track: bool) -> AuthorizationRequest:
        state = generate_state()
        if track:
            self.flow_state = FlowState.STATE_GENERATED

        code_verifier = code_challenge = None
        if self.config.use_pkce:
            pkce = generate_pkce()
            code_verifier, code_challenge = pkce.verifier, pkce.challenge
            if track:
                self.flow_state = FlowState.PKCE_GENERATED

        auth_url = build_authorization_url(self.config, state, code_challenge)
        if track:
            self.flow_state = FlowState.AUTHORIZATION_URL_BUILT
        return AuthorizationRequest(auth_url=auth_url, state=state, code_verifier=code_verifier)

    async def authenticate(self, browser: Browser | None = None) -> OperationResult:
        """Run a full interactive authentication attempt.

        Never raises: every failure is returned as an OperationResult. The
        returned state is checked before any network call is made.
        """
        browser = browser or self.browser
        if browser is None:
            return OperationResult.failed(ErrorCode.AUTHENTICATION_ERROR, "No browser configured")

        async with self._attempt_lock:
            result: OperationResult | None = None
            try:
                result = await self._run_attempt(browser)
            except Exception as e:
                logger.warning("Authentication attempt failed: %s", e)
                result = OperationResult.failed(ErrorCode.AUTHENTICATION_ERROR, str(e), cause=e)
            finally:
                # A cancelled attempt also ends in FAILED.
                succeeded = result is not None and result.success
                self.flow_state = FlowState.SUCCEEDED if succeeded else FlowState.FAILED
            return result

    async def _run_attempt(self, browser: Browser) -> OperationResult:
        request = self._prepare_request(track=True)

        self.flow_state = FlowState.AWAITING_BROWSER
        outcome = await browser(request.auth_url, self.config.redirect_uri)

        if not outcome.success:
            logger.info("Authorization not granted: %s", outcome.error or ErrorCode.USER_CANCELLED)
            return OperationResult.failed(
                outcome.error or ErrorCode.USER_CANCELLED,
                outcome.error_description or "Authentication was cancelled",
            )

        if not validate_state(request.state, outcome.state):
            logger.warning("State mismatch on authorization redirect")
            return OperationResult.failed(
                ErrorCode.INVALID_STATE, "State mismatch - possible CSRF attack"
            )
        self.flow_state = FlowState.STATE_VALIDATED

        if not outcome.code:
            return OperationResult.failed(
                ErrorCode.INVALID_RESPONSE, "No authorization code in response"
            )

        self.flow_state = FlowState.EXCHANGING
        return await self.tokens.exchange_code(outcome.code, request.code_verifier)

    async def exchange_code(self, code: str, code_verifier: str | None = None) -> OperationResult:
        return await self.tokens.exchange_code(code, code_verifier)

    async def refresh(self) -> OperationResult:
        return await self.tokens.refresh()

    async def revoke(self, token: str | None = None) -> bool:
        return await self.tokens.revoke(token)
