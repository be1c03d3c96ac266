"""Token lifecycle: holds the current token and runs exchange, refresh and revoke."""

from __future__ import annotations

import asyncio
import logging

from .errors import ErrorCode
from .models import ClientConfig, OperationResult, TokenResponse
from .transport import TokenTransport

logger = logging.getLogger(__name__)


class TokenManager:
    """Owns the single current token of a client.

    Read paths are synchronous. Every operation that replaces or clears the
    token runs under one asyncio lock, so concurrent exchange/refresh/revoke
    calls on the same manager are applied one at a time. A cancelled
    operation leaves the held token untouched.
    """

    def __init__(self, config: ClientConfig, transport: TokenTransport):
        self.config = config
        self._transport = transport
        self._token: TokenResponse | None = None
        self._lock = asyncio.Lock()

    @property
    def access_token(self) -> str | None:
        token = self._token
        if token is None or token.is_expired():
            return None
        return token.access_token

    @property
    def has_valid_token(self) -> bool:
        return self.access_token is not None

    @property
    def current_token(self) -> TokenResponse | None:
        """Copy of the held token, returned even when it has expired."""
        return self._token.copy() if self._token else None

    def set_token(self, token: TokenResponse | None) -> None:
        """Replace the held token, e.g. with one restored from caller storage."""
        self._token = token.copy() if token else None

    async def exchange_code(self, code: str, code_verifier: str | None = None) -> OperationResult:
        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.config.redirect_uri,
            "client_id": self.config.client_id,
        }
        if self.config.client_secret:
            form["client_secret"] = self.config.client_secret
        if self.config.use_pkce and code_verifier:
            form["code_verifier"] = code_verifier
        if self.config.additional_token_params:
            form.update(self.config.additional_token_params)

        async with self._lock:
            try:
                token = await self._transport.send_token_request(form)
            except Exception as e:
                logger.warning("Authorization code exchange error: %s", e)
                return OperationResult.failed(ErrorCode.EXCHANGE_ERROR, str(e), cause=e)

            if token is None:
                return OperationResult.failed(
                    ErrorCode.TOKEN_EXCHANGE_FAILED, "Failed to exchange code for token"
                )

            self._token = token
        logger.info("Authorization code exchanged for %s token", token.token_type)
        return OperationResult.succeeded(token.copy())

    async def refresh(self) -> OperationResult:
        async with self._lock:
            current = self._token
            if current is None or not current.refresh_token:
                return OperationResult.failed(ErrorCode.NO_REFRESH_TOKEN, "No refresh token available")

            form = {
                "grant_type": "refresh_token",
                "refresh_token": current.refresh_token,
                "client_id": self.config.client_id,
            }
            if self.config.client_secret:
                form["client_secret"] = self.config.client_secret
            if self.config.scopes:
                form["scope"] = self.config.scopes

            try:
                token = await self._transport.send_token_request(form)
            except Exception as e:
                logger.warning("Token refresh error: %s", e)
                return OperationResult.failed(ErrorCode.REFRESH_ERROR, str(e), cause=e)

            if token is None:
                return OperationResult.failed(ErrorCode.REFRESH_FAILED, "Failed to refresh token")

            # Providers commonly omit refresh_token on refresh responses.
            if not token.refresh_token:
                token.refresh_token = current.refresh_token

            self._token = token
        logger.info("Refreshed access token")
        return OperationResult.succeeded(token.copy())

    async def revoke(self, token: str | None = None) -> bool:
        """Revoke ``token`` (default: the held access token) and clear local state.

        The held token is cleared whatever the server answers. Returns the
        server's verdict, or True when there was nothing to call.
        """
        async with self._lock:
            if not self.config.revocation_url:
                self._token = None
                return True

            token = token or (self._token.access_token if self._token else None)
            if not token:
                return True

            revoked = await self._transport.send_revocation_request(
                token, self.config.client_id, self.config.client_secret
            )
            self._token = None

        if revoked:
            logger.info("Token revoked")
        else:
            logger.warning("Token revocation failed; local token cleared anyway")
        return revoked
