"""Form-encoded POST requests to the token and revocation endpoints."""

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx

from .errors import MalformedResponseError, OAuthTransportError
from .models import ClientConfig, TokenResponse

logger = logging.getLogger(__name__)

JSON_ACCEPT_HEADERS = {"Accept": "application/json"}


class TokenTransport:
    """Sends token and revocation requests for a single client configuration.

    The ``httpx.AsyncClient`` is borrowed, not owned: whoever created it is
    responsible for closing it.
    """

    def __init__(self, config: ClientConfig, client: httpx.AsyncClient):
        self.config = config
        self._client = client

    async def send_token_request(self, form_fields: Mapping[str, str]) -> TokenResponse | None:
        """POST ``form_fields`` to the token endpoint.

        Returns the parsed token, or None when the endpoint answers with a
        non-2xx status. Raises OAuthTransportError if no response arrived and
        MalformedResponseError if a 2xx body is not a usable token object.
        """
        logger.debug("POST %s (grant_type=%s)", self.config.token_url, form_fields.get("grant_type"))
        try:
            response = await self._client.post(
                self.config.token_url,
                data=dict(form_fields),
                headers=JSON_ACCEPT_HEADERS,
                timeout=self.config.timeout,
            )
        except httpx.HTTPError as e:
            raise OAuthTransportError(f"Token request failed: {e}", cause=e) from e

        if not response.is_success:
            _log_error_response(response)
            return None

        try:
            data = response.json()
        except ValueError:
            raise MalformedResponseError(status_code=response.status_code) from None

        # Issuance time is taken after the response has been received.
        return TokenResponse.from_response(data)

    async def send_revocation_request(
        self, token: str, client_id: str, client_secret: str | None = None
    ) -> bool:
        """Ask the revocation endpoint to revoke ``token`` (RFC 7009).

        Returns True only on a 2xx answer. Never raises for transport errors.
        """
        if not self.config.revocation_url:
            return False

        form = {
            "token": token,
            "token_type_hint": "access_token",
            "client_id": client_id,
        }
        if client_secret:
            form["client_secret"] = client_secret

        try:
            response = await self._client.post(
                self.config.revocation_url,
                data=form,
                headers=JSON_ACCEPT_HEADERS,
                timeout=self.config.timeout,
            )
        except Exception as e:
            logger.warning("Token revocation request failed: %s", e)
            return False

        if not response.is_success:
            logger.warning("Token revocation rejected with HTTP %s", response.status_code)
            return False
        return True


def _log_error_response(response: httpx.Response) -> None:
    error = description = None
    try:
        body = response.json()
        if isinstance(body, dict):
            error = body.get("error")
            description = body.get("error_description")
    except ValueError:
        pass
    logger.warning(
        "Token endpoint returned HTTP %s (error=%s, description=%s)",
        response.status_code,
        error,
        description,
    )
