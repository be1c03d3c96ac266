"""Authorization request URL construction."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from .constants import CODE_CHALLENGE_METHOD
from .models import ClientConfig

logger = logging.getLogger(__name__)


def build_authorization_url(
    config: ClientConfig, state: str, code_challenge: str | None = None
) -> str:
    """Return the authorization endpoint URL for one authentication attempt.

    Entries of ``config.additional_auth_params`` are applied last and replace
    any standard parameter with the same name. The code verifier is never
    part of this URL.
    """
    params: dict[str, str] = {
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "response_type": "code",
        "state": state,
    }
    if config.scopes:
        params["scope"] = config.scopes
    if config.use_pkce and code_challenge:
        params["code_challenge"] = code_challenge
        params["code_challenge_method"] = CODE_CHALLENGE_METHOD
    if config.additional_auth_params:
        params.update(config.additional_auth_params)

    auth_url = f"{config.authorization_url}?{urlencode(params)}"
    logger.debug("Built authorization URL for client %s (pkce=%s)", config.client_id, "code_challenge" in params)
    return auth_url
