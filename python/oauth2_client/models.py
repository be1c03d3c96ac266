"""Client configuration, token and operation result types."""

from __future__ import annotations

import os
import time
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

from .constants import (
    DEFAULT_EXPIRES_IN,
    DEFAULT_REDIRECT_URI,
    DEFAULT_TIMEOUT_SECONDS,
    ENV_PREFIX,
    EXPIRY_BUFFER_SECONDS,
)
from .errors import ConfigError, MalformedResponseError


def _now() -> float:
    return time.time()


@dataclass(frozen=True)
class ClientConfig:
    """
    Configuration for an OAuth2Client.

    Attributes:
        client_id: Client identifier issued during registration
        authorization_url: Authorization endpoint URL
        token_url: Token endpoint URL
        client_secret: Client secret (None for public clients)
        redirect_uri: Redirect URI registered with the provider
        scopes: Space-delimited scope string
        use_pkce: Send a PKCE S256 challenge with the authorization request
        revocation_url: Token revocation endpoint (RFC 7009), if any
        additional_auth_params: Extra authorization request query parameters
        additional_token_params: Extra code exchange form fields
        timeout: Request timeout in seconds

    Example:
        ```python
        config = ClientConfig(
            client_id="my-app",
            authorization_url="https://auth.example.com/authorize",
            token_url="https://auth.example.com/token",
            scopes="openid profile",
        )
        ```
    """

    client_id: str
    authorization_url: str
    token_url: str
    client_secret: str | None = None
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scopes: str | None = None
    use_pkce: bool = True
    revocation_url: str | None = None
    additional_auth_params: Mapping[str, str] | None = None
    additional_token_params: Mapping[str, str] | None = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.client_id:
            raise ConfigError("client_id is required")
        if not self.authorization_url:
            raise ConfigError("authorization_url is required")
        if not self.token_url:
            raise ConfigError("token_url is required")
        if not self.redirect_uri:
            raise ConfigError("redirect_uri is required")
        if self.timeout <= 0:
            raise ConfigError("timeout must be greater than 0")

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, **overrides: Any) -> ClientConfig:
        """Build a config from ``{prefix}CLIENT_ID``-style environment variables.

        Keyword overrides that are not None take precedence over the environment.
        """

        def env(name: str) -> str | None:
            return os.environ.get(f"{prefix}{name}") or None

        values: dict[str, Any] = {
            "client_id": env("CLIENT_ID") or "",
            "authorization_url": env("AUTHORIZATION_URL") or "",
            "token_url": env("TOKEN_URL") or "",
            "client_secret": env("CLIENT_SECRET"),
            "scopes": env("SCOPES"),
            "revocation_url": env("REVOCATION_URL"),
        }
        if env("REDIRECT_URI"):
            values["redirect_uri"] = env("REDIRECT_URI")
        if env("USE_PKCE"):
            values["use_pkce"] = env("USE_PKCE").lower() not in ("0", "false", "no", "off")
        if env("TIMEOUT"):
            try:
                values["timeout"] = float(env("TIMEOUT"))
            except ValueError:
                raise ConfigError(f"{prefix}TIMEOUT must be a number") from None

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


_KNOWN_FIELDS = ("access_token", "token_type", "expires_in", "refresh_token", "scope")


@dataclass
class TokenResponse:
    """OAuth 2.0 token response (RFC 6749 section 5.1) with its absolute expiry.

    ``issued_at`` and ``expires_at`` are Unix timestamps. Provider-specific
    fields that are not part of the standard response are kept in ``extra``.
    """

    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 0
    refresh_token: str | None = None
    scope: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    issued_at: float = 0.0
    expires_at: float = 0.0

    @classmethod
    def from_response(cls, data: Any, issued_at: float | None = None) -> TokenResponse:
        """Parse a decoded JSON token response and stamp its expiry.

        Keys are matched case-insensitively. When a field appears under several
        spellings, the exact lower-case key wins, otherwise the first one seen;
        the other spellings are kept in ``extra``. Raises MalformedResponseError
        if the payload is not an object or has no usable access token.
        """
        if not isinstance(data, dict):
            raise MalformedResponseError("Token response is not a JSON object")

        sources: dict[str, str] = {}
        for key in data:
            normalized = str(key).lower()
            if normalized in _KNOWN_FIELDS and (normalized not in sources or key == normalized):
                sources[normalized] = key

        known = {name: data[key] for name, key in sources.items()}
        chosen = set(sources.values())
        extra = {key: value for key, value in data.items() if key not in chosen}

        access_token = known.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise MalformedResponseError("Token response has no access_token")

        expires_in = known.get("expires_in") or 0
        try:
            expires_in = int(expires_in)
        except (TypeError, ValueError):
            raise MalformedResponseError(f"Invalid expires_in value: {expires_in!r}") from None

        token = cls(
            access_token=access_token,
            token_type=known.get("token_type") or "Bearer",
            expires_in=expires_in,
            refresh_token=known.get("refresh_token") or None,
            scope=known.get("scope") or None,
            extra=extra,
        )
        token.stamp(_now() if issued_at is None else issued_at)
        return token

    def stamp(self, issued_at: float) -> None:
        """Set the absolute expiry relative to ``issued_at``."""
        lifetime = self.expires_in if self.expires_in > 0 else DEFAULT_EXPIRES_IN
        self.issued_at = issued_at
        self.expires_at = issued_at + lifetime

    def is_expired(self, now: float | None = None) -> bool:
        current = _now() if now is None else now
        return self.expires_at <= current + EXPIRY_BUFFER_SECONDS

    @property
    def expired(self) -> bool:
        return self.is_expired()

    def copy(self) -> TokenResponse:
        return replace(self, extra=dict(self.extra))

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["extra"] = dict(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TokenResponse:
        """Restore a token previously produced by ``to_dict``."""
        names = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in names}
        values["extra"] = dict(values.get("extra") or {})
        return cls(**values)


@dataclass(frozen=True)
class OperationResult:
    """Outcome of an OAuth operation: a token on success, an error code otherwise."""

    success: bool
    token: TokenResponse | None = None
    error: str | None = None
    error_description: str | None = None
    cause: Exception | None = field(default=None, compare=False, repr=False)

    @classmethod
    def succeeded(cls, token: TokenResponse) -> OperationResult:
        if token is None:
            raise ValueError("A successful result requires a token")
        return cls(success=True, token=token)

    @classmethod
    def failed(
        cls,
        error: str,
        description: str | None = None,
        cause: Exception | None = None,
    ) -> OperationResult:
        return cls(success=False, error=error, error_description=description, cause=cause)
