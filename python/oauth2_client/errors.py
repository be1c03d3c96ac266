"""Error codes and exception types for the OAuth 2.0 client.

Exceptions are grouped by how far a request got before it failed:

- OAuthValidationError: rejected locally, no network activity happened.
- OAuthTransportError: a request was attempted, the outcome is unknown.
- OAuthProtocolError: a response arrived but could not be used.

Public client operations never raise these. They surface as the ``cause``
of a failed OperationResult alongside one of the ErrorCode strings.
"""

from __future__ import annotations


class ErrorCode:
    USER_CANCELLED = "user_cancelled"
    INVALID_STATE = "invalid_state"
    TOKEN_EXCHANGE_FAILED = "token_exchange_failed"
    EXCHANGE_ERROR = "exchange_error"
    REFRESH_FAILED = "refresh_failed"
    REFRESH_ERROR = "refresh_error"
    NO_REFRESH_TOKEN = "no_refresh_token"
    AUTHENTICATION_ERROR = "authentication_error"
    INVALID_RESPONSE = "invalid_response"
    PARSE_ERROR = "parse_error"


class OAuthError(Exception):
    """Base exception for all OAuth client errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class OAuthValidationError(OAuthError, ValueError):
    """Raised before any network activity when an input is invalid."""


class InvalidLengthError(OAuthValidationError):
    """Raised when a PKCE verifier length is outside the RFC 7636 range."""


class InvalidInputError(OAuthValidationError):
    """Raised when a required input is empty."""


class ConfigError(OAuthValidationError):
    """Raised when a ClientConfig is missing a required value."""


class OAuthTransportError(OAuthError):
    """Raised when a request was sent but no usable response arrived."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class OAuthProtocolError(OAuthError):
    """Raised when a response was received but is semantically invalid."""


class MalformedResponseError(OAuthProtocolError):
    """Raised when a 2xx token response body is not a usable JSON object."""

    def __init__(
        self,
        message: str = "Token response is not a valid JSON object",
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message)
