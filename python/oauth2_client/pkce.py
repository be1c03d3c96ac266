"""PKCE (Proof Key for Code Exchange, RFC 7636) verifier and S256 challenge generation."""

from __future__ import annotations

import base64
import hashlib
import secrets
from dataclasses import dataclass

from .constants import (
    CODE_CHALLENGE_METHOD,
    DEFAULT_VERIFIER_LENGTH,
    MAX_VERIFIER_LENGTH,
    MIN_VERIFIER_LENGTH,
)
from .errors import InvalidInputError, InvalidLengthError


@dataclass(frozen=True)
class PKCEPair:
    verifier: str
    challenge: str
    method: str = CODE_CHALLENGE_METHOD


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def generate_code_verifier(length: int = DEFAULT_VERIFIER_LENGTH) -> str:
    """Return a random code verifier built from ``length`` secure random bytes.

    ``length`` counts bytes, not characters: the result is the unpadded
    base64url expansion of those bytes, so 64 bytes give 86 characters.
    """
    if length < MIN_VERIFIER_LENGTH or length > MAX_VERIFIER_LENGTH:
        raise InvalidLengthError(
            f"Length must be between {MIN_VERIFIER_LENGTH} and {MAX_VERIFIER_LENGTH}, got {length}"
        )
    return _b64url(secrets.token_bytes(length))


def generate_code_challenge(verifier: str) -> str:
    if not verifier:
        raise InvalidInputError("Code verifier must not be empty")
    digest = hashlib.sha256(verifier.encode("utf-8")).digest()
    return _b64url(digest)


def generate_pkce(length: int = DEFAULT_VERIFIER_LENGTH) -> PKCEPair:
    verifier = generate_code_verifier(length)
    challenge = generate_code_challenge(verifier)
    return PKCEPair(verifier=verifier, challenge=challenge)
