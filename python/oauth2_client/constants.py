"""
OAuth 2.0 client constants
Protocol defaults shared by the authorization, token and revocation requests
"""

# Client defaults
DEFAULT_REDIRECT_URI = "http://localhost:8080/callback"
DEFAULT_TIMEOUT_SECONDS = 30.0

# PKCE (RFC 7636)
MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128
DEFAULT_VERIFIER_LENGTH = 64
CODE_CHALLENGE_METHOD = "S256"

# Token lifetime
DEFAULT_EXPIRES_IN = 3600  # used when the provider omits expires_in
EXPIRY_BUFFER_SECONDS = 60  # clock-skew allowance

# Environment variable prefix for ClientConfig.from_env
ENV_PREFIX = "OAUTH2_"
