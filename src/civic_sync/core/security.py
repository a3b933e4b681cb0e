"""Pre-shared secret verification for the sync trigger."""

import hmac

_BEARER_PREFIX = "Bearer "


class SyncAuthenticationError(Exception):
    """Raised when the sync trigger is called without the expected secret."""

    def __init__(self, message: str = "Unauthorized") -> None:
        self.message = message
        super().__init__(message)


def extract_bearer_token(authorization: str | None) -> str | None:
    """Pull the token out of an ``Authorization: Bearer <token>`` header value.

    Args:
        authorization: Raw header value, possibly None.

    Returns:
        The token, or None when the header is absent or not a bearer header.
    """
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        return None
    token = authorization[len(_BEARER_PREFIX) :].strip()
    return token or None


def verify_sync_secret(authorization: str | None, expected_secret: str) -> None:
    """Compare the presented bearer token with the configured secret.

    The comparison is constant-time.

    Args:
        authorization: Raw ``Authorization`` header value.
        expected_secret: The configured pre-shared secret.

    Raises:
        SyncAuthenticationError: If the token is missing or does not match.
    """
    token = extract_bearer_token(authorization)
    if token is None or not hmac.compare_digest(token.encode(), expected_secret.encode()):
        raise SyncAuthenticationError
