"""Authentication middleware for the admin endpoints.

Provides:
- API key extraction from the X-API-Key request header
- Constant-time API key comparison
"""

import hmac as hmac_mod
import logging
from typing import Optional

from spaceapi.api import API_KEY_HEADER

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Authentication error with error code and HTTP status."""

    def __init__(self, code: str, message: str, http_status: int):
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(f"{code}: {message}")


def extract_api_key(headers) -> str:
    """Extract the API key from request headers.

    The value is passed through unchanged; whether it is correct is
    decided by the status guard.

    Args:
        headers: Request headers (case-insensitive mapping, e.g.
            http.client.HTTPMessage)

    Returns:
        Raw header value

    Raises:
        AuthError: If the header is absent
    """
    api_key = headers.get(API_KEY_HEADER) if headers is not None else None
    if api_key is None:
        raise AuthError("E300", "API key missing", 401)
    return api_key


def check_api_key(presented: str, expected: Optional[str]) -> None:
    """Compare a presented API key with the configured one.

    Args:
        presented: Key taken from the request
        expected: Configured key, or None when admin mode is off

    Raises:
        AuthError: On mismatch, or if no key is configured
    """
    if expected is None:
        raise AuthError("E301", "Invalid API key", 401)

    if not hmac_mod.compare_digest(presented.encode("utf-8"), expected.encode("utf-8")):
        raise AuthError("E301", "Invalid API key", 401)
