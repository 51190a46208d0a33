"""Endpoint handlers for the server.

Each handler takes the shared SpaceGuard and the request headers and
returns (response_body, http_status); a body of None means an empty
response.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from spaceapi.api import CLOSE_SPACE_PATH, OPEN_SPACE_PATH, STATUS_V14_PATH
from spaceapi_server.auth import AuthError, extract_api_key
from spaceapi_server.guard import SpaceGuard

logger = logging.getLogger(__name__)

Handler = Callable[[SpaceGuard, object], Tuple[Optional[dict], int]]


def handle_status_v14(guard: SpaceGuard, headers) -> Tuple[dict, int]:
    """Handle GET /spaceapi/v14. Never fails."""
    return guard.read().to_dict(), 200


def handle_open_space(guard: SpaceGuard, headers) -> Tuple[Optional[dict], int]:
    """Handle POST /admin/publish/space-open."""
    return _handle_admin(guard, headers, guard.open, "open")


def handle_close_space(guard: SpaceGuard, headers) -> Tuple[Optional[dict], int]:
    """Handle POST /admin/publish/space-close."""
    return _handle_admin(guard, headers, guard.close, "close")


def _handle_admin(guard, headers, action, name: str) -> Tuple[Optional[dict], int]:
    try:
        api_key = extract_api_key(headers)
        action(api_key)
    except AuthError as e:
        logger.warning("Rejected %s request: %s %s", name, e.code, e.message)
        return _error_response(e.code, e.message), e.http_status
    return None, 200


def build_routes(admin_enabled: bool) -> Dict[Tuple[str, str], Handler]:
    """Build the (method, path) -> handler table.

    Admin routes are left out entirely when admin mode is off, so those
    paths resolve as not found rather than unauthorized.
    """
    routes: Dict[Tuple[str, str], Handler] = {
        ("GET", STATUS_V14_PATH): handle_status_v14,
    }

    if admin_enabled:
        routes[("POST", OPEN_SPACE_PATH)] = handle_open_space
        routes[("POST", CLOSE_SPACE_PATH)] = handle_close_space

    return routes


def _error_response(code: str, message: str) -> dict:
    """Build error response dict."""
    return {"error": {"code": code, "message": message}}
