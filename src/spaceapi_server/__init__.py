"""Server package for the SpaceAPI status publisher.

The server holds the space status in memory and serves it over HTTP, with
optional API-key protected endpoints to open and close the space.
"""

from spaceapi_server.httpd import (
    Server,
    create_server,
    DEFAULT_PORT,
    DEFAULT_BIND,
)
from spaceapi_server.auth import (
    AuthError,
    API_KEY_HEADER,
    extract_api_key,
)
from spaceapi_server.config import (
    AdminConfig,
    ConfigError,
    SpaceConfig,
    ensure_api_key,
    load_space_config,
)
from spaceapi_server.guard import SpaceGuard

__all__ = [
    # Server
    "Server",
    "create_server",
    "DEFAULT_PORT",
    "DEFAULT_BIND",
    # Auth
    "AuthError",
    "API_KEY_HEADER",
    "extract_api_key",
    # Config
    "AdminConfig",
    "ConfigError",
    "SpaceConfig",
    "ensure_api_key",
    "load_space_config",
    # Guard
    "SpaceGuard",
]
