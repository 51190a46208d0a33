"""Space configuration management.

Configuration is loaded from a single YAML file:
- publish: the status document served at /spaceapi/v14
- admin: whether the open/close endpoints exist, and their API key

The published state is always reset to closed at load time; nothing is
written back to the file.
"""

import logging
import secrets
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

import yaml

from spaceapi.status import State, Status, StatusDecodeError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.yml"


class ConfigError(Exception):
    """Configuration error."""


@dataclass(frozen=True)
class AdminConfig:
    """Admin surface settings.

    YAML keys are ``enable`` and ``api_key``.
    """
    enabled: bool = False
    api_key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "AdminConfig":
        enabled = data.get("enable", False)
        if not isinstance(enabled, bool):
            raise ConfigError(f"admin.enable must be a boolean, got {enabled!r}")

        api_key = data.get("api_key")
        if api_key is not None:
            if not isinstance(api_key, str):
                raise ConfigError("admin.api_key must be a string")
            if not api_key:
                raise ConfigError("admin.api_key must not be empty")

        return cls(enabled=enabled, api_key=api_key)


@dataclass
class SpaceConfig:
    """Parsed configuration of the published space."""
    publish: Status
    admin: AdminConfig = field(default_factory=AdminConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "SpaceConfig":
        """Build config from a parsed YAML mapping.

        The published state is forced to closed with the current time as
        last change.

        Raises:
            ConfigError: If the document is malformed
        """
        if not isinstance(data, dict):
            raise ConfigError("Config must be a mapping")

        if "publish" not in data:
            raise ConfigError("Missing required section: publish")

        try:
            publish = Status.from_dict(data["publish"])
        except StatusDecodeError as e:
            raise ConfigError(f"Invalid publish section: {e}") from e

        admin_data = data.get("admin") or {}
        if not isinstance(admin_data, dict):
            raise ConfigError("admin section must be a mapping")

        publish.state = replace(
            publish.state or State(), open=False, lastchange=int(time.time())
        )
        return cls(publish=publish, admin=AdminConfig.from_dict(admin_data))


def _parse_yaml(path: Path) -> dict:
    """Parse a YAML file and return contents."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_space_config(path) -> SpaceConfig:
    """Load space configuration from a YAML file.

    Args:
        path: Path to the config file

    Returns:
        SpaceConfig with state reset to closed

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    path = Path(path)
    logger.info("Read config file `%s`", path)

    try:
        data = _parse_yaml(path)
    except OSError as e:
        raise ConfigError(f"Can't read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Can't parse space config: {e}") from e

    return SpaceConfig.from_dict(data)


def generate_api_key() -> str:
    """Generate a random 128-bit API key as 32 hex characters."""
    return secrets.token_hex(16)


def ensure_api_key(config: SpaceConfig) -> SpaceConfig:
    """Fill in a random API key when admin mode lacks one.

    The generated key only exists in memory, so it is printed once to
    stdout and flagged in the log.

    Args:
        config: Loaded configuration

    Returns:
        Config whose admin section has an API key if admin mode is enabled

    Raises:
        ConfigError: If no key could be generated
    """
    if not config.admin.enabled or config.admin.api_key is not None:
        return config

    logger.error("API key isn't set. Generating a random one")
    try:
        key = generate_api_key()
    except (OSError, NotImplementedError) as e:
        raise ConfigError(f"Can't generate API key: {e}") from e

    print(f"Generated key is: {key}")
    return replace(config, admin=replace(config.admin, api_key=key))
