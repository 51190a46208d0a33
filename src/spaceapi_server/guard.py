"""Status guard: the authoritative in-memory space state.

All request handlers share one SpaceGuard. Reads take the shared side of a
ReadWriteLock and get a deep copy; open/close take the exclusive side and
replace the whole State object, so a reader never sees a half-applied
change.
"""

import copy
import logging
import time
from dataclasses import replace
from typing import Optional

from spaceapi.status import API_VERSION, State, Status
from spaceapi_server.auth import check_api_key
from spaceapi_server.locking import ReadWriteLock

logger = logging.getLogger(__name__)


def unix_timestamp() -> int:
    """Current time as whole unix seconds."""
    return int(time.time())


class SpaceGuard:
    """Lock-protected owner of one Status record."""

    def __init__(self, status: Status, api_key: Optional[str] = None):
        """Initialize guard.

        Args:
            status: Initial status record (copied; caller keeps its own).
                Its state is reset to closed at the current time.
            api_key: Admin API key; None rejects every open/close
        """
        self._status = copy.deepcopy(status)
        self._status.state = replace(
            self._status.state or State(), open=False, lastchange=unix_timestamp()
        )
        self._api_key = api_key
        self._lock = ReadWriteLock()

    def open(self, api_key: str) -> None:
        """Mark the space as open.

        Raises:
            AuthError: If api_key does not match; state is left untouched
        """
        self._set_open(api_key, True)

    def close(self, api_key: str) -> None:
        """Mark the space as closed.

        Raises:
            AuthError: If api_key does not match; state is left untouched
        """
        self._set_open(api_key, False)

    def _set_open(self, api_key: str, is_open: bool) -> None:
        with self._lock.write_locked():
            check_api_key(api_key, self._api_key)

            previous = self._status.state.lastchange or 0
            self._status.state = self._status.state.changed(
                is_open, max(unix_timestamp(), previous)
            )
        logger.info("Space %s is now %s", self._status.space, "open" if is_open else "closed")

    def read(self) -> Status:
        """Return a snapshot of the record with api_compatibility set."""
        with self._lock.read_locked():
            status = copy.deepcopy(self._status)
        status.api_compatibility = [API_VERSION]
        return status

    @property
    def is_open(self) -> bool:
        with self._lock.read_locked():
            return bool(self._status.state.open)
