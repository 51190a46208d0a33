"""SpaceAPI status document types shared by server and client."""

from spaceapi.status import (
    API_VERSION,
    Contact,
    Location,
    State,
    Status,
    StatusDecodeError,
)

__all__ = [
    "API_VERSION",
    "Contact",
    "Location",
    "State",
    "Status",
    "StatusDecodeError",
]
