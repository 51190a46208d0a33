"""Client package for opening, closing and querying a space."""

from spaceapi_client.client import (
    USER_AGENT,
    AuthRejectedError,
    Client,
    ClientBuildError,
    ClientBuilder,
    ClientError,
    DecodeError,
    RequestFailedError,
    TransportError,
)

__all__ = [
    "USER_AGENT",
    "AuthRejectedError",
    "Client",
    "ClientBuildError",
    "ClientBuilder",
    "ClientError",
    "DecodeError",
    "RequestFailedError",
    "TransportError",
]
