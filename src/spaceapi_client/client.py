"""HTTP client for the status server.

Opens and closes the space through the admin endpoints and reads the
published status document.
"""

import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Optional

import requests

from spaceapi.api import (
    API_KEY_HEADER,
    CLOSE_SPACE_PATH,
    OPEN_SPACE_PATH,
    STATUS_V14_PATH,
)
from spaceapi.status import Status, StatusDecodeError

logger = logging.getLogger(__name__)

PACKAGE_NAME = "spaceapi-dezentrale"
DEFAULT_TIMEOUT = 30


def get_version() -> str:
    """Get installed package version ('dev' when running from a checkout)."""
    try:
        return version(PACKAGE_NAME)
    except PackageNotFoundError:
        return "dev"


USER_AGENT = f"spaceapi-dezentrale-client/{get_version()}"


class ClientError(Exception):
    """Base exception for client errors."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


class ClientBuildError(ClientError):
    """Client is missing required settings."""

    def __init__(self, message: str):
        super().__init__("E400", message)


class AuthRejectedError(ClientError):
    """Server refused the API key (HTTP 401)."""

    def __init__(self, message: str = "Wrong API key provided, request denied"):
        super().__init__("E301", message)


class RequestFailedError(ClientError):
    """Request did not succeed: unexpected HTTP status or transport failure."""

    retryable = False

    def __init__(self, message: str, status_code: Optional[int] = None, code: str = "E502"):
        self.status_code = status_code
        super().__init__(code, message)


class TransportError(RequestFailedError):
    """Server could not be reached. Safe to retry."""

    retryable = True

    def __init__(self, message: str):
        super().__init__(message, code="E501")


class DecodeError(ClientError):
    """Server answered, but the body is not a valid status document."""

    def __init__(self, message: str):
        super().__init__("E503", message)


class ClientBuilder:
    """Collects client settings; build() validates them."""

    def __init__(self):
        self._api_key: Optional[str] = None
        self._base_url: Optional[str] = None
        self._timeout: float = DEFAULT_TIMEOUT
        self._verify: bool = True

    def api_key(self, key: str) -> "ClientBuilder":
        self._api_key = key
        return self

    def base_url(self, url: str) -> "ClientBuilder":
        self._base_url = url
        return self

    def timeout(self, seconds: float) -> "ClientBuilder":
        self._timeout = seconds
        return self

    def verify(self, verify: bool) -> "ClientBuilder":
        self._verify = verify
        return self

    def build(self) -> "Client":
        """Build the client.

        Raises:
            ClientBuildError: If api_key or base_url is unset
        """
        if not self._api_key:
            raise ClientBuildError("api_key must be set")
        if not self._base_url:
            raise ClientBuildError("base_url must be set")

        return Client(
            base_url=self._base_url,
            api_key=self._api_key,
            timeout=self._timeout,
            verify=self._verify,
        )


class Client:
    """Client for one status server."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
        session: Optional[requests.Session] = None,
    ):
        """Initialize client.

        Args:
            base_url: Server URL (e.g., https://status.example.org)
            api_key: Admin API key, sent with every request
            timeout: Request timeout in seconds
            verify: Verify TLS certificates
            session: Preconfigured requests session (mainly for tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.verify = verify
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
            API_KEY_HEADER: api_key,
        })

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(self, method: str, path: str) -> requests.Response:
        url = self._url(path)
        logger.debug("%s %s", method, url)

        try:
            response = self.session.request(
                method, url, timeout=self.timeout, verify=self.verify
            )
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            raise TransportError(f"Cannot connect to {self.base_url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise RequestFailedError(f"Request to {url} failed: {e}") from e

        if response.status_code == 200:
            return response
        if response.status_code == 401:
            raise AuthRejectedError()
        raise RequestFailedError(
            f"Unexpected status code returned: {response.status_code}",
            status_code=response.status_code,
        )

    def open(self) -> None:
        """Mark the space as open.

        Raises:
            AuthRejectedError: If the API key is refused
            RequestFailedError: On any other failure
        """
        self._request("POST", OPEN_SPACE_PATH)

    def close(self) -> None:
        """Mark the space as closed.

        Raises:
            AuthRejectedError: If the API key is refused
            RequestFailedError: On any other failure
        """
        self._request("POST", CLOSE_SPACE_PATH)

    def status(self) -> Status:
        """Fetch the published status document.

        Raises:
            AuthRejectedError: If the API key is refused
            RequestFailedError: On transport failure or unexpected status
            DecodeError: If the body is not a valid status document
        """
        response = self._request("GET", STATUS_V14_PATH)

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"Can't parse space status: {e}") from e

        try:
            return Status.from_dict(data)
        except StatusDecodeError as e:
            raise DecodeError(f"Can't parse space status: {e}") from e

    def is_open(self) -> bool:
        """Whether the space is open; False when the state is unknown."""
        status = self.status()
        if status.state is None:
            return False
        return bool(status.state.open)
