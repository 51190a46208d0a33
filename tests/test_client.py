"""Tests for spaceapi_client/client.py - status server client."""

import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

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

STATUS_DOC = {
    "api_compatibility": ["14"],
    "space": "test",
    "logo": "some_logo",
    "url": "http://localhost",
    "contact": {},
    "location": {},
    "state": {"open": True, "lastchange": 1700000000},
}


def _response(status_code=200, json_data=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def session():
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def client(session):
    return Client("http://status.example.org/", "sesame-open", session=session)


class TestClientBuilder:
    """Tests for ClientBuilder."""

    def test_build(self):
        client = ClientBuilder().api_key("key").base_url("http://x").build()
        assert isinstance(client, Client)
        assert client.base_url == "http://x"
        assert client.api_key == "key"

    def test_missing_api_key(self):
        with pytest.raises(ClientBuildError, match="api_key"):
            ClientBuilder().base_url("http://x").build()

    def test_missing_base_url(self):
        with pytest.raises(ClientBuildError, match="base_url"):
            ClientBuilder().api_key("key").build()

    def test_options(self):
        client = (
            ClientBuilder()
            .api_key("key")
            .base_url("https://x")
            .timeout(5)
            .verify(False)
            .build()
        )
        assert client.timeout == 5
        assert client.verify is False


class TestClientRequests:
    """Tests for request building."""

    def test_headers(self, client, session):
        """User agent and API key are set on the session."""
        assert session.headers["User-Agent"] == USER_AGENT
        assert session.headers["X-API-Key"] == "sesame-open"
        assert USER_AGENT.startswith("spaceapi-dezentrale-client/")

    def test_open_url(self, client, session):
        """Trailing slash on base URL is not doubled."""
        session.request.return_value = _response(200)
        client.open()
        session.request.assert_called_once_with(
            "POST",
            "http://status.example.org/admin/publish/space-open",
            timeout=30,
            verify=True,
        )

    def test_close_url(self, client, session):
        session.request.return_value = _response(200)
        client.close()
        args = session.request.call_args[0]
        assert args == ("POST", "http://status.example.org/admin/publish/space-close")

    def test_status_and_is_open_share_url(self, client, session):
        """status() and is_open() build the same URL."""
        session.request.return_value = _response(200, STATUS_DOC)
        client.status()
        client.is_open()
        urls = [c[0][1] for c in session.request.call_args_list]
        assert urls == ["http://status.example.org/spaceapi/v14"] * 2


class TestClientResults:
    """Tests for response mapping."""

    @pytest.mark.parametrize("action", ["open", "close"])
    def test_admin_ok(self, client, session, action):
        session.request.return_value = _response(200)
        assert getattr(client, action)() is None

    @pytest.mark.parametrize("action", ["open", "close", "status"])
    def test_unauthorized(self, client, session, action):
        session.request.return_value = _response(401)
        with pytest.raises(AuthRejectedError):
            getattr(client, action)()

    @pytest.mark.parametrize("code", [404, 500, 403])
    def test_other_status(self, client, session, code):
        session.request.return_value = _response(code)
        with pytest.raises(RequestFailedError) as exc_info:
            client.open()
        assert exc_info.value.status_code == code
        assert not isinstance(exc_info.value, TransportError)
        assert exc_info.value.retryable is False

    @pytest.mark.parametrize("exc", [
        requests.exceptions.ConnectionError("refused"),
        requests.exceptions.Timeout("slow"),
    ])
    def test_transport_error(self, client, session, exc):
        """Connection failures are retryable and chain the cause."""
        session.request.side_effect = exc
        with pytest.raises(TransportError) as exc_info:
            client.open()
        assert exc_info.value.retryable is True
        assert exc_info.value.__cause__ is exc
        assert isinstance(exc_info.value, RequestFailedError)

    def test_other_request_exception(self, client, session):
        session.request.side_effect = requests.exceptions.InvalidURL("bad")
        with pytest.raises(RequestFailedError):
            client.status()

    def test_status_decoded(self, client, session):
        session.request.return_value = _response(200, STATUS_DOC)
        status = client.status()
        assert status.space == "test"
        assert status.state.open is True
        assert status.api_compatibility == ["14"]

    def test_status_invalid_json(self, client, session):
        session.request.return_value = _response(200, json_error=ValueError("no json"))
        with pytest.raises(DecodeError):
            client.status()

    def test_status_wrong_shape(self, client, session):
        session.request.return_value = _response(200, {"space": "test"})
        with pytest.raises(DecodeError, match="logo"):
            client.status()

    def test_errors_share_base(self):
        for cls in (AuthRejectedError, RequestFailedError, TransportError, DecodeError):
            assert issubclass(cls, ClientError)
        assert not issubclass(DecodeError, RequestFailedError)


class TestIsOpen:
    """Tests for is_open projection."""

    def test_open(self, client, session):
        session.request.return_value = _response(200, STATUS_DOC)
        assert client.is_open() is True

    def test_closed(self, client, session):
        doc = dict(STATUS_DOC, state={"open": False})
        session.request.return_value = _response(200, doc)
        assert client.is_open() is False

    def test_no_state(self, client, session):
        doc = {k: v for k, v in STATUS_DOC.items() if k != "state"}
        session.request.return_value = _response(200, doc)
        assert client.is_open() is False

    def test_state_without_open(self, client, session):
        doc = dict(STATUS_DOC, state={"lastchange": 1})
        session.request.return_value = _response(200, doc)
        assert client.is_open() is False


class TestClientAgainstServer:
    """Client talking to a real server."""

    def test_round_trip(self, start_server, admin_config):
        server = start_server(admin_config)
        host, port = server.address
        client = ClientBuilder().base_url(f"http://{host}:{port}").api_key("sesame-open").build()

        assert client.is_open() is False
        client.open()
        assert client.is_open() is True
        status = client.status()
        assert status.api_compatibility == ["14"]
        client.close()
        assert client.is_open() is False

    def test_wrong_key(self, start_server, admin_config):
        server = start_server(admin_config)
        host, port = server.address
        client = ClientBuilder().base_url(f"http://{host}:{port}").api_key("sesame").build()

        with pytest.raises(AuthRejectedError):
            client.open()
        assert client.is_open() is False

    def test_admin_disabled(self, start_server, public_config):
        server = start_server(public_config)
        host, port = server.address
        client = ClientBuilder().base_url(f"http://{host}:{port}").api_key("sesame-open").build()

        with pytest.raises(RequestFailedError) as exc_info:
            client.open()
        assert exc_info.value.status_code == 404


class TestClientImports:
    """The client package stands alone from the server."""

    def test_does_not_load_server(self):
        """Importing the client pulls in neither the server nor PyYAML."""
        src = Path(__file__).parent.parent / "src"
        env = dict(os.environ, PYTHONPATH=str(src))
        result = subprocess.run(
            [
                sys.executable, "-c",
                "import sys, spaceapi_client; "
                "print('spaceapi_server' in sys.modules, 'yaml' in sys.modules)",
            ],
            capture_output=True, text=True, env=env, timeout=30,
        )
        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "False False"
