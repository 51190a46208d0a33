"""Shared pytest fixtures for spaceapi tests."""

import sys
import threading
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from spaceapi.status import Contact, Location, State, Status
from spaceapi_server.config import AdminConfig, SpaceConfig
from spaceapi_server.httpd import Server

TEST_API_KEY = "sesame-open"


def sample_status() -> Status:
    """Minimal published status for space 'test'."""
    return Status(
        space="test",
        logo="some_logo",
        url="http://localhost",
        contact=Contact(),
        location=Location(),
        state=State(open=False, lastchange=1_700_000_000),
    )


def sample_config(admin_enabled: bool) -> SpaceConfig:
    """Space config with admin mode on (key 'sesame-open') or off."""
    if admin_enabled:
        admin = AdminConfig(enabled=True, api_key=TEST_API_KEY)
    else:
        admin = AdminConfig(enabled=False, api_key=None)
    return SpaceConfig(publish=sample_status(), admin=admin)


@pytest.fixture
def status():
    return sample_status()


@pytest.fixture
def admin_config():
    """Admin mode enabled with API key 'sesame-open'."""
    return sample_config(admin_enabled=True)


@pytest.fixture
def public_config():
    """Admin mode disabled."""
    return sample_config(admin_enabled=False)


@pytest.fixture
def config_file(tmp_path):
    """Write a space config file with admin mode enabled."""
    path = tmp_path / 'config.yml'
    path.write_text("""
publish:
  space: test
  logo: some_logo
  url: http://localhost
  contact:
    email: info@example.org
  location:
    address: Somewhere 1
    lat: 51.0
    lon: 7.5
admin:
  enable: true
  api_key: sesame-open
""")
    return path


@pytest.fixture
def start_server():
    """Factory: start a Server on a free port in a background thread.

    Returns a function taking a SpaceConfig and returning the running
    Server; all servers are shut down after the test.
    """
    servers = []

    def _start(config: SpaceConfig) -> Server:
        server = Server(config=config, bind="127.0.0.1", port=0)
        server.start()

        thread = threading.Thread(target=server.serve_forever)
        thread.daemon = True
        thread.start()

        servers.append(server)
        return server

    yield _start

    for server in servers:
        server.shutdown()
