"""
Pytest configuration and shared fixtures for jarstore tests.

Network access is replaced by an in-memory transport; subprocesses are
replaced by mocks.
"""

import json
import pytest
from unittest.mock import MagicMock
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from jarstore.app_catalog import AppDescriptor
from jarstore.common.exceptions import TransportError
from jarstore.config import StoreConfig
from jarstore.installed import InstallationStore


CATALOG_URL = "https://example.test/apps.json"


class FakeTransport:
    """Serves canned bytes per URL; unknown URLs fail like a 404."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.requests = []

    def fetch_bytes(self, url):
        self.requests.append(url)
        if url not in self.responses:
            raise TransportError(url, "HTTP 404")
        return self.responses[url]

    def fetch_json(self, url):
        data = self.fetch_bytes(url)
        try:
            return json.loads(data.decode("utf-8"))
        except ValueError as e:
            raise TransportError(url, f"invalid JSON: {e}", cause=e)

    def download_file(self, url, dest):
        data = self.fetch_bytes(url)
        Path(dest).write_bytes(data)
        return Path(dest)


def make_app(name="Weather", version="2.0", url="https://example.test/u1.jar", **kw):
    fields = dict(
        name=name,
        description=kw.pop("description", f"{name} app"),
        version=version,
        author=kw.pop("author", "DRAGE"),
        icon=kw.pop("icon", "https://example.test/icon.png"),
        download_url=url,
    )
    return AppDescriptor(**fields)


def catalog_document(*apps):
    return json.dumps({"apps": [app.to_dict() for app in apps]}).encode("utf-8")


# ============ Environment Fixtures ============

@pytest.fixture
def store_config(tmp_path: Path) -> StoreConfig:
    """Configuration rooted in a temporary directory."""
    return StoreConfig(catalog_url=CATALOG_URL, python="python3").with_root(tmp_path)


@pytest.fixture
def store(store_config) -> InstallationStore:
    return InstallationStore.from_config(store_config)


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def weather_app() -> AppDescriptor:
    return make_app()


# ============ Subprocess Fixtures ============

@pytest.fixture
def compiler_ok():
    """subprocess.run stand-in reporting a successful compile."""
    return MagicMock(return_value=MagicMock(returncode=0, stdout="", stderr=""))


@pytest.fixture
def compiler_fails():
    """subprocess.run stand-in reporting a syntax error."""
    return MagicMock(return_value=MagicMock(
        returncode=1,
        stdout="",
        stderr="  File \"jarstore_app.py\", line 3\nSyntaxError: invalid syntax",
    ))


@pytest.fixture
def mock_spawner():
    """subprocess.Popen stand-in."""
    return MagicMock()


# ============ Marker Configuration ============

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "unit: fast unit tests with no external deps"
    )
