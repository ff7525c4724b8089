"""Pytest configuration and fixtures for the VSCode search provider tests."""

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import Mock

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"
REPOSITORY_ROOT = Path(__file__).parent.parent

# Make the package importable without installing it
if str(REPOSITORY_ROOT) not in sys.path:
    sys.path.insert(0, str(REPOSITORY_ROOT))


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding storage.json samples of different VSCode versions."""
    return FIXTURES_DIR


@pytest.fixture
def providers_dir() -> Path:
    """Directory holding the GNOME Shell search provider manifests."""
    return REPOSITORY_ROOT / "providers"


@pytest.fixture
def write_storage(tmp_path: Path) -> Callable[..., Path]:
    """Write a storage.json document into a config directory below tmp_path."""

    def _write(document: Any, dirname: str = "Code") -> Path:
        config_dir = tmp_path / dirname
        config_dir.mkdir(parents=True, exist_ok=True)
        content = document if isinstance(document, str) else json.dumps(document)
        (config_dir / "storage.json").write_text(content)
        return config_dir

    return _write


def make_app(app_id: str, icon: Optional[str] = "code-oss") -> Mock:
    """Mock Gio.AppInfo with the given ID."""
    app = Mock()
    app.get_id.return_value = app_id
    if icon is None:
        app.get_icon.return_value = None
    else:
        app.get_icon.return_value.to_string.return_value = icon
    return app


@pytest.fixture
def mock_app() -> Mock:
    """An installed Code OSS application."""
    return make_app("code-oss.desktop")


@pytest.fixture
def app_lookup() -> Callable[[List[str]], Callable[[str], Optional[Mock]]]:
    """Build an application lookup that knows only the given desktop IDs."""

    def _lookup(installed: List[str]) -> Callable[[str], Optional[Mock]]:
        apps: Dict[str, Mock] = {desktop_id: make_app(desktop_id) for desktop_id in installed}
        return apps.get

    return _lookup


@pytest.fixture
def mock_bus() -> Mock:
    """Mock pydbus session bus."""
    bus = Mock()
    bus.con = None
    return bus


@pytest.fixture
def app_factory() -> Callable[..., Mock]:
    """Factory for mock Gio.AppInfo objects."""
    return make_app
