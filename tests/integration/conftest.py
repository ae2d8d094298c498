"""
Integration Test Fixtures.

Fixtures for integration tests - real JSON file store in a temporary data
directory, real configuration files.
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from modules.sticky.core.config import get_app_config, get_settings


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """
    Point the store at a fresh directory for the duration of a test.

    Usage:
        def test_cli(data_dir):
            result = runner.invoke(main, ["--service", "list"])
            assert (data_dir / "sticky-store.json").exists()
    """
    monkeypatch.setenv("STICKY_DATA_DIR", str(tmp_path))
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield tmp_path
    get_settings.cache_clear()
    get_app_config.cache_clear()
