"""Project-level pytest configuration and shared fixtures."""

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep tests away from the user's cache directory and HN_* settings."""
    for name in ("HN_API_BASE_URL", "HN_USER_AGENT", "HN_CACHE_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
    yield
