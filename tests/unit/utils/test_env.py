"""Unit tests for fontlocal.utils.env module."""

from pathlib import Path

import pytest

from fontlocal.utils.env import get_cache_dir, get_home_dir


class TestCacheDir:
    """Test get_cache_dir function."""

    @pytest.mark.unit
    def test_defaults_to_home_cache(self, isolated_home: Path):
        """Test the cache directory falls back to ~/.cache/fontlocal."""
        assert get_cache_dir() == isolated_home / ".cache" / "fontlocal"

    @pytest.mark.unit
    def test_respects_xdg_cache_home(self, isolated_home: Path, monkeypatch):
        """Test XDG_CACHE_HOME takes precedence over HOME."""
        xdg = isolated_home / "xdg-cache"
        monkeypatch.setenv("XDG_CACHE_HOME", str(xdg))

        assert get_cache_dir() == xdg / "fontlocal"

    @pytest.mark.unit
    def test_ignores_relative_xdg_cache_home(
        self, isolated_home: Path, monkeypatch, caplog
    ):
        """Test a relative XDG_CACHE_HOME is ignored with a warning."""
        monkeypatch.setenv("XDG_CACHE_HOME", "relative/cache")

        assert get_cache_dir() == isolated_home / ".cache" / "fontlocal"
        assert "XDG_CACHE_HOME contains relative path" in caplog.text


class TestHomeDir:
    """Test get_home_dir function."""

    @pytest.mark.unit
    def test_respects_home(self, isolated_home: Path):
        """Test HOME is used when set."""
        assert get_home_dir() == isolated_home
