"""Environment-aware path resolution utilities.

Resolves the directories fontlocal keeps its own state in (the log file)
following the XDG Base Directory specification. Font assets and cached
stylesheets live in the project's font directory instead, see
:mod:`fontlocal.models`.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

APP_NAME = "fontlocal"


def _xdg_dir(xdg_var_name: str) -> Path | None:
    """Return ``$XDG_*/fontlocal`` when the variable holds an absolute path.

    Per XDG spec, relative paths are invalid and must be ignored.
    """
    xdg_value = os.environ.get(xdg_var_name)
    if not xdg_value:
        return None
    xdg_path = Path(xdg_value)
    if not xdg_path.is_absolute():
        logger.warning(
            "%s contains relative path '%s' which violates "
            "XDG Base Directory specification. Ignoring and using default.",
            xdg_var_name,
            xdg_value,
        )
        return None
    return xdg_path / APP_NAME


def get_home_dir() -> Path:
    """Get the user's home directory, respecting HOME."""
    home = os.environ.get("HOME")
    return Path(home) if home else Path.home()


def get_cache_dir() -> Path:
    """Get the application's cache directory.

    Respects XDG_CACHE_HOME and HOME environment variables.
    Falls back to ~/.cache/fontlocal.

    Returns:
        Path to the fontlocal cache directory
    """
    return _xdg_dir("XDG_CACHE_HOME") or get_home_dir() / ".cache" / APP_NAME
