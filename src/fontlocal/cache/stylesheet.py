"""Cache of generated stylesheets, keyed by their source address.

Each generated stylesheet is stored as ``<md5 of address>.css`` in the font
directory. The key is the address, not the content: once an address has been
processed, later runs reuse the stored text without touching the network
until the file is deleted.
"""

import contextlib
import hashlib
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

CACHE_SUFFIX = ".css"
_FINGERPRINT_LENGTH = 32


def fingerprint(address: str) -> str:
    """Return the fixed-width hex digest used as cache key for ``address``."""
    return hashlib.md5(address.encode("utf-8"), usedforsecurity=False).hexdigest()


class StylesheetCache:
    """Generated stylesheets stored in a directory.

    Examples:
        cache = StylesheetCache("./public/astro-fontaine")
        css = cache.read(href)
        if css is None:
            css = build(href)
            cache.write(href, css)
    """

    def __init__(self, directory: Path | str) -> None:
        """Initialize the cache.

        Args:
            directory: Directory holding the cache files; created on first write
        """
        self.directory = Path(directory)

    def path_for(self, address: str) -> Path:
        """Path of the cache file for ``address``."""
        return self.directory / f"{fingerprint(address)}{CACHE_SUFFIX}"

    def read(self, address: str) -> str | None:
        """Return the cached stylesheet for ``address``, or None on a miss."""
        path = self.path_for(address)
        if not path.is_file():
            logger.debug("Cache miss for %s", address)
            return None
        logger.debug("Cache hit for %s: %s", address, path)
        return path.read_text(encoding="utf-8")

    def write(self, address: str, css: str) -> Path:
        """Store ``css`` as the stylesheet generated for ``address``.

        The file is replaced atomically; concurrent writers for the same
        address produce the same text, so the last one simply wins.

        Returns:
            Path of the cache file
        """
        path = self.path_for(address)
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(css)
            Path(tmp_name).replace(path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                Path(tmp_name).unlink()
            raise
        logger.debug("Cached stylesheet for %s at %s", address, path)
        return path

    def entries(self) -> list[Path]:
        """List cache files, sorted by name.

        Only files named like a fingerprint count, so other stylesheets in
        the font directory (e.g. the build output) are never reported.
        """
        if not self.directory.is_dir():
            return []
        return sorted(
            path
            for path in self.directory.glob(f"*{CACHE_SUFFIX}")
            if path.is_file() and _is_fingerprint(path.stem)
        )

    def clear(self) -> int:
        """Delete all cache files.

        Returns:
            Count of files removed
        """
        removed = 0
        for path in self.entries():
            with contextlib.suppress(FileNotFoundError):
                path.unlink()
                removed += 1
        if removed:
            logger.info("Removed %d cached stylesheet(s) from %s", removed, self.directory)
        return removed


def _is_fingerprint(name: str) -> bool:
    return len(name) == _FINGERPRINT_LENGTH and all(
        c in "0123456789abcdef" for c in name
    )
