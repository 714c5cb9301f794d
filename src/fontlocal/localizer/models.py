"""Localizer data models and exceptions."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit


class LocalizerError(Exception):
    """Base exception for stylesheet localization errors."""

    pass


class FetchError(LocalizerError):
    """A remote stylesheet could not be fetched."""

    pass


class DownloadError(LocalizerError):
    """A remote font asset could not be downloaded."""

    pass


@dataclass(frozen=True)
class FontFaceDeclaration:
    """One ``@font-face`` rule reduced to what the pipeline needs.

    ``src`` is the first ``url(...)`` source of the rule. It is ``None`` only
    for families configured by the user without a remote file.
    """

    family: str
    src: str | None
    fallbacks: tuple[str, ...] = ()


def _resolve_segments(path: str) -> list[str]:
    """Split a URL path into segments with ``.``/``..`` resolved."""
    segments: list[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)
    return segments


@dataclass(frozen=True)
class AssetLocation:
    """Where a remote font lives locally, on disk and on the site.

    The mapping is a pure function of the URL's host and path, so distinct
    remote files never share a local path.
    """

    src: str
    path: Path
    local_url: str

    @classmethod
    def from_src(
        cls, src: str, font_directory: Path | str, mount_prefix: str = "/"
    ) -> AssetLocation:
        """Derive the location of ``src`` under ``font_directory``.

        Args:
            src: Absolute font URL
            font_directory: Local directory mirroring remote hosts
            mount_prefix: URL prefix under which ``font_directory`` is served

        Returns:
            The asset location

        Raises:
            ValueError: If ``src`` is not an absolute URL with a file path
        """
        parts = urlsplit(src)
        if not parts.netloc or parts.netloc in (".", ".."):
            raise ValueError(f"Font source is not an absolute URL: {src}")
        segments = _resolve_segments(parts.path)
        if not segments:
            raise ValueError(f"Font source has no file path: {src}")

        path = Path(font_directory, parts.netloc, *segments)
        url_path = posixpath.join(parts.netloc, *segments)
        local_url = f"{mount_prefix.rstrip('/')}/{url_path}"
        return cls(src=src, path=path, local_url=local_url)
