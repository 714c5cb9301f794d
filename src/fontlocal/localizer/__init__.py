"""Localization of remote web font stylesheets.

Fetches ``@font-face`` stylesheets, downloads the fonts they reference into
a local directory, points the stylesheet at the local copies and appends
metric-matched fallback faces.
"""

from fontlocal.localizer.models import (
    AssetLocation,
    DownloadError,
    FetchError,
    FontFaceDeclaration,
    LocalizerError,
)
from fontlocal.localizer.pipeline import (
    LocalizationPipeline,
    PipelineState,
    generate_css,
)

__all__ = [
    "AssetLocation",
    "DownloadError",
    "FetchError",
    "FontFaceDeclaration",
    "LocalizationPipeline",
    "LocalizerError",
    "PipelineState",
    "generate_css",
]
