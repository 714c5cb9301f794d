"""fontlocal - self-host remote web fonts with metric-matched fallbacks."""

__version__ = "0.1.0"

from fontlocal.cli.app import main
from fontlocal.localizer import LocalizationPipeline, generate_css

__all__ = ["LocalizationPipeline", "generate_css", "main"]
