"""Font metrics and fallback ``@font-face`` synthesis.

A fallback face tells the browser to render a local font (Arial,
Helvetica...) with the vertical metrics of the web font it stands in for, so
text does not shift when the web font arrives. The override percentages are
the web font's ascent, descent and line gap relative to its em square.

Metrics come from a built-in table of common families or, for unknown
families, from the font file itself through fontTools.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from fontTools.ttLib import TTFont, TTLibError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontMetrics:
    """Vertical metrics of a font, in font units."""

    ascent: int
    descent: int
    line_gap: int
    units_per_em: int


# hhea metrics of widely used web and system fonts
BUILTIN_METRICS: dict[str, FontMetrics] = {
    "arial": FontMetrics(ascent=1854, descent=-434, line_gap=67, units_per_em=2048),
    "inter": FontMetrics(ascent=2728, descent=-680, line_gap=0, units_per_em=2816),
    "lato": FontMetrics(ascent=1974, descent=-426, line_gap=0, units_per_em=2000),
    "montserrat": FontMetrics(ascent=968, descent=-251, line_gap=0, units_per_em=1000),
    "open sans": FontMetrics(ascent=2189, descent=-600, line_gap=0, units_per_em=2048),
    "poppins": FontMetrics(ascent=1050, descent=-350, line_gap=100, units_per_em=1000),
    "roboto": FontMetrics(ascent=1900, descent=-500, line_gap=0, units_per_em=2048),
    "times new roman": FontMetrics(
        ascent=1825, descent=-443, line_gap=87, units_per_em=2048
    ),
}


def normalize_family(family: str) -> str:
    """Lower-case ``family``, drop quotes and collapse whitespace."""
    return re.sub(r"\s+", " ", family.strip().strip("'\"")).lower()


def fallback_name(family: str) -> str:
    """Name of the fallback face generated for ``family``."""
    return f"{family} fallback"


def _percentage(value: float) -> str:
    text = f"{value * 100:.4f}".rstrip("0").rstrip(".")
    return f"{text}%"


def _quote(name: str) -> str:
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@runtime_checkable
class MetricsEngine(Protocol):
    """What the pipeline needs from a metrics engine."""

    async def lookup_metrics(self, family: str) -> FontMetrics | None:
        """Return known metrics for ``family``, or None."""
        ...

    async def read_metrics_from_file(self, path: Path) -> FontMetrics | None:
        """Read metrics from a local font file, or None if unreadable."""
        ...

    def synthesize_fallback_block(
        self, metrics: FontMetrics, name: str, fallbacks: Sequence[str]
    ) -> str:
        """Render the fallback ``@font-face`` rule."""
        ...


class FontMetricsEngine:
    """Default metrics engine: built-in table plus fontTools."""

    def __init__(self, table: dict[str, FontMetrics] | None = None) -> None:
        """Initialize the engine.

        Args:
            table: Known metrics by family, keys as produced by
                :func:`normalize_family`. Defaults to ``BUILTIN_METRICS``.
        """
        self.table = BUILTIN_METRICS if table is None else table

    async def lookup_metrics(self, family: str) -> FontMetrics | None:
        return self.table.get(normalize_family(family))

    async def read_metrics_from_file(self, path: Path) -> FontMetrics | None:
        return await asyncio.to_thread(self._read_metrics, Path(path))

    @staticmethod
    def _read_metrics(path: Path) -> FontMetrics | None:
        try:
            with TTFont(path) as font:
                hhea = font["hhea"]
                head = font["head"]
                return FontMetrics(
                    ascent=hhea.ascent,
                    descent=hhea.descent,
                    line_gap=hhea.lineGap,
                    units_per_em=head.unitsPerEm,
                )
        except (OSError, KeyError, TTLibError) as e:
            logger.debug("Cannot read font metrics from %s: %s", path, e)
            return None

    def synthesize_fallback_block(
        self, metrics: FontMetrics, name: str, fallbacks: Sequence[str]
    ) -> str:
        """Render a fallback ``@font-face`` rule.

        Args:
            metrics: Metrics of the web font being replaced
            name: Family name of the fallback face
            fallbacks: Local fonts to use, in order of preference

        Returns:
            The rule, ending with a newline
        """
        em = metrics.units_per_em
        lines = [
            "@font-face {",
            f"  font-family: {_quote(name)};",
        ]
        if fallbacks:
            sources = ", ".join(f"local({_quote(f)})" for f in fallbacks)
            lines.append(f"  src: {sources};")
        lines += [
            f"  size-adjust: {_percentage(1)};",
            f"  ascent-override: {_percentage(metrics.ascent / em)};",
            f"  descent-override: {_percentage(abs(metrics.descent) / em)};",
            f"  line-gap-override: {_percentage(metrics.line_gap / em)};",
            "}",
        ]
        return "\n".join(lines) + "\n"
