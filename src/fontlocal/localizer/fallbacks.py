"""Orchestration of fallback ``@font-face`` synthesis, one per family."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from fontlocal.localizer.models import AssetLocation, FontFaceDeclaration
from fontlocal.localizer.tasks import run_all
from fontlocal.metrics import MetricsEngine, fallback_name

logger = logging.getLogger(__name__)


def unique_families(
    declarations: Iterable[FontFaceDeclaration],
) -> list[FontFaceDeclaration]:
    """Keep the first declaration of every family.

    Weight, style and unicode range do not matter for the fallback face, so
    one declaration stands for the whole family.
    """
    seen: set[str] = set()
    unique: list[FontFaceDeclaration] = []
    for declaration in declarations:
        if declaration.family in seen:
            continue
        seen.add(declaration.family)
        unique.append(declaration)
    return unique


async def synthesize_fallback(
    engine: MetricsEngine,
    declaration: FontFaceDeclaration,
    font_directory: Path | str,
) -> str | None:
    """Build the fallback face of one family.

    The engine's own table is consulted first; only when it does not know
    the family is the downloaded copy of the declaration's source read.

    Returns:
        The fallback rule, or None when no metrics are available
    """
    metrics = await engine.lookup_metrics(declaration.family)
    if metrics is None and declaration.src is not None:
        location = AssetLocation.from_src(declaration.src, font_directory)
        metrics = await engine.read_metrics_from_file(location.path)

    if metrics is None:
        logger.warning(
            "Could not find metrics for font %r (src: %s)",
            declaration.family,
            declaration.src,
        )
        return None

    return engine.synthesize_fallback_block(
        metrics, fallback_name(declaration.family), declaration.fallbacks
    )


async def synthesize_fallbacks(
    engine: MetricsEngine,
    declarations: Iterable[FontFaceDeclaration],
    font_directory: Path | str,
) -> list[str]:
    """Build fallback faces for every distinct family of ``declarations``.

    Families are processed concurrently; the result follows the order in
    which families first appear. Families without metrics contribute
    nothing.
    """
    blocks = await run_all(
        synthesize_fallback(engine, declaration, font_directory)
        for declaration in unique_families(declarations)
    )
    return [block for block in blocks if block]
