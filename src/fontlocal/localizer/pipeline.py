"""Stylesheet localization pipeline.

One run turns remote ``@font-face`` stylesheets into a self-hosted one:

    CACHE_LOOKUP -> FETCHING -> EXTRACTING -> DOWNLOADING -> SYNTHESIZING
        -> REWRITING -> CACHING -> DONE

A cache hit jumps from CACHE_LOOKUP straight to DONE. Network failures while
FETCHING or DOWNLOADING end the run in FAILED; nothing is retried and no
cache entry is written. Every stage waits for all of its concurrent tasks
before the next one starts.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from enum import Enum
from pathlib import Path

import httpx

from fontlocal.cache import StylesheetCache
from fontlocal.localizer.css import parse, serialize
from fontlocal.localizer.downloader import download_assets
from fontlocal.localizer.extractor import FallbackResolver, extract_font_faces
from fontlocal.localizer.fallbacks import synthesize_fallbacks
from fontlocal.localizer.fetcher import fetch_stylesheets
from fontlocal.localizer.models import DownloadError, FetchError, FontFaceDeclaration
from fontlocal.localizer.rewriter import rewrite_urls
from fontlocal.metrics import FontMetricsEngine, MetricsEngine
from fontlocal.models import (
    DEFAULT_FONT_DIRECTORY,
    DEFAULT_MOUNT_PREFIX,
    DEFAULT_TIMEOUT,
    Settings,
)

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """Stages of a pipeline run."""

    IDLE = "idle"
    CACHE_LOOKUP = "cache-lookup"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    DOWNLOADING = "downloading"
    SYNTHESIZING = "synthesizing"
    REWRITING = "rewriting"
    CACHING = "caching"
    DONE = "done"
    FAILED = "failed"


def assemble_css(stylesheet: str, fallback_blocks: Iterable[str]) -> str:
    """Join the rewritten stylesheet and fallback faces with blank lines."""
    parts = [part.strip("\n") for part in (stylesheet, *fallback_blocks)]
    parts = [part for part in parts if part.strip()]
    return "\n\n".join(parts) + "\n" if parts else ""


BUNDLE_KEY_PREFIX = "bundle:"


def bundle_cache_key(stylesheets: Sequence[str]) -> str:
    """Cache key of a build combining several stylesheets.

    Prefixed so that a one-stylesheet build never shares the entry written
    by a single-stylesheet run of the same address.
    """
    return BUNDLE_KEY_PREFIX + "\n".join(stylesheets)


class LocalizationPipeline:
    """Localizes remote font stylesheets into a font directory.

    Besides its configuration the pipeline only keeps ``state``, the stage of
    its latest run. Concurrent runs on one instance overwrite each other's
    ``state``; use one pipeline per run when the stage matters. Every call
    parses and owns its own syntax tree.

    Examples:
        pipeline = LocalizationPipeline("./public/astro-fontaine")
        css = await pipeline.generate(
            "https://fonts.googleapis.com/css2?family=Inter",
            family="Inter",
            fallbacks=["Helvetica", "Arial"],
        )
    """

    def __init__(  # noqa: PLR0913  # explicit configuration instead of globals
        self,
        font_directory: Path | str = DEFAULT_FONT_DIRECTORY,
        mount_prefix: str = DEFAULT_MOUNT_PREFIX,
        *,
        engine: MetricsEngine | None = None,
        cache: StylesheetCache | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_concurrency: int | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            font_directory: Directory receiving fonts and cached stylesheets
            mount_prefix: URL prefix under which ``font_directory`` is served
            engine: Metrics engine for fallback faces (default: FontMetricsEngine)
            cache: Stylesheet cache (default: one in ``font_directory``)
            client: HTTP client to reuse; a fresh one is opened per run if None
            timeout: Network timeout in seconds for pipeline-owned clients
            max_concurrency: Optional bound on parallel font downloads
        """
        self.font_directory = Path(font_directory)
        self.mount_prefix = mount_prefix
        self.engine = engine or FontMetricsEngine()
        self.cache = cache or StylesheetCache(self.font_directory)
        self.client = client
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self.state = PipelineState.IDLE

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        engine: MetricsEngine | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> LocalizationPipeline:
        """Create a pipeline configured from ``settings``."""
        return cls(
            settings.font_path,
            settings.mount_prefix,
            engine=engine,
            client=client,
            timeout=settings.timeout,
            max_concurrency=settings.max_concurrency,
        )

    def _transition(self, state: PipelineState) -> None:
        logger.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state

    @asynccontextmanager
    async def _open_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.client is not None:
            yield self.client
            return
        async with httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True
        ) as client:
            yield client

    async def generate(
        self, href: str, family: str, fallbacks: Sequence[str]
    ) -> str:
        """Localize a single stylesheet.

        Args:
            href: Address of the remote stylesheet
            family: Font family the caller expects the stylesheet to declare
            fallbacks: Local fonts used by every family's fallback face

        Returns:
            The rewritten stylesheet followed by the fallback faces

        Raises:
            FetchError: If the stylesheet cannot be fetched
            DownloadError: If a font cannot be downloaded
        """
        return await self._run(
            [href],
            cache_key=href,
            fallbacks=list(fallbacks),
            expected_family=family,
        )

    async def build(self, settings: Settings) -> str:
        """Localize all stylesheets of ``settings`` into one stylesheet.

        Stylesheets are fetched with ``settings.user_agent``. Each family
        takes the fallbacks configured for it or ``default_fallbacks``;
        configured fonts absent from the stylesheets get a fallback face too.

        Raises:
            FetchError: If a stylesheet cannot be fetched
            DownloadError: If a font cannot be downloaded
        """
        return await self._run(
            settings.stylesheets,
            cache_key=(
                bundle_cache_key(settings.stylesheets) if settings.stylesheets else None
            ),
            fallbacks=settings.fallbacks_for,
            extra_fonts=[
                FontFaceDeclaration(
                    family=font.family,
                    src=font.src,
                    fallbacks=tuple(settings.fallbacks_for(font.family)),
                )
                for font in settings.fonts
            ],
            user_agent=settings.user_agent,
        )

    async def _run(  # noqa: PLR0913
        self,
        addresses: Sequence[str],
        *,
        cache_key: str | None,
        fallbacks: Sequence[str] | FallbackResolver,
        extra_fonts: Sequence[FontFaceDeclaration] = (),
        expected_family: str | None = None,
        user_agent: str | None = None,
    ) -> str:
        self.state = PipelineState.IDLE
        self._transition(PipelineState.CACHE_LOOKUP)
        if cache_key is not None:
            cached = self.cache.read(cache_key)
            if cached is not None:
                self._transition(PipelineState.DONE)
                return cached

        async with self._open_client() as client:
            self._transition(PipelineState.FETCHING)
            try:
                text = await fetch_stylesheets(client, addresses, user_agent=user_agent)
            except FetchError:
                self._transition(PipelineState.FAILED)
                raise

            self._transition(PipelineState.EXTRACTING)
            tree = parse(text)
            declarations = extract_font_faces(tree, fallbacks)
            found = {declaration.family for declaration in declarations}
            if expected_family is not None and expected_family not in found:
                logger.warning(
                    "Stylesheet %s declares no font-face for %r",
                    ", ".join(addresses),
                    expected_family,
                )
            declarations += [font for font in extra_fonts if font.family not in found]
            logger.info(
                "Found %d font-face declaration(s) for %d family(ies)",
                len(declarations),
                len({declaration.family for declaration in declarations}),
            )

            self._transition(PipelineState.DOWNLOADING)
            try:
                await download_assets(
                    client,
                    declarations,
                    self.font_directory,
                    max_concurrency=self.max_concurrency,
                )
            except DownloadError:
                self._transition(PipelineState.FAILED)
                raise

        self._transition(PipelineState.SYNTHESIZING)
        blocks = await synthesize_fallbacks(
            self.engine, declarations, self.font_directory
        )

        self._transition(PipelineState.REWRITING)
        rewrite_urls(tree, declarations, self.mount_prefix)
        css = assemble_css(serialize(tree), blocks)

        if cache_key is not None:
            self._transition(PipelineState.CACHING)
            self.cache.write(cache_key, css)

        self._transition(PipelineState.DONE)
        return css


async def generate_css(  # noqa: PLR0913
    href: str,
    family: str,
    fallbacks: Sequence[str],
    font_directory: Path | str = DEFAULT_FONT_DIRECTORY,
    *,
    mount_prefix: str = DEFAULT_MOUNT_PREFIX,
    engine: MetricsEngine | None = None,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Localize one remote stylesheet; see :meth:`LocalizationPipeline.generate`."""
    pipeline = LocalizationPipeline(
        font_directory, mount_prefix, engine=engine, client=client
    )
    return await pipeline.generate(href, family, fallbacks)
