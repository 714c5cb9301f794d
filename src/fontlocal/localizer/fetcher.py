"""Retrieval of remote font-face stylesheets."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from fontlocal.localizer.models import FetchError
from fontlocal.localizer.tasks import run_all

logger = logging.getLogger(__name__)


async def fetch_stylesheet(
    client: httpx.AsyncClient, url: str, *, user_agent: str | None = None
) -> str:
    """Fetch one stylesheet and return its text.

    Raises:
        FetchError: If the request fails or the response is not successful
    """
    headers = {"user-agent": user_agent} if user_agent else None
    logger.debug("Fetching stylesheet %s", url)
    try:
        response = await client.get(url, headers=headers)
    except httpx.HTTPError as e:
        raise FetchError(
            f"Could not fetch the following stylesheet URL: {url} ({e})"
        ) from e
    if not response.is_success:
        raise FetchError(
            f"Could not fetch the following stylesheet URL: {url} "
            f"(HTTP {response.status_code})"
        )
    return response.text


async def fetch_stylesheets(
    client: httpx.AsyncClient,
    urls: Sequence[str],
    *,
    user_agent: str | None = None,
) -> str:
    """Fetch several stylesheets concurrently and concatenate them.

    Texts are joined in the order of ``urls``.

    Raises:
        FetchError: If any stylesheet cannot be fetched
    """
    texts = await run_all(
        fetch_stylesheet(client, url, user_agent=user_agent) for url in urls
    )
    return "\n".join(texts)
