"""Rewriting of remote font URLs to their same-origin copies."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tinycss2.ast import Node

from fontlocal.localizer.css import Stylesheet, make_url, url_value, walk
from fontlocal.localizer.models import AssetLocation, FontFaceDeclaration

logger = logging.getLogger(__name__)


def rewrite_urls(
    tree: Stylesheet,
    declarations: Iterable[FontFaceDeclaration],
    mount_prefix: str,
) -> int:
    """Point every ``url()`` matching a declaration's source at its local copy.

    A URL is rewritten only when it equals some declaration's ``src``
    exactly; the new URL is ``<mount_prefix>/<host>/<path>``. Other URLs are
    left alone.

    Args:
        tree: Parsed stylesheet, modified in place
        declarations: Declarations extracted from ``tree``
        mount_prefix: URL prefix under which the font directory is served

    Returns:
        Number of URLs rewritten
    """
    local_urls = {
        declaration.src: AssetLocation.from_src(
            declaration.src, ".", mount_prefix
        ).local_url
        for declaration in declarations
        if declaration.src is not None
    }
    rewritten = 0

    def replace(node: Node) -> Node | None:
        nonlocal rewritten
        value = url_value(node)
        if value is None or value not in local_urls:
            return None
        rewritten += 1
        return make_url(node, local_urls[value])

    walk(tree, replace)
    logger.debug("Rewrote %d font URL(s)", rewritten)
    return rewritten
