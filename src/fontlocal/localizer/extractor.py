"""Extraction of ``@font-face`` declarations from a parsed stylesheet."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import tinycss2
from tinycss2.ast import Node

from fontlocal.localizer.css import Stylesheet, find_all, first_value, url_value
from fontlocal.localizer.models import FontFaceDeclaration

FallbackResolver = Callable[[str], Sequence[str]]


def is_font_face(node: Node) -> bool:
    """Tell whether ``node`` is an ``@font-face`` rule with a block."""
    return (
        node.type == "at-rule"
        and node.lower_at_keyword == "font-face"
        and node.content is not None
    )


def _read_font_face(rule: Node) -> tuple[str | None, str | None]:
    """Return ``(family, src)`` of one ``@font-face`` rule.

    Only the first value token of each property counts: a ``src`` listing
    several sources is represented by its first one, and a ``src`` starting
    with ``local()`` has no remote source at all.
    """
    family = src = None
    declarations = tinycss2.parse_blocks_contents(
        rule.content, skip_comments=True, skip_whitespace=True
    )
    for declaration in declarations:
        if declaration.type != "declaration":
            continue
        token = first_value(declaration.value)
        if token is None:
            continue
        if declaration.lower_name == "src":
            src = url_value(token)
        elif declaration.lower_name == "font-family" and token.type in (
            "string",
            "ident",
        ):
            family = token.value
    return (
        family.strip() if family else None,
        src.strip() if src else None,
    )


def extract_font_faces(
    tree: Stylesheet, fallbacks: Sequence[str] | FallbackResolver
) -> list[FontFaceDeclaration]:
    """Collect the ``@font-face`` declarations of ``tree`` in document order.

    Rules without a family or a remote source are skipped. Several rules
    may share a family (one per weight, style or unicode range); all of them
    are kept.

    Args:
        tree: Parsed stylesheet
        fallbacks: Fallback font names for every family, or a callable
            returning them for a given family

    Returns:
        The declarations, in order of appearance
    """
    resolve = fallbacks if callable(fallbacks) else (lambda _family: fallbacks)

    declarations: list[FontFaceDeclaration] = []
    for rule in find_all(tree, is_font_face):
        family, src = _read_font_face(rule)
        if not family or not src:
            continue
        declarations.append(
            FontFaceDeclaration(
                family=family, src=src, fallbacks=tuple(resolve(family))
            )
        )
    return declarations
