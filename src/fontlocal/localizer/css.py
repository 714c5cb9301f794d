"""Mutable CSS syntax tree on top of tinycss2.

tinycss2 gives plain node lists. This module adds what the pipeline needs
from a syntax tree: parsing with grouping rules (``@media``, ``@supports``...)
expanded into nested rule lists, depth-first search, a walk that can swap
nodes for replacements, and serialization back to text.

Tokens serialize from their stored representation, so changing a token means
building a new one (see :func:`make_url`), never assigning ``value``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

import tinycss2
from tinycss2.ast import AtRule, Node, URLToken
from tinycss2.serializer import serialize_url

# At-rules whose block holds rules rather than declarations
GROUPING_AT_RULES = frozenset(
    {"container", "document", "-moz-document", "layer", "media", "scope", "supports"}
)

_SKIPPED_TYPES = frozenset({"whitespace", "comment"})

Visitor = Callable[[Node], Node | None]


@dataclass
class Stylesheet:
    """Parsed stylesheet owned by a single pipeline run."""

    rules: list[Node] = field(default_factory=list)


def parse(text: str) -> Stylesheet:
    """Parse CSS text into a :class:`Stylesheet`."""
    rules = tinycss2.parse_stylesheet(text)
    _expand_grouping_rules(rules)
    return Stylesheet(rules=rules)


def _expand_grouping_rules(nodes: list[Node]) -> None:
    for node in nodes:
        if (
            isinstance(node, AtRule)
            and node.content is not None
            and node.lower_at_keyword in GROUPING_AT_RULES
        ):
            node.content = tinycss2.parse_rule_list(node.content)
            _expand_grouping_rules(node.content)


def _child_lists(node: Node) -> Iterator[list[Node]]:
    """Yield the mutable child lists of ``node``."""
    match node.type:
        case "at-rule" | "qualified-rule":
            yield node.prelude
            if node.content is not None:
                yield node.content
        case "function":
            yield node.arguments
        case "() block" | "[] block" | "{} block":
            yield node.content
        case "declaration":
            yield node.value


def walk(tree: Stylesheet | list[Node], visitor: Visitor) -> None:
    """Visit every node depth-first, parents before children.

    When ``visitor`` returns a node, it takes the visited node's place in
    its parent list and its children are not visited.
    """
    nodes = tree.rules if isinstance(tree, Stylesheet) else tree
    for index, node in enumerate(nodes):
        replacement = visitor(node)
        if replacement is not None:
            nodes[index] = replacement
            continue
        for children in _child_lists(node):
            walk(children, visitor)


def find_all(
    tree: Stylesheet | list[Node], predicate: Callable[[Node], bool]
) -> list[Node]:
    """Return every node matching ``predicate`` in depth-first order."""
    found: list[Node] = []

    def collect(node: Node) -> None:
        if predicate(node):
            found.append(node)

    walk(tree, collect)
    return found


def serialize(tree: Stylesheet | list[Node]) -> str:
    """Serialize the tree back to CSS text."""
    nodes = tree.rules if isinstance(tree, Stylesheet) else tree
    return tinycss2.serialize(nodes)


def first_value(tokens: list[Node]) -> Node | None:
    """Return the first token that is neither whitespace nor a comment."""
    for token in tokens:
        if token.type not in _SKIPPED_TYPES:
            return token
    return None


def url_value(node: Node) -> str | None:
    """Return the address of a ``url()`` token, quoted or not."""
    if node.type == "url":
        return node.value
    if node.type == "function" and node.lower_name == "url":
        argument = first_value(node.arguments)
        if argument is not None and argument.type == "string":
            return argument.value
    return None


def make_url(original: Node, value: str) -> URLToken:
    """Build a ``url()`` token for ``value`` at the position of ``original``."""
    return URLToken(
        original.source_line,
        original.source_column,
        value,
        f"url({serialize_url(value)})",
    )
