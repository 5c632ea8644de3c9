"""Helpers for querying parsed HTML result pages.

Results pages returned by the validation services are parsed with
BeautifulSoup. The functions here walk the resulting trees the same way for
every service: find the nodes that describe issues, then squash the text
inside them into something readable.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from contextlib import suppress

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from validate_page.validator.errors import ResponseParseError

__all__ = [
    "parse_page",
    "get_attr",
    "get_text",
    "find_all",
    "has_class",
    "parse_int",
]

# Matches one or more (ASCII) whitespace characters.
_SPACES = re.compile(r"\s+", re.ASCII)

NodePredicate = Callable[[PageElement], bool]


def parse_page(raw: bytes) -> BeautifulSoup:
    """Parse a results page returned by a validation service.

    Raises:
        ResponseParseError: If the page could not be parsed.
    """
    try:
        # Repeated attributes keep their first value.
        return BeautifulSoup(raw, "html.parser", on_duplicate_attribute="ignore")
    except ParserRejectedMarkup as e:
        raise ResponseParseError(f"failed to parse response: {e}") from e


def get_attr(node: PageElement, name: str) -> str:
    """Return the named attribute of node, or an empty string if it's unset.

    Multi-valued attributes like "class" are joined with single spaces. Since
    BeautifulSoup splits them on whitespace, this also drops leading, trailing
    and repeated spaces: class=" error " is returned as "error".

    Pages must be parsed with parse_page for repeated attributes to resolve to
    their first value.
    """
    if not isinstance(node, Tag):
        return ""
    value = node.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return value


def has_class(name: str, cls: str) -> NodePredicate:
    """Return a predicate matching <name> elements whose class is exactly cls."""

    def _matches(node: PageElement) -> bool:
        return (
            isinstance(node, Tag) and node.name == name and get_attr(node, "class") == cls
        )

    return _matches


def find_all(node: PageElement, predicate: NodePredicate) -> list[Tag]:
    """Return all elements under node (inclusive) accepted by predicate.

    Elements are returned in document order. The descendants of a matching
    element are not searched.
    """
    if predicate(node):
        return [node] if isinstance(node, Tag) else []
    if not isinstance(node, Tag):
        return []

    matches: list[Tag] = []
    for child in node.children:
        matches.extend(find_all(child, predicate))
    return matches


def get_text(node: PageElement, predicate: NodePredicate | None = None) -> str:
    """Concatenate the text of all text nodes under node.

    Repeated whitespace is compressed into a single space and each <p>
    element is preceded by a newline.

    If predicate is supplied, text is only included if predicate returns
    True for the containing node or one of its ancestors below node.
    Once a node is included, predicate is not consulted for its descendants.
    """
    parts: list[str] = []
    _collect_text(node, predicate, False, parts)
    return "".join(parts)


def _collect_text(
    node: PageElement,
    predicate: NodePredicate | None,
    included: bool,
    parts: list[str],
) -> None:
    included = included or predicate is None or predicate(node)

    if isinstance(node, NavigableString):
        # Comments, doctypes, CDATA and the like aren't text.
        if included and not isinstance(node, PreformattedString):
            parts.append(_SPACES.sub(" ", str(node)))
        return
    if not isinstance(node, Tag):
        return

    if included and node.name == "p":
        parts.append("\n")
    for child in node.children:
        _collect_text(child, predicate, included, parts)


def parse_int(text: str) -> int:
    """Parse a line or column number, returning 0 (unknown) on failure."""
    value = 0
    with suppress(ValueError):
        value = int(text.strip())
    return value if value > 0 else 0
