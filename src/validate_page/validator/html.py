"""Validation of HTML documents using the Nu Html Checker.

See https://validator.w3.org/nu/ for the service. Issues are scraped from
the HTML results page, which lists each one as a <li class="error">:

    <li class="error">
      <p><strong>Error</strong>: <span>Element <code>bogus</code> not
        allowed as child of element <code>body</code> in this context.</span></p>
      <p class="location"><a href="#l8c11">At line <span class="last-line">8</span>,
        column <span class="last-col">11</span></a></p>
      <p class="extract"><code>&lt;body&gt;↩    <b>&lt;bogus&gt;</b></code></p>
    </li>
"""

from __future__ import annotations

import logging
import re
import threading

from bs4.element import PageElement, Tag

from validate_page.validator.check import checked_result
from validate_page.validator.models import Issue, Severity, ValidationResult
from validate_page.validator.transport import FilePart, MultipartPoster
from validate_page.validator.tree import (
    find_all,
    get_attr,
    get_text,
    has_class,
    parse_int,
    parse_page,
)

__all__ = [
    "HTML_VALIDATOR_URL",
    "HTML_SUCCESS",
    "validate_html",
    "parse_html_results",
    "extract_html_issues",
]

HTML_VALIDATOR_URL = "https://validator.w3.org/nu/"

# Text included in results pages on success.
HTML_SUCCESS = "The document validates according to the specified schema(s)."

_SPACES_AROUND_LINES = re.compile(r"\s*\n\s*")

log = logging.getLogger(__name__)


def validate_html(
    document: bytes,
    poster: MultipartPoster,
    url: str = HTML_VALIDATOR_URL,
    cancel: threading.Event | None = None,
) -> ValidationResult:
    """Validate an HTML document using the Nu Html Checker.

    Every issue is currently reported as an error, even if the checker
    describes it as a warning.

    Args:
        document: The HTML document to validate.
        poster: Used to upload the document.
        url: The checker's URL.
        cancel: Optional event that abandons the upload when set.

    Returns:
        Parsed issues and the raw results page. If the page's success message
        disagrees with the parsed issues, the result's inconsistency is set.

    Raises:
        TransportError: If the document couldn't be uploaded.
        ResponseParseError: If the results page couldn't be parsed.
        ValidationCancelledError: If cancel was set before the page arrived.
    """
    raw = poster.post(
        url,
        {"action": "check"},
        [
            FilePart(
                field="uploaded_file",
                filename="page.html",
                content_type="text/html",
                content=document,
            )
        ],
        cancel=cancel,
    )
    return parse_html_results(raw)


def parse_html_results(raw: bytes) -> ValidationResult:
    """Parse a results page returned by the Nu Html Checker."""
    page = parse_page(raw)
    issues = extract_html_issues(page)
    log.debug("Found %d issue(s) in HTML results page", len(issues))
    return checked_result(HTML_SUCCESS.encode() in raw, issues, raw)


def extract_html_issues(node: PageElement) -> list[Issue]:
    """Return an issue for each <li class="error"> under node."""
    return [_make_html_issue(li) for li in find_all(node, has_class("li", "error"))]


def _is_span(node: PageElement) -> bool:
    return isinstance(node, Tag) and node.name == "span"


def _span_int(node: Tag, cls: str) -> int:
    """Parse the first <span class="cls"> under node as an integer."""
    spans = find_all(node, has_class("span", cls))
    if not spans:
        return 0
    return parse_int(get_text(spans[0]))


def _make_html_issue(li: Tag) -> Issue:
    line = 0
    column = 0
    message = ""
    context = ""

    for child in li.children:
        if not isinstance(child, Tag):
            continue

        cls = get_attr(child, "class")
        if cls == "location":
            line = _span_int(child, "last-line")
            column = _span_int(child, "last-col")
        elif cls == "extract":
            context = get_text(child).strip()
        elif cls == "" and not message:
            # The message is wrapped in a <span> after an "Error:" label.
            text = get_text(child, _is_span).strip()
            message = _SPACES_AROUND_LINES.sub("\n", text)

    return Issue(
        severity=Severity.ERROR,
        line=line,
        column=column,
        message=message,
        context=context,
    )
