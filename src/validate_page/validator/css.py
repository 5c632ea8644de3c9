"""Validation of CSS using the W3C CSS Validation Service.

See https://jigsaw.w3.org/css-validator/ for the service. Issues are scraped
from the tables in the HTML results page.
"""

from __future__ import annotations

import logging
import threading

from bs4.element import PageElement, Tag

from validate_page.validator.check import checked_result
from validate_page.validator.models import FileType, Issue, Severity, ValidationResult
from validate_page.validator.transport import FilePart, MultipartPoster
from validate_page.validator.tree import (
    find_all,
    get_attr,
    get_text,
    parse_int,
    parse_page,
)

__all__ = [
    "CSS_VALIDATOR_URL",
    "CSS_SUCCESS",
    "CSS_FORM_FIELDS",
    "validate_css",
    "parse_css_results",
    "extract_css_issues",
]

CSS_VALIDATOR_URL = "https://jigsaw.w3.org/css-validator/validator"

# Comment included in results pages on success.
CSS_SUCCESS = "<!-- NO ERRORS -->"

# Available values can be seen in the source of https://jigsaw.w3.org/css-validator.
CSS_FORM_FIELDS = {
    "profile": "css3svg",  # "none", "css1", "css2", "css21", "css3", "svg", etc.
    "usermedium": "all",  # "screen", "print", etc.
    "warning": "1",  # "no", "0" (most important), "1" (normal report), "2" (all)
    "vextwarning": "",  # "" (default), "true" (warnings), "false" (errors)
    "lang": "en",
}

_SEVERITIES = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
}

log = logging.getLogger(__name__)


def validate_css(
    document: bytes,
    file_type: FileType,
    poster: MultipartPoster,
    url: str = CSS_VALIDATOR_URL,
    cancel: threading.Event | None = None,
) -> ValidationResult:
    """Validate the CSS in a stylesheet or HTML document.

    file_type must describe the document accurately: the service reports that
    the document is valid if it's given the wrong type.

    Args:
        document: The stylesheet or HTML document to validate.
        file_type: The type of document.
        poster: Used to upload the document.
        url: The validation service's URL.
        cancel: Optional event that abandons the upload when set.

    Returns:
        Parsed issues and the raw results page. If the page's success comment
        disagrees with the parsed issues, the result's inconsistency is set.

    Raises:
        TransportError: If the document couldn't be uploaded.
        ResponseParseError: If the results page couldn't be parsed.
        ValidationCancelledError: If cancel was set before the page arrived.
    """
    raw = poster.post(
        url,
        dict(CSS_FORM_FIELDS),
        [
            FilePart(
                field="file",
                filename="data",
                content_type=file_type.value,
                content=document,
            )
        ],
        cancel=cancel,
    )
    return parse_css_results(raw)


def parse_css_results(raw: bytes) -> ValidationResult:
    """Parse a results page returned by the CSS Validation Service."""
    page = parse_page(raw)
    issues = extract_css_issues(page)
    log.debug("Found %d issue(s) in CSS results page", len(issues))
    return checked_result(CSS_SUCCESS.encode() in raw, issues, raw)


def _is_issue_row(node: PageElement) -> bool:
    return (
        isinstance(node, Tag)
        and node.name == "tr"
        and get_attr(node, "class") in _SEVERITIES
    )


def extract_css_issues(node: PageElement) -> list[Issue]:
    """Return an issue for each <tr class="error"> or <tr class="warning"> under node."""
    return [
        _make_css_issue(tr, _SEVERITIES[get_attr(tr, "class")])
        for tr in find_all(node, _is_issue_row)
    ]


def _make_css_issue(tr: Tag, severity: Severity) -> Issue:
    """Create an issue from a <tr class="error"> or <tr class="warning"> row.

    Errors look like this:

      <tr class="error">
        <td class="linenumber" title="Line 17">17</td>
        <td class="codeContext"> body </td>
        <td class="parse-error">Property <code>foo</code> doesn't exist</td>
      </tr>

    Warnings look like this:

      <tr class="warning">
        <td class="linenumber" title="Line 15">15</td>
        <td class="codeContext"></td>
        <td class="level0" title="warning level 0"><code>-webkit-transform</code>
          is an unknown vendor extension</td>
      </tr>

    The service doesn't report columns.
    """
    line = 0
    message = ""
    context = ""

    for td in tr.children:
        if not isinstance(td, Tag) or td.name != "td":
            continue

        # Squish together all of the text content inside the <td>.
        text = get_text(td).strip()
        if not text:
            continue

        cls = get_attr(td, "class")
        if cls == "linenumber":
            line = parse_int(text)
        elif cls == "codeContext":
            context = text
        else:
            message = text

    return Issue(severity=severity, line=line, message=message, context=context)
