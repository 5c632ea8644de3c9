"""Inferring the type of a document to validate."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path

__all__ = [
    "DocType",
    "infer_doc_type",
    "type_from_path",
    "type_from_content",
]

# Number of leading bytes examined when sniffing content.
SNIFF_LEN = 512

# Leading tags that identify HTML, as in the WHATWG MIME Sniffing Standard.
_HTML_PREFIXES = (
    b"<!doctype html",
    b"<html",
    b"<head",
    b"<script",
    b"<iframe",
    b"<h1",
    b"<div",
    b"<font",
    b"<table",
    b"<a",
    b"<style",
    b"<title",
    b"<b",
    b"<body",
    b"<br",
    b"<p",
    b"<!--",
)

# Matches an <html> start tag carrying an "amp" or "⚡" attribute.
_AMP_HTML_TAG = re.compile(r"<html\b[^>]*?\s(?:amp|⚡)(?=[\s=>/])", re.IGNORECASE)

# Control bytes that don't appear in text files.
_BINARY_BYTES = set(range(0x00, 0x09)) | {0x0B} | set(range(0x0E, 0x1B)) | set(
    range(0x1C, 0x20)
)


class DocType(Enum):
    """Kinds of documents that can be validated."""

    AMP = "amp"
    CSS = "css"
    HTML = "html"
    # CSS embedded in an HTML document.
    HTML_CSS = "htmlcss"


def type_from_path(path: Path) -> DocType | None:
    """Infer a document's type from its filename, or return None."""
    name = path.name.lower()
    if name.endswith((".amp", ".amp.html")):
        return DocType.AMP
    if name.endswith(".css"):
        return DocType.CSS
    if name.endswith((".html", ".htm")):
        return DocType.HTML
    return None


def _looks_like_html(data: bytes) -> bool:
    lower = data.lstrip(b"\t\n\x0c\r ").lower()
    for prefix in _HTML_PREFIXES:
        if lower.startswith(prefix):
            rest = lower[len(prefix) : len(prefix) + 1]
            if rest in (b" ", b">") or prefix == b"<!--":
                return True
    return False


def _looks_like_text(data: bytes) -> bool:
    return not any(b in _BINARY_BYTES for b in data)


def type_from_content(data: bytes) -> DocType | None:
    """Infer a document's type from its first bytes, or return None.

    HTML documents whose <html> tag is marked with "amp" or "⚡" are AMP.
    Other text is assumed to be a stylesheet.
    """
    head = data[:SNIFF_LEN]
    if head.startswith(b"\xef\xbb\xbf"):
        head = head[3:]
    if _looks_like_html(head):
        text = head.decode("utf-8", errors="replace")
        return DocType.AMP if _AMP_HTML_TAG.search(text) else DocType.HTML
    if _looks_like_text(head):
        return DocType.CSS
    return None


def infer_doc_type(path: Path | None, data: bytes) -> DocType | None:
    """Infer a document's type from its path (if any), then its content."""
    if path is not None:
        doc_type = type_from_path(path)
        if doc_type is not None:
            return doc_type
    return type_from_content(data)
