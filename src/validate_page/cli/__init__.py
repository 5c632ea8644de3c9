"""Command-line interface for validate-page."""

from .sniff import DocType, infer_doc_type, type_from_content, type_from_path

__all__ = [
    "DocType",
    "infer_doc_type",
    "type_from_content",
    "type_from_path",
]
