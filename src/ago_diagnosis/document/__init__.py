"""Parsed HTML documents and selector queries."""

from ago_diagnosis.document.accessor import ElementSet, HtmlDocument
from ago_diagnosis.document.errors import DocumentFetchError, SelectorError
from ago_diagnosis.document.loader import load_document


__all__ = [
    "DocumentFetchError",
    "ElementSet",
    "HtmlDocument",
    "SelectorError",
    "load_document",
]
