"""Which editor documents take part in diagnostics."""

from __future__ import annotations

from typing import Protocol
from urllib.parse import urlparse

from pygls.uris import to_fs_path

from omnidiag.config import DiagnosticsOptions

__all__ = [
    "EditorDocument",
    "document_file_name",
    "is_virtual_document",
    "should_ignore_document",
]


class EditorDocument(Protocol):
    """The document attributes the scheduler reads (pygls TextDocument fits)."""

    @property
    def uri(self) -> str: ...

    @property
    def language_id(self) -> str | None: ...


def _scheme(uri: str) -> str:
    return urlparse(uri).scheme


def is_virtual_document(uri: str, options: DiagnosticsOptions) -> bool:
    scheme = _scheme(uri)
    # urlparse lowercases schemes.
    return any(
        scheme.startswith(prefix.lower()) for prefix in options.virtual_document_schemes
    )


def should_ignore_document(document: EditorDocument, options: DiagnosticsOptions) -> bool:
    """True for documents of another language or backed by neither a file nor a virtual document."""
    if document.language_id != options.language_id:
        return True

    if _scheme(document.uri) != "file" and not is_virtual_document(document.uri, options):
        return True

    return False


def document_file_name(uri: str) -> str:
    """File name sent to the server for a document; virtual documents keep their URI."""
    if _scheme(uri) == "file":
        return to_fs_path(uri) or uri
    return uri
