"""Language Server Protocol front end for omnidiag."""

from omnidiag.lsp.server import (
    ACTIVE_DOCUMENT_METHOD,
    WINDOW_STATE_METHOD,
    create_server,
)

__all__ = [
    "ACTIVE_DOCUMENT_METHOD",
    "WINDOW_STATE_METHOD",
    "create_server",
]
