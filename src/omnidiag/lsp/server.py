"""omnidiag LSP server using pygls 2.0.

Publishes diagnostics computed by an external analysis server for the
documents an editor opens and edits.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from omnidiag import __version__
from omnidiag.analysis.server import AnalysisServer
from omnidiag.config import DiagnosticsOptions, OptionsProvider
from omnidiag.diagnostics.advisor import ValidationAdvisor
from omnidiag.diagnostics.collection import DiagnosticCollection
from omnidiag.diagnostics.provider import DiagnosticsProvider
from omnidiag.logging import get_logger
from omnidiag.lsp.error_handling import guard_handler

__all__ = [
    "ACTIVE_DOCUMENT_METHOD",
    "WINDOW_STATE_METHOD",
    "create_server",
]

# Editor focus has no LSP equivalent; clients send these notifications.
ACTIVE_DOCUMENT_METHOD = "omnidiag/didChangeActiveDocument"
WINDOW_STATE_METHOD = "omnidiag/didChangeWindowState"


def _field(params: Any, name: str) -> Any:
    """Read a field of custom notification params (dict or attribute object)."""
    if isinstance(params, Mapping):
        return params.get(name)
    return getattr(params, name, None)


def create_server(
    *,
    analysis_server: AnalysisServer,
    options: DiagnosticsOptions | None = None,
    logger: logging.Logger | None = None,
) -> LanguageServer:
    """
    Create and configure the LSP server.

    Args:
        analysis_server: The server answering code checks and reporting
            project and restore events.
        options: Initial diagnostics options; client initialization options
            and configuration changes are merged over them.
        logger: Optional logger instance. If None, uses the omnidiag.lsp logger.

    Returns:
        Configured LanguageServer instance publishing diagnostics.
    """
    if logger is None:
        logger = get_logger("lsp")

    server = LanguageServer("omnidiag", f"v{__version__}")
    options_provider = OptionsProvider(options)

    def publish(uri: str, diagnostics: list[types.Diagnostic]) -> None:
        server.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
        )

    advisor = ValidationAdvisor(analysis_server, options_provider)
    collection = DiagnosticCollection(publish)
    provider = DiagnosticsProvider(
        analysis_server, advisor, collection, options_provider, logger=logger
    )

    def _update_options(settings: Any) -> None:
        updated = options_provider.update(settings)
        logger.debug("Diagnostics options: %s", updated)

    @server.feature(types.INITIALIZE)
    @guard_handler(logger=logger, method="initialize")
    def initialize(params: types.InitializeParams) -> None:
        """Read diagnostics settings from the client's initialization options."""
        _update_options(params.initialization_options)

    @server.feature(types.WORKSPACE_DID_CHANGE_CONFIGURATION)
    @guard_handler(logger=logger, method="workspace/didChangeConfiguration")
    def did_change_configuration(params: types.DidChangeConfigurationParams) -> None:
        _update_options(params.settings)

    @server.feature(types.TEXT_DOCUMENT_DID_OPEN)
    @guard_handler(logger=logger, method="textDocument/didOpen")
    async def did_open(params: types.DidOpenTextDocumentParams) -> None:
        """Handle textDocument/didOpen by scheduling a document check."""
        document = server.workspace.get_text_document(params.text_document.uri)
        logger.debug("Document opened: %s (version %s)", document.uri, document.version)
        await provider.on_document_open(document)

    @server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
    @guard_handler(logger=logger, method="textDocument/didChange")
    async def did_change(params: types.DidChangeTextDocumentParams) -> None:
        """Handle textDocument/didChange by restarting the document debounce."""
        document = server.workspace.get_text_document(params.text_document.uri)
        logger.debug("Document changed: %s (version %s)", document.uri, document.version)
        await provider.on_document_change(document)

    @server.feature(types.TEXT_DOCUMENT_DID_CLOSE)
    @guard_handler(logger=logger, method="textDocument/didClose")
    async def did_close(params: types.DidCloseTextDocumentParams) -> None:
        """Handle textDocument/didClose by dropping the document's diagnostics."""
        logger.debug("Document closed: %s", params.text_document.uri)
        await provider.on_document_close(params.text_document.uri)

    @server.feature(ACTIVE_DOCUMENT_METHOD)
    @guard_handler(logger=logger, method=ACTIVE_DOCUMENT_METHOD)
    async def did_change_active_document(params: Any) -> None:
        uri = _field(params, "uri")
        document = server.workspace.get_text_document(uri) if uri else None
        await provider.on_active_document_changed(document)

    @server.feature(WINDOW_STATE_METHOD)
    @guard_handler(logger=logger, method=WINDOW_STATE_METHOD)
    async def did_change_window_state(params: Any) -> None:
        await provider.on_window_state_changed(bool(_field(params, "focused")))

    @server.feature(types.SHUTDOWN)
    @guard_handler(logger=logger, method="shutdown")
    def shutdown(params: Any) -> None:
        provider.dispose()
        advisor.dispose()

    return server
