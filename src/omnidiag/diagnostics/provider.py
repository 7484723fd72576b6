"""Schedules document and project validations and writes their results."""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
from collections.abc import Coroutine
from typing import Any

from omnidiag.analysis.cancellation import CancellationToken
from omnidiag.analysis.server import AnalysisServer
from omnidiag.analysis.types import ProjectDiagnosticStatus, ProjectInformation
from omnidiag.config import OptionsProvider
from omnidiag.diagnostics.advisor import ValidationAdvisor
from omnidiag.diagnostics.collection import DiagnosticCollection
from omnidiag.diagnostics.debounce import PROJECT_SCOPE, DebounceManager
from omnidiag.diagnostics.documents import (
    EditorDocument,
    document_file_name,
    should_ignore_document,
)
from omnidiag.diagnostics.merge import build_replacement_batch, diagnostics_in_files
from omnidiag.logging import get_logger

__all__ = ["DiagnosticsProvider"]


class DiagnosticsProvider:
    """Turns editor and server events into debounced code checks.

    Document events restart a short per-document debounce; project events
    schedule a longer whole-project check unless one is already pending.
    Results are written to ``collection`` only by validations whose token
    was not cancelled.
    """

    def __init__(
        self,
        server: AnalysisServer,
        advisor: ValidationAdvisor,
        collection: DiagnosticCollection,
        options: OptionsProvider,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._server = server
        self._advisor = advisor
        self._collection = collection
        self._options = options
        self._logger = logger if logger is not None else get_logger("diagnostics.provider")

        self._document_validations = DebounceManager(self._logger)
        self._project_validation = DebounceManager(self._logger)
        self._active_document: EditorDocument | None = None
        self._background: set[asyncio.Task[None]] = set()

        self._subscriptions = contextlib.ExitStack()
        self._subscriptions.callback(server.on_package_restore(self._on_package_restore))
        self._subscriptions.callback(server.on_project_changed(self._on_project_changed))
        self._subscriptions.callback(
            server.on_project_diagnostic_status(self._on_project_analysis)
        )

    def dispose(self) -> None:
        self._subscriptions.close()
        self._project_validation.cancel_all()
        self._document_validations.cancel_all()
        for task in list(self._background):
            task.cancel()
        self._background.clear()

    # Editor events

    async def on_document_open(self, document: EditorDocument) -> None:
        await self._on_document_add_or_change(document)

    async def on_document_change(self, document: EditorDocument) -> None:
        await self._on_document_add_or_change(document)

    async def on_active_document_changed(self, document: EditorDocument | None) -> None:
        self._active_document = document
        if document is not None:
            await self._on_document_add_or_change(document)

    async def on_window_state_changed(self, focused: bool) -> None:
        if focused:
            await self.on_active_document_changed(self._active_document)

    async def on_document_close(self, uri: str) -> None:
        """Drop the document's validation and diagnostics; revalidate the project if anything changed."""
        # The token is cancelled before the collection is touched, so an
        # in-flight check cannot write after the delete below.
        did_change = self._document_validations.discard(uri) is not None

        if self._collection.has(uri):
            did_change = True
            self._collection.delete(uri)

        if self._active_document is not None and self._active_document.uri == uri:
            self._active_document = None

        if did_change:
            await self.validate_project()

    async def _on_document_add_or_change(self, document: EditorDocument) -> None:
        if should_ignore_document(document, self._options.get()):
            return
        await self.validate_document(document)

    # Server events

    def _on_package_restore(self) -> None:
        self._spawn(self.validate_project())

    def _on_project_changed(self, info: ProjectInformation) -> None:
        self._spawn(self.validate_project())

    def _on_project_analysis(self, status: ProjectDiagnosticStatus) -> None:
        if status == ProjectDiagnosticStatus.READY:
            self._spawn(self.validate_project())

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task[None]) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._logger.debug("Project validation request failed", exc_info=exc)

    # Validation

    async def validate_document(self, document: EditorDocument) -> None:
        uri = document.uri
        # Superseded work is cancelled even when the new check is gated.
        await self._document_validations.cancel(uri)

        if not self._advisor.should_validate_files():
            self._logger.debug("File validation gated, skipping %s", uri)
            return

        await self._document_validations.schedule(
            uri,
            functools.partial(self._check_document, uri, document_file_name(uri)),
            delay_ms=self._options.get().document_delay_ms,
        )

    async def validate_project(self) -> None:
        if not self._advisor.should_validate_project():
            self._logger.debug("Project validation gated")
            return

        await self._project_validation.schedule_if_idle(
            PROJECT_SCOPE,
            self._check_project,
            delay_ms=self._options.get().project_delay_ms,
        )

    async def _check_document(
        self, uri: str, file_name: str, token: CancellationToken
    ) -> None:
        findings = await self._server.code_check(file_name, token)
        if token.is_cancelled:
            return

        if not findings:
            if self._collection.has(uri):
                self._collection.delete(uri)
            self._logger.debug("No diagnostics for %s", uri)
            return

        suppress_hidden = self._options.get().suppress_hidden_diagnostics
        diagnostics = [
            diagnostic
            for _, diagnostic in diagnostics_in_files(
                findings, suppress_hidden=suppress_hidden
            )
        ]
        self._collection.set(uri, diagnostics)
        self._logger.debug("Set %d diagnostics for %s", len(diagnostics), uri)

    async def _check_project(self, token: CancellationToken) -> None:
        findings = await self._server.code_check(None, token)
        if token.is_cancelled:
            return

        entries = build_replacement_batch(
            findings,
            displayed=self._collection.uris(),
            suppress_hidden=self._options.get().suppress_hidden_diagnostics,
        )
        self._collection.set_many(entries)
        self._logger.debug("Project check returned %d findings", len(findings))
