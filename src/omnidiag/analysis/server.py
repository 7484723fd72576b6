"""Protocol describing the analysis server collaborator."""

from __future__ import annotations

from typing import Callable, Protocol, TypeAlias

from omnidiag.analysis.types import (
    Finding,
    ProjectDiagnosticStatus,
    ProjectInformation,
)
from omnidiag.analysis.cancellation import CancellationToken

Unsubscribe: TypeAlias = Callable[[], None]
ProjectHandler: TypeAlias = Callable[[ProjectInformation], None]
RestoreHandler: TypeAlias = Callable[[], None]
StatusHandler: TypeAlias = Callable[[ProjectDiagnosticStatus], None]


class AnalysisServer(Protocol):
    """The subset of an OmniSharp-style server the scheduler depends on.

    Every ``on_*`` method registers a handler and returns a callable that
    removes it again. Handlers must be called from the thread running the
    asyncio event loop.
    """

    def is_running(self) -> bool:
        """Return True once the server accepts requests."""

    def on_project_added(self, handler: ProjectHandler) -> Unsubscribe: ...

    def on_project_changed(self, handler: ProjectHandler) -> Unsubscribe: ...

    def on_project_removed(self, handler: ProjectHandler) -> Unsubscribe: ...

    def on_before_package_restore(self, handler: RestoreHandler) -> Unsubscribe: ...

    def on_package_restore(self, handler: RestoreHandler) -> Unsubscribe: ...

    def on_project_diagnostic_status(self, handler: StatusHandler) -> Unsubscribe: ...

    async def code_check(
        self, file_name: str | None, token: CancellationToken
    ) -> list[Finding]:
        """Run analyzers for one file, or for the whole project when None."""
