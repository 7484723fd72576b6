"""In-memory analysis server for tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from omnidiag.analysis.cancellation import CancellationToken
from omnidiag.analysis.types import (
    Finding,
    ProjectDiagnosticStatus,
    ProjectInformation,
)


def make_finding(
    file_name: str = "/src/A.cs",
    *,
    line: int = 1,
    column: int = 1,
    end_line: int | None = None,
    end_column: int | None = None,
    text: str = "Something is off",
    id: str = "CS1000",
    log_level: str = "Warning",
    tags: tuple[str, ...] = (),
    projects: tuple[str, ...] = ("App",),
) -> Finding:
    return Finding(
        file_name=file_name,
        line=line,
        column=column,
        end_line=line if end_line is None else end_line,
        end_column=column + 1 if end_column is None else end_column,
        text=text,
        id=id,
        log_level=log_level,
        tags=tags,
        projects=projects,
    )


class FakeAnalysisServer:
    """Records code checks and lets tests fire server notifications."""

    def __init__(self, *, running: bool = True) -> None:
        self.running = running
        self.requests: list[str | None] = []
        self.tokens: list[CancellationToken] = []
        # file name (None = project) -> findings returned by code_check
        self.results: dict[str | None, list[Finding]] = {}
        self.error: Exception | None = None
        # When set, code_check waits on it before answering.
        self.gate: asyncio.Event | None = None
        self._handlers: dict[str, list[Callable[..., None]]] = {}

    def is_running(self) -> bool:
        return self.running

    def _subscribe(self, event: str, handler: Callable[..., None]) -> Callable[[], None]:
        handlers = self._handlers.setdefault(event, [])
        handlers.append(handler)
        return lambda: handlers.remove(handler)

    def subscriber_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    def emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers.get(event, [])):
            handler(*args)

    def on_project_added(self, handler: Callable[[ProjectInformation], None]) -> Callable[[], None]:
        return self._subscribe("project_added", handler)

    def on_project_changed(self, handler: Callable[[ProjectInformation], None]) -> Callable[[], None]:
        return self._subscribe("project_changed", handler)

    def on_project_removed(self, handler: Callable[[ProjectInformation], None]) -> Callable[[], None]:
        return self._subscribe("project_removed", handler)

    def on_before_package_restore(self, handler: Callable[[], None]) -> Callable[[], None]:
        return self._subscribe("before_package_restore", handler)

    def on_package_restore(self, handler: Callable[[], None]) -> Callable[[], None]:
        return self._subscribe("package_restore", handler)

    def on_project_diagnostic_status(
        self, handler: Callable[[ProjectDiagnosticStatus], None]
    ) -> Callable[[], None]:
        return self._subscribe("project_diagnostic_status", handler)

    async def code_check(
        self, file_name: str | None, token: CancellationToken
    ) -> list[Finding]:
        self.requests.append(file_name)
        self.tokens.append(token)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.results.get(file_name, []))


def create_fake_server() -> FakeAnalysisServer:
    """Factory usable as ``--server-factory tests.helpers.fake_server:create_fake_server``."""
    return FakeAnalysisServer()
