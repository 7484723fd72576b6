"""Gating policy deciding whether validations may run."""

from __future__ import annotations

import contextlib
from types import TracebackType

from omnidiag.analysis.server import AnalysisServer
from omnidiag.analysis.types import ProjectDescriptor, ProjectInformation
from omnidiag.config import OptionsProvider
from omnidiag.logging import get_logger

__all__ = ["ValidationAdvisor"]


class ValidationAdvisor:
    """Tracks server readiness, package restores and project sizes.

    State is only mutated by the server notifications the advisor subscribes
    to on construction; consumers see it through ``should_validate_files``
    and ``should_validate_project``.
    """

    def __init__(self, server: AnalysisServer, options: OptionsProvider) -> None:
        self._server = server
        self._options = options
        self._logger = get_logger("diagnostics.advisor")
        self._restore_counter = 0
        self._project_file_counts: dict[str, int] = {}

        self._subscriptions = contextlib.ExitStack()
        self._subscriptions.callback(server.on_project_changed(self._on_project_changed))
        self._subscriptions.callback(server.on_project_added(self._on_project_added))
        self._subscriptions.callback(server.on_project_removed(self._on_project_removed))
        self._subscriptions.callback(
            server.on_before_package_restore(self._on_before_package_restore)
        )
        self._subscriptions.callback(server.on_package_restore(self._on_package_restore))

    def dispose(self) -> None:
        self._subscriptions.close()

    def __enter__(self) -> ValidationAdvisor:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def should_validate_files(self) -> bool:
        return self._server.is_running() and not self._is_restoring_packages()

    def should_validate_project(self) -> bool:
        return (
            self._server.is_running()
            and not self._is_restoring_packages()
            and not self._is_over_file_limit()
        )

    def _is_restoring_packages(self) -> bool:
        return self._restore_counter > 0

    def _is_over_file_limit(self) -> bool:
        file_limit = self._options.get().max_project_file_count_for_diagnostic_analysis
        if file_limit <= 0:
            return False

        source_file_count = 0
        for count in self._project_file_counts.values():
            source_file_count += count
            if source_file_count > file_limit:
                self._logger.debug(
                    "Project validation gated: more than %d source files", file_limit
                )
                return True
        return False

    @staticmethod
    def _counted_project(info: ProjectInformation) -> ProjectDescriptor | None:
        """Pick the descriptor whose source files are counted."""
        for project in (info.dotnet_project, info.msbuild_project):
            if project is not None and project.source_files is not None:
                return project
        return None

    def _add_or_update_project_file_count(self, info: ProjectInformation) -> None:
        project = self._counted_project(info)
        if project is None:
            return
        count = len(project.source_files or ())
        self._project_file_counts[project.path] = count
        self._logger.debug("Project %s has %d source files", project.path, count)

    def _on_project_added(self, info: ProjectInformation) -> None:
        self._add_or_update_project_file_count(info)

    def _on_project_changed(self, info: ProjectInformation) -> None:
        self._add_or_update_project_file_count(info)

    def _on_project_removed(self, info: ProjectInformation) -> None:
        for project in (info.dotnet_project, info.msbuild_project):
            if project is not None:
                self._project_file_counts.pop(project.path, None)

    def _on_before_package_restore(self) -> None:
        self._restore_counter += 1
        self._logger.debug("Package restore started (%d pending)", self._restore_counter)

    def _on_package_restore(self) -> None:
        self._restore_counter -= 1
        self._logger.debug("Package restore finished (%d pending)", self._restore_counter)
