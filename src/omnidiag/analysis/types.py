"""Payload types delivered by the analysis server."""

from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple


class ProjectDiagnosticStatus(IntEnum):
    """Project analysis progress reported by the server."""

    STARTED = 0
    READY = 1


class ProjectDescriptor(NamedTuple):
    """One project description inside a project information payload."""

    path: str
    source_files: tuple[str, ...] | None = None


class ProjectInformation(NamedTuple):
    """Project added/changed/removed payload.

    ``dotnet_project`` is the framework-style (project.json era) description,
    ``msbuild_project`` the build-system one. Either may be absent.
    """

    dotnet_project: ProjectDescriptor | None = None
    msbuild_project: ProjectDescriptor | None = None


class Finding(NamedTuple):
    """A single analyzer result as reported by a code check."""

    file_name: str
    line: int  # 1-based
    column: int  # 1-based
    end_line: int  # 1-based
    end_column: int  # 1-based, exclusive
    text: str
    id: str
    log_level: str
    tags: tuple[str, ...] = ()
    projects: tuple[str, ...] = ()
