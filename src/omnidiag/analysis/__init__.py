"""Boundary types for the external analysis server."""

from omnidiag.analysis.cancellation import CancellationToken
from omnidiag.analysis.server import AnalysisServer, Unsubscribe
from omnidiag.analysis.types import (
    Finding,
    ProjectDescriptor,
    ProjectDiagnosticStatus,
    ProjectInformation,
)

__all__ = [
    "AnalysisServer",
    "CancellationToken",
    "Finding",
    "ProjectDescriptor",
    "ProjectDiagnosticStatus",
    "ProjectInformation",
    "Unsubscribe",
]
