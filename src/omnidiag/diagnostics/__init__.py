"""Validation scheduling, classification and merging of diagnostics."""

from omnidiag.diagnostics.advisor import ValidationAdvisor
from omnidiag.diagnostics.classifier import DiagnosticDisplay, classify, to_diagnostic
from omnidiag.diagnostics.collection import DiagnosticCollection
from omnidiag.diagnostics.debounce import DebounceManager, ValidationState
from omnidiag.diagnostics.merge import build_replacement_batch
from omnidiag.diagnostics.provider import DiagnosticsProvider

__all__ = [
    "DebounceManager",
    "DiagnosticCollection",
    "DiagnosticDisplay",
    "DiagnosticsProvider",
    "ValidationAdvisor",
    "ValidationState",
    "build_replacement_batch",
    "classify",
    "to_diagnostic",
]
