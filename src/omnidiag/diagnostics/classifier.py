"""Severity and fade-out classification of analyzer findings."""

from __future__ import annotations

from typing import NamedTuple

from lsprotocol import types

from omnidiag.analysis.types import Finding

__all__ = [
    "DIAGNOSTIC_SOURCE",
    "FADE_OUT_IDS",
    "DiagnosticDisplay",
    "classify",
    "project_label",
    "to_diagnostic",
    "to_range",
]

DIAGNOSTIC_SOURCE = "csharp"

# CS0162 unreachable code, CS8019 unnecessary using directive. Listed so
# fading works even when analyzers do not report the Unnecessary tag.
FADE_OUT_IDS = frozenset({"CS0162", "CS8019"})

_LEVEL_SEVERITY: dict[str, types.DiagnosticSeverity] = {
    "error": types.DiagnosticSeverity.Error,
    "warning": types.DiagnosticSeverity.Warning,
    "info": types.DiagnosticSeverity.Information,
}


class DiagnosticDisplay(NamedTuple):
    """How a finding is shown. A severity of None means suppressed."""

    severity: types.DiagnosticSeverity | None
    fade_out: bool

    @property
    def is_suppressed(self) -> bool:
        return self.severity is None


def classify(finding: Finding, *, suppress_hidden: bool) -> DiagnosticDisplay:
    """
    Map a finding to a display severity and fade-out flag.

    Args:
        finding: The analyzer finding.
        suppress_hidden: Drop ``hidden`` findings instead of showing hints.

    Returns:
        The display classification. Faded ``hidden``/``none`` findings are
        always shown as hints, since editors have no hidden severity and
        analyzers report fade-outs at that level.
    """
    fade_out = finding.id in FADE_OUT_IDS or any(
        tag.lower() == "unnecessary" for tag in finding.tags
    )
    level = finding.log_level.lower()

    if fade_out and level in ("hidden", "none"):
        return DiagnosticDisplay(types.DiagnosticSeverity.Hint, True)

    if level in _LEVEL_SEVERITY:
        severity: types.DiagnosticSeverity | None = _LEVEL_SEVERITY[level]
    elif level == "hidden" and not suppress_hidden:
        severity = types.DiagnosticSeverity.Hint
    else:
        severity = None

    return DiagnosticDisplay(severity, fade_out)


def project_label(project_name: str) -> str:
    """Strip the ``<id>+`` prefix the server puts before project names."""
    return project_name[project_name.find("+") + 1 :]


def to_range(finding: Finding) -> types.Range:
    """Convert the finding's 1-based coordinates to a 0-based LSP range."""
    return types.Range(
        start=types.Position(
            line=max(finding.line - 1, 0),
            character=max(finding.column - 1, 0),
        ),
        end=types.Position(
            line=max(finding.end_line - 1, 0),
            character=max(finding.end_column - 1, 0),
        ),
    )


def to_diagnostic(
    finding: Finding, *, suppress_hidden: bool
) -> types.Diagnostic | None:
    """Build the LSP diagnostic for a finding, or None when suppressed."""
    display = classify(finding, suppress_hidden=suppress_hidden)
    if display.is_suppressed:
        return None

    labels = ", ".join(project_label(name) for name in finding.projects)
    return types.Diagnostic(
        range=to_range(finding),
        message=f"{finding.text} [{labels}]",
        severity=display.severity,
        code=finding.id,
        source=DIAGNOSTIC_SOURCE,
        tags=[types.DiagnosticTag.Unnecessary] if display.fade_out else None,
    )
