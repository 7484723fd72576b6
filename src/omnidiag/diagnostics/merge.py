"""Merge a whole-project code check into the displayed diagnostics."""

from __future__ import annotations

from collections.abc import Iterable

from lsprotocol import types
from pygls.uris import from_fs_path

from omnidiag.analysis.types import Finding
from omnidiag.diagnostics.classifier import to_diagnostic
from omnidiag.diagnostics.collection import DiagnosticEntry

__all__ = [
    "build_replacement_batch",
    "diagnostics_in_files",
    "file_uri",
]


def file_uri(file_name: str) -> str:
    """Return the document URI for a file name reported by the server."""
    return from_fs_path(file_name) or file_name


def diagnostics_in_files(
    findings: Iterable[Finding], *, suppress_hidden: bool
) -> list[tuple[str, types.Diagnostic]]:
    """Convert findings to ``(file_name, diagnostic)`` pairs, dropping suppressed ones."""
    pairs: list[tuple[str, types.Diagnostic]] = []
    for finding in findings:
        diagnostic = to_diagnostic(finding, suppress_hidden=suppress_hidden)
        if diagnostic is not None:
            pairs.append((finding.file_name, diagnostic))
    return pairs


def build_replacement_batch(
    findings: Iterable[Finding],
    *,
    displayed: Iterable[str],
    suppress_hidden: bool,
) -> list[DiagnosticEntry]:
    """
    Build the batch that replaces the displayed project diagnostics.

    Args:
        findings: Every finding of one whole-project code check.
        displayed: URIs currently holding diagnostics.
        suppress_hidden: Passed through to classification.

    Returns:
        ``(uri, diagnostics)`` entries for ``DiagnosticCollection.set_many``.
        Each file with findings gets a ``(uri, None)`` clear followed by its
        list, so stale entries are replaced rather than unioned. Displayed
        files without findings get a trailing clear.
    """
    ordered = sorted(findings, key=lambda finding: finding.file_name)

    entries: list[DiagnosticEntry] = []
    last_uri: str | None = None
    last_list: list[types.Diagnostic] = []

    for file_name, diagnostic in diagnostics_in_files(
        ordered, suppress_hidden=suppress_hidden
    ):
        uri = file_uri(file_name)
        if uri == last_uri:
            last_list.append(diagnostic)
            continue

        entries.append((uri, None))
        last_uri = uri
        last_list = [diagnostic]
        entries.append((uri, last_list))

    touched = {uri for uri, _ in entries}
    for uri in displayed:
        if uri not in touched:
            entries.append((uri, None))

    return entries
