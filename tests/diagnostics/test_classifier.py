"""Tests for severity and fade-out classification."""

from __future__ import annotations

import pytest
from lsprotocol import types

from omnidiag.diagnostics.classifier import (
    classify,
    project_label,
    to_diagnostic,
    to_range,
)
from tests.helpers.fake_server import make_finding


class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize(
        ("log_level", "expected"),
        [
            ("error", types.DiagnosticSeverity.Error),
            ("Error", types.DiagnosticSeverity.Error),
            ("WARNING", types.DiagnosticSeverity.Warning),
            ("info", types.DiagnosticSeverity.Information),
        ],
    )
    def test_maps_levels_case_insensitively(
        self, log_level: str, expected: types.DiagnosticSeverity
    ) -> None:
        display = classify(make_finding(log_level=log_level), suppress_hidden=True)
        assert display.severity == expected
        assert display.fade_out is False

    def test_plain_warning(self) -> None:
        """Warning without fade indicators stays a warning."""
        display = classify(
            make_finding(log_level="warning", id="CS0168"), suppress_hidden=True
        )
        assert display.severity == types.DiagnosticSeverity.Warning
        assert display.fade_out is False

    def test_hidden_is_hint_when_not_suppressed(self) -> None:
        display = classify(make_finding(log_level="hidden"), suppress_hidden=False)
        assert display.severity == types.DiagnosticSeverity.Hint

    def test_hidden_is_suppressed_when_suppressing(self) -> None:
        display = classify(make_finding(log_level="hidden"), suppress_hidden=True)
        assert display.is_suppressed

    @pytest.mark.parametrize("log_level", ["none", "None", "verbose", ""])
    def test_unknown_levels_are_suppressed(self, log_level: str) -> None:
        display = classify(make_finding(log_level=log_level), suppress_hidden=False)
        assert display.is_suppressed
        assert display.fade_out is False

    def test_unnecessary_tag_overrides_hidden_suppression(self) -> None:
        """Faded hidden findings stay visible as hints."""
        display = classify(
            make_finding(log_level="hidden", tags=("Unnecessary",)),
            suppress_hidden=True,
        )
        assert display.severity == types.DiagnosticSeverity.Hint
        assert display.fade_out is True

    def test_unnecessary_tag_overrides_none_level(self) -> None:
        display = classify(
            make_finding(log_level="none", tags=("unnecessary",)),
            suppress_hidden=True,
        )
        assert display.severity == types.DiagnosticSeverity.Hint
        assert display.fade_out is True

    @pytest.mark.parametrize("finding_id", ["CS0162", "CS8019"])
    def test_well_known_ids_fade_out(self, finding_id: str) -> None:
        display = classify(
            make_finding(log_level="hidden", id=finding_id), suppress_hidden=True
        )
        assert display.severity == types.DiagnosticSeverity.Hint
        assert display.fade_out is True

    def test_fade_out_keeps_explicit_severity(self) -> None:
        """Fading does not downgrade warnings."""
        display = classify(
            make_finding(log_level="warning", id="CS0162"), suppress_hidden=True
        )
        assert display.severity == types.DiagnosticSeverity.Warning
        assert display.fade_out is True


class TestToDiagnostic:
    """Tests for to_diagnostic and helpers."""

    def test_composes_message_with_project_labels(self) -> None:
        finding = make_finding(
            text="Unused variable",
            projects=("abc+App", "def+App.Tests"),
        )
        diagnostic = to_diagnostic(finding, suppress_hidden=True)
        assert diagnostic is not None
        assert diagnostic.message == "Unused variable [App, App.Tests]"
        assert diagnostic.code == "CS1000"
        assert diagnostic.source == "csharp"
        assert diagnostic.tags is None

    def test_faded_diagnostic_is_tagged_unnecessary(self) -> None:
        diagnostic = to_diagnostic(
            make_finding(log_level="hidden", id="CS8019"), suppress_hidden=True
        )
        assert diagnostic is not None
        assert diagnostic.tags == [types.DiagnosticTag.Unnecessary]

    def test_suppressed_finding_produces_nothing(self) -> None:
        assert to_diagnostic(make_finding(log_level="none"), suppress_hidden=True) is None

    def test_project_label_without_prefix(self) -> None:
        assert project_label("App") == "App"

    def test_project_label_strips_prefix(self) -> None:
        assert project_label("0f3c+Lib") == "Lib"

    def test_range_is_zero_based(self) -> None:
        finding = make_finding(line=3, column=5, end_line=4, end_column=2)
        assert to_range(finding) == types.Range(
            start=types.Position(line=2, character=4),
            end=types.Position(line=3, character=1),
        )

    def test_range_clamps_at_zero(self) -> None:
        finding = make_finding(line=0, column=0, end_line=0, end_column=0)
        rng = to_range(finding)
        assert rng.start == types.Position(line=0, character=0)
        assert rng.end == types.Position(line=0, character=0)
