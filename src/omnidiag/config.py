"""Diagnostics options and the provider that serves the latest values."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

__all__ = [
    "ConfigError",
    "DiagnosticsOptions",
    "OptionsProvider",
]

# Settings sections searched (in order) when options arrive nested.
_SECTIONS = ("omnisharp", "csharp")

# camelCase setting name -> DiagnosticsOptions field
_SETTING_FIELDS: dict[str, str] = {
    "suppressHiddenDiagnostics": "suppress_hidden_diagnostics",
    "maxProjectFileCountForDiagnosticAnalysis": (
        "max_project_file_count_for_diagnostic_analysis"
    ),
    "documentDelayMs": "document_delay_ms",
    "projectDelayMs": "project_delay_ms",
    "languageId": "language_id",
    "virtualDocumentSchemes": "virtual_document_schemes",
}


class ConfigError(ValueError):
    """Raised when diagnostics settings have an invalid shape or value."""


@dataclasses.dataclass(frozen=True)
class DiagnosticsOptions:
    """Settings consumed by the validation scheduler."""

    suppress_hidden_diagnostics: bool = True
    # 0 or less disables the project size gate.
    max_project_file_count_for_diagnostic_analysis: int = 1000
    document_delay_ms: int = 750
    project_delay_ms: int = 3000
    language_id: str = "csharp"
    # URI scheme prefixes accepted in addition to "file".
    virtual_document_schemes: tuple[str, ...] = ("virtualCSharp-",)

    @classmethod
    def from_mapping(
        cls,
        settings: Mapping[str, Any] | None,
        *,
        base: DiagnosticsOptions | None = None,
    ) -> DiagnosticsOptions:
        """
        Build options from LSP initialization options or configuration.

        Settings may be flat or nested under an ``omnisharp``/``csharp``
        section; unknown keys are ignored and missing keys keep the value
        from ``base`` (defaults when None).

        Raises:
            ConfigError: If a known setting has the wrong type or a delay
                is negative.
        """
        options = base if base is not None else cls()
        if not settings:
            return options
        if not isinstance(settings, Mapping):
            raise ConfigError(f"settings must be a mapping, got {type(settings).__name__}")

        merged: dict[str, Any] = {}
        for section in _SECTIONS:
            nested = settings.get(section)
            if isinstance(nested, Mapping):
                merged.update(nested)
        merged.update({k: v for k, v in settings.items() if k not in _SECTIONS})

        changes: dict[str, Any] = {}
        for key, field_name in _SETTING_FIELDS.items():
            if key in merged:
                changes[field_name] = _coerce(field_name, merged[key])

        return dataclasses.replace(options, **changes)


def _coerce(field_name: str, value: Any) -> Any:
    if field_name == "suppress_hidden_diagnostics":
        if not isinstance(value, bool):
            raise ConfigError(f"{field_name} must be a boolean")
        return value

    if field_name == "language_id":
        if not isinstance(value, str) or not value:
            raise ConfigError(f"{field_name} must be a non-empty string")
        return value

    if field_name == "virtual_document_schemes":
        if not isinstance(value, (list, tuple)) or not all(
            isinstance(v, str) for v in value
        ):
            raise ConfigError(f"{field_name} must be a list of strings")
        return tuple(value)

    # Remaining fields are integers; bool is an int subclass and is rejected.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{field_name} must be an integer")
    if field_name.endswith("_delay_ms") and value < 0:
        raise ConfigError(f"{field_name} must not be negative")
    return value


class OptionsProvider:
    """Holds the latest DiagnosticsOptions; readers call ``get`` on demand."""

    def __init__(self, options: DiagnosticsOptions | None = None) -> None:
        self._options = options if options is not None else DiagnosticsOptions()

    def get(self) -> DiagnosticsOptions:
        return self._options

    def update(self, settings: Mapping[str, Any] | None) -> DiagnosticsOptions:
        """Merge ``settings`` into the current options and return the result."""
        self._options = DiagnosticsOptions.from_mapping(settings, base=self._options)
        return self._options
