"""Diagnostics scheduling for OmniSharp-style analysis servers."""

__version__ = "0.1.0"
