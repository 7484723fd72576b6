"""Per-URI diagnostic store that publishes its changes."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence

from lsprotocol import types

from omnidiag.logging import get_logger

__all__ = [
    "DiagnosticCollection",
    "DiagnosticEntry",
    "PublishCallback",
]

DiagnosticEntry = tuple[str, Sequence[types.Diagnostic] | None]
PublishCallback = Callable[[str, list[types.Diagnostic]], None]


class DiagnosticCollection:
    """Diagnostics currently shown to the user, keyed by document URI.

    Every mutation publishes the affected URIs through ``publish``; an empty
    list tells the client to clear that URI.
    """

    def __init__(self, publish: PublishCallback, name: str = "csharp") -> None:
        self.name = name
        self._publish = publish
        self._entries: dict[str, list[types.Diagnostic]] = {}
        self._logger = get_logger("diagnostics.collection")

    def __contains__(self, uri: str) -> bool:
        return uri in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def has(self, uri: str) -> bool:
        return uri in self._entries

    def get(self, uri: str) -> list[types.Diagnostic] | None:
        entry = self._entries.get(uri)
        return list(entry) if entry is not None else None

    def uris(self) -> list[str]:
        return list(self._entries)

    def set(self, uri: str, diagnostics: Sequence[types.Diagnostic] | None) -> None:
        """Replace the diagnostics for ``uri``; empty or None deletes them."""
        if diagnostics:
            self._entries[uri] = list(diagnostics)
        else:
            self._entries.pop(uri, None)
        self._publish_uri(uri)

    def delete(self, uri: str) -> None:
        if self._entries.pop(uri, None) is not None:
            self._publish_uri(uri)

    def set_many(self, entries: Iterable[DiagnosticEntry]) -> None:
        """
        Apply a batch of ``(uri, diagnostics)`` pairs as one update.

        Within a batch, lists for the same URI are concatenated and a None
        entry discards what was accumulated for that URI so far, including
        the diagnostics held before the batch. Each touched URI is published
        once, after the whole batch has been applied.
        """
        staged: dict[str, list[types.Diagnostic]] = {}
        for uri, diagnostics in entries:
            if diagnostics is None:
                staged[uri] = []
                continue
            if uri not in staged:
                staged[uri] = list(self._entries.get(uri, ()))
            staged[uri].extend(diagnostics)

        for uri, diagnostics in staged.items():
            if diagnostics:
                self._entries[uri] = diagnostics
            else:
                self._entries.pop(uri, None)

        for uri in staged:
            self._publish_uri(uri)

        self._logger.debug("Applied diagnostics batch touching %d documents", len(staged))

    def clear(self) -> None:
        uris = list(self._entries)
        self._entries.clear()
        for uri in uris:
            self._publish_uri(uri)

    def _publish_uri(self, uri: str) -> None:
        self._publish(uri, list(self._entries.get(uri, ())))
