"""Fixtures for E2E tests."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from tests.lsp.e2e.lsp_client import LspTestClient

# server_entry imports the ``tests`` package, so run from the repository root.
REPO_ROOT = Path(__file__).resolve().parents[3]


class _StdinWriter:
    """StreamWriter-like wrapper around a subprocess stdin pipe."""

    def __init__(self, stdin: asyncio.StreamWriter) -> None:
        self._stdin = stdin

    def write(self, data: bytes) -> None:
        self._stdin.write(data)

    async def drain(self) -> None:
        await self._stdin.drain()


@pytest.fixture
async def lsp_server_process() -> AsyncGenerator[asyncio.subprocess.Process, None]:
    """Start the test LSP server as a subprocess."""
    process = await asyncio.create_subprocess_exec(
        sys.executable,
        "-m",
        "tests.lsp.e2e.server_entry",
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
        cwd=REPO_ROOT,
    )

    yield process

    if process.returncode is None:
        process.terminate()
        try:
            await asyncio.wait_for(process.wait(), timeout=5.0)
        except asyncio.TimeoutError:
            process.kill()


@pytest.fixture
async def lsp_client(
    lsp_server_process: asyncio.subprocess.Process,
) -> AsyncGenerator[LspTestClient, None]:
    """Create an LSP client connected to the test server."""
    assert lsp_server_process.stdin is not None
    assert lsp_server_process.stdout is not None

    client = LspTestClient(
        reader=lsp_server_process.stdout,
        writer=_StdinWriter(lsp_server_process.stdin),  # type: ignore[arg-type]
    )
    yield client
