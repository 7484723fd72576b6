"""Entry point for the omnidiag LSP server."""

import sys

from omnidiag.cli import run


def main() -> None:
    """Run the CLI and exit with its status code."""
    sys.exit(run())


if __name__ == "__main__":
    main()
