"""Command-line interface for omnidiag."""

from __future__ import annotations

import argparse
import dataclasses
import importlib
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Literal

from omnidiag.analysis.server import AnalysisServer
from omnidiag.config import DiagnosticsOptions
from omnidiag.logging import configure_logging, get_logger
from omnidiag.lsp.server import create_server


@dataclasses.dataclass(frozen=True)
class CliArgs:
    """Parsed command-line arguments."""

    transport: Literal["stdio", "tcp"]
    host: str
    port: int
    log_level: str
    log_file: Path | None
    debug: bool
    server_factory: str
    max_project_file_count: int | None
    suppress_hidden: bool


def parse_args(argv: Sequence[str] | None = None) -> CliArgs:
    """
    Parse command-line arguments.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Parsed arguments as CliArgs dataclass.
    """
    parser = argparse.ArgumentParser(
        prog="omnidiag",
        description="Diagnostics language server for OmniSharp-style analysis servers",
    )

    parser.add_argument(
        "--server-factory",
        required=True,
        metavar="MODULE:CALLABLE",
        help="Callable returning the analysis server to query, e.g. mypkg.omnisharp:connect",
    )

    parser.add_argument(
        "--transport",
        choices=["stdio", "tcp"],
        default="stdio",
        help="Transport mode (default: stdio)",
    )

    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host for TCP transport (default: 127.0.0.1)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=4390,
        help="Port for TCP transport (default: 4390)",
    )

    parser.add_argument(
        "--max-project-file-count",
        type=int,
        default=None,
        help="Skip whole-project checks above this many source files (0 = no limit)",
    )

    parser.add_argument(
        "--no-suppress-hidden",
        dest="suppress_hidden",
        action="store_false",
        help="Show hidden-level findings as hints",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Log level (default: INFO, or DEBUG if --debug is set)",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Log file path (default: stderr)",
    )

    parser.add_argument(
        "-v",
        "--debug",
        action="store_true",
        help="Enable debug mode (sets log level to DEBUG unless --log-level is specified)",
    )

    args = parser.parse_args(argv)

    if args.log_level is not None:
        log_level = args.log_level
    elif args.debug:
        log_level = "DEBUG"
    else:
        log_level = "INFO"

    return CliArgs(
        transport=args.transport,
        host=args.host,
        port=args.port,
        log_level=log_level,
        log_file=args.log_file,
        debug=args.debug,
        server_factory=args.server_factory,
        max_project_file_count=args.max_project_file_count,
        suppress_hidden=args.suppress_hidden,
    )


def load_server_factory(spec: str) -> Callable[[], AnalysisServer]:
    """
    Resolve a ``module:callable`` string.

    Raises:
        ValueError: If the string is malformed or the attribute is not callable.
        ImportError: If the module cannot be imported.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"server factory must look like 'module:callable', got {spec!r}")

    target: object = importlib.import_module(module_name)
    for part in attr.split("."):
        target = getattr(target, part)

    if not callable(target):
        raise ValueError(f"server factory {spec!r} is not callable")
    return target  # type: ignore[return-value]


def build_options(args: CliArgs) -> DiagnosticsOptions:
    options = DiagnosticsOptions(suppress_hidden_diagnostics=args.suppress_hidden)
    if args.max_project_file_count is not None:
        options = dataclasses.replace(
            options,
            max_project_file_count_for_diagnostic_analysis=args.max_project_file_count,
        )
    return options


def run(argv: Sequence[str] | None = None) -> int:
    """
    Run the LSP server.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success, 1 for error).
    """
    args = parse_args(argv)

    configure_logging(level=args.log_level, log_file=args.log_file)
    logger = get_logger("main")

    logger.info("Starting omnidiag server")
    logger.debug("Configuration: %s", args)

    try:
        analysis_server = load_server_factory(args.server_factory)()

        server = create_server(
            analysis_server=analysis_server,
            options=build_options(args),
        )

        if args.transport == "stdio":
            logger.info("Starting in stdio mode")
            server.start_io()
        else:
            logger.info("Starting in TCP mode on %s:%d", args.host, args.port)
            server.start_tcp(args.host, args.port)

        return 0

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0

    except Exception:
        logger.critical("Fatal error in server", exc_info=True)
        return 1
