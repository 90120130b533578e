# src/main.py — v1
"""CLI entry point — serve, analyze commands.

Usage:
    policylens serve [--host HOST] [--port PORT]
    policylens analyze <policy_url> <webpage_url>
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from policylens.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from policylens.config.settings import ConfigurationError, load_settings

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    _setup_logging(settings, args.verbose)

    try:
        return args.func(args, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="policylens",
        description=f"policylens v{__version__} — policy compliance analyzer",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- serve ---
    p_serve = subparsers.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default=None, help="Listen host (default: HOST setting)")
    p_serve.add_argument("--port", type=int, default=None, help="Listen port (default: PORT setting)")
    p_serve.set_defaults(func=_cmd_serve)

    # --- analyze ---
    p_analyze = subparsers.add_parser(
        "analyze", help="Analyze one policy/webpage pair and print the response",
    )
    p_analyze.add_argument("policy", help="Policy document URL")
    p_analyze.add_argument("webpage", help="Webpage URL to check against the policy")
    p_analyze.set_defaults(func=_cmd_analyze)

    return parser


def _cmd_serve(args: argparse.Namespace, settings) -> int:
    """Run uvicorn on the FastAPI app."""
    import uvicorn

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("API server listening on %s:%d", host, port)
    uvicorn.run("policylens.api.app:app", host=host, port=port, log_config=None)
    return 0


def _cmd_analyze(args: argparse.Namespace, settings) -> int:
    """Run the pipeline once and print the JSON response."""
    from policylens.api.dependencies import build_orchestrator
    from policylens.core.errors import PipelineError

    orchestrator = build_orchestrator(settings)
    try:
        result = asyncio.run(orchestrator.handle_request(args.policy, args.webpage))
    except PipelineError as exc:
        logger.error("%s", exc.message)
        print(json.dumps({"detail": exc.message}), file=sys.stderr)
        return 2 if exc.status_code < 500 else 1

    print(json.dumps({"Response": result.response_text()}))
    return 0


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging from settings; --verbose forces DEBUG."""
    from policylens.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
