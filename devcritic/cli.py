from __future__ import annotations

import argparse
import json
import logging
import sys

import uvicorn
from loguru import logger

from devcritic import service
from devcritic.config import Config
from devcritic.github import GitHubNotFoundError
from devcritic.server import create_app


def cmd_serve(config: Config, *, host: str | None = None, port: int | None = None) -> None:
    """Run the HTTP API with uvicorn."""
    uvicorn.run(
        create_app(config),
        host=host or config.host,
        port=port or config.port,
        log_config=None,
    )


def cmd_analyze(
    config: Config,
    username: str,
    *,
    no_critique: bool = False,
    output: str | None = None,
) -> None:
    """Analyze one profile and write the merged JSON to stdout or a file."""
    sanitized = service.sanitize_username(username)
    if not sanitized:
        logger.error("Invalid username format: {!r}", username)
        sys.exit(1)

    try:
        if no_critique:
            result = service.fetch_bundle(sanitized, config).to_dict()
        else:
            result = service.run_analysis(sanitized, config)
    except GitHubNotFoundError as exc:
        logger.error("{}", exc)
        sys.exit(1)

    text = json.dumps(result, indent=2, ensure_ascii=False)
    if output:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(text + "\n")
        logger.info("Wrote analysis for {} to {}", sanitized, output)
    else:
        print(text)


class _InterceptHandler(logging.Handler):
    """Route stdlib logging (httpx, openai, uvicorn) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _setup_logging(verbose: bool = False) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
    )

    # uvicorn runs with log_config=None, so its loggers propagate to this root handler.
    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    chatty_level = logging.DEBUG if verbose else logging.WARNING
    for name in ("httpx", "openai", "httpcore", "uvicorn.access"):
        logging.getLogger(name).setLevel(chatty_level)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="devcritic",
        description="Score a GitHub portfolio with an LLM-generated critique",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    serve_p = sub.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", default=None, help="Bind address (default: env HOST or 127.0.0.1)")
    serve_p.add_argument("--port", type=int, default=None, help="Bind port (default: env PORT or 8000)")

    analyze_p = sub.add_parser("analyze", help="Analyze a single GitHub user")
    analyze_p.add_argument("username", help="GitHub username")
    analyze_p.add_argument(
        "--no-critique",
        action="store_true",
        help="Only fetch and print the aggregated GitHub data, skip the LLM call",
    )
    analyze_p.add_argument(
        "-o", "--output",
        default=None,
        help="Write the JSON result to this file instead of stdout",
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _setup_logging(args.verbose)
    config = Config.from_env()

    if args.command == "serve":
        cmd_serve(config, host=args.host, port=args.port)
    elif args.command == "analyze":
        cmd_analyze(
            config,
            args.username,
            no_critique=args.no_critique,
            output=args.output,
        )
