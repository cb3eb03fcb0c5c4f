"""
Command-line interface for SelfHeal.

Checks the effective model configuration and asks the backend for a
locator suggestion by hand, without a browser.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import structlog
from dotenv import load_dotenv

from selfheal.llm.client import ModelClient
from selfheal.llm.loader import DEFAULT_CONFIG_PATH, load_model_config
from selfheal.runner.locators import classify_suggestion


def configure_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure structlog console output on stderr.

    stdout is reserved for command results (JSON).
    """
    log_level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING

    logging.basicConfig(format="%(message)s", level=log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="selfheal",
        description="SelfHeal - model-backed locator recovery for browser tests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  selfheal config
  selfheal config --config settings.yaml
  selfheal suggest --markup page.html --locator "By.Id: searchBox" \\
      --description "Wikipedia search box"
""",
    )
    parser.add_argument(
        "-c", "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Settings document, JSON or YAML (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("config", help="Print the effective model configuration")

    suggest = subparsers.add_parser("suggest", help="Ask the model for a replacement locator")
    suggest.add_argument("--markup", required=True, help="File holding the page HTML")
    suggest.add_argument(
        "--locator",
        required=True,
        help='Description of the failed locator, e.g. "By.Id: searchBox"',
    )
    suggest.add_argument("--description", required=True, help="What the element is")
    suggest.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds (default: 30)",
    )

    return parser


async def _suggest(args: argparse.Namespace) -> int:
    config = load_model_config(args.config)
    client = ModelClient(config, timeout=args.timeout)
    markup = Path(args.markup).read_text(encoding="utf-8", errors="replace")

    suggestion = await client.request_locator_suggestion(markup, args.locator, args.description)
    if not suggestion:
        print("No suggestion received", file=sys.stderr)
        return 1

    print(json.dumps({"suggestion": suggestion, "kind": str(classify_suggestion(suggestion))}))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    load_dotenv()
    configure_logging(verbose=args.verbose, debug=args.debug)

    match args.command:
        case "config":
            config = load_model_config(args.config)
            print(json.dumps(config.redacted(), indent=2))
            return 0
        case "suggest":
            try:
                return asyncio.run(_suggest(args))
            except OSError as e:
                print(f"Error: {e}", file=sys.stderr)
                return 2
        case _:
            parser.print_help()
            return 2


if __name__ == "__main__":
    sys.exit(main())
