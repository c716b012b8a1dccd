# main.py

"""Entry point for PriceScope (API server or headless CLI)."""

import argparse
import asyncio
import logging
import sys

from pricescope.config.logging_config import setup_logging
from pricescope.config.settings import Settings

logger = logging.getLogger("pricescope.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="pricescope",
        description="AI product extraction and price comparison.",
        epilog="Run without arguments to start the HTTP API.",
    )
    parser.add_argument(
        "url",
        nargs="?",
        default=None,
        help="Product page URL to scrape and compare. "
        "Omit to launch the API server.",
    )
    parser.add_argument(
        "--search",
        default=None,
        dest="product_name",
        help="Only search comparable listings for this product name.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--host",
        default=Settings.HOST,
        help=f"API bind address (default: {Settings.HOST}).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=Settings.PORT,
        help=f"API port (default: {Settings.PORT}).",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on external services.",
    )
    return parser


def _run_server(host: str, port: int) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    mode = "HOSTED" if Settings.is_hosted_environment() else "LOCAL"
    logger.info("Starting API on %s:%d (%s)", host, port, mode)
    try:
        uvicorn.run(
            "pricescope.api.server:create_app",
            factory=True,
            host=host,
            port=port,
            log_config=None,
        )
    except Exception:
        logger.critical("Fatal error while serving API", exc_info=True)
        raise
    finally:
        logger.info("PriceScope API shutting down")


def _run_scrape(args: argparse.Namespace) -> None:
    """Scrape a URL and compare it, then exit."""
    from pricescope.cli.runner import cli_scrape

    exit_code = asyncio.run(cli_scrape(args.url, args.output_format))
    sys.exit(exit_code)


def _run_compare(args: argparse.Namespace) -> None:
    """Search comparable listings for a product name, then exit."""
    from pricescope.cli.runner import cli_compare

    exit_code = asyncio.run(
        cli_compare(args.product_name, args.output_format)
    )
    sys.exit(exit_code)


def _run_health_check() -> None:
    """Run external service connectivity health check."""
    from pricescope.cli.runner import run_health_check

    exit_code = asyncio.run(run_health_check())
    sys.exit(exit_code)


def main() -> None:
    """Route to the API server (no args) or a headless CLI command."""
    log_file = setup_logging()
    logger.info("PriceScope starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.health:
        _run_health_check()
    elif args.product_name:
        _run_compare(args)
    elif args.url:
        _run_scrape(args)
    else:
        _run_server(args.host, args.port)


if __name__ == "__main__":
    main()
