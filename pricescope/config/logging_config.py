# pricescope/config/logging_config.py

"""Per-run logging for the PriceScope API server and CLI.

Each launch writes one ``logs/run_YYYYMMDD_HHMMSS.log`` file. Three
sources share it:

* the ``pricescope.*`` stage loggers (fetch, reduce, extract, currency,
  search);
* uvicorn's ``uvicorn.error`` and ``uvicorn.access`` loggers, so request
  lines sit next to the pipeline records they triggered;
* every record stamped with the URL of the scrape in progress (``-``
  outside a scrape), which keeps concurrent requests apart in the file.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path

from pricescope.config.settings import Settings

_APP_LOGGER = "pricescope"
_SERVER_LOGGERS: tuple[str, ...] = ("uvicorn.error", "uvicorn.access")

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(scrape_url)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(scrape_url)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_NO_SCRAPE = "-"
_scrape_url: ContextVar[str] = ContextVar("scrape_url", default=_NO_SCRAPE)


@contextmanager
def scrape_context(url: str) -> Iterator[None]:
    """Tag every record logged inside the block with *url*.

    Context variables are per asyncio task, so concurrent scrapes
    served by the API keep their own URL.
    """
    token = _scrape_url.set(url)
    try:
        yield
    finally:
        _scrape_url.reset(token)


class ScrapeUrlFilter(logging.Filter):
    """Add ``record.scrape_url`` for the formatters above."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.scrape_url = _scrape_url.get()
        return True


def _build_handlers(log_file: Path) -> list[logging.Handler]:
    """File handler at DEBUG, stderr handler at WARNING."""
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    handlers: list[logging.Handler] = [file_handler, console_handler]
    for handler in handlers:
        handler.addFilter(ScrapeUrlFilter())
    return handlers


def _route_server_loggers(handlers: list[logging.Handler]) -> None:
    """Send uvicorn's loggers to this run's handlers only.

    ``main.py`` starts uvicorn with ``log_config=None`` so uvicorn does
    not install handlers of its own over these.
    """
    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.setLevel(logging.INFO)
        server_logger.handlers = list(handlers)
        server_logger.propagate = False


def current_log_file() -> Path | None:
    """Return the file the ``pricescope`` logger writes to, if any."""
    for handler in logging.getLogger(_APP_LOGGER).handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)
    return None


def setup_logging() -> Path:
    """Configure logging for this run and return the log file path.

    Repeated calls keep the existing handlers and return the file
    already in use.
    """
    app_logger = logging.getLogger(_APP_LOGGER)
    app_logger.setLevel(logging.DEBUG)

    existing = current_log_file()
    if existing is not None:
        return existing

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    handlers = _build_handlers(log_file)
    for handler in handlers:
        app_logger.addHandler(handler)
    _route_server_loggers(handlers)

    app_logger.info(
        "Logging to %s (hosted=%s)",
        log_file,
        Settings.is_hosted_environment(),
    )
    return log_file
