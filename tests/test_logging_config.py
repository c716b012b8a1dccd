# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import asyncio
import logging
import unittest

from pricescope.config.logging_config import (
    ScrapeUrlFilter,
    current_log_file,
    scrape_context,
    setup_logging,
)

_OWNED_LOGGERS = ("pricescope", "uvicorn.error", "uvicorn.access")


def _flush_all() -> None:
    for handler in logging.getLogger("pricescope").handlers:
        handler.flush()


class TestSetupLogging(unittest.TestCase):
    """setup_logging handler layout."""

    def setUp(self) -> None:
        """Detach and close handlers left by earlier tests."""
        for name in _OWNED_LOGGERS:
            target = logging.getLogger(name)
            for handler in list(target.handlers):
                target.removeHandler(handler)
                handler.close()

    def test_creates_named_log_file_in_logs_dir(self) -> None:
        """The run file exists and is named run_YYYYMMDD_HHMMSS.log."""
        log_path = setup_logging()
        self.assertTrue(log_path.exists())
        self.assertEqual(log_path.parent.name, "logs")
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_handler_levels(self) -> None:
        """File captures DEBUG, stderr only WARNING and above."""
        setup_logging()
        app_logger = logging.getLogger("pricescope")
        self.assertEqual(app_logger.level, logging.DEBUG)
        levels = {
            type(h).__name__: h.level for h in app_logger.handlers
        }
        self.assertEqual(levels["FileHandler"], logging.DEBUG)
        self.assertEqual(levels["StreamHandler"], logging.WARNING)

    def test_repeated_calls_reuse_run_file(self) -> None:
        """A second call adds no handlers and returns the same file."""
        first = setup_logging()
        count = len(logging.getLogger("pricescope").handlers)
        second = setup_logging()
        self.assertEqual(first, second)
        self.assertEqual(current_log_file(), first)
        self.assertEqual(len(logging.getLogger("pricescope").handlers), count)

    def test_uvicorn_loggers_share_run_file(self) -> None:
        """Server request lines land in the same file as pipeline logs."""
        log_path = setup_logging()
        access = logging.getLogger("uvicorn.access")
        self.assertFalse(access.propagate)
        self.assertEqual(
            access.handlers, logging.getLogger("pricescope").handlers
        )

        access.info('%s - "%s %s HTTP/1.1" %d',
                    "127.0.0.1:5000", "POST", "/scrape", 200)
        logging.getLogger("uvicorn.error").info("Application startup complete.")
        _flush_all()

        text = log_path.read_text(encoding="utf-8")
        self.assertIn('"POST /scrape HTTP/1.1" 200', text)
        self.assertIn("Application startup complete.", text)

    def test_scrape_url_stamped_on_records(self) -> None:
        """Records inside a scrape carry its URL; others carry '-'."""
        log_path = setup_logging()
        stage = logging.getLogger("pricescope.pipeline")
        with scrape_context("https://www.amazon.in/dp/B0TEST"):
            stage.info("inside marker")
        stage.info("outside marker")
        _flush_all()

        lines = log_path.read_text(encoding="utf-8").splitlines()
        inside = next(line for line in lines if "inside marker" in line)
        outside = next(line for line in lines if "outside marker" in line)
        self.assertIn("| https://www.amazon.in/dp/B0TEST |", inside)
        self.assertIn("| - |", outside)


class TestScrapeContext(unittest.IsolatedAsyncioTestCase):
    """scrape_context isolation between concurrent scrapes."""

    async def test_concurrent_tasks_keep_their_url(self) -> None:
        """Each asyncio task sees only the URL it set."""
        seen: dict[str, str] = {}
        url_filter = ScrapeUrlFilter()

        async def _scrape(url: str) -> None:
            with scrape_context(url):
                await asyncio.sleep(0)
                record = logging.LogRecord(
                    "pricescope.pipeline", logging.INFO, __file__, 0,
                    "x", None, None,
                )
                url_filter.filter(record)
                seen[url] = record.scrape_url

        await asyncio.gather(
            _scrape("https://a.example/p"), _scrape("https://b.example/p"),
        )

        self.assertEqual(
            seen,
            {
                "https://a.example/p": "https://a.example/p",
                "https://b.example/p": "https://b.example/p",
            },
        )

    def test_context_resets_after_block(self) -> None:
        """Leaving the block restores the '-' placeholder."""
        record = logging.LogRecord(
            "pricescope", logging.INFO, __file__, 0, "x", None, None,
        )
        with scrape_context("https://a.example/p"):
            pass
        ScrapeUrlFilter().filter(record)
        self.assertEqual(record.scrape_url, "-")


if __name__ == "__main__":
    unittest.main()
