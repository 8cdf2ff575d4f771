"""Tests for logging setup."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from rich.logging import RichHandler

from tubecast.config.logging import setup_logging


@pytest.fixture
def root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _console_handler(root: logging.Logger) -> RichHandler:
    return next(h for h in root.handlers if isinstance(h, RichHandler))


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_default_level_is_warning(self, root_logger: logging.Logger) -> None:
        setup_logging()

        assert _console_handler(root_logger).level == logging.WARNING
        assert root_logger.level == logging.WARNING

    def test_configured_level_applies(self, root_logger: logging.Logger) -> None:
        setup_logging(level="INFO")

        assert _console_handler(root_logger).level == logging.INFO
        assert root_logger.isEnabledFor(logging.INFO)
        assert not root_logger.isEnabledFor(logging.DEBUG)

    def test_verbose_overrides_level(self, root_logger: logging.Logger) -> None:
        setup_logging(verbose=True, level="ERROR")

        assert _console_handler(root_logger).level == logging.DEBUG

    def test_log_file_receives_debug(self, root_logger: logging.Logger, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "tubecast.log"
        setup_logging(log_file=log_file, level="ERROR")

        logging.getLogger("tubecast.test").debug("written to file")

        assert "written to file" in log_file.read_text()
        assert _console_handler(root_logger).level == logging.ERROR

    def test_repeated_setup_replaces_handlers(self, root_logger: logging.Logger) -> None:
        setup_logging()
        setup_logging(level="INFO")

        assert len([h for h in root_logger.handlers if isinstance(h, RichHandler)]) == 1
