"""Logging setup for the CLI."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3")


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
    level: str = "WARNING",
) -> None:
    """Configure the root logger.

    Console output goes to stderr through rich so it does not tear the
    progress display. Safe to call again once the config's level is known.

    Args:
        verbose: Enable DEBUG output on the console, overriding ``level``
        log_file: Optional file receiving every record at DEBUG level
        level: Console level name, e.g. the configured ``log_level``
    """
    console_level = logging.DEBUG if verbose else logging.getLevelName(level.upper())
    if not isinstance(console_level, int):
        console_level = logging.WARNING

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        level=console_level,
        show_path=verbose,
        rich_tracebacks=verbose,
    )
    root.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(file_handler)

    root.setLevel(logging.DEBUG if log_file else console_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
