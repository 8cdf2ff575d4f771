"""Default storage locations, following the XDG conventions via platformdirs."""

import tempfile
from pathlib import Path

import platformdirs

APP_NAME = "tubecast"


def get_config_dir() -> Path:
    """Return the per-user configuration directory."""
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_config_file(config_dir: Path | None = None) -> Path:
    return (config_dir or get_config_dir()) / "config.json"


def get_key_file(config_dir: Path | None = None) -> Path:
    return (config_dir or get_config_dir()) / ".keyfile"


def get_history_file(config_dir: Path | None = None) -> Path:
    return (config_dir or get_config_dir()) / "history.json"


def get_error_log_file(config_dir: Path | None = None) -> Path:
    return (config_dir or get_config_dir()) / "errors.log"


def get_default_download_dir() -> Path:
    """Scratch directory for downloads; runs create their own subdirectory in it."""
    return Path(tempfile.gettempdir()) / "tubecast-downloads"
