"""Utility functions and helpers for Tubecast."""

from tubecast.utils.errors import (
    ConfigError,
    ConfigNotFoundError,
    DependencyError,
    DownloadError,
    EmptyPlaylistError,
    EncryptionError,
    InvalidConfigError,
    PlaylistFetchError,
    ProcessingError,
    RunCancelledError,
    TubecastError,
    UploadError,
    ValidationError,
)
from tubecast.utils.paths import (
    get_config_dir,
    get_config_file,
    get_default_download_dir,
    get_error_log_file,
    get_history_file,
    get_key_file,
)

__all__ = [
    # Errors
    "TubecastError",
    "ConfigError",
    "InvalidConfigError",
    "ConfigNotFoundError",
    "EncryptionError",
    "ValidationError",
    "DependencyError",
    "ProcessingError",
    "PlaylistFetchError",
    "EmptyPlaylistError",
    "DownloadError",
    "UploadError",
    "RunCancelledError",
    # Paths
    "get_config_dir",
    "get_config_file",
    "get_key_file",
    "get_history_file",
    "get_error_log_file",
    "get_default_download_dir",
]
