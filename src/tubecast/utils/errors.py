"""Custom exceptions for Tubecast."""


class TubecastError(Exception):
    """Base exception for all Tubecast errors."""

    pass


class ConfigError(TubecastError):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration data."""

    pass


class ConfigNotFoundError(ConfigError):
    """Configuration file not found or storage credentials missing."""

    pass


class EncryptionError(ConfigError):
    """Encryption/decryption errors."""

    pass


class ValidationError(TubecastError):
    """User input or config value rejected before any side effect."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.value = value
        self.suggestion = suggestion


class DependencyError(TubecastError):
    """A required external tool is not installed."""

    def __init__(self, dependency: str, path: str | None = None) -> None:
        message = f"Required dependency not found: {dependency}"
        if path:
            message += f" (looked for {path})"
        super().__init__(message)
        self.dependency = dependency
        self.path = path


class ProcessingError(TubecastError):
    """A playlist conversion run failed."""

    pass


class PlaylistFetchError(ProcessingError):
    """Playlist metadata could not be retrieved."""

    pass


class EmptyPlaylistError(ProcessingError):
    """The playlist has no resolvable items."""

    def __init__(self, playlist_url: str) -> None:
        super().__init__(f"No videos found in playlist: {playlist_url}")
        self.playlist_url = playlist_url


class DownloadError(ProcessingError):
    """Audio extraction or transcoding failed for one item."""

    def __init__(
        self,
        message: str,
        video_id: str | None = None,
        video_title: str | None = None,
    ) -> None:
        super().__init__(message)
        self.video_id = video_id
        self.video_title = video_title


class UploadError(ProcessingError):
    """The object store rejected a write."""

    def __init__(self, message: str, key: str | None = None, bucket: str | None = None) -> None:
        super().__init__(message)
        self.key = key
        self.bucket = bucket


class RunCancelledError(ProcessingError):
    """The run was cancelled by the operator."""

    pass
