"""Configuration manager for loading and saving Tubecast config."""

import json
import logging
import shutil
from pathlib import Path

from tubecast.config.crypto import CredentialEncryptor
from tubecast.config.schema import GlobalConfig
from tubecast.utils.errors import ConfigNotFoundError, DependencyError, InvalidConfigError
from tubecast.utils.paths import get_config_dir, get_config_file, get_key_file

logger = logging.getLogger(__name__)

ENCRYPTED_STORAGE_FIELDS = ("access_key", "secret_key")


class ConfigManager:
    """Manages the Tubecast configuration file.

    The config is a JSON document. Storage credentials are encrypted before
    they touch disk and decrypted on load, so callers only ever see plaintext.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_dir: Optional custom config directory. Defaults to XDG config dir.
        """
        self.config_dir = config_dir or get_config_dir()
        self.config_file = get_config_file(self.config_dir)
        self.key_file = get_key_file(self.config_dir)
        self.encryptor = CredentialEncryptor(self.key_file)

    def load_config(self) -> GlobalConfig:
        """Load and validate the configuration.

        Returns:
            Validated GlobalConfig; defaults when no config file exists yet

        Raises:
            InvalidConfigError: If the file is unreadable or fails validation
        """
        if not self.config_file.exists():
            logger.debug("No config at %s, using defaults", self.config_file)
            return GlobalConfig()

        try:
            data = json.loads(self.config_file.read_text(encoding="utf-8")) or {}
            storage = data.get("storage") or {}
            for field in ENCRYPTED_STORAGE_FIELDS:
                if storage.get(field):
                    storage[field] = self.encryptor.decrypt(storage[field])
            return GlobalConfig(**data)
        except Exception as e:
            raise InvalidConfigError(
                f"Invalid configuration in {self.config_file}: {e}"
            ) from e

    def save_config(self, config: GlobalConfig) -> None:
        """Write the configuration, encrypting storage credentials."""
        data = config.model_dump(mode="json")
        for field in ENCRYPTED_STORAGE_FIELDS:
            data["storage"][field] = self.encryptor.encrypt(data["storage"][field])

        self.config_dir.mkdir(parents=True, exist_ok=True)

        temp_file = self.config_file.with_suffix(".tmp")
        temp_file.write_text(json.dumps(data, indent=2), encoding="utf-8")
        temp_file.chmod(0o600)
        temp_file.replace(self.config_file)
        logger.debug("Saved config to %s", self.config_file)

    def is_configured(self) -> bool:
        """True once storage credentials have been saved."""
        if not self.config_file.exists():
            return False
        try:
            return self.load_config().storage.is_complete
        except InvalidConfigError:
            return False

    def require_configured(self) -> GlobalConfig:
        """Load the configuration, requiring saved storage credentials.

        Raises:
            ConfigNotFoundError: If no config file exists or storage is incomplete
            InvalidConfigError: If the file is unreadable or fails validation
        """
        if not self.config_file.exists():
            raise ConfigNotFoundError(f"No configuration found at {self.config_file}")

        config = self.load_config()
        if not config.storage.is_complete:
            raise ConfigNotFoundError(
                f"Storage credentials are missing from {self.config_file}"
            )
        return config

    @staticmethod
    def check_dependencies(config: GlobalConfig) -> dict[str, str | None]:
        """Resolve each external tool to an executable path.

        Returns:
            Mapping of tool name to resolved path, or None when missing
        """
        tools = {
            "yt-dlp": config.tools.yt_dlp_path,
            "ffmpeg": config.tools.ffmpeg_path,
        }
        return {name: shutil.which(path) for name, path in tools.items()}

    def require_dependencies(self, config: GlobalConfig) -> None:
        """Raise DependencyError for the first missing external tool."""
        configured = {"yt-dlp": config.tools.yt_dlp_path, "ffmpeg": config.tools.ffmpeg_path}
        for name, resolved in self.check_dependencies(config).items():
            if resolved is None:
                raise DependencyError(name, configured[name])
