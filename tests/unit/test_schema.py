"""Tests for configuration schema models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from tubecast.config.schema import FeedSettings, GlobalConfig, StorageConfig, ToolsConfig


class TestStorageConfig:
    """Tests for StorageConfig model."""

    def test_defaults_are_incomplete(self) -> None:
        assert not StorageConfig().is_complete

    def test_complete_config(self, storage_config: StorageConfig) -> None:
        assert storage_config.is_complete

    def test_trailing_slash_removed(self) -> None:
        config = StorageConfig(
            endpoint=" https://abc.r2.cloudflarestorage.com/ ",
            public_url="https://pub-abc.r2.dev/",
        )
        assert config.endpoint == "https://abc.r2.cloudflarestorage.com"
        assert config.public_url == "https://pub-abc.r2.dev"

    def test_rejects_http_endpoint(self) -> None:
        with pytest.raises(ValidationError):
            StorageConfig(endpoint="http://abc.r2.cloudflarestorage.com")

    def test_rejects_bad_bucket_name(self) -> None:
        with pytest.raises(ValidationError):
            StorageConfig(bucket_name="Not_A_Bucket")


class TestToolsConfig:
    """Tests for ToolsConfig model."""

    def test_defaults(self) -> None:
        config = ToolsConfig()
        assert config.yt_dlp_path
        assert config.ffmpeg_path
        assert config.download_timeout_seconds == 600
        assert config.max_output_bytes == 50 * 1024 * 1024

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ToolsConfig(download_timeout_seconds=0)

    def test_download_dir_coerced_to_path(self, tmp_path: Path) -> None:
        config = ToolsConfig(download_dir=str(tmp_path))  # type: ignore[arg-type]
        assert config.download_dir == tmp_path


class TestGlobalConfig:
    """Tests for GlobalConfig model."""

    def test_defaults(self) -> None:
        config = GlobalConfig()
        assert config.version == "1"
        assert config.log_level == "INFO"
        assert config.feed == FeedSettings()

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            GlobalConfig(log_level="TRACE")  # type: ignore[arg-type]
