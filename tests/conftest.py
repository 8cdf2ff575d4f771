"""Shared fixtures for Tubecast tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from tubecast.config.schema import GlobalConfig, StorageConfig, ToolsConfig
from tubecast.media.models import VideoMetadata


@pytest.fixture
def storage_config() -> StorageConfig:
    return StorageConfig(
        endpoint="https://account.r2.cloudflarestorage.com",
        public_url="https://pub-test.r2.dev",
        access_key="AKIATESTKEY",
        secret_key="secret-value-1234",
        bucket_name="podcasts-bucket",
    )


@pytest.fixture
def global_config(tmp_path: Path, storage_config: StorageConfig) -> GlobalConfig:
    """Complete config whose scratch directory lives under tmp_path."""
    return GlobalConfig(
        storage=storage_config,
        tools=ToolsConfig(
            yt_dlp_path="yt-dlp",
            ffmpeg_path="ffmpeg",
            download_dir=tmp_path / "downloads",
        ),
    )


@pytest.fixture
def sample_videos() -> list[VideoMetadata]:
    return [
        VideoMetadata(
            id="vid1",
            title="First Talk",
            description="The first one",
            duration_seconds=125,
            upload_date=datetime(2024, 1, 15, tzinfo=timezone.utc),
            uploader="Test Channel",
            thumbnail_url="https://i.ytimg.com/vi/vid1/hqdefault.jpg",
            source_url="https://www.youtube.com/watch?v=vid1",
        ),
        VideoMetadata(
            id="vid2",
            title="Second Talk",
            duration_seconds=3725,
            uploader="Test Channel",
            source_url="https://www.youtube.com/watch?v=vid2",
        ),
    ]
