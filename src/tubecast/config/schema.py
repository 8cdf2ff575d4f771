"""Configuration schema models using Pydantic."""

import shutil
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from tubecast.utils.paths import get_default_download_dir
from tubecast.utils.validators import (
    validate_bucket_name,
    validate_endpoint,
    validate_public_url,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


def _which_or(name: str) -> str:
    return shutil.which(name) or name


class StorageConfig(BaseModel):
    """S3-compatible object storage settings."""

    endpoint: str = ""
    public_url: str = ""
    access_key: str = ""  # Encrypted when stored
    secret_key: str = ""  # Encrypted when stored
    bucket_name: str = ""
    region: str = "auto"

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        value = value.strip()
        if value and not validate_endpoint(value):
            raise ValueError("endpoint must be an https URL")
        return value.rstrip("/")

    @field_validator("public_url")
    @classmethod
    def _check_public_url(cls, value: str) -> str:
        value = value.strip()
        if value and not validate_public_url(value):
            raise ValueError("public_url must be an https URL")
        return value.rstrip("/")

    @field_validator("bucket_name")
    @classmethod
    def _check_bucket_name(cls, value: str) -> str:
        value = value.strip()
        if value and not validate_bucket_name(value):
            raise ValueError(
                "bucket_name must be 3-63 characters of lowercase letters, digits and hyphens"
            )
        return value

    @property
    def is_complete(self) -> bool:
        return all(
            [self.endpoint, self.public_url, self.access_key, self.secret_key, self.bucket_name]
        )


class ToolsConfig(BaseModel):
    """External tool locations and limits."""

    yt_dlp_path: str = Field(default_factory=lambda: _which_or("yt-dlp"))
    ffmpeg_path: str = Field(default_factory=lambda: _which_or("ffmpeg"))
    download_dir: Path = Field(default_factory=get_default_download_dir)
    download_timeout_seconds: int = Field(default=600, gt=0)
    metadata_timeout_seconds: int = Field(default=120, gt=0)
    max_output_bytes: int = Field(default=50 * 1024 * 1024, gt=0)
    audio_bitrate: str = "192k"


class FeedSettings(BaseModel):
    """Podcast-level defaults written into every feed."""

    language: str = "en-US"
    category: str = "Technology"
    explicit: bool = False
    default_image_url: str | None = None


class GlobalConfig(BaseModel):
    """Global Tubecast configuration."""

    version: str = "1"
    log_level: LogLevel = "INFO"

    storage: StorageConfig = Field(default_factory=StorageConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    feed: FeedSettings = Field(default_factory=FeedSettings)
