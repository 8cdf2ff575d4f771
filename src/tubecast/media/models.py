"""Data models for playlist items and downloaded media."""

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class VideoMetadata(BaseModel):
    """One playlist entry as reported by yt-dlp."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    duration_seconds: float = Field(default=0, ge=0)
    upload_date: datetime | None = None
    uploader: str = ""
    thumbnail_url: str = ""
    source_url: str


class PlaylistInfo(BaseModel):
    """Playlist-level metadata plus its resolvable items, in playlist order."""

    title: str
    channel_name: str
    items: list[VideoMetadata] = Field(default_factory=list)
    skipped_count: int = Field(default=0, ge=0)


class DownloadedAsset(BaseModel):
    """A transcoded audio file on local disk, owned by one pipeline run."""

    source_video_id: str
    local_path: Path
    ordinal: int = Field(..., ge=1)

    @property
    def filename(self) -> str:
        return self.local_path.name
