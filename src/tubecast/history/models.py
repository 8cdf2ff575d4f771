"""Data models for the conversion history."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class HistoryEntry(BaseModel):
    """One completed conversion. Entries are never edited after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    playlist_url: str
    playlist_title: str
    channel_name: str
    feed_url: str
    created_at: datetime
    episode_count: int = Field(..., ge=0)
