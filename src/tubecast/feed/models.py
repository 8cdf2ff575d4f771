"""Data models for podcast feeds."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Episode(BaseModel):
    """One feed item, derived from a source video and its uploaded audio."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    url: str
    size: int = Field(..., ge=0)
    publish_date: datetime
    duration_formatted: str
    guid: str
    author: str = ""
    ordinal: int = Field(..., ge=1)


class PodcastInfo(BaseModel):
    """Channel-level feed metadata."""

    title: str
    description: str
    author: str
    image_url: str = ""
    language: str = "en-US"
    category: str = "Technology"
    explicit: bool = False
