"""Data models for published objects."""

from pydantic import BaseModel, ConfigDict, Field


class UploadedObject(BaseModel):
    """An object written to the store, addressable at ``url``."""

    model_config = ConfigDict(frozen=True)

    key: str
    url: str
    size: int = Field(..., ge=0)
