from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PartResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    public_id: str
    remote_url: str
    format: str
    duration_seconds: float
    width: int
    height: int
    byte_size: int
    storage_namespace: str
    aspect_ratio: str | None = None
    bit_rate: int | None = None
    frame_rate: float | None = None
    video_codec: str | None = None
    audio_codec: str | None = None


class VideoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    title: str
    description: str | None = None
    primary_part_id: str
    primary_url: str
    total_duration_seconds: float
    total_byte_size: int
    width: int
    height: int
    format: str
    thumbnail: str
    storage_namespace: str
    aspect_ratio: str | None = None
    bit_rate: int | None = None
    frame_rate: float | None = None
    video_codec: str | None = None
    audio_codec: str | None = None
    is_multipart: bool
    total_parts: int
    parts: list[PartResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class VideoUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None


class VideoDeleteRequest(BaseModel):
    """Optional explicit list of remote identifiers to delete."""

    parts: list[str] | None = None


class VideoDeleteResponse(BaseModel):
    message: str


class PlaybackSource(BaseModel):
    url: str
    duration: float


class PlaybackManifestResponse(BaseModel):
    video_id: str
    total_duration: float
    offsets: list[float]
    sources: list[PlaybackSource]
