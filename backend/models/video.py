from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class ProbeResult:
    duration_seconds: float
    width: int = 0
    height: int = 0
    video_codec: str | None = None
    audio_codec: str | None = None
    frame_rate: float = 0.0
    bit_rate: int = 0


@dataclass(frozen=True)
class SegmentationPlan:
    part_count: int                    # 1..MAX_PARTS
    part_duration_seconds: float       # cut hint handed to the remuxer
    source_duration_seconds: float


@dataclass(frozen=True)
class PartMetadata:
    public_id: str                     # "<folder>/<base>-<token>[-part-NNN]"
    remote_url: str
    format: str
    duration_seconds: float
    width: int
    height: int
    byte_size: int
    storage_namespace: str             # bucket the object lives in
    aspect_ratio: str | None = None
    bit_rate: int | None = None
    frame_rate: float | None = None
    video_codec: str | None = None
    audio_codec: str | None = None


@dataclass
class VideoRecord:
    id: str
    owner_id: str
    title: str
    primary_part_id: str
    primary_url: str
    total_duration_seconds: float      # sum of parts
    total_byte_size: int               # sum of parts
    width: int                         # from part 0
    height: int
    format: str
    thumbnail: str
    storage_namespace: str
    description: str | None = None
    aspect_ratio: str | None = None
    bit_rate: int | None = None
    frame_rate: float | None = None
    video_codec: str | None = None
    audio_codec: str | None = None
    is_multipart: bool = False
    total_parts: int = 1
    parts: list[PartMetadata] = field(default_factory=list)   # empty unless multipart
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def part_ids(self) -> list[str]:
        """Primary id followed by every part id, without duplicates."""
        ids = [self.primary_part_id]
        for part in self.parts:
            if part.public_id not in ids:
                ids.append(part.public_id)
        return ids
