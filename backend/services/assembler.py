"""Combine per-part upload results into one VideoRecord."""

from __future__ import annotations

import secrets
from typing import Sequence

from models.video import PartMetadata, VideoRecord


def new_record_id() -> str:
    return secrets.token_hex(12)


def thumbnail_reference(public_id: str) -> str:
    return f"{public_id}.jpg"


def assemble(
    owner_id: str,
    title: str,
    description: str | None,
    part_results: Sequence[PartMetadata],
    *,
    record_id: str | None = None,
) -> VideoRecord:
    """
    Sum duration and size across parts; part 0 supplies the representative
    resolution, format and codecs. Single-part results are promoted to the
    top level and `parts` stays empty.
    """
    if not part_results:
        raise ValueError("assemble() needs at least one uploaded part")

    primary = part_results[0]
    is_multipart = len(part_results) > 1
    return VideoRecord(
        id=record_id or new_record_id(),
        owner_id=owner_id,
        title=title,
        description=description or None,
        primary_part_id=primary.public_id,
        primary_url=primary.remote_url,
        total_duration_seconds=sum(part.duration_seconds or 0.0 for part in part_results),
        total_byte_size=sum(part.byte_size or 0 for part in part_results),
        width=primary.width,
        height=primary.height,
        format=primary.format,
        thumbnail=thumbnail_reference(primary.public_id),
        storage_namespace=primary.storage_namespace,
        aspect_ratio=primary.aspect_ratio,
        bit_rate=primary.bit_rate,
        frame_rate=primary.frame_rate,
        video_codec=primary.video_codec,
        audio_codec=primary.audio_codec,
        is_multipart=is_multipart,
        total_parts=len(part_results),
        parts=list(part_results) if is_multipart else [],
    )
