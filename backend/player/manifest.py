"""Playback manifest: what a client player needs to stitch a record's parts."""

from __future__ import annotations

from typing import Any, Callable

from models.video import VideoRecord
from player.timeline import PartSource, Timeline, sources_for

UrlSigner = Callable[[str], str]


def playback_sources(record: VideoRecord, sign: UrlSigner | None = None) -> list[PartSource]:
    def url_for(public_id: str, fallback: str) -> str:
        return sign(public_id) if sign is not None else fallback

    parts = [
        PartSource(url=url_for(part.public_id, part.remote_url), duration=part.duration_seconds)
        for part in (record.parts if record.is_multipart else [])
    ]
    return sources_for(
        url_for(record.primary_part_id, record.primary_url),
        parts,
        record.total_duration_seconds,
    )


def build_manifest(record: VideoRecord, sign: UrlSigner | None = None) -> dict[str, Any]:
    timeline = Timeline(playback_sources(record, sign))
    return {
        "video_id": record.id,
        "total_duration": timeline.total_duration,
        "offsets": list(timeline.offsets),
        "sources": [{"url": source.url, "duration": source.duration} for source in timeline.sources],
    }
