"""In-memory video record repository. Keyed by record ID."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from models.video import VideoRecord

EDITABLE_FIELDS = frozenset({"title", "description"})


class VideoRepository:
    def __init__(self) -> None:
        self._records: dict[str, VideoRecord] = {}

    def create(self, record: VideoRecord) -> VideoRecord:
        if record.id in self._records:
            raise KeyError(f"Video {record.id} already exists")
        self._records[record.id] = record
        return record

    def get(self, record_id: str) -> VideoRecord | None:
        return self._records.get(record_id)

    def find_by_owner_and_id(self, owner_id: str, record_id: str) -> VideoRecord | None:
        record = self._records.get(record_id)
        if record is None or record.owner_id != owner_id:
            return None
        return record

    def update_fields(self, record_id: str, patch: dict[str, Any]) -> VideoRecord | None:
        """Apply a title/description patch; other keys are rejected."""
        record = self._records.get(record_id)
        if record is None:
            return None
        unknown = set(patch) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable: {sorted(unknown)}")
        updated = replace(record, **patch, updated_at=datetime.now(timezone.utc))
        self._records[record_id] = updated
        return updated

    def delete_by_id(self, record_id: str) -> bool:
        return self._records.pop(record_id, None) is not None

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()


videos = VideoRepository()
