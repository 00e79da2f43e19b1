from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO


class PipelineState(str, Enum):
    STAGED = "staged"
    PROBED = "probed"
    DIRECT_UPLOAD = "direct_upload"
    SPLIT = "split"
    PARTS_UPLOADING = "parts_uploading"
    ASSEMBLING = "assembling"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class VideoAsset:
    stream: BinaryIO                   # caller-owned, read once into staging
    filename: str                      # declared display name
    content_type: str = "video/mp4"


@dataclass
class UploadAttempt:
    part_index: int                    # 0 for a direct upload
    file_path: str
    public_id: str
    attempt_number: int = 0            # 0 = first try
    last_error: str | None = None
