"""Size/duration-aware segmentation of oversized videos into uploadable parts."""

from __future__ import annotations

import logging
import math
import os

from models.video import SegmentationPlan
from services.config import MIB, SplitLimits
from services.errors import OversizedPartError, SplitError
from services.media_tool import MediaTool
from services.naming import PART_MARKER

logger = logging.getLogger(__name__)


def plan(file_size: int, duration: float, limits: SplitLimits) -> SegmentationPlan:
    """
    Pure segmentation plan for a file of `file_size` bytes lasting `duration` seconds.

    Starts from ceil(size / target), clamps to [1, max_parts], then merges
    parts while the average would fall below min_part_bytes. The per-part
    duration never drops below one second, even for a zero duration.
    """
    if limits.target_part_bytes <= 0:
        raise ValueError("target_part_bytes must be positive")

    segments = math.ceil(file_size / limits.target_part_bytes)
    segments = max(1, min(segments, limits.max_parts))
    while segments > 1 and file_size / segments < limits.min_part_bytes:
        segments -= 1

    safe_duration = duration if duration and math.isfinite(duration) and duration > 0 else 0.0
    segment_duration = max(1, math.floor(safe_duration / segments))
    return SegmentationPlan(
        part_count=segments,
        part_duration_seconds=float(segment_duration),
        source_duration_seconds=safe_duration,
    )


def _mb(size: int) -> str:
    return f"{size / MIB:.2f}"


class Splitter:
    def __init__(self, media_tool: MediaTool, limits: SplitLimits) -> None:
        self._media_tool = media_tool
        self._limits = limits

    async def split(
        self,
        path: str,
        segmentation: SegmentationPlan,
        *,
        output_dir: str,
        base_name: str,
    ) -> list[str]:
        """
        Remux `path` into parts under `output_dir` and return their paths in
        timeline order. Raises OversizedPartError if any part is still above
        the store limit; no re-planning is attempted.
        """
        extension = os.path.splitext(path)[1].lower() or ".mp4"
        prefix = f"{base_name}{PART_MARKER}"
        pattern = os.path.join(output_dir, f"{prefix}%03d{extension}")

        logger.info(
            "[splitter] Splitting %s into %d part(s) (~%ds each)",
            os.path.basename(path),
            segmentation.part_count,
            int(segmentation.part_duration_seconds),
        )
        await self._media_tool.segment(path, int(segmentation.part_duration_seconds), pattern)

        parts = sorted(
            os.path.join(output_dir, name)
            for name in os.listdir(output_dir)
            if name.startswith(prefix) and name.endswith(extension)
        )
        if not parts:
            raise SplitError(f"ffmpeg produced no parts for {os.path.basename(path)}")
        if len(parts) > segmentation.part_count:
            logger.warning(
                "[splitter] Keyframe cuts produced %d parts (planned %d)",
                len(parts),
                segmentation.part_count,
            )

        sizes = [os.path.getsize(part) for part in parts]
        oversized = [part for part, size in zip(parts, sizes) if size > self._limits.store_limit_bytes]
        for index, (part, size) in enumerate(zip(parts, sizes), start=1):
            marker = "oversized" if part in oversized else "ok"
            logger.info("[splitter]   part %d: %s MB (%s)", index, _mb(size), marker)
        logger.info("[splitter]   average: %s MB over %d part(s)", _mb(sum(sizes) // len(sizes)), len(parts))

        if oversized:
            raise OversizedPartError(
                f"{len(oversized)} part(s) exceed the {_mb(self._limits.store_limit_bytes)} MB store limit",
                oversized=[os.path.basename(part) for part in oversized],
            )
        return parts
