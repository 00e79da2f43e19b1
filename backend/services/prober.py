"""Extract duration, resolution, codecs, frame rate and bit rate from a video file."""

from __future__ import annotations

import logging
import math
from typing import Any

from models.video import ProbeResult
from services.errors import ProbeError
from services.media_tool import MediaTool

logger = logging.getLogger(__name__)


def _to_float(value: Any) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def _to_int(value: Any) -> int:
    return int(_to_float(value))


def parse_frame_rate(rational: str | None) -> float:
    """
    '30000/1001' -> 29.97. A zero denominator yields 0.0 instead of raising;
    callers must not read that as a real frame rate.
    """
    if not rational:
        return 0.0
    num_str, _, den_str = str(rational).partition("/")
    num = _to_float(num_str)
    den = _to_float(den_str) if den_str else 1.0
    if den == 0:
        return 0.0
    return round(num / den, 3)


def parse_probe_output(data: dict[str, Any], *, require_duration: bool = True) -> ProbeResult:
    """
    Fold ffprobe JSON into a ProbeResult. With `require_duration=False` a
    missing or zero duration is reported as 0.0 instead of raising.
    """
    streams = data.get("streams") if isinstance(data.get("streams"), list) else []
    video = next((s for s in streams if s.get("codec_type") == "video"), None) or {}
    audio = next((s for s in streams if s.get("codec_type") == "audio"), None) or {}
    fmt = data.get("format") or {}

    duration = _to_float(fmt.get("duration"))
    if duration <= 0 and require_duration:
        raise ProbeError("Video has no readable duration")

    return ProbeResult(
        duration_seconds=max(0.0, duration),
        width=_to_int(video.get("width")),
        height=_to_int(video.get("height")),
        video_codec=video.get("codec_name"),
        audio_codec=audio.get("codec_name"),
        frame_rate=parse_frame_rate(video.get("avg_frame_rate") or "0/1"),
        bit_rate=_to_int(video.get("bit_rate")) or _to_int(fmt.get("bit_rate")),
    )


class Prober:
    def __init__(self, media_tool: MediaTool) -> None:
        self._media_tool = media_tool

    async def probe(self, path: str, *, require_duration: bool = True) -> ProbeResult:
        data = await self._media_tool.probe(path)
        result = parse_probe_output(data, require_duration=require_duration)
        if result.duration_seconds <= 0:
            logger.warning("[prober] %s reports no duration; keeping 0s", path)
        logger.info(
            "[prober] %s: %.2fs %dx%d video=%s audio=%s fps=%s",
            path,
            result.duration_seconds,
            result.width,
            result.height,
            result.video_codec,
            result.audio_codec,
            result.frame_rate,
        )
        return result
