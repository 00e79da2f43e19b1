"""ffmpeg / ffprobe subprocess wrapper used for probing and lossless remuxing."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from services.config import MediaToolConfig
from services.errors import MediaToolUnavailableError, ProbeError, SplitError

logger = logging.getLogger(__name__)

# (ffmpeg_path, ffprobe_path) pairs that answered `-version` in this process.
_verified_tools: set[tuple[str, str]] = set()


async def _run(cmd: list[str], *, timeout: float | None = None) -> tuple[int, str, str]:
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise
    return proc.returncode or 0, stdout.decode(errors="replace"), stderr.decode(errors="replace")


class MediaTool:
    def __init__(self, config: MediaToolConfig | None = None) -> None:
        self._config = config or MediaToolConfig()

    @property
    def config(self) -> MediaToolConfig:
        return self._config

    async def ensure_available(self) -> None:
        """Run `-version` on both binaries once per process; raise if either is missing."""
        key = (self._config.ffmpeg_path, self._config.ffprobe_path)
        if key in _verified_tools:
            return
        for binary in key:
            try:
                code, _, _ = await _run([binary, "-version"], timeout=30)
            except (FileNotFoundError, PermissionError, asyncio.TimeoutError) as exc:
                raise MediaToolUnavailableError(f"{binary} is not installed on the server") from exc
            if code != 0:
                raise MediaToolUnavailableError(f"{binary} -version exited with {code}")
        _verified_tools.add(key)
        logger.info("[media_tool] ffmpeg=%s ffprobe=%s available", *key)

    async def probe(self, path: str) -> dict[str, Any]:
        """Raw ffprobe JSON (format + stream entries) for one file."""
        cmd = [
            self._config.ffprobe_path,
            "-v", "error",
            "-show_entries", "format=duration,bit_rate",
            "-show_entries", "stream=index,codec_type,codec_name,width,height,avg_frame_rate,bit_rate",
            "-of", "json",
            path,
        ]
        try:
            code, stdout, stderr = await _run(cmd, timeout=self._config.probe_timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise ProbeError(f"ffprobe timed out after {self._config.probe_timeout_seconds}s") from exc
        except FileNotFoundError as exc:
            raise MediaToolUnavailableError("ffprobe is not installed on the server") from exc
        if code != 0:
            raise ProbeError(f"ffprobe failed to read {path}: {stderr.strip() or 'unknown error'}")
        try:
            data = json.loads(stdout or "{}")
        except json.JSONDecodeError as exc:
            raise ProbeError(f"Failed to parse ffprobe output: {exc}") from exc
        if not isinstance(data, dict):
            raise ProbeError("Unexpected ffprobe output")
        return data

    async def segment(self, path: str, segment_seconds: int, output_pattern: str) -> None:
        """
        Stream-copy `path` into numbered files matching `output_pattern`
        (printf-style, e.g. "clip-part-%03d.mp4").

        Timestamps restart at zero in every part and negative timestamps are
        shifted to zero. No re-encoding happens.
        """
        cmd = [
            self._config.ffmpeg_path,
            "-hide_banner",
            "-loglevel", "error",
            "-y",
            "-i", path,
            "-c", "copy",
            "-f", "segment",
            "-segment_time", str(segment_seconds),
            "-reset_timestamps", "1",
            "-avoid_negative_ts", "make_zero",
            output_pattern,
        ]
        logger.info("[media_tool] Segmenting %s every %ss", path, segment_seconds)
        try:
            code, _, stderr = await _run(cmd)
        except FileNotFoundError as exc:
            raise MediaToolUnavailableError("ffmpeg is not installed on the server") from exc
        if code != 0:
            raise SplitError(f"ffmpeg segment failed ({code}): {stderr.strip()[-500:]}")
