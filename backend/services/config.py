"""Explicit, per-call configuration objects read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

MIB = 1024 * 1024

DEFAULT_BUCKET = "video-platform-media"
DEFAULT_UPLOAD_FOLDER = "video-platform"


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    return int(raw) if raw else default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else default


@dataclass(frozen=True)
class SplitLimits:
    store_limit_bytes: int = 100 * MIB     # per-object ceiling of the store
    target_part_bytes: int = 70 * MIB
    min_part_bytes: int = 50 * MIB
    max_parts: int = 20

    @classmethod
    def from_env(cls) -> SplitLimits:
        return cls(
            store_limit_bytes=_env_int("STORE_LIMIT_BYTES", cls.store_limit_bytes),
            target_part_bytes=_env_int("TARGET_PART_BYTES", cls.target_part_bytes),
            min_part_bytes=_env_int("MIN_PART_BYTES", cls.min_part_bytes),
            max_parts=_env_int("MAX_PARTS", cls.max_parts),
        )


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3                   # additional attempts after the first
    delay_seconds: float = 2.0             # linear: delay * attempt

    @classmethod
    def from_env(cls) -> RetryPolicy:
        return cls(
            max_retries=_env_int("UPLOAD_MAX_RETRIES", cls.max_retries),
            delay_seconds=_env_float("UPLOAD_RETRY_DELAY_SECONDS", cls.delay_seconds),
        )

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number `attempt` (1-based). Non-decreasing in `attempt`."""
        return max(0.0, self.delay_seconds) * max(1, attempt)


@dataclass(frozen=True)
class StoreConfig:
    bucket: str = DEFAULT_BUCKET
    folder: str = DEFAULT_UPLOAD_FOLDER
    project: str | None = None
    credentials_file: str | None = None
    chunk_size: int = 6 * MIB              # resumable upload chunk, multiple of 256 KiB
    timeout_seconds: float = 600.0

    @classmethod
    def from_env(cls) -> StoreConfig:
        return cls(
            bucket=_env_str("GCS_BUCKET", DEFAULT_BUCKET),
            folder=_env_str("UPLOAD_FOLDER", DEFAULT_UPLOAD_FOLDER),
            project=_env_str("GCS_PROJECT") or None,
            credentials_file=_env_str("GCS_CREDENTIALS_FILE") or None,
        )

    def with_namespace(self, namespace: str | None) -> StoreConfig:
        """Copy targeting another bucket; the receiver is never mutated."""
        namespace = (namespace or "").strip()
        if not namespace or namespace == self.bucket:
            return self
        return replace(self, bucket=namespace)


@dataclass(frozen=True)
class MediaToolConfig:
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    probe_timeout_seconds: float = 60.0

    @classmethod
    def from_env(cls) -> MediaToolConfig:
        return cls(
            ffmpeg_path=_env_str("FFMPEG_PATH", "ffmpeg"),
            ffprobe_path=_env_str("FFPROBE_PATH", "ffprobe"),
        )


def get_auth_secret() -> str:
    """Secret for bearer tokens; empty string when not configured."""
    return _env_str("AUTH_TOKEN_SECRET")
