"""Transfer one physical part to the object store with bounded retries."""

from __future__ import annotations

import asyncio
import logging
import os
import time

from models.upload import UploadAttempt
from models.video import PartMetadata, ProbeResult
from services.config import RetryPolicy
from services.errors import StoreError, UploadError
from services.object_store import ObjectStore, StoredObject
from services.prober import Prober
from services.retry import call_with_retry, is_retryable

logger = logging.getLogger(__name__)


def _aspect_ratio(width: int, height: int) -> str | None:
    if not width or not height:
        return None
    return f"{width / height:.6f}"


def to_part_metadata(
    stored: StoredObject,
    probe: ProbeResult | None,
    *,
    file_path: str,
    namespace: str,
) -> PartMetadata:
    """
    Fixed-shape adapter over whatever the store returned.

    Remote values win; the local probe fills the gaps; byte size falls back
    to the size on disk.
    """
    probe = probe or ProbeResult(duration_seconds=0.0)
    width = stored.width or probe.width
    height = stored.height or probe.height
    return PartMetadata(
        public_id=stored.public_id,
        remote_url=stored.url,
        format=stored.format or os.path.splitext(file_path)[1].lstrip(".").lower() or "mp4",
        duration_seconds=stored.duration_seconds or probe.duration_seconds,
        width=width,
        height=height,
        byte_size=stored.byte_size or os.path.getsize(file_path),
        storage_namespace=namespace,
        aspect_ratio=_aspect_ratio(width, height),
        bit_rate=stored.bit_rate or probe.bit_rate or None,
        frame_rate=stored.frame_rate or probe.frame_rate or None,
        video_codec=probe.video_codec,
        audio_codec=probe.audio_codec,
    )


class Uploader:
    """
    Uploads files under caller-chosen, deterministic identifiers.

    Uploads never overwrite: a retry that lands on an existing object fails
    with a permanent error instead of creating a divergent duplicate.
    """

    def __init__(
        self,
        store: ObjectStore,
        policy: RetryPolicy,
        *,
        prober: Prober | None = None,
        size_limit_bytes: int | None = None,
    ) -> None:
        self._store = store
        self._policy = policy
        self._prober = prober
        self._size_limit = size_limit_bytes

    async def upload(
        self,
        file_path: str,
        desired_id: str,
        *,
        part_index: int = 0,
        probe: ProbeResult | None = None,
        abort: asyncio.Event | None = None,
    ) -> PartMetadata:
        size = os.path.getsize(file_path)
        if self._size_limit is not None and size > self._size_limit:
            raise UploadError(
                f"{os.path.basename(file_path)} is {size} bytes, above the {self._size_limit} byte limit",
                retryable=False,
                failed_parts=[part_index],
            )
        if probe is None and self._prober is not None:
            # Part-level probe: a degenerate tail segment may report no duration.
            probe = await self._prober.probe(file_path, require_duration=False)

        attempt = UploadAttempt(part_index=part_index, file_path=file_path, public_id=desired_id)

        def _record_failure(attempt_number: int, exc: StoreError) -> None:
            attempt.attempt_number = attempt_number
            attempt.last_error = exc.message

        started = time.monotonic()
        logger.info("[uploader] Part %d: %s -> %s (%d bytes)", part_index, os.path.basename(file_path), desired_id, size)
        try:
            stored = await call_with_retry(
                lambda: self._store.upload(file_path, desired_id, overwrite=False),
                policy=self._policy,
                label=f"upload {desired_id}",
                abort=abort,
                on_failure=_record_failure,
            )
        except StoreError as exc:
            logger.error(
                "[uploader] Part %d failed after %d attempt(s): %s",
                part_index,
                attempt.attempt_number + 1,
                attempt.last_error,
            )
            raise UploadError(
                f"Upload of {desired_id} failed: {exc.message}",
                retryable=is_retryable(exc),
                failed_parts=[part_index],
            ) from exc

        logger.info(
            "[uploader] Part %d uploaded in %.1fs: %s",
            part_index,
            time.monotonic() - started,
            stored.url,
        )
        return to_part_metadata(stored, probe, file_path=file_path, namespace=self._store.namespace)
