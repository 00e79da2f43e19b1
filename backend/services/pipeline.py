"""
Ingestion orchestrator.

    Staged -> Probed -> (DirectUpload | Split -> PartsUploading) -> Assembling -> Complete

Any step may end in Failed instead.

A record is persisted only after every part has uploaded; the staging
directory is removed on every exit path.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import shutil
import tempfile
from contextlib import contextmanager
from typing import Callable, Iterator

from models.upload import PipelineState, VideoAsset
from models.video import PartMetadata, VideoRecord
from services.assembler import assemble
from services.config import RetryPolicy, SplitLimits, StoreConfig
from services.errors import UploadError
from services.gcs import GcsObjectStore
from services.media_tool import MediaTool
from services.naming import base_public_id, part_public_id
from services.object_store import ObjectStore
from services.prober import Prober
from services.splitter import Splitter, plan
from services.store import VideoRepository
from services.uploader import Uploader

logger = logging.getLogger(__name__)

STAGING_PREFIX = "video-upload-"
_SAFE_EXTENSION = re.compile(r"^\.[a-z0-9]{1,8}$")

StateListener = Callable[[PipelineState], None]
StoreFactory = Callable[[StoreConfig], ObjectStore]


@contextmanager
def staging_directory(prefix: str = STAGING_PREFIX) -> Iterator[str]:
    """Private temp directory for one pipeline run, removed however the run ends."""
    path = tempfile.mkdtemp(prefix=prefix)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        logger.info("[pipeline] Staging directory %s removed", path)


def _write_staged(asset: VideoAsset, directory: str) -> str:
    extension = os.path.splitext(os.path.basename(asset.filename or ""))[1].lower()
    if not _SAFE_EXTENSION.match(extension):
        extension = ".mp4"
    path = os.path.join(directory, f"source{extension}")
    with open(path, "wb") as out:
        shutil.copyfileobj(asset.stream, out, length=1024 * 1024)
    return path


class _Run:
    def __init__(self, on_state: StateListener | None) -> None:
        self.state: PipelineState | None = None
        self._on_state = on_state

    def enter(self, state: PipelineState) -> None:
        logger.info("[pipeline] %s -> %s", self.state.value if self.state else "start", state.value)
        self.state = state
        if self._on_state is not None:
            self._on_state(state)


class IngestionPipeline:
    def __init__(
        self,
        *,
        repository: VideoRepository,
        media_tool: MediaTool | None = None,
        limits: SplitLimits | None = None,
        retry_policy: RetryPolicy | None = None,
        store_factory: StoreFactory = GcsObjectStore,
    ) -> None:
        self._repository = repository
        self._media_tool = media_tool or MediaTool()
        self._limits = limits or SplitLimits()
        self._policy = retry_policy or RetryPolicy()
        self._store_factory = store_factory
        self._prober = Prober(self._media_tool)
        self._splitter = Splitter(self._media_tool, self._limits)

    @property
    def limits(self) -> SplitLimits:
        return self._limits

    async def ingest(
        self,
        asset: VideoAsset,
        *,
        owner_id: str,
        title: str,
        store_config: StoreConfig,
        description: str | None = None,
        on_state: StateListener | None = None,
    ) -> VideoRecord:
        """
        Run the whole pipeline for one asset and return the persisted record.

        Any failure (ProbeError, SplitError/OversizedPartError, UploadError)
        is re-raised after the run is marked FAILED; nothing is persisted.
        """
        await self._media_tool.ensure_available()

        run = _Run(on_state)
        abort = asyncio.Event()
        store = self._store_factory(store_config)
        uploader = Uploader(
            store,
            self._policy,
            prober=self._prober,
            size_limit_bytes=self._limits.store_limit_bytes,
        )
        try:
            with staging_directory() as staging:
                input_path = await asyncio.to_thread(_write_staged, asset, staging)
                run.enter(PipelineState.STAGED)

                size = os.path.getsize(input_path)
                probe = await self._prober.probe(input_path)
                run.enter(PipelineState.PROBED)

                base_id = base_public_id(asset.filename)
                if size <= self._limits.store_limit_bytes:
                    run.enter(PipelineState.DIRECT_UPLOAD)
                    parts = [await uploader.upload(input_path, base_id, probe=probe, abort=abort)]
                else:
                    run.enter(PipelineState.SPLIT)
                    segmentation = plan(size, probe.duration_seconds, self._limits)
                    split_dir = os.path.join(staging, "split")
                    os.makedirs(split_dir, exist_ok=True)
                    files = await self._splitter.split(
                        input_path, segmentation, output_dir=split_dir, base_name=base_id
                    )
                    run.enter(PipelineState.PARTS_UPLOADING)
                    parts = await self._upload_parts(uploader, files, base_id, abort)

                run.enter(PipelineState.ASSEMBLING)
                record = assemble(owner_id, title, description, parts)
                self._repository.create(record)
                run.enter(PipelineState.COMPLETE)
                logger.info(
                    "[pipeline] Video %s stored: %d part(s), %.1fs, %d bytes",
                    record.id,
                    record.total_parts,
                    record.total_duration_seconds,
                    record.total_byte_size,
                )
                return record
        except asyncio.CancelledError:
            abort.set()
            run.enter(PipelineState.FAILED)
            raise
        except Exception:
            run.enter(PipelineState.FAILED)
            raise

    async def _upload_parts(
        self,
        uploader: Uploader,
        files: list[str],
        base_id: str,
        abort: asyncio.Event,
    ) -> list[PartMetadata]:
        """
        Upload every part concurrently and wait for all of them to settle.

        Slots are assigned by part index before any upload starts, so
        completion order never affects the result order. The join is shielded:
        an aborted caller stops new retries but in-flight transfers finish.
        """
        tasks = [
            uploader.upload(path, part_public_id(base_id, index + 1), part_index=index, abort=abort)
            for index, path in enumerate(files)
        ]
        results = await asyncio.shield(asyncio.gather(*tasks, return_exceptions=True))

        failed = [index for index, result in enumerate(results) if isinstance(result, BaseException)]
        if failed:
            first = results[failed[0]]
            retryable = all(isinstance(results[i], UploadError) and results[i].retryable for i in failed)
            logger.error("[pipeline] %d of %d part(s) failed: %s", len(failed), len(files), failed)
            raise UploadError(
                f"{len(failed)} of {len(files)} part(s) failed to upload: {first}",
                retryable=retryable,
                failed_parts=failed,
            ) from first
        return list(results)
