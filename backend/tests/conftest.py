from __future__ import annotations

import os
from typing import Any

import pytest

from services.config import RetryPolicy, SplitLimits
from services.errors import MediaToolUnavailableError, StoreError
from services.media_tool import MediaTool
from services.object_store import StoredObject
from services.store import videos

TEST_BUCKET = "test-bucket"
TEST_FOLDER = "video-platform"

# Byte-scale limits so fixtures stay tiny: store limit 1000, target 700, min 500.
TINY_LIMITS = SplitLimits(store_limit_bytes=1000, target_part_bytes=700, min_part_bytes=500, max_parts=20)
NO_DELAY = RetryPolicy(max_retries=3, delay_seconds=0.0)


class FakeMediaTool(MediaTool):
    """Stands in for ffmpeg/ffprobe: probes from a table, 'segments' by writing files."""

    def __init__(
        self,
        *,
        source_duration: float = 185.0,
        part_sizes: list[int] | None = None,
        part_duration: float = 46.0,
        available: bool = True,
        probe_overrides: dict[str, dict[str, Any]] | None = None,
    ) -> None:
        super().__init__()
        self.source_duration = source_duration
        self.part_sizes = part_sizes if part_sizes is not None else [600, 600, 600, 400]
        self.part_duration = part_duration
        self.available = available
        self.probe_overrides = probe_overrides or {}
        self.segment_calls: list[tuple[str, int, str]] = []
        self.probed: list[str] = []

    async def ensure_available(self) -> None:
        if not self.available:
            raise MediaToolUnavailableError("ffmpeg is not installed on the server")

    async def probe(self, path: str) -> dict[str, Any]:
        self.probed.append(path)
        name = os.path.basename(path)
        if name in self.probe_overrides:
            return self.probe_overrides[name]
        duration = self.part_duration if "-part-" in name else self.source_duration
        return {
            "format": {"duration": str(duration), "bit_rate": "800000"},
            "streams": [
                {
                    "codec_type": "video",
                    "codec_name": "h264",
                    "width": 1280,
                    "height": 720,
                    "avg_frame_rate": "30000/1001",
                    "bit_rate": "750000",
                },
                {"codec_type": "audio", "codec_name": "aac"},
            ],
        }

    async def segment(self, path: str, segment_seconds: int, output_pattern: str) -> None:
        self.segment_calls.append((path, segment_seconds, output_pattern))
        for index, size in enumerate(self.part_sizes):
            with open(output_pattern % index, "wb") as out:
                out.write(b"\x00" * size)


class FakeObjectStore:
    """
    In-memory object store. Failures are scripted per identifier:
      upload_failures["clip-part-002"] = [StoreError(...), ...]  (consumed in order)
    """

    def __init__(self, namespace: str = TEST_BUCKET, folder: str = TEST_FOLDER) -> None:
        self._namespace = namespace
        self.folder = folder
        self.objects: dict[str, int] = {}
        self.upload_failures: dict[str, list[StoreError]] = {}
        self.delete_failures: dict[str, list[StoreError]] = {}
        self.prefix_failures: dict[str, StoreError] = {}
        self.stat_failures: dict[str, StoreError] = {}
        self.upload_calls: list[str] = []
        self.delete_calls: list[str] = []
        self.prefix_calls: list[str] = []

    @property
    def namespace(self) -> str:
        return self._namespace

    def _name(self, public_id: str) -> str:
        return f"{self.folder}/{public_id}"

    def url_for(self, name: str) -> str:
        return f"https://storage.example.com/{self._namespace}/{name}"

    async def upload(self, file_path: str, public_id: str, *, overwrite: bool = False) -> StoredObject:
        self.upload_calls.append(public_id)
        pending = self.upload_failures.get(public_id)
        if pending:
            raise pending.pop(0)
        name = self._name(public_id)
        if name in self.objects and not overwrite:
            raise StoreError(f"upload {name} failed: already exists", http_code=412)
        size = os.path.getsize(file_path)
        self.objects[name] = size
        return StoredObject(public_id=name, url=self.url_for(name), byte_size=size, format="mp4")

    async def delete_by_id(self, public_id: str) -> None:
        self.delete_calls.append(public_id)
        pending = self.delete_failures.get(public_id)
        if pending:
            raise pending.pop(0)
        if public_id not in self.objects:
            raise StoreError(f"delete {public_id} failed: not found", http_code=404)
        del self.objects[public_id]

    async def delete_by_prefix(self, prefix: str) -> list[str]:
        self.prefix_calls.append(prefix)
        if prefix in self.prefix_failures:
            raise self.prefix_failures[prefix]
        doomed = [name for name in self.objects if name.startswith(prefix)]
        for name in doomed:
            del self.objects[name]
        return doomed

    async def stat_by_id(self, public_id: str) -> StoredObject | None:
        if public_id in self.stat_failures:
            raise self.stat_failures[public_id]
        if public_id not in self.objects:
            return None
        return StoredObject(public_id=public_id, url=self.url_for(public_id), byte_size=self.objects[public_id])

    def signed_url(self, public_id: str, *, expiration_seconds: int | None = None) -> str:
        return f"https://signed.example/{self._namespace}/{public_id}?sig=test"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def clear_videos() -> None:
    """Isolate tests by clearing the in-memory video repository."""
    videos.clear()
    yield
    videos.clear()


@pytest.fixture
def fake_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def fake_media_tool() -> FakeMediaTool:
    return FakeMediaTool()
