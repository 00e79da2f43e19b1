"""Object store boundary: the only shapes the pipeline sees from remote storage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class StoredObject:
    public_id: str                 # full identifier, folder included
    url: str
    byte_size: int
    format: str | None = None
    duration_seconds: float | None = None
    width: int | None = None
    height: int | None = None
    bit_rate: int | None = None
    frame_rate: float | None = None


class ObjectStore(Protocol):
    """
    Remote storage for video parts. Every failure is raised as StoreError
    carrying the message and, when known, the HTTP status code.
    """

    @property
    def namespace(self) -> str: ...

    async def upload(self, file_path: str, public_id: str, *, overwrite: bool = False) -> StoredObject: ...

    async def delete_by_id(self, public_id: str) -> None: ...

    async def delete_by_prefix(self, prefix: str) -> list[str]: ...

    async def stat_by_id(self, public_id: str) -> StoredObject | None: ...

    def signed_url(self, public_id: str, *, expiration_seconds: int | None = None) -> str: ...
