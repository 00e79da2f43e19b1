"""Google Cloud Storage implementation of the object store."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import os
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator

from services.config import StoreConfig
from services.errors import StoreError
from services.naming import object_name
from services.object_store import StoredObject

logger = logging.getLogger(__name__)

PLAYBACK_URL_EXPIRATION_SECONDS = 48 * 3600  # 48 hours
DEFAULT_CONTENT_TYPE = "video/mp4"


@contextmanager
def _translate_errors(action: str, name: str) -> Iterator[None]:
    """Re-raise SDK and transport failures as StoreError(message, http_code)."""
    import requests  # noqa: PLC0415
    from google.api_core import exceptions as api_exceptions  # noqa: PLC0415

    try:
        yield
    except api_exceptions.GoogleAPICallError as exc:
        code = int(exc.code) if exc.code is not None else None
        raise StoreError(f"{action} {name} failed: {exc.message}", http_code=code) from exc
    except (requests.exceptions.Timeout, TimeoutError) as exc:
        raise StoreError(f"{action} {name} failed: timeout ({exc})") from exc
    except requests.exceptions.ConnectionError as exc:
        raise StoreError(f"{action} {name} failed: connection error ({exc})") from exc


def _format_of(file_path: str) -> str:
    return os.path.splitext(file_path)[1].lstrip(".").lower() or "mp4"


class GcsObjectStore:
    """
    Object store backed by one GCS bucket.

    Constructed per call from an explicit StoreConfig; there is no shared
    "current bucket". Blocking SDK calls run in worker threads.
    """

    def __init__(self, config: StoreConfig, *, client: Any | None = None) -> None:
        self._config = config
        self._client = client

    @property
    def namespace(self) -> str:
        return self._config.bucket

    @property
    def config(self) -> StoreConfig:
        return self._config

    def _get_client(self) -> Any:
        if self._client is None:
            from google.cloud import storage  # noqa: PLC0415

            if self._config.credentials_file:
                self._client = storage.Client.from_service_account_json(
                    self._config.credentials_file, project=self._config.project
                )
            else:
                self._client = storage.Client(project=self._config.project)
        return self._client

    def _bucket(self) -> Any:
        return self._get_client().bucket(self._config.bucket)

    def _upload_sync(self, file_path: str, public_id: str, overwrite: bool) -> StoredObject:
        name = object_name(self._config.folder, public_id)
        blob = self._bucket().blob(name, chunk_size=self._config.chunk_size)
        content_type = mimetypes.guess_type(file_path)[0] or DEFAULT_CONTENT_TYPE
        extra: dict[str, Any] = {}
        if not overwrite:
            # Fails with 412 if an object already exists under this name.
            extra["if_generation_match"] = 0
        with _translate_errors("upload", name):
            blob.upload_from_filename(
                file_path,
                content_type=content_type,
                timeout=self._config.timeout_seconds,
                **extra,
            )
        size = blob.size if isinstance(blob.size, int) else os.path.getsize(file_path)
        return StoredObject(
            public_id=name,
            url=blob.public_url,
            byte_size=size,
            format=_format_of(file_path),
        )

    def _delete_sync(self, public_id: str) -> None:
        with _translate_errors("delete", public_id):
            self._bucket().delete_blob(public_id, timeout=self._config.timeout_seconds)

    def _delete_prefix_sync(self, prefix: str) -> list[str]:
        from google.api_core import exceptions as api_exceptions  # noqa: PLC0415

        deleted: list[str] = []
        with _translate_errors("delete prefix", prefix):
            client = self._get_client()
            for blob in client.list_blobs(self._config.bucket, prefix=prefix):
                try:
                    blob.delete(timeout=self._config.timeout_seconds)
                except api_exceptions.NotFound:
                    pass
                deleted.append(blob.name)
        return deleted

    def _stat_sync(self, public_id: str) -> StoredObject | None:
        with _translate_errors("stat", public_id):
            blob = self._bucket().get_blob(public_id, timeout=self._config.timeout_seconds)
        if blob is None:
            return None
        return StoredObject(
            public_id=blob.name,
            url=blob.public_url,
            byte_size=blob.size or 0,
            format=_format_of(blob.name),
        )

    async def upload(self, file_path: str, public_id: str, *, overwrite: bool = False) -> StoredObject:
        return await asyncio.to_thread(self._upload_sync, file_path, public_id, overwrite)

    async def delete_by_id(self, public_id: str) -> None:
        await asyncio.to_thread(self._delete_sync, public_id)

    async def delete_by_prefix(self, prefix: str) -> list[str]:
        deleted = await asyncio.to_thread(self._delete_prefix_sync, prefix)
        logger.info("[gcs] Deleted %d object(s) under %s/%s", len(deleted), self.namespace, prefix)
        return deleted

    async def stat_by_id(self, public_id: str) -> StoredObject | None:
        return await asyncio.to_thread(self._stat_sync, public_id)

    def signed_url(self, public_id: str, *, expiration_seconds: int | None = None) -> str:
        """
        V4 signed GET URL for one object.

        Uses the client's credentials (GOOGLE_APPLICATION_CREDENTIALS, ADC or
        the configured service account file).
        """
        from google.auth import exceptions as auth_exceptions  # noqa: PLC0415

        seconds = expiration_seconds or PLAYBACK_URL_EXPIRATION_SECONDS
        expiration = datetime.now(timezone.utc) + timedelta(seconds=seconds)
        with _translate_errors("sign", public_id):
            blob = self._bucket().blob(public_id)
            try:
                return blob.generate_signed_url(expiration=expiration, method="GET", version="v4")
            except (AttributeError, auth_exceptions.GoogleAuthError) as exc:
                # AttributeError: credentials without a private key cannot sign.
                raise StoreError(f"sign {public_id} failed: {exc}") from exc
