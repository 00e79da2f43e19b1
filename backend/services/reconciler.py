"""Delete a video's remote objects and drop the record only when all are gone."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable

from models.video import VideoRecord
from services.config import RetryPolicy
from services.errors import ReconciliationError, StoreError
from services.naming import PART_MARKER, multipart_prefix
from services.object_store import ObjectStore
from services.retry import call_with_retry
from services.store import VideoRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    deleted: bool
    failed_ids: list[str] = field(default_factory=list)

    def raise_for_failure(self) -> None:
        if not self.deleted:
            raise ReconciliationError(self.failed_ids)


def _dedupe(ids: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for public_id in ids:
        public_id = (public_id or "").strip()
        if public_id:
            seen.setdefault(public_id, None)
    return list(seen)


def record_base_id(record: VideoRecord) -> str:
    prefix = multipart_prefix(record.primary_part_id)
    return prefix[: -len(PART_MARKER)] if prefix else record.primary_part_id


def owned_by(record: VideoRecord, public_id: str) -> bool:
    """True for the record's own ids and any '<base>-part-NNN' sibling."""
    base = record_base_id(record)
    return public_id in record.part_ids() or public_id == base or public_id.startswith(base + PART_MARKER)


def group_by_prefix(ids: Iterable[str]) -> tuple[dict[str, list[str]], list[str]]:
    """Split ids into {'<base>-part-': [ids...]} groups and standalone ids."""
    groups: dict[str, list[str]] = {}
    singles: list[str] = []
    for public_id in ids:
        prefix = multipart_prefix(public_id)
        if prefix is None:
            singles.append(public_id)
        else:
            groups.setdefault(prefix, []).append(public_id)
    return groups, singles


class DeletionReconciler:
    """
    Best-effort bulk delete with an all-or-nothing effect on the local record.

    The record is removed only when every candidate identifier is confirmed
    deleted or absent; otherwise it is left untouched and the identifiers that
    remain are reported so the caller can retry.
    """

    def __init__(self, store: ObjectStore, policy: RetryPolicy, repository: VideoRepository) -> None:
        self._store = store
        self._policy = policy
        self._repository = repository

    def candidate_ids(self, record: VideoRecord, explicit_ids: list[str] | None = None) -> list[str]:
        """
        Explicit ids are validated against the record, then extended with the
        record's own part ids: the record is never dropped while one of its
        parts was left out of the delete.
        """
        if explicit_ids:
            ids = _dedupe(explicit_ids)
            foreign = [public_id for public_id in ids if not owned_by(record, public_id)]
            if foreign:
                raise ValueError(f"Identifiers do not belong to video {record.id}: {foreign}")
            return _dedupe([*ids, *record.part_ids()])
        return _dedupe(record.part_ids())

    async def _delete_one(self, public_id: str) -> bool:
        try:
            await call_with_retry(
                lambda: self._store.delete_by_id(public_id),
                policy=self._policy,
                label=f"delete {public_id}",
            )
            return True
        except StoreError as exc:
            if exc.http_code == 404:
                return True
            logger.warning("[reconciler] Delete of %s failed: %s", public_id, exc.message)

        # Confirm absence before declaring a failure.
        try:
            return await self._store.stat_by_id(public_id) is None
        except StoreError as exc:
            logger.warning("[reconciler] Could not stat %s: %s", public_id, exc.message)
            return False

    async def reconcile(self, record: VideoRecord, explicit_ids: list[str] | None = None) -> ReconcileResult:
        candidates = self.candidate_ids(record, explicit_ids)
        groups, _ = group_by_prefix(candidates)

        covered: set[str] = set()
        for prefix, ids in groups.items():
            try:
                await self._store.delete_by_prefix(prefix)
            except StoreError as exc:
                logger.warning(
                    "[reconciler] Prefix delete %s failed (%s); falling back to %d single delete(s)",
                    prefix,
                    exc.message,
                    len(ids),
                )
                continue
            covered.update(ids)

        remaining = [public_id for public_id in candidates if public_id not in covered]
        outcomes = await asyncio.gather(*(self._delete_one(public_id) for public_id in remaining))
        failed = [public_id for public_id, ok in zip(remaining, outcomes) if not ok]

        if failed:
            logger.error(
                "[reconciler] Video %s kept; %d remote object(s) not deleted: %s",
                record.id,
                len(failed),
                ", ".join(failed),
            )
            return ReconcileResult(deleted=False, failed_ids=failed)

        self._repository.delete_by_id(record.id)
        logger.info("[reconciler] Video %s deleted (%d remote id(s))", record.id, len(candidates))
        return ReconcileResult(deleted=True)
