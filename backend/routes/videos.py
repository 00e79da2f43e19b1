"""Video upload, metadata, deletion and playback endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Query, UploadFile

from app.models import (
    PlaybackManifestResponse,
    VideoDeleteRequest,
    VideoDeleteResponse,
    VideoResponse,
    VideoUpdateRequest,
)
from models.upload import VideoAsset
from models.video import VideoRecord
from player.manifest import build_manifest
from routes.deps import (
    get_owner_id,
    get_pipeline,
    get_repository,
    get_retry_policy,
    get_store_config,
    get_store_factory,
)
from services.config import RetryPolicy, StoreConfig
from services.pipeline import IngestionPipeline, StoreFactory
from services.reconciler import DeletionReconciler
from services.store import VideoRepository

router = APIRouter(tags=["videos"])
logger = logging.getLogger(__name__)


def _to_response(record: VideoRecord) -> VideoResponse:
    return VideoResponse.model_validate(record, from_attributes=True)


def _owned_record(repository: VideoRepository, owner_id: str, video_id: str) -> VideoRecord:
    record = repository.find_by_owner_and_id(owner_id, video_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Video not found")
    return record


@router.post("/videos", response_model=VideoResponse, status_code=201)
async def upload_video(
    file: UploadFile | None = File(default=None),
    title: str = Form(default=""),
    description: str = Form(default=""),
    namespace: str = Form(default=""),
    owner_id: str = Depends(get_owner_id),
    pipeline: IngestionPipeline = Depends(get_pipeline),
    store_config: StoreConfig = Depends(get_store_config),
) -> VideoResponse:
    """Ingest one video: split if it exceeds the store limit, upload, persist one record."""
    title = title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="Video file is required")
    content_type = file.content_type or ""
    if not content_type.startswith("video/"):
        raise HTTPException(status_code=400, detail="Invalid file type")

    config = store_config.with_namespace(namespace)
    logger.info("[videos] POST /api/videos owner=%s file=%s bucket=%s", owner_id, file.filename, config.bucket)
    try:
        record = await pipeline.ingest(
            VideoAsset(stream=file.file, filename=file.filename, content_type=content_type),
            owner_id=owner_id,
            title=title,
            description=description.strip() or None,
            store_config=config,
        )
    finally:
        await file.close()
    return _to_response(record)


@router.get("/videos/{video_id}", response_model=VideoResponse)
def get_video(
    video_id: str,
    owner_id: str = Depends(get_owner_id),
    repository: VideoRepository = Depends(get_repository),
) -> VideoResponse:
    return _to_response(_owned_record(repository, owner_id, video_id))


@router.patch("/videos/{video_id}", response_model=VideoResponse)
def update_video(
    video_id: str,
    body: VideoUpdateRequest,
    owner_id: str = Depends(get_owner_id),
    repository: VideoRepository = Depends(get_repository),
) -> VideoResponse:
    """Edit title and/or description. Remote objects are never touched."""
    _owned_record(repository, owner_id, video_id)
    patch = body.model_dump(exclude_unset=True)
    if "title" in patch:
        patch["title"] = (patch["title"] or "").strip()
        if not patch["title"]:
            raise HTTPException(status_code=400, detail="Title is required")
    if "description" in patch:
        patch["description"] = (patch["description"] or "").strip() or None
    updated = repository.update_fields(video_id, patch)
    if updated is None:
        raise HTTPException(status_code=404, detail="Video not found")
    return _to_response(updated)


@router.delete("/videos/{video_id}", response_model=VideoDeleteResponse)
async def delete_video(
    video_id: str,
    body: VideoDeleteRequest | None = Body(default=None),
    owner_id: str = Depends(get_owner_id),
    repository: VideoRepository = Depends(get_repository),
    store_config: StoreConfig = Depends(get_store_config),
    store_factory: StoreFactory = Depends(get_store_factory),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
) -> VideoDeleteResponse:
    """
    Delete every remote part, then the record.

    Responds 502 with {"error", "failedIds"} and keeps the record when any
    remote identifier could not be confirmed deleted.
    """
    record = _owned_record(repository, owner_id, video_id)
    store = store_factory(store_config.with_namespace(record.storage_namespace))
    reconciler = DeletionReconciler(store, retry_policy, repository)
    try:
        result = await reconciler.reconcile(record, body.parts if body else None)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    result.raise_for_failure()
    return VideoDeleteResponse(message="Video deleted successfully")


@router.get("/videos/{video_id}/playback", response_model=PlaybackManifestResponse)
def get_playback_manifest(
    video_id: str,
    signed: bool = Query(True, description="Return short-lived signed URLs instead of stored URLs"),
    owner_id: str = Depends(get_owner_id),
    repository: VideoRepository = Depends(get_repository),
    store_config: StoreConfig = Depends(get_store_config),
    store_factory: StoreFactory = Depends(get_store_factory),
) -> PlaybackManifestResponse:
    """Ordered part sources and cumulative offsets for the seamless player."""
    record = _owned_record(repository, owner_id, video_id)
    sign = None
    if signed:
        store = store_factory(store_config.with_namespace(record.storage_namespace))
        sign = store.signed_url
    return PlaybackManifestResponse.model_validate(build_manifest(record, sign))
