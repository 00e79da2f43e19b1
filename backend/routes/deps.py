"""Request-scoped collaborators. Overridable through app.dependency_overrides."""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Header, HTTPException

from services.config import MediaToolConfig, RetryPolicy, SplitLimits, StoreConfig, get_auth_secret
from services.gcs import GcsObjectStore
from services.media_tool import MediaTool
from services.owner_token import InvalidOwnerToken, decode_owner_token
from services.pipeline import IngestionPipeline, StoreFactory
from services.store import VideoRepository, videos

logger = logging.getLogger(__name__)


def get_owner_id(authorization: str | None = Header(default=None)) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    secret = get_auth_secret()
    if not secret:
        logger.error("[deps] AUTH_TOKEN_SECRET is not configured")
        raise HTTPException(status_code=500, detail="Authentication is not configured (AUTH_TOKEN_SECRET)")
    try:
        return decode_owner_token(secret, token.strip())
    except InvalidOwnerToken as exc:
        logger.info("[deps] Rejected bearer token: %s", exc)
        raise HTTPException(status_code=401, detail="Unauthorized") from exc


def get_repository() -> VideoRepository:
    return videos


def get_store_config() -> StoreConfig:
    return StoreConfig.from_env()


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy.from_env()


def get_store_factory() -> StoreFactory:
    return GcsObjectStore


@lru_cache(maxsize=1)
def _default_pipeline() -> IngestionPipeline:
    return IngestionPipeline(
        repository=videos,
        media_tool=MediaTool(MediaToolConfig.from_env()),
        limits=SplitLimits.from_env(),
        retry_policy=RetryPolicy.from_env(),
    )


def get_pipeline() -> IngestionPipeline:
    return _default_pipeline()
