import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from routes.videos import router as videos_router
from services.errors import (
    ProbeError,
    ReconciliationError,
    SplitError,
    StoreError,
    UploadError,
    VideoPipelineError,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Video Parts API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(videos_router, prefix="/api")


def _error(status_code: int, message: str, **extra: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@app.exception_handler(HTTPException)
async def http_error(_request: Request, exc: HTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(ReconciliationError)
async def reconciliation_error(_request: Request, exc: ReconciliationError) -> JSONResponse:
    return _error(502, "Remote deletion failed for some parts", failedIds=exc.failed_ids)


@app.exception_handler(VideoPipelineError)
async def pipeline_error(_request: Request, exc: VideoPipelineError) -> JSONResponse:
    if isinstance(exc, (ProbeError, SplitError)):
        status_code = 422
    elif isinstance(exc, (UploadError, StoreError)):
        status_code = 502
    else:
        status_code = 500
    logger.error("[api] %s: %s", type(exc).__name__, exc)
    return _error(status_code, str(exc) or "Failed to upload video")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
