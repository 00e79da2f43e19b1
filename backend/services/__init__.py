from .errors import (
    OversizedPartError,
    ProbeError,
    ReconciliationError,
    StoreError,
    UploadError,
    VideoPipelineError,
)
from .store import videos

__all__ = [
    "videos",
    "VideoPipelineError",
    "ProbeError",
    "OversizedPartError",
    "StoreError",
    "UploadError",
    "ReconciliationError",
]
