from .upload import PipelineState, UploadAttempt, VideoAsset
from .video import PartMetadata, ProbeResult, SegmentationPlan, VideoRecord

__all__ = [
    "PipelineState",
    "UploadAttempt",
    "VideoAsset",
    "PartMetadata",
    "ProbeResult",
    "SegmentationPlan",
    "VideoRecord",
]
