"""Error taxonomy for ingestion, storage and deletion."""

from __future__ import annotations


class VideoPipelineError(Exception):
    """Base class for every failure surfaced by the video pipeline."""


class MediaToolUnavailableError(VideoPipelineError):
    """ffmpeg/ffprobe could not be executed. Checked once before any ingestion work."""


class ProbeError(VideoPipelineError):
    """The asset could not be parsed or reports a zero duration."""


class SplitError(VideoPipelineError):
    """The remux step failed or produced no parts."""


class OversizedPartError(SplitError):
    """A remuxed part still exceeds the store limit. Never retried or re-planned."""

    def __init__(self, message: str, *, oversized: list[str] | None = None) -> None:
        super().__init__(message)
        self.oversized = list(oversized or [])


class StoreError(VideoPipelineError):
    """
    Raw failure reported by the object store.

    Classification into retryable / fatal is done by the caller, not here.
    """

    def __init__(self, message: str, *, http_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.http_code = http_code


class UploadError(VideoPipelineError):
    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        failed_parts: list[int] | None = None,
    ) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.failed_parts = list(failed_parts or [])


class ReconciliationError(VideoPipelineError):
    """Some remote identifiers could not be confirmed deleted; the record was kept."""

    def __init__(self, failed_ids: list[str]) -> None:
        super().__init__(f"Remote deletion failed for {len(failed_ids)} object(s)")
        self.failed_ids = list(failed_ids)
