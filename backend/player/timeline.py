"""Unified timeline over consecutive parts."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class PartSource:
    url: str
    duration: float            # seconds


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def format_time(seconds: float) -> str:
    """125 -> '2:05', 3725 -> '1:02:05'. Negative input shows as 0:00."""
    s = max(0, int(seconds))
    hours, rem = divmod(s, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class Timeline:
    """
    Cumulative offsets built once from part durations:
    offsets[i] = sum(durations[:i]), offsets[-1] = total.
    """

    def __init__(self, sources: Sequence[PartSource]) -> None:
        if not sources:
            raise ValueError("Timeline needs at least one source")
        self.sources: tuple[PartSource, ...] = tuple(sources)
        offsets = [0.0]
        for source in self.sources:
            offsets.append(offsets[-1] + max(0.0, float(source.duration or 0.0)))
        self.offsets: tuple[float, ...] = tuple(offsets)

    def __len__(self) -> int:
        return len(self.sources)

    @property
    def total_duration(self) -> float:
        return self.offsets[-1]

    def part_for_time(self, t: float) -> int:
        """Greatest i with offsets[i] <= t, limited to real parts."""
        index = bisect_right(self.offsets, t, 0, len(self.sources)) - 1
        return max(0, index)

    def to_local(self, t: float) -> tuple[int, float]:
        t = clamp(t, 0.0, self.total_duration)
        index = self.part_for_time(t)
        return index, t - self.offsets[index]

    def to_unified(self, index: int, local_time: float) -> float:
        return self.offsets[index] + local_time

    def buffered_end(self, index: int, local_buffered_end: float | None) -> float:
        """Translate a part-local buffered end into unified seconds."""
        if local_buffered_end is None:
            return self.offsets[index]
        return min(self.total_duration, self.offsets[index] + max(0.0, local_buffered_end))


def sources_for(url: str, parts: Sequence[PartSource] | None, total_duration: float) -> list[PartSource]:
    """Multipart videos play their parts; anything else is one source spanning the total."""
    if parts and len(parts) > 1:
        return list(parts)
    return [PartSource(url=url, duration=total_duration)]
