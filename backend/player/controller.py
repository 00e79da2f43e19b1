"""
Headless seamless player.

Drives one visible media element (and optionally a hidden preload element)
so N part streams behave like a single video: one clock, seeking across
part boundaries and gapless auto-advance.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol, Sequence

from player.timeline import PartSource, Timeline, clamp

logger = logging.getLogger(__name__)

SKIP_SECONDS = 10.0


class MediaElement(Protocol):
    """The subset of an HTML5-style media element the controller needs."""

    src: str | None
    current_time: float

    def load(self) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def buffered_end(self) -> float | None: ...


class PlayerPhase(str, Enum):
    STEADY = "steady"
    SEEKING = "seeking"                # part switch pending for a user seek
    TRANSITIONING = "transitioning"    # part switch pending for auto-advance


class SeamlessPlayer:
    def __init__(
        self,
        sources: Sequence[PartSource],
        element: MediaElement,
        *,
        preload_element: MediaElement | None = None,
    ) -> None:
        self.timeline = Timeline(sources)
        self._element = element
        self._preload = preload_element
        self.part_index = 0
        self.unified_time = 0.0
        self.buffered = 0.0
        self.playing = False
        self.phase = PlayerPhase.STEADY
        self._pending_local: float = 0.0
        self._pending_unified: float = 0.0
        self._load_current()

    @property
    def seeking(self) -> bool:
        return self.phase is PlayerPhase.SEEKING

    @property
    def transitioning(self) -> bool:
        return self.phase is PlayerPhase.TRANSITIONING

    @property
    def total_duration(self) -> float:
        return self.timeline.total_duration

    @property
    def progress_fraction(self) -> float:
        total = self.total_duration
        return self.unified_time / total if total > 0 else 0.0

    @property
    def buffered_fraction(self) -> float:
        total = self.total_duration
        return self.buffered / total if total > 0 else 0.0

    def _load_current(self) -> None:
        src = self.timeline.sources[self.part_index].url
        if self._element.src != src:
            self._element.src = src
            self._element.load()
        self._preload_next()

    def _preload_next(self) -> None:
        if self._preload is None:
            return
        next_index = self.part_index + 1
        if next_index < len(self.timeline):
            src = self.timeline.sources[next_index].url
            if self._preload.src != src:
                self._preload.src = src
                self._preload.load()

    def _switch_part(self, index: int, phase: PlayerPhase, local_time: float, unified: float) -> None:
        self.phase = phase
        self._pending_local = local_time
        self._pending_unified = unified
        self.part_index = index
        self._load_current()

    # --- element events ---

    def handle_time_update(self) -> None:
        """Underlying clock tick; ignored while a part switch is in flight."""
        if self.phase is not PlayerPhase.STEADY:
            return
        local = self._element.current_time
        self.unified_time = self.timeline.to_unified(self.part_index, local)
        buffered_end = self._element.buffered_end()
        if buffered_end is not None:
            self.buffered = self.timeline.buffered_end(self.part_index, buffered_end)

    def handle_ended(self) -> None:
        if self.phase is not PlayerPhase.STEADY:
            # A pending seek or advance already chose the next position.
            return
        if self.part_index < len(self.timeline) - 1:
            next_index = self.part_index + 1
            logger.debug("[player] Part %d ended; advancing to %d", self.part_index, next_index)
            self._switch_part(
                next_index,
                PlayerPhase.TRANSITIONING,
                0.0,
                self.timeline.offsets[next_index],
            )
        else:
            self.playing = False
            self.unified_time = self.total_duration

    def handle_source_ready(self) -> None:
        """The newly loaded part can accept currentTime; finish the pending switch."""
        if self.phase is PlayerPhase.STEADY:
            return
        if self.phase is PlayerPhase.TRANSITIONING:
            self.playing = True
        self._element.current_time = self._pending_local
        self.unified_time = self._pending_unified
        if self.playing:
            self._element.play()
        self.phase = PlayerPhase.STEADY

    # --- user actions ---

    def play(self) -> None:
        self._element.play()
        self.playing = True

    def pause(self) -> None:
        self._element.pause()
        self.playing = False

    def toggle_play(self) -> None:
        if self.playing:
            self.pause()
        else:
            self.play()

    def seek(self, target: float) -> None:
        """
        Move to unified time `target`. Switching parts completes on
        handle_source_ready(); a seek during an auto-advance supersedes it.
        """
        target = clamp(target, 0.0, self.total_duration)
        index, local = self.timeline.to_local(target)
        if index != self.part_index:
            self._switch_part(index, PlayerPhase.SEEKING, local, target)
            return
        if self.phase is not PlayerPhase.STEADY:
            # Same part already loading; retarget the pending switch.
            self.phase = PlayerPhase.SEEKING
            self._pending_local = local
            self._pending_unified = target
            return
        self._element.current_time = local
        self.unified_time = target

    def seek_to_fraction(self, ratio: float) -> None:
        """Click on the unified progress bar at `ratio` of its width."""
        self.seek(clamp(ratio, 0.0, 1.0) * self.total_duration)

    def skip(self, delta: float = SKIP_SECONDS) -> None:
        self.seek(self.unified_time + delta)
