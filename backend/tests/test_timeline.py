"""Tests for the unified timeline math."""

import pytest

from player.timeline import PartSource, Timeline, format_time, sources_for

SOURCES = [
    PartSource(url="https://cdn/p1.mp4", duration=46.0),
    PartSource(url="https://cdn/p2.mp4", duration=46.5),
    PartSource(url="https://cdn/p3.mp4", duration=46.0),
    PartSource(url="https://cdn/p4.mp4", duration=46.5),
]


def test_offsets_are_cumulative() -> None:
    timeline = Timeline(SOURCES)
    assert timeline.offsets == (0.0, 46.0, 92.5, 138.5, 185.0)
    assert timeline.total_duration == 185.0
    assert len(timeline) == 4


@pytest.mark.parametrize(
    ("t", "expected"),
    [
        (0.0, (0, 0.0)),
        (45.9, (0, 45.9)),
        (46.0, (1, 0.0)),
        (100.0, (2, 7.5)),
        (185.0, (3, 46.5)),
        (500.0, (3, 46.5)),
        (-3.0, (0, 0.0)),
    ],
)
def test_to_local(t: float, expected) -> None:
    index, local = Timeline(SOURCES).to_local(t)
    assert index == expected[0]
    assert local == pytest.approx(expected[1])


def test_part_for_time_invariant_holds_across_timeline() -> None:
    timeline = Timeline(SOURCES)
    t = 0.0
    while t < timeline.total_duration:
        index = timeline.part_for_time(t)
        assert timeline.offsets[index] <= t < timeline.offsets[index + 1]
        t += 0.25


def test_to_unified_round_trips_local_time() -> None:
    timeline = Timeline(SOURCES)
    index, local = timeline.to_local(120.25)
    assert timeline.to_unified(index, local) == pytest.approx(120.25)


def test_buffered_end_translates_to_unified() -> None:
    timeline = Timeline(SOURCES)
    assert timeline.buffered_end(1, 10.0) == 56.0
    assert timeline.buffered_end(2, None) == 92.5
    assert timeline.buffered_end(3, 999.0) == 185.0


def test_zero_duration_part_is_skipped_by_lookup() -> None:
    timeline = Timeline([PartSource("a", 10.0), PartSource("b", 0.0), PartSource("c", 5.0)])
    assert timeline.part_for_time(10.0) == 2


def test_timeline_requires_sources() -> None:
    with pytest.raises(ValueError):
        Timeline([])


def test_sources_for_single_video_spans_total() -> None:
    assert sources_for("https://cdn/v.mp4", [], 30.0) == [PartSource("https://cdn/v.mp4", 30.0)]
    assert sources_for("https://cdn/v.mp4", None, 30.0) == [PartSource("https://cdn/v.mp4", 30.0)]
    assert sources_for("https://cdn/v.mp4", SOURCES, 185.0) == SOURCES


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(0, "0:00"), (5.9, "0:05"), (125, "2:05"), (3725, "1:02:05"), (-4, "0:00")],
)
def test_format_time(seconds: float, expected: str) -> None:
    assert format_time(seconds) == expected
