"""Tests for the ffmpeg/ffprobe subprocess wrapper (subprocess calls mocked)."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest

from services import media_tool as media_tool_module
from services.config import MediaToolConfig
from services.errors import MediaToolUnavailableError, ProbeError, SplitError
from services.media_tool import MediaTool


@pytest.fixture(autouse=True)
def reset_verified_tools() -> None:
    media_tool_module._verified_tools.clear()
    yield
    media_tool_module._verified_tools.clear()


@pytest.mark.asyncio
async def test_ensure_available_checks_once_per_process() -> None:
    run = AsyncMock(return_value=(0, "ffmpeg version 6.1", ""))
    with patch("services.media_tool._run", run):
        tool = MediaTool()
        await tool.ensure_available()
        await tool.ensure_available()
    assert [call.args[0] for call in run.await_args_list] == [["ffmpeg", "-version"], ["ffprobe", "-version"]]


@pytest.mark.asyncio
async def test_ensure_available_raises_when_binary_missing() -> None:
    run = AsyncMock(side_effect=FileNotFoundError("ffmpeg"))
    with patch("services.media_tool._run", run), pytest.raises(MediaToolUnavailableError):
        await MediaTool(MediaToolConfig(ffmpeg_path="/opt/missing/ffmpeg")).ensure_available()


@pytest.mark.asyncio
async def test_probe_returns_parsed_json() -> None:
    payload = {"format": {"duration": "12.5"}, "streams": []}
    run = AsyncMock(return_value=(0, json.dumps(payload), ""))
    with patch("services.media_tool._run", run):
        data = await MediaTool().probe("/tmp/source.mp4")
    assert data == payload
    cmd = run.await_args.args[0]
    assert cmd[0] == "ffprobe"
    assert cmd[-1] == "/tmp/source.mp4"
    assert "json" in cmd


@pytest.mark.asyncio
async def test_probe_nonzero_exit_raises_probe_error() -> None:
    run = AsyncMock(return_value=(1, "", "Invalid data found when processing input"))
    with patch("services.media_tool._run", run), pytest.raises(ProbeError, match="Invalid data"):
        await MediaTool().probe("/tmp/source.mp4")


@pytest.mark.asyncio
async def test_probe_timeout_raises_probe_error() -> None:
    run = AsyncMock(side_effect=asyncio.TimeoutError())
    with patch("services.media_tool._run", run), pytest.raises(ProbeError):
        await MediaTool().probe("/tmp/source.mp4")


@pytest.mark.asyncio
async def test_probe_garbage_output_raises_probe_error() -> None:
    run = AsyncMock(return_value=(0, "not json", ""))
    with patch("services.media_tool._run", run), pytest.raises(ProbeError):
        await MediaTool().probe("/tmp/source.mp4")


@pytest.mark.asyncio
async def test_segment_uses_stream_copy_with_reset_timestamps() -> None:
    run = AsyncMock(return_value=(0, "", ""))
    with patch("services.media_tool._run", run):
        await MediaTool().segment("/tmp/source.mp4", 46, "/tmp/out/clip-part-%03d.mp4")
    cmd = run.await_args.args[0]
    assert cmd[0] == "ffmpeg"
    assert cmd[cmd.index("-c") + 1] == "copy"
    assert cmd[cmd.index("-segment_time") + 1] == "46"
    assert cmd[cmd.index("-reset_timestamps") + 1] == "1"
    assert cmd[cmd.index("-avoid_negative_ts") + 1] == "make_zero"
    assert cmd[-1] == "/tmp/out/clip-part-%03d.mp4"


@pytest.mark.asyncio
async def test_segment_failure_raises_split_error() -> None:
    run = AsyncMock(return_value=(1, "", "moov atom not found"))
    with patch("services.media_tool._run", run), pytest.raises(SplitError, match="moov atom"):
        await MediaTool().segment("/tmp/source.mp4", 46, "/tmp/out/clip-part-%03d.mp4")
