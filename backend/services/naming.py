"""Deterministic object identifiers for uploaded videos and their parts."""

from __future__ import annotations

import re
import time

_EXTENSION = re.compile(r"\.[^/.]+$")
_UNSAFE = re.compile(r"[^a-z0-9\-_]+", re.IGNORECASE)
_PART_SUFFIX = re.compile(r"^(?P<prefix>.+-part-)\d+$")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

PART_MARKER = "-part-"


def sanitize_base_name(filename: str) -> str:
    """'My Clip (final).MP4' -> 'my-clip-final'. Falls back to 'video'."""
    name = _EXTENSION.sub("", filename or "")
    name = _UNSAFE.sub("-", name).strip("-").lower()
    return name or "video"


def to_base36(value: int) -> str:
    if value <= 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def unique_token(now_ms: int | None = None) -> str:
    """Base-36 epoch milliseconds."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return to_base36(now_ms)


def base_public_id(filename: str, *, token: str | None = None) -> str:
    return f"{sanitize_base_name(filename)}-{token or unique_token()}"


def part_public_id(base_id: str, index: int) -> str:
    """1-based, zero-padded: part_public_id('clip-x', 2) == 'clip-x-part-002'."""
    return f"{base_id}{PART_MARKER}{index:03d}"


def object_name(folder: str, public_id: str) -> str:
    folder = folder.strip("/")
    return f"{folder}/{public_id}" if folder else public_id


def multipart_prefix(public_id: str) -> str | None:
    """'<base>-part-' for part identifiers, None for anything else."""
    match = _PART_SUFFIX.match(public_id)
    return match.group("prefix") if match else None
