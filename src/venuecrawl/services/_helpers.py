"""Shared service-layer helper functions."""

from __future__ import annotations

import re
from datetime import UTC, datetime

_UNSAFE_CHARS = re.compile(r"[^\w.-]+")


def now_compact() -> str:
    """Current UTC time as compact ISO (YYYYMMDDTHHmmss, for run directories)."""
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S")


def safe_dirname(label: str, *, max_len: int = 60) -> str:
    """Reduce a node label to something usable as a directory name.

    Examples:
        >>> safe_dirname("Shibuya Station / 渋谷駅")
        'Shibuya-Station-渋谷駅'
        >>> safe_dirname("  ")
        'start'
    """
    cleaned = _UNSAFE_CHARS.sub("-", label).strip("-.")
    return cleaned[:max_len] or "start"
