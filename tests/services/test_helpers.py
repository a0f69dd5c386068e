"""Tests for service-layer helpers."""

import re

import pytest

from venuecrawl.services._helpers import now_compact, safe_dirname


def test_now_compact_format() -> None:
    assert re.fullmatch(r"\d{8}T\d{6}", now_compact())


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("Blue Bottle Coffee", "Blue-Bottle-Coffee"),
        ("Shibuya Station / 渋谷駅", "Shibuya-Station-渋谷駅"),
        ("../etc/passwd", "etc-passwd"),
        ("   ", "start"),
        ("", "start"),
    ],
)
def test_safe_dirname(label: str, expected: str) -> None:
    assert safe_dirname(label) == expected


def test_safe_dirname_truncates() -> None:
    assert safe_dirname("x" * 200, max_len=10) == "x" * 10
