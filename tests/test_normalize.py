from __future__ import annotations

import re

import pytest

from callroute.core.normalize import normalize_number


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("+1 (555) 123-4567", "+15551234567"),
        ("555.123.4567", "5551234567"),
        ("+1-555-123-4567", "+15551234567"),
        ("15551234567", "15551234567"),
        ("", ""),
        ("abc123def", "123"),
        ("+++111", "+111"),
        ("1+2", "12"),
        ("Anonymous", ""),
        (" +15551234567", "15551234567"),
    ],
)
def test_normalize_number(raw: str, expected: str) -> None:
    assert normalize_number(raw) == expected


def test_normalize_output_is_digits_with_optional_leading_plus() -> None:
    samples = ["+44 20 8366 1177", "++--++", "(+1) 800", "tel:+1-800-FLOWERS", "١٢٣"]
    for s in samples:
        out = normalize_number(s)
        assert re.fullmatch(r"\+?[0-9]*", out), (s, out)
        assert out.count("+") <= 1
