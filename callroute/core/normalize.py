# file: callroute/core/normalize.py
"""
Phone number normalization used for matching.

This is deliberately not E.164 canonicalization: it only strips formatting so
that "+1 (555) 123-4567" and "+15551234567" compare equal.
"""

from __future__ import annotations


def normalize_number(number: str) -> str:
    """
    Reduce `number` to ASCII digits, keeping a `+` only in the leading position.

    Examples:
        "+1 (555) 123-4567" -> "+15551234567"
        "555.123.4567"      -> "5551234567"
        "1+2"               -> "12"
    """

    out: list[str] = []
    for i, ch in enumerate(number):
        if ch == "+" and i == 0:
            out.append(ch)
        elif "0" <= ch <= "9":
            out.append(ch)
    return "".join(out)
