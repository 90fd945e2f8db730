# file: callroute/core/blocklist.py
"""
Blocklist matching.

Entries are checked in the order the store returns them; the first match wins.
A malformed regex entry never blocks anything and never aborts the check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable

import re2

from callroute.core.models import BlocklistEntry, PatternKind, parse_kind
from callroute.core.normalize import normalize_number

logger = logging.getLogger(__name__)


@lru_cache(maxsize=512)
def compile_regex(pattern: str) -> Any | None:
    """
    Compile `pattern` with RE2, returning None if it is not a valid expression.

    RE2 matches in linear time. Backreferences and lookaround are not supported.
    """

    try:
        return re2.compile(pattern)
    except re2.error as exc:
        logger.debug("Invalid regex %r: %s", pattern, exc)
        return None


@dataclass(frozen=True, slots=True)
class BlockResult:
    blocked: bool
    entry: BlocklistEntry | None = None


def entry_matches(normalized_number: str, entry: BlocklistEntry) -> bool:
    kind = parse_kind(PatternKind, entry.pattern_type)
    if kind is PatternKind.EXACT:
        return normalized_number == normalize_number(entry.pattern)
    if kind is PatternKind.PREFIX:
        return normalized_number.startswith(normalize_number(entry.pattern))
    if kind is PatternKind.REGEX:
        # Raw pattern against the normalized number.
        compiled = compile_regex(entry.pattern)
        if compiled is None:
            logger.debug("Skipping blocklist entry %s: invalid regex", entry.id)
            return False
        return compiled.search(normalized_number) is not None
    return False


def is_blocked(number: str, entries: Iterable[BlocklistEntry]) -> BlockResult:
    """
    Check `number` against blocklist entries.

    Args:
        number: Raw caller identifier (formatting is stripped before matching).
        entries: Blocklist entries in store order.

    Returns:
        `BlockResult(True, entry)` for the first matching entry, else
        `BlockResult(False, None)`.
    """

    normalized = normalize_number(number)
    for entry in entries:
        if entry_matches(normalized, entry):
            return BlockResult(blocked=True, entry=entry)
    return BlockResult(blocked=False)
