"""Route ordering: DID-specific routes first, then global ones, by priority."""

from __future__ import annotations

from typing import Sequence

from callroute.core.models import Route


def select_routes(did_routes: Sequence[Route], global_routes: Sequence[Route]) -> list[Route]:
    """
    Merge DID and global routes into evaluation order.

    `sorted` is stable, so equal priorities keep DID routes ahead of global
    routes and each list's own order.
    """

    merged = [*did_routes, *global_routes]
    return sorted(merged, key=lambda r: r.priority)
