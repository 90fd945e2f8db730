"""
Data-source contract for the routing engine.

Sources must be async and cancellable: the engine awaits each query directly,
so cancelling the evaluating task cancels the in-flight query.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from callroute.core.models import BlocklistEntry, Route


class RouteSourceError(RuntimeError):
    """Raised when a data source cannot answer a query."""


class RouteSource(ABC):
    """Read-only queries the engine issues per evaluation."""

    @abstractmethod
    async def blocklist_entries(self) -> list[BlocklistEntry]:
        """All blocklist entries in the store's natural order."""

        raise NotImplementedError

    @abstractmethod
    async def enabled_routes_for_did(self, did_id: int) -> list[Route]:
        """Enabled routes owned by `did_id`."""

        raise NotImplementedError

    @abstractmethod
    async def enabled_global_routes(self) -> list[Route]:
        """Enabled routes with no owning DID."""

        raise NotImplementedError
