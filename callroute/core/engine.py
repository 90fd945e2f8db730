# file: callroute/core/engine.py
"""
Call routing decision engine.

Evaluation order for one inbound call:

1. blocklist (a match rejects the call outright);
2. DID-specific enabled routes, then global enabled routes, stably ordered by
   priority (lower first);
3. the first route whose condition holds decides the action;
4. otherwise the call goes to voicemail.

The engine holds no mutable state after construction, so one instance can
serve concurrent evaluations.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import tzinfo

from callroute.core.actions import resolve_action
from callroute.core.blocklist import is_blocked
from callroute.core.conditions import evaluate_condition, load_timezone
from callroute.core.models import (
    BLOCKLIST_ROUTE_NAME,
    DEFAULT_ROUTE_NAME,
    Action,
    ActionKind,
    CallContext,
    Route,
)
from callroute.core.selector import select_routes
from callroute.store.source import RouteSource

logger = logging.getLogger(__name__)


class RulesEngine:
    def __init__(
        self,
        source: RouteSource,
        timezone: str = "UTC",
        *,
        timeout_seconds: float | None = None,
    ) -> None:
        self._source = source
        self._tz = load_timezone(timezone)
        self._timeout = timeout_seconds

    @property
    def timezone(self) -> tzinfo:
        return self._tz

    async def evaluate(self, ctx: CallContext, *, timeout: float | None = None) -> Action:
        """
        Decide what to do with an inbound call.

        Args:
            ctx: The call being routed.
            timeout: Overall deadline in seconds; defaults to the engine's
                configured timeout (None means no deadline).

        Raises:
            RouteSourceError: the blocklist or DID route lookup failed.
            ActionDecodeError: the winning route's action cannot be executed.
            asyncio.TimeoutError: the deadline expired before a decision.
            asyncio.CancelledError: the evaluating task was cancelled.
        """

        deadline = timeout if timeout is not None else self._timeout
        if deadline is None:
            return await self._evaluate(ctx)
        return await asyncio.wait_for(self._evaluate(ctx), timeout=deadline)

    async def _evaluate(self, ctx: CallContext) -> Action:
        entries = await self._source.blocklist_entries()
        block = is_blocked(ctx.caller_id, entries)
        if block.blocked:
            entry_id = block.entry.id if block.entry is not None else None
            logger.info(
                "Caller %s blocked by entry %s",
                ctx.caller_id,
                entry_id,
                extra={
                    "did_id": ctx.did_id,
                    "route_name": BLOCKLIST_ROUTE_NAME,
                    "blocklist_entry_id": entry_id,
                },
            )
            return Action(kind=ActionKind.REJECT, route_name=BLOCKLIST_ROUTE_NAME)

        did_routes = await self._source.enabled_routes_for_did(ctx.did_id)
        global_routes = await self._global_routes(ctx.did_id)

        for route in select_routes(did_routes, global_routes):
            if evaluate_condition(
                route.condition_type,
                route.condition_data,
                ctx,
                tz=self._tz,
                route_name=route.name,
            ):
                logger.debug(
                    "Route %r (priority %s) matched",
                    route.name,
                    route.priority,
                    extra={
                        "did_id": ctx.did_id,
                        "route_name": route.name,
                        "priority": route.priority,
                    },
                )
                return self._action_for(route)

        logger.debug(
            "No route matched for DID %s; using default",
            ctx.did_id,
            extra={"did_id": ctx.did_id, "route_name": DEFAULT_ROUTE_NAME},
        )
        return Action(kind=ActionKind.VOICEMAIL, route_name=DEFAULT_ROUTE_NAME)

    async def _global_routes(self, did_id: int) -> list[Route]:
        # Global routes are best-effort; only DID routes are required.
        try:
            return await self._source.enabled_global_routes()
        except Exception as exc:
            logger.warning(
                "Global route lookup failed, continuing without: %s",
                exc,
                extra={"did_id": did_id},
            )
            return []

    @staticmethod
    def _action_for(route: Route) -> Action:
        payload = resolve_action(route.action_type, route.action_data, route_name=route.name)
        return Action(
            kind=ActionKind(route.action_type),
            route_name=route.name,
            payload=payload,
            priority=route.priority,
            data=route.action_data,
        )
