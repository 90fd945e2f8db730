# file: callroute/cli.py
"""
callroute CLI.

Commands:
  - init-db: create the route/blocklist schema
  - add-route: validate and store a routing rule
  - block: add a blocklist entry
  - routes: list stored routes
  - evaluate: show how an inbound call would be routed
  - validate: check route definitions from a JSON file
  - presets: print the built-in rule templates
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import click

from callroute import __version__
from callroute.config import CallrouteSettings, load_settings
from callroute.core.actions import ActionDecodeError
from callroute.core.engine import RulesEngine
from callroute.core.models import CallContext, PatternKind, Route
from callroute.core.presets import preset_rules
from callroute.core.validator import validate_route
from callroute.logging_config import configure_logging
from callroute.store.source import RouteSourceError
from callroute.store.sqlite import SQLiteRouteStore

logger = logging.getLogger(__name__)

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config path.",
)
_db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite database path (overrides config).",
)


def _setup(config_path: Path | None) -> CallrouteSettings:
    settings = load_settings(yaml_path=config_path)
    configure_logging(level=settings.log_level, json_logging=settings.json_logging)
    return settings


def _open_store(settings: CallrouteSettings, db_path: Path | None) -> SQLiteRouteStore:
    try:
        return SQLiteRouteStore(db_path or settings.database_path)
    except Exception as exc:
        raise click.ClickException(f"Cannot open database: {exc}") from exc


def _payload_arg(value: str | None) -> bytes | None:
    if value is None:
        return None
    return value.encode("utf-8")


def _route_from_obj(obj: dict[str, Any], index: int) -> Route:
    def raw(key: str) -> bytes | None:
        value = obj.get(key)
        if value is None:
            return None
        if isinstance(value, str):
            return value.encode("utf-8")
        return json.dumps(value).encode("utf-8")

    did_id = obj.get("did_id")
    return Route(
        id=int(obj.get("id") or 0),
        did_id=int(did_id) if did_id is not None else None,
        priority=int(obj.get("priority") or 0),
        name=str(obj.get("name") or f"route-{index}"),
        condition_type=str(obj.get("condition_type") or ""),
        condition_data=raw("condition_data"),
        action_type=str(obj.get("action_type") or ""),
        action_data=raw("action_data"),
        enabled=bool(obj.get("enabled", True)),
    )


def _parse_when(value: str | None) -> datetime:
    if value is None:
        return datetime.now(tz=timezone.utc)
    try:
        ts = datetime.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter(f"not an ISO 8601 timestamp: {value}") from exc
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__)
def main() -> None:
    """Inbound call routing rules."""


@main.command("init-db")
@_config_option
@_db_option
def init_db_cmd(config_path: Path | None, db_path: Path | None) -> None:
    """Create the route and blocklist tables."""

    settings = _setup(config_path)
    store = _open_store(settings, db_path)
    click.echo(str(store.path))


@main.command("add-route")
@click.argument("name")
@click.option("--priority", type=int, default=0, show_default=True)
@click.option("--did", "did_id", type=int, default=None, help="Owning DID id (omit for global).")
@click.option("--condition-type", default="default", show_default=True)
@click.option("--condition-data", default=None, help="Condition payload as JSON.")
@click.option("--action-type", default="voicemail", show_default=True)
@click.option("--action-data", default=None, help="Action payload as JSON.")
@click.option("--disabled", is_flag=True, help="Store the route disabled.")
@_config_option
@_db_option
def add_route_cmd(
    name: str,
    priority: int,
    did_id: int | None,
    condition_type: str,
    condition_data: str | None,
    action_type: str,
    action_data: str | None,
    disabled: bool,
    config_path: Path | None,
    db_path: Path | None,
) -> None:
    """Validate a routing rule and store it."""

    settings = _setup(config_path)
    candidate = Route(
        id=0,
        did_id=did_id,
        priority=priority,
        name=name,
        condition_type=condition_type,
        condition_data=_payload_arg(condition_data),
        action_type=action_type,
        action_data=_payload_arg(action_data),
        enabled=not disabled,
    )
    errors = validate_route(candidate)
    if errors:
        for err in errors:
            click.echo(f"error: {err}", err=True)
        raise click.ClickException(f"Route {name!r} is invalid ({len(errors)} error(s)).")

    store = _open_store(settings, db_path)
    try:
        route = store.add_route(
            name=name,
            priority=priority,
            did_id=did_id,
            condition_type=condition_type,
            condition_data=condition_data,
            action_type=action_type,
            action_data=action_data,
            enabled=not disabled,
        )
    except RouteSourceError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(route.to_dict(), sort_keys=True))


@main.command("block")
@click.argument("pattern")
@click.option(
    "--type",
    "pattern_type",
    type=click.Choice([k.value for k in PatternKind]),
    default=PatternKind.EXACT.value,
    show_default=True,
)
@click.option("--reason", default="", help="Why the number is blocked.")
@_config_option
@_db_option
def block_cmd(
    pattern: str,
    pattern_type: str,
    reason: str,
    config_path: Path | None,
    db_path: Path | None,
) -> None:
    """Add a blocklist entry."""

    settings = _setup(config_path)
    store = _open_store(settings, db_path)
    try:
        entry = store.add_blocklist_entry(pattern, pattern_type=pattern_type, reason=reason)
    except RouteSourceError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"blocked {entry.pattern} ({entry.pattern_type}) id={entry.id}")


@main.command("routes")
@_config_option
@_db_option
def routes_cmd(config_path: Path | None, db_path: Path | None) -> None:
    """List stored routes in priority order."""

    settings = _setup(config_path)
    store = _open_store(settings, db_path)
    try:
        routes = store.list_routes()
    except RouteSourceError as exc:
        raise click.ClickException(str(exc)) from exc
    for r in routes:
        scope = f"did={r.did_id}" if r.did_id is not None else "global"
        state = "" if r.enabled else " (disabled)"
        click.echo(
            f"{r.priority:>5}  {r.name}  [{scope}] {r.condition_type} -> {r.action_type}{state}"
        )


@main.command("evaluate")
@click.argument("caller_id")
@click.option("--did", "did_id", type=int, required=True, help="DID id the call arrived on.")
@click.option("--to", "called_number", default="", help="Dialed number.")
@click.option("--at", "when", default=None, help="Call time as ISO 8601 (default: now, UTC).")
@click.option("--json", "as_json", is_flag=True, help="Print the decision as JSON.")
@_config_option
@_db_option
def evaluate_cmd(
    caller_id: str,
    did_id: int,
    called_number: str,
    when: str | None,
    as_json: bool,
    config_path: Path | None,
    db_path: Path | None,
) -> None:
    """Show how an inbound call would be routed."""

    settings = _setup(config_path)
    store = _open_store(settings, db_path)
    engine = RulesEngine(
        store, settings.timezone, timeout_seconds=settings.evaluation_timeout_seconds
    )
    ctx = CallContext(
        caller_id=caller_id,
        called_number=called_number,
        did_id=did_id,
        time=_parse_when(when),
    )
    logger.debug("Evaluating call from %s on DID %s", caller_id, did_id)

    try:
        action = asyncio.run(engine.evaluate(ctx))
    except ActionDecodeError as exc:
        raise click.ClickException(
            f"Route {exc.route_name!r} has an unusable action: {exc}"
        ) from exc
    except RouteSourceError as exc:
        raise click.ClickException(f"Data source error: {exc}") from exc
    except asyncio.TimeoutError as exc:
        raise click.ClickException("Evaluation timed out.") from exc

    if as_json:
        click.echo(json.dumps(action.to_dict(), indent=2, sort_keys=True))
        return

    line = f"{action.kind.value} via {action.route_name}"
    if action.priority is not None:
        line += f" (priority {action.priority})"
    click.echo(line)
    if action.payload is not None:
        click.echo(json.dumps(action.payload.model_dump(), sort_keys=True))


@main.command("validate")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate_cmd(input_file: Path) -> None:
    """
    Validate route definitions from a JSON file (one object or an array).
    """

    try:
        raw = json.loads(input_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid JSON: {exc}") from exc

    items = raw if isinstance(raw, list) else [raw]
    failed = 0
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise click.ClickException(f"Item {i} is not a JSON object.")
        try:
            route = _route_from_obj(item, i)
        except (TypeError, ValueError) as exc:
            failed += 1
            click.echo(f"{item.get('name') or f'route-{i}'}: invalid")
            click.echo(f"  - Invalid route fields: {exc}")
            continue
        errors = validate_route(route)
        if errors:
            failed += 1
            click.echo(f"{route.name}: invalid")
            for err in errors:
                click.echo(f"  - {err}")
        else:
            click.echo(f"{route.name}: ok")

    if failed:
        raise click.ClickException(f"{failed} of {len(items)} route(s) invalid.")


@main.command("presets")
def presets_cmd() -> None:
    """Print the built-in routing rule templates as JSON."""

    click.echo(json.dumps([p.to_dict() for p in preset_rules()], indent=2))
