"""Pressroom CLI entry point."""

import json
from typing import Any

import click

from pressroom.bootstrap import create_registry
from pressroom.core.config import Settings, configure_logging
from pressroom.core.errors import PressroomError
from pressroom.core.types import Tier
from pressroom.hooks.types import HookName, HookPoint
from pressroom.query.spec import QuerySpec


def _parse_filters(pairs: tuple[str, ...]) -> dict[str, Any]:
    """Turn ``key=value`` pairs into filters; repeated keys become lists."""
    filters: dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected key=value, got '{pair}'", param_hint="--filter")
        key, value = pair.split("=", 1)
        if key in filters:
            existing = filters[key]
            filters[key] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            filters[key] = value
    return filters


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, sort_keys=True))


@click.group()
@click.option("--log-level", default=None, help="Log level (defaults to PRESSROOM_LOG_LEVEL).")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """Pressroom entity query and serialization CLI."""
    settings = Settings.from_env()
    configure_logging(log_level or settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


def _registry(ctx: click.Context):
    if "registry" not in ctx.obj:
        ctx.obj["registry"] = create_registry(settings=ctx.obj["settings"])
    return ctx.obj["registry"]


def _service(registry, name: str):
    """Resolve a service by entity type ("Submission") or collection ("submissions")."""
    if registry.has(name):
        return registry.get(name)
    return registry.for_collection(name)


@cli.command("list")
@click.argument("entity_type")
@click.option("--scope", "scope_id", type=int, default=None, help="Scope id (e.g. contextId).")
@click.option("--filter", "-f", "filters", multiple=True, help="Filter as key=value; repeatable.")
@click.option("--offset", type=int, default=None)
@click.option("--count", type=int, default=None)
@click.option("--order-by", default=None)
@click.option("--desc", is_flag=True, default=False, help="Order descending.")
@click.option("--strict", is_flag=True, default=False, help="Reject unrecognized filters.")
@click.option("--full", is_flag=True, default=False, help="Serialize items at the full tier.")
@click.option("--explain", is_flag=True, default=False, help="Print the composed query instead.")
@click.pass_context
def list_entities(
    ctx: click.Context,
    entity_type: str,
    scope_id: int | None,
    filters: tuple[str, ...],
    offset: int | None,
    count: int | None,
    order_by: str | None,
    desc: bool,
    strict: bool,
    full: bool,
    explain: bool,
):
    """List ENTITY_TYPE entities as JSON."""
    registry = _registry(ctx)
    params: dict[str, Any] = {
        **_parse_filters(filters),
        "offset": offset,
        "count": count,
        "orderBy": order_by,
        "orderDirection": "desc" if desc else None,
        "strict": strict or None,
    }

    try:
        service = _service(registry, entity_type)
        spec = QuerySpec.from_params(params)
        if explain:
            query = registry.query_builder.build(
                service.entity_type, service.scope_filters(scope_id), spec
            )
            _echo_json(query.describe())
            return
        if full:
            items, total = service.list(scope_id, spec)
            context = registry.context()
            _echo_json({"items": [service.get_full(e, context) for e in items], "itemsMax": total})
        else:
            _echo_json(service.describe_list(scope_id, spec))
    except PressroomError as e:
        click.echo(click.style(f"{e.code}: {e.message}", fg="red"), err=True)
        raise SystemExit(1)


@cli.command()
@click.argument("entity_type")
@click.pass_context
def schema(ctx: click.Context, entity_type: str):
    """Show ENTITY_TYPE's properties, tiers and filter keys."""
    registry = _registry(ctx)
    entity_type = registry.collections().get(entity_type, entity_type)
    if not registry.schemas.is_registered(entity_type):
        click.echo(f"Error: no schema registered for '{entity_type}'", err=True)
        raise SystemExit(1)

    property_schema = registry.schemas.get(entity_type)
    click.echo(f"{entity_type}")
    for tier in Tier:
        click.echo(f"  {tier.value}: {', '.join(property_schema.names(tier))}")

    if registry.query_builder.is_registered(entity_type):
        definition = registry.query_builder.get_definition(entity_type)
        click.echo("  filters:")
        for filter_def in definition.ordered_filters:
            click.echo(f"    {filter_def.key}: {filter_def.description}")
        click.echo(f"  order fields: {', '.join(definition.order_fields)}")


@cli.command()
@click.pass_context
def hooks(ctx: click.Context):
    """List hook points for each entity type with listener counts."""
    registry = _registry(ctx)
    for entity_type in registry.schemas.list_registered():
        click.echo(entity_type)
        for point in HookPoint:
            name = HookName(entity_type, point)
            click.echo(f"  {name}  ({registry.hooks.count(name)} listener(s))")


if __name__ == "__main__":
    cli()
