"""Config CLI commands: show, validate."""

from __future__ import annotations

import json

import click


@click.group("config")
def config_group() -> None:
    """Manage configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the resolved configuration (API key masked)."""
    from dometrics.config.loader import load_config

    config = load_config(ctx.obj.get("config_path"))
    data = config.model_dump()
    if data["oracle"]["api_key"]:
        data["oracle"]["api_key"] = "****"
    click.echo(json.dumps(data, indent=2, default=str))


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate config.yaml against the schema."""
    from pydantic import ValidationError

    from dometrics.config.loader import load_config

    try:
        config = load_config(ctx.obj.get("config_path"))
    except (ValidationError, OSError, ValueError) as e:
        click.echo(f"Config validation failed: {e}", err=True)
        raise SystemExit(1) from None

    oracle_state = "on" if config.oracle.enabled and config.oracle.resolve_api_key() else "off"
    click.echo("Config is valid.")
    click.echo(f"  Version: {config.version}")
    click.echo(f"  Weights: {config.weights.version}")
    click.echo(f"  Oracle: {oracle_state} ({config.oracle.model}, "
               f"{config.oracle.timeout_seconds:.0f}s timeout)")
