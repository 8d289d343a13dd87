"""CLI command: dometrics batch -- Score a file of registry records."""

from __future__ import annotations

import json
import logging

import click

logger = logging.getLogger(__name__)


@click.command("batch")
@click.argument("records_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False), default=None,
              help="Write the scored table to this CSV file")
@click.option("--top", type=int, default=10, show_default=True, help="Rows to show")
@click.pass_context
def batch_cmd(ctx: click.Context, records_file: str, csv_path: str | None, top: int) -> None:
    """Score every domain in RECORDS_FILE (YAML or JSON) and print analytics."""
    from dometrics.config.loader import load_config
    from dometrics.data.records import load_domain_records
    from dometrics.engine.attributes import utc_now
    from dometrics.engine.batch import attributes_from_records, score_domains
    from dometrics.output.analytics import summarize_scores, top_movers

    config = load_config(ctx.obj.get("config_path"))
    try:
        records = load_domain_records(records_file)
    except ValueError as e:
        raise click.UsageError(str(e)) from None

    domains = attributes_from_records(records)
    scored = score_domains(domains, config.weights, now=utc_now())

    click.echo("Dometrics Batch Scoring")
    click.echo("=" * 40)
    click.echo(f"Scored: {len(scored)} of {len(records)} records")

    if not scored.empty:
        click.echo("\nBy forecast:")
        table = scored.sort_values("forecast", ascending=False).head(top)
        for row in table.itertuples(index=False):
            click.echo(
                f"  {row.domain:24s} risk={row.risk:5.1f} rarity={row.rarity:5.1f} "
                f"mom={row.momentum:5.1f} fc={row.forecast:5.1f} "
                f"${row.current_value:>12,.0f}"
            )

        click.echo("\nTop movers:")
        for row in top_movers(scored, top).itertuples(index=False):
            click.echo(f"  {row.domain:24s} momentum={row.momentum:5.1f}")

    click.echo("\nSummary:")
    click.echo(json.dumps(summarize_scores(scored), indent=2))

    if csv_path:
        scored.to_csv(csv_path, index=False)
        click.echo(f"\nWrote {csv_path}")
