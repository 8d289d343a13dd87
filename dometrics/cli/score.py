"""CLI command: dometrics score -- Score a single domain."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import timedelta
from pathlib import Path

import click
import yaml

logger = logging.getLogger(__name__)


@click.command("score")
@click.argument("domain_name")
@click.option("--expires-in", type=int, default=365, show_default=True,
              help="Days until expiry")
@click.option("--expires-at", default=None, help="Expiry as ISO timestamp (overrides --expires-in)")
@click.option("--locked", is_flag=True, help="Domain is transfer-locked")
@click.option("--registrar-id", type=int, default=None, help="Registrar IANA id")
@click.option("--renewals", type=int, default=0, help="Number of renewals")
@click.option("--offers", type=int, default=0, help="Active purchase offers")
@click.option("--activity-7d", type=int, default=0, help="Events in the last 7 days")
@click.option("--activity-30d", type=int, default=0, help="Events in the last 30 days")
@click.option("--oracle/--no-oracle", default=False,
              help="Ask the valuation oracle (falls back automatically)")
@click.option("--analysis", "analysis_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="JSON/YAML analysis to use instead of the rule-based outlook")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON instead of a report")
@click.pass_context
def score_cmd(
    ctx: click.Context,
    domain_name: str,
    expires_in: int,
    expires_at: str | None,
    locked: bool,
    registrar_id: int | None,
    renewals: int,
    offers: int,
    activity_7d: int,
    activity_30d: int,
    oracle: bool,
    analysis_path: str | None,
    as_json: bool,
) -> None:
    """Score DOMAIN_NAME (e.g. crypto.io) and print its report."""
    from dometrics.config.loader import load_config
    from dometrics.engine.attributes import (
        DomainAttributes,
        split_domain_name,
        to_utc,
        utc_now,
    )
    from dometrics.engine.scorer import ScoringEngine
    from dometrics.output.narrative import (
        build_analysis,
        render_report,
        validate_analysis_response,
    )

    if "." not in domain_name:
        raise click.BadParameter("expected NAME.TLD", param_hint="DOMAIN_NAME")
    name, tld = split_domain_name(domain_name)

    now = utc_now()
    if expires_at is not None:
        try:
            expiry = to_utc(expires_at)
        except ValueError:
            raise click.BadParameter(f"not an ISO timestamp: {expires_at}",
                                     param_hint="--expires-at") from None
    else:
        expiry = now + timedelta(days=expires_in)

    domain = DomainAttributes(
        name=name,
        tld=tld,
        expires_at=expiry,
        lock_status=locked,
        registrar_id=registrar_id,
        renewal_count=renewals,
        offer_count=offers,
        activity_7d=activity_7d,
        activity_30d=activity_30d,
    )

    config = load_config(ctx.obj.get("config_path"))
    engine = ScoringEngine.from_config(config, use_oracle=oracle)
    if oracle:
        scores = asyncio.run(engine.score_async(domain, now=now))
    else:
        scores = engine.score(domain, now=now)

    if analysis_path is not None:
        raw = yaml.safe_load(Path(analysis_path).read_text()) or {}
        if not isinstance(raw, dict):
            raise click.BadParameter("expected a mapping", param_hint="--analysis")
        analysis = validate_analysis_response(raw, domain)
    else:
        analysis = build_analysis(domain, scores, now)

    if as_json:
        payload = scores.to_dict()
        payload["domain"] = domain.full_name
        payload["analysis"] = analysis
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(render_report(domain, scores, analysis, now))
