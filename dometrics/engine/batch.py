"""Batch scoring: many domains -> one pandas DataFrame.

One row per domain, sub-scores and valuation as columns.  Used by the
``batch`` CLI command and the analytics summaries.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Mapping

import pandas as pd

from dometrics.config.schema import ScoringWeights
from dometrics.engine.attributes import DomainAttributes, attributes_from_record
from dometrics.engine.scorer import compute_scores_sync

logger = logging.getLogger(__name__)

SCORE_COLUMNS = [
    "domain",
    "name",
    "tld",
    "days_until_expiry",
    "risk",
    "rarity",
    "momentum",
    "forecast",
    "forecast_low",
    "forecast_high",
    "current_value",
    "projected_value",
    "value_confidence",
    "keyword_category",
]


def attributes_from_records(records: Iterable[Mapping[str, Any]]) -> list[DomainAttributes]:
    """Map registry records, skipping (and logging) the ones that cannot be mapped."""
    domains: list[DomainAttributes] = []
    skipped = 0
    for record in records:
        if not isinstance(record, Mapping):
            skipped += 1
            logger.warning("Skipping non-mapping record %r", record)
            continue
        try:
            domains.append(attributes_from_record(record))
        except (ValueError, TypeError) as e:
            skipped += 1
            logger.warning("Skipping record %r: %s", record.get("name"), e)
    if skipped:
        logger.info("Mapped %d records, skipped %d", len(domains), skipped)
    return domains


def score_domains(
    domains: Iterable[DomainAttributes],
    weights: ScoringWeights | None = None,
    now: datetime | None = None,
) -> pd.DataFrame:
    """Score every domain with the synchronous path.

    Returns a DataFrame with ``SCORE_COLUMNS`` (empty, but with the
    columns, when no domains are given).
    """
    rows: list[dict[str, Any]] = []
    for domain in domains:
        scores = compute_scores_sync(domain, weights, now)
        rows.append({
            "domain": domain.full_name,
            "name": domain.name,
            "tld": domain.tld,
            "days_until_expiry": domain.days_until_expiry(now),
            "risk": scores.risk,
            "rarity": scores.rarity,
            "momentum": scores.momentum,
            "forecast": scores.forecast,
            "forecast_low": scores.forecast_low,
            "forecast_high": scores.forecast_high,
            "current_value": scores.current_value,
            "projected_value": scores.projected_value,
            "value_confidence": scores.value_confidence,
            "keyword_category": scores.keyword_category,
        })

    logger.info("Scored %d domains", len(rows))
    return pd.DataFrame(rows, columns=SCORE_COLUMNS)
