"""Algorithmic USD valuation -- the synchronous path and the oracle fallback.

Sequential multiplicative model from a $100 base:
  1. Length tier          (<=3 50x ... >10 1x)
  2. Keyword match        (high-value 15x, medium 5x, exact-name bonus)
  3. TLD bucket           (ultra 3x, rare 2x, common 1.2x, abundant 0.8x)
  4. Market activity      (1 + offers*0.1 + activity30d*0.02, capped at 3x)
  5. Risk adjustment      (shrinks toward 30% as risk rises)
  6. Floor at $100 -> current value
  7. Projection           (momentum/rarity driven 6-month multiplier)
  8. Confidence           (70 + data-richness bonuses, capped at 95)

Each step records a ScoreFactor whose contribution is the dollar delta
that step produced.
"""

from __future__ import annotations

import logging
from typing import Literal, TypedDict

from dometrics.config.defaults import (
    HIGH_VALUE_KEYWORDS,
    MEDIUM_VALUE_KEYWORDS,
    PROJECTION,
    TOP_FACTORS,
    VALUATION,
    VALUE_CONFIDENCE,
)
from dometrics.engine.attributes import DomainAttributes
from dometrics.engine.factors import ScoreFactor, top_factors
from dometrics.engine.subscores import tld_bucket

logger = logging.getLogger(__name__)

KeywordCategory = Literal["premium", "commercial", "generic"]


class ValueEstimate(TypedDict):
    """Return type for estimate_value()."""
    current_value: float
    projected_value: float
    confidence: float
    keyword_category: KeywordCategory
    matched_keyword: str | None
    factors: list[ScoreFactor]


# ---------------------------------------------------------------------------
# Step multipliers
# ---------------------------------------------------------------------------

def length_multiplier(length: int) -> float:
    for max_len, mult in VALUATION["length_tiers"]:
        if length <= max_len:
            return mult
    return VALUATION["length_default"]


def _best_match(name: str, keywords: frozenset[str]) -> str | None:
    """Longest keyword contained in ``name``; ties broken alphabetically."""
    hits = [kw for kw in keywords if kw in name]
    if not hits:
        return None
    return min(hits, key=lambda kw: (-len(kw), kw))


def match_keyword(name: str) -> tuple[str | None, KeywordCategory]:
    """Find the keyword driving the valuation and its category.

    High-value keywords are checked first; the medium set only applies
    when nothing high-value matched.
    """
    lowered = name.lower()
    keyword = _best_match(lowered, HIGH_VALUE_KEYWORDS)
    if keyword is not None:
        return keyword, "premium"
    keyword = _best_match(lowered, MEDIUM_VALUE_KEYWORDS)
    if keyword is not None:
        return keyword, "commercial"
    return None, "generic"


def keyword_multiplier(name: str) -> float:
    """Substring multiplier, times the exact-name bonus when the whole name is the keyword."""
    keyword, category = match_keyword(name)
    if category == "premium":
        mult = VALUATION["keyword_high"]
        if name.lower() == keyword:
            mult *= VALUATION["exact_high"]
        return mult
    if category == "commercial":
        mult = VALUATION["keyword_medium"]
        if name.lower() == keyword:
            mult *= VALUATION["exact_medium"]
        return mult
    return 1.0


def market_multiplier(offer_count: float, activity_30d: float) -> float:
    raw = (
        1.0
        + offer_count * VALUATION["offer_multiplier"]
        + activity_30d * VALUATION["activity_multiplier"]
    )
    return min(VALUATION["market_cap"], raw)


def risk_adjustment(risk: float) -> float:
    return max(VALUATION["risk_floor"], 1.0 - risk / 100.0 * VALUATION["risk_shrink"])


def projection_multiplier(momentum: float, rarity: float) -> float:
    """6-month growth multiplier from momentum and rarity."""
    p = PROJECTION
    mult = 1.0
    if momentum > p["hot_momentum"]:
        mult += p["hot_bonus"]
    elif momentum > p["warm_momentum"]:
        mult += p["warm_bonus"]
    elif momentum < p["cold_momentum"]:
        mult += p["cold_penalty"]
    if rarity > p["rare_threshold"]:
        mult += p["rare_bonus"]
    return mult


def value_confidence(
    activity_30d: float,
    offer_count: float,
    keyword_category: KeywordCategory,
) -> float:
    c = VALUE_CONFIDENCE
    confidence = c["base"]
    if activity_30d > c["activity_threshold"]:
        confidence += c["bonus"]
    if offer_count > c["offer_threshold"]:
        confidence += c["bonus"]
    if keyword_category != "generic":
        confidence += c["bonus"]
    return float(min(c["cap"], confidence))


# ---------------------------------------------------------------------------
# Estimate
# ---------------------------------------------------------------------------

def estimate_value(
    domain: DomainAttributes,
    risk: float,
    rarity: float,
    momentum: float,
) -> ValueEstimate:
    """Algorithmic current/projected USD value for one domain.

    ``risk``, ``rarity`` and ``momentum`` are the already-computed 0-100
    sub-scores.  Both dollar values are floored at $100.
    """
    floor = VALUATION["value_floor"]
    factors: list[ScoreFactor] = []
    value = VALUATION["base_value"]

    def apply(name: str, raw: float, mult: float, description: str) -> None:
        nonlocal value
        before = value
        value = value * mult
        factors.append(ScoreFactor(
            name=name,
            value=raw,
            weight=mult,
            contribution=round(value - before, 2),
            description=description,
        ))

    length = len(domain.name)
    apply("Length Premium", length, length_multiplier(length),
          f"{length} character name")

    keyword, category = match_keyword(domain.name)
    apply("Keyword Value", 1 if keyword else 0, keyword_multiplier(domain.name),
          f"Matches '{keyword}' ({category})" if keyword else "No valuable keywords")

    bucket = tld_bucket(domain.tld)
    tld_mult = VALUATION["tld_multipliers"].get(bucket, 1.0)
    apply("TLD Premium", tld_mult, tld_mult,
          f".{domain.tld} is {bucket}")

    apply("Market Activity", domain.offer_count,
          market_multiplier(domain.offer_count, domain.activity_30d),
          f"{domain.offer_count} offers, {domain.activity_30d} events in 30d")

    apply("Risk Adjustment", risk, risk_adjustment(risk),
          f"Risk score {risk:.0f}/100")

    current_value = max(floor, value)

    growth = projection_multiplier(momentum, rarity)
    projected_value = max(floor, current_value * growth)
    factors.append(ScoreFactor(
        name="Growth Outlook",
        value=momentum,
        weight=growth,
        contribution=round(projected_value - current_value, 2),
        description=f"{growth:.1f}x projected over 6 months",
    ))

    confidence = value_confidence(domain.activity_30d, domain.offer_count, category)

    logger.debug(
        "Valued %s at $%.2f (projected $%.2f, confidence %.0f)",
        domain.full_name, current_value, projected_value, confidence,
    )

    return {
        "current_value": round(current_value, 2),
        "projected_value": round(projected_value, 2),
        "confidence": confidence,
        "keyword_category": category,
        "matched_keyword": keyword,
        "factors": top_factors(factors, TOP_FACTORS["value"]),
    }
