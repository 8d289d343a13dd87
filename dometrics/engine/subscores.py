"""Domain sub-score calculators.

Four sub-scores, each on a 0-100 scale:
  - Risk: expiry buffer, lock status, registrar, renewals, liquidity
  - Rarity: name length, dictionary/brandability, TLD scarcity, demand
  - Momentum: 7d-vs-30d activity delta, events in the last 72h
  - Forecast: linear blend of the other three, with a risk-widened band

Every calculator returns its clamped score plus the top explaining
factors (sorted by absolute contribution).
"""

from __future__ import annotations

from datetime import datetime
from typing import TypedDict

from dometrics.config.defaults import (
    DEFAULT_TLD_BUCKET,
    DICTIONARY_WORDS,
    TLD_SCARCITY,
    TOP_FACTORS,
    TRUSTED_REGISTRARS,
    VOWELS,
)
from dometrics.config.schema import DEFAULT_WEIGHTS, ScoringWeights
from dometrics.engine.attributes import DomainAttributes, count_recent_events
from dometrics.engine.factors import ScoreFactor, clamp, top_factors

# ---------------------------------------------------------------------------
# Type definitions
# ---------------------------------------------------------------------------

class ForecastResult(TypedDict):
    """Return type for calc_forecast_score()."""
    forecast: float
    low: float
    high: float
    factors: list[ScoreFactor]


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------

def is_trusted_registrar(registrar_id: int | None) -> bool:
    """Missing or unlisted registrar ids are unknown."""
    return registrar_id is not None and registrar_id in TRUSTED_REGISTRARS


def is_dictionary_word(name: str) -> bool:
    return name.lower() in DICTIONARY_WORDS


def is_brandable(name: str, min_length: int = 4, max_length: int = 8) -> bool:
    """Pronounceable-ish: right length, at least one vowel and one non-vowel."""
    if not min_length <= len(name) <= max_length:
        return False
    lowered = name.lower()
    has_vowel = any(ch in VOWELS for ch in lowered)
    has_other = any(ch not in VOWELS for ch in lowered)
    return has_vowel and has_other


def tld_bucket(tld: str) -> str:
    """Scarcity bucket for a TLD: ultra, rare, common or abundant."""
    return TLD_SCARCITY.get(tld.lstrip(".").lower(), DEFAULT_TLD_BUCKET)


# ---------------------------------------------------------------------------
# Raw factor curves
# ---------------------------------------------------------------------------

def expiry_risk(days: float, high_risk_days: float = 30, low_risk_days: float = 180) -> float:
    """Expiry risk 0-100: 100 at/below high_risk_days, 0 at/above low_risk_days."""
    if days <= high_risk_days:
        return 100.0
    if days >= low_risk_days:
        return 0.0
    span = low_risk_days - high_risk_days
    return 100.0 - (days - high_risk_days) / span * 100.0


def length_rarity(length: int, max_rarity_length: int = 4, min_rarity_length: int = 12) -> float:
    """Length rarity 0-100: short names are rare."""
    if length <= max_rarity_length:
        return 100.0
    if length >= min_rarity_length:
        return 0.0
    span = min_rarity_length - max_rarity_length
    return (min_rarity_length - length) / span * 100.0


def activity_delta_pct(activity_7d: float, activity_30d: float, normalizer: float = 4.3) -> float:
    """Percent change of the 7d rate (scaled to 30d) over the 30d baseline."""
    if activity_30d <= 0:
        return 0.0
    return (activity_7d * normalizer - activity_30d) / activity_30d * 100.0


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------

def calc_risk_score(
    domain: DomainAttributes,
    weights: ScoringWeights | None = None,
    now: datetime | None = None,
) -> tuple[float, list[ScoreFactor]]:
    """Risk sub-score (0-100, higher = riskier).

    Components:
      - Expiry buffer (45%): piecewise linear between 30 and 180 days
      - Lock status (25%): fixed penalty when transfer-locked
      - Registrar quality (15%): penalty for registrars off the trusted list
      - Renewal history (10%): reduction once renewed twice
      - Liquidity (5%): reduction with 3+ active offers

    Returns (risk, top 3 factors).
    """
    rw = (weights or DEFAULT_WEIGHTS).risk
    factors: list[ScoreFactor] = []

    days = domain.days_until_expiry(now)
    eb = rw.expiry_buffer
    factors.append(ScoreFactor(
        name="Expiry Buffer",
        value=days,
        weight=eb.weight,
        contribution=expiry_risk(days, eb.high_risk_days, eb.low_risk_days) * eb.weight,
        description=f"{days} days until expiration",
    ))

    ls = rw.lock_status
    penalty = ls.locked if domain.lock_status else ls.unlocked
    factors.append(ScoreFactor(
        name="Lock Status",
        value=1 if domain.lock_status else 0,
        weight=ls.weight,
        contribution=penalty * ls.weight,
        description="Domain is locked" if domain.lock_status else "Domain is unlocked",
    ))

    rq = rw.registrar_quality
    trusted = is_trusted_registrar(domain.registrar_id)
    factors.append(ScoreFactor(
        name="Registrar Quality",
        value=domain.registrar_id or 0,
        weight=rq.weight,
        contribution=(rq.trusted if trusted else rq.unknown) * rq.weight,
        description="Trusted registrar" if trusted else "Unknown registrar",
    ))

    rh = rw.renewal_history
    renewal_bonus = rh.reduction if domain.renewal_count >= rh.threshold else 0.0
    factors.append(ScoreFactor(
        name="Renewal History",
        value=domain.renewal_count,
        weight=rh.weight,
        contribution=renewal_bonus * rh.weight,
        description=f"{domain.renewal_count} renewals",
    ))

    lq = rw.liquidity
    liquidity_bonus = lq.reduction if domain.offer_count >= lq.threshold else 0.0
    factors.append(ScoreFactor(
        name="Market Liquidity",
        value=domain.offer_count,
        weight=lq.weight,
        contribution=liquidity_bonus * lq.weight,
        description=f"{domain.offer_count} active offers",
    ))

    score = clamp(sum(f.contribution for f in factors))
    return score, top_factors(factors, TOP_FACTORS["risk"])


# ---------------------------------------------------------------------------
# Rarity
# ---------------------------------------------------------------------------

def calc_rarity_score(
    domain: DomainAttributes,
    weights: ScoringWeights | None = None,
) -> tuple[float, list[ScoreFactor]]:
    """Rarity sub-score (0-100, higher = rarer).

    Components:
      - Name length (40%): 100 at 4 chars or fewer, 0 at 12 or more
      - Dictionary/brandable (25%): dictionary word > brandable > random
      - TLD scarcity (25%): bucket bonus, unknown TLDs count as common
      - Historic demand (10%): 2 points per offer, capped at 10

    Returns (rarity, top 3 factors).
    """
    rw = (weights or DEFAULT_WEIGHTS).rarity
    factors: list[ScoreFactor] = []

    nl = rw.name_length
    length = len(domain.name)
    factors.append(ScoreFactor(
        name="Name Length",
        value=length,
        weight=nl.weight,
        contribution=length_rarity(length, nl.max_rarity_length, nl.min_rarity_length) * nl.weight,
        description=f"{length} characters",
    ))

    db = rw.dictionary_brandable
    if is_dictionary_word(domain.name):
        brand_bonus, label = db.dictionary, "Dictionary word"
    elif is_brandable(domain.name, db.brandable_min_length, db.brandable_max_length):
        brand_bonus, label = db.brandable, "Brandable"
    else:
        brand_bonus, label = db.random, "Random string"
    factors.append(ScoreFactor(
        name="Brandability",
        value=brand_bonus,
        weight=db.weight,
        contribution=brand_bonus * db.weight,
        description=label,
    ))

    ts = rw.tld_scarcity
    bucket = tld_bucket(domain.tld)
    tld_bonus = ts.buckets.get(bucket, 0.0)
    factors.append(ScoreFactor(
        name="TLD Scarcity",
        value=tld_bonus,
        weight=ts.weight,
        contribution=tld_bonus * ts.weight,
        description=f".{domain.tld} is {bucket}",
    ))

    hd = rw.historic_demand
    demand = min(hd.cap, domain.offer_count * hd.per_offer)
    factors.append(ScoreFactor(
        name="Historic Demand",
        value=domain.offer_count,
        weight=hd.weight,
        contribution=demand * hd.weight,
        description=f"{domain.offer_count} unique bidders",
    ))

    score = clamp(sum(f.contribution for f in factors))
    return score, top_factors(factors, TOP_FACTORS["rarity"])


# ---------------------------------------------------------------------------
# Momentum
# ---------------------------------------------------------------------------

def calc_momentum_score(
    domain: DomainAttributes,
    weights: ScoringWeights | None = None,
    now: datetime | None = None,
) -> tuple[float, list[ScoreFactor]]:
    """Momentum sub-score (0-100, higher = trending).

    Components:
      - Activity delta (70%): 7d activity scaled to 30d vs the 30d
        baseline, mapped as 50 + delta/2
      - Recent events (30%): 33 points per event in the last 72 hours

    Returns (momentum, top 2 factors).
    """
    mw = (weights or DEFAULT_WEIGHTS).momentum
    factors: list[ScoreFactor] = []

    ad = mw.activity_delta
    delta = activity_delta_pct(domain.activity_7d, domain.activity_30d, ad.normalizer)
    delta_score = clamp(50.0 + delta / 2.0)
    sign = "+" if delta > 0 else ""
    factors.append(ScoreFactor(
        name="Activity Trend",
        value=delta,
        weight=ad.weight,
        contribution=delta_score * ad.weight,
        description=f"{sign}{delta:.0f}% vs {ad.baseline_days}d average",
    ))

    re_cfg = mw.recent_events
    count = count_recent_events(domain.recent_events, re_cfg.window_hours, now)
    event_score = min(100.0, count * re_cfg.points_per_event)
    factors.append(ScoreFactor(
        name="Recent Activity",
        value=count,
        weight=re_cfg.weight,
        contribution=event_score * re_cfg.weight,
        description=f"{count} events in {re_cfg.window_hours}h",
    ))

    score = clamp(sum(f.contribution for f in factors))
    return score, top_factors(factors, TOP_FACTORS["momentum"])


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------

def calc_forecast_score(
    risk: float,
    rarity: float,
    momentum: float,
    weights: ScoringWeights | None = None,
) -> ForecastResult:
    """Forecast sub-score from the three computed sub-scores.

    forecast = base * (1 + w_m*momentum + w_r*rarity + w_k*risk), all as
    fractions of 100.  The risk weight is negative.  The band half-width
    is forecast * (interval_base + interval_risk_multiplier * risk).
    """
    fw = (weights or DEFAULT_WEIGHTS).forecast
    risk_frac = risk / 100.0
    rarity_frac = rarity / 100.0
    momentum_frac = momentum / 100.0

    forecast = fw.base * (
        1.0
        + fw.momentum * momentum_frac
        + fw.rarity * rarity_frac
        + fw.risk * risk_frac
    )
    interval = forecast * (fw.interval_base + fw.interval_risk_multiplier * risk_frac)

    factors = [
        ScoreFactor(
            name="Momentum Impact",
            value=momentum,
            weight=fw.momentum,
            contribution=fw.base * fw.momentum * momentum_frac,
            description=f"{momentum:.0f}% momentum score",
        ),
        ScoreFactor(
            name="Rarity Impact",
            value=rarity,
            weight=fw.rarity,
            contribution=fw.base * fw.rarity * rarity_frac,
            description=f"{rarity:.0f}% rarity score",
        ),
        ScoreFactor(
            name="Risk Impact",
            value=risk,
            weight=abs(fw.risk),
            contribution=fw.base * fw.risk * risk_frac,
            description=f"{risk:.0f}% risk score",
        ),
    ]

    return {
        "forecast": clamp(forecast),
        "low": forecast - interval,
        "high": forecast + interval,
        "factors": top_factors(factors),
    }
