"""compute_scores_sync() / compute_scores_async() -- score one domain.

Both entry points:
  1. Compute risk, rarity and momentum sub-scores
  2. Derive the forecast score and its confidence band
  3. Value the domain in USD

The sync path always uses the algorithmic valuation.  The async path
asks the Valuation Oracle first (single attempt, bounded by a timeout)
and silently falls back to the algorithmic valuation on any failure.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from dometrics.config.defaults import ORACLE_DEFAULTS, TOP_FACTORS
from dometrics.config.schema import DEFAULT_WEIGHTS, DometricsConfig, ScoringWeights
from dometrics.data.adapters.valuation_oracle import (
    LLMValuationOracle,
    OracleValuation,
    ValuationOracle,
    ValuationRequest,
    normalize_oracle_response,
)
from dometrics.engine.attributes import DomainAttributes
from dometrics.engine.factors import ScoreFactor, top_factors
from dometrics.engine.subscores import (
    ForecastResult,
    calc_forecast_score,
    calc_momentum_score,
    calc_rarity_score,
    calc_risk_score,
)
from dometrics.engine.valuation import ValueEstimate, estimate_value

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class DomainScores:
    """Scores, valuation and explanations for one domain.

    Recomputed on every call; the engine never caches or mutates it.
    ``keyword_analysis`` is only set when the oracle supplied the value.
    """
    risk: float
    rarity: float
    momentum: float
    forecast: float
    forecast_low: float
    forecast_high: float
    current_value: float
    projected_value: float
    value_confidence: float
    explainers: dict[str, list[ScoreFactor]] = field(default_factory=dict)
    valuation_source: str = "algorithmic"
    keyword_category: str = "generic"
    keyword_analysis: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation."""
        return {
            "risk": self.risk,
            "rarity": self.rarity,
            "momentum": self.momentum,
            "forecast": self.forecast,
            "forecast_low": self.forecast_low,
            "forecast_high": self.forecast_high,
            "current_value": self.current_value,
            "projected_value": self.projected_value,
            "value_confidence": self.value_confidence,
            "valuation_source": self.valuation_source,
            "keyword_category": self.keyword_category,
            "keyword_analysis": self.keyword_analysis,
            "explainers": {
                key: [f.to_dict() for f in factors]
                for key, factors in self.explainers.items()
            },
        }


@dataclass
class _SubScores:
    risk: float
    rarity: float
    momentum: float
    forecast: ForecastResult
    explainers: dict[str, list[ScoreFactor]]


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _compute_subscores(
    domain: DomainAttributes,
    weights: ScoringWeights,
    now: datetime | None,
) -> _SubScores:
    risk, risk_factors = calc_risk_score(domain, weights, now)
    rarity, rarity_factors = calc_rarity_score(domain, weights)
    momentum, momentum_factors = calc_momentum_score(domain, weights, now)
    forecast = calc_forecast_score(risk, rarity, momentum, weights)
    return _SubScores(
        risk=risk,
        rarity=rarity,
        momentum=momentum,
        forecast=forecast,
        explainers={
            "risk": risk_factors,
            "rarity": rarity_factors,
            "momentum": momentum_factors,
            "forecast": forecast["factors"],
        },
    )


def _estimate(domain: DomainAttributes, subs: _SubScores) -> ValueEstimate:
    return estimate_value(domain, subs.risk, subs.rarity, subs.momentum)


def _assemble(
    subs: _SubScores,
    current_value: float,
    projected_value: float,
    confidence: float,
    value_factors: list[ScoreFactor],
    source: str,
    keyword_category: str,
    keyword_analysis: dict[str, Any] | None = None,
) -> DomainScores:
    explainers = dict(subs.explainers)
    explainers["value"] = value_factors
    return DomainScores(
        risk=round(subs.risk, 1),
        rarity=round(subs.rarity, 1),
        momentum=round(subs.momentum, 1),
        forecast=round(subs.forecast["forecast"], 1),
        forecast_low=round(subs.forecast["low"], 1),
        forecast_high=round(subs.forecast["high"], 1),
        current_value=current_value,
        projected_value=projected_value,
        value_confidence=confidence,
        explainers=explainers,
        valuation_source=source,
        keyword_category=keyword_category,
        keyword_analysis=keyword_analysis,
    )


def _from_estimate(subs: _SubScores, est: ValueEstimate) -> DomainScores:
    return _assemble(
        subs,
        current_value=est["current_value"],
        projected_value=est["projected_value"],
        confidence=est["confidence"],
        value_factors=est["factors"],
        source="algorithmic",
        keyword_category=est["keyword_category"],
    )


def _from_oracle(
    domain: DomainAttributes, subs: _SubScores, valuation: OracleValuation,
) -> DomainScores:
    factors = valuation.factors or _estimate(domain, subs)["factors"]
    return _assemble(
        subs,
        current_value=valuation.current_value,
        projected_value=valuation.projected_value,
        confidence=valuation.confidence,
        value_factors=top_factors(factors, TOP_FACTORS["value"]),
        source="oracle",
        keyword_category=valuation.category,
        keyword_analysis={
            "keywords": list(valuation.keywords),
            "brandability": valuation.brandability,
            "memorability": valuation.memorability,
            "commercial_value": valuation.commercial_value,
            "reasoning": valuation.reasoning,
        },
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def compute_scores_sync(
    domain: DomainAttributes,
    weights: ScoringWeights | None = None,
    now: datetime | None = None,
) -> DomainScores:
    """Score a domain with the algorithmic valuation.  No network I/O.

    Parameters:
        domain: Raw domain attributes.
        weights: Alternate ScoringWeights; defaults to the v1 model.
        now: Reference time for expiry and recent-event windows
             (defaults to the current UTC time).
    """
    subs = _compute_subscores(domain, weights or DEFAULT_WEIGHTS, now)
    return _from_estimate(subs, _estimate(domain, subs))


async def compute_scores_async(
    domain: DomainAttributes,
    oracle: ValuationOracle | None = None,
    weights: ScoringWeights | None = None,
    timeout: float | None = None,
    now: datetime | None = None,
) -> DomainScores:
    """Score a domain, taking the dollar valuation from the oracle when possible.

    The oracle gets one attempt bounded by ``timeout`` seconds (8s by
    default).  Timeouts, errors, disabled oracles and unusable payloads
    all produce the same result as ``compute_scores_sync()``; no oracle
    exception ever reaches the caller.
    """
    subs = _compute_subscores(domain, weights or DEFAULT_WEIGHTS, now)

    if oracle is None or getattr(oracle, "enabled", True) is False:
        return _from_estimate(subs, _estimate(domain, subs))

    request = ValuationRequest.from_domain(domain, now)
    limit = timeout if timeout is not None else ORACLE_DEFAULTS["timeout_seconds"]
    try:
        raw = await asyncio.wait_for(oracle.evaluate(request), timeout=limit)
        valuation = normalize_oracle_response(raw, domain.name)
    except asyncio.TimeoutError:
        logger.warning(
            "Valuation oracle timed out after %.1fs for %s, using algorithmic estimate",
            limit, domain.full_name,
        )
        return _from_estimate(subs, _estimate(domain, subs))
    except Exception as e:
        logger.warning(
            "Valuation oracle failed for %s (%s), using algorithmic estimate",
            domain.full_name, e,
        )
        return _from_estimate(subs, _estimate(domain, subs))

    logger.debug("Oracle valued %s at $%.2f", domain.full_name, valuation.current_value)
    return _from_oracle(domain, subs, valuation)


class ScoringEngine:
    """Immutable weights plus an optional oracle, shared across calls.

    Usage::

        engine = ScoringEngine.from_config(load_config())
        scores = await engine.score_async(domain)
    """

    def __init__(
        self,
        weights: ScoringWeights | None = None,
        oracle: ValuationOracle | None = None,
        timeout: float = ORACLE_DEFAULTS["timeout_seconds"],
    ):
        self.weights = weights or DEFAULT_WEIGHTS
        self.oracle = oracle
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: DometricsConfig, use_oracle: bool = True) -> "ScoringEngine":
        oracle = None
        if use_oracle and config.oracle.enabled:
            oracle = LLMValuationOracle.from_config(config.oracle)
        return cls(
            weights=config.weights,
            oracle=oracle,
            timeout=config.oracle.timeout_seconds,
        )

    def score(self, domain: DomainAttributes, now: datetime | None = None) -> DomainScores:
        return compute_scores_sync(domain, self.weights, now)

    async def score_async(
        self, domain: DomainAttributes, now: datetime | None = None,
    ) -> DomainScores:
        return await compute_scores_async(
            domain, self.oracle, self.weights, self.timeout, now,
        )
