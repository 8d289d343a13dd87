"""Investment outlook and Markdown report for one scored domain.

The outlook is rule-based (risk/rarity bands plus simple strengths and
risks).  ``validate_analysis_response()`` applies the same defaults to
an externally generated analysis (``dometrics score --analysis FILE``)
so both sources share one shape.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Literal, Mapping, TypedDict

from dometrics.engine.attributes import DomainAttributes
from dometrics.engine.scorer import DomainScores

logger = logging.getLogger(__name__)

Outlook = Literal["excellent", "good", "fair", "poor", "high-risk"]

_OUTLOOKS = ("excellent", "good", "fair", "poor", "high-risk")

_RECOMMENDATIONS = {
    "excellent": "Strong buy recommendation",
    "good": "Consider acquiring if price is reasonable",
    "high-risk": "Proceed with extreme caution",
    "fair": "Monitor for better opportunities",
    "poor": "Monitor for better opportunities",
}


class DomainAnalysis(TypedDict):
    """Investment commentary for one domain."""
    summary: str
    investment_outlook: Outlook
    key_strengths: list[str]
    key_risks: list[str]
    recommendation: str
    confidence_level: float


# ---------------------------------------------------------------------------
# Rule-based outlook
# ---------------------------------------------------------------------------

def classify_outlook(risk: float, rarity: float) -> Outlook:
    """Outlook band from risk and rarity.

      risk < 30 and rarity > 70  -> excellent
      risk < 50 and rarity > 50  -> good
      risk > 70                  -> high-risk
      otherwise                  -> fair
    """
    if risk < 30 and rarity > 70:
        return "excellent"
    if risk < 50 and rarity > 50:
        return "good"
    if risk > 70:
        return "high-risk"
    return "fair"


def build_analysis(
    domain: DomainAttributes,
    scores: DomainScores,
    now: datetime | None = None,
) -> DomainAnalysis:
    """Deterministic outlook, strengths and risks from the scores."""
    full = domain.full_name
    outlook = classify_outlook(scores.risk, scores.rarity)
    summary = {
        "excellent": f"{full} presents an excellent investment opportunity with low risk and high rarity.",
        "good": f"{full} shows good potential with manageable risk and solid value characteristics.",
        "high-risk": f"{full} carries significant risk factors that require careful consideration.",
        "fair": f"{full} presents a moderate investment opportunity with standard market characteristics.",
    }[outlook]

    strengths: list[str] = []
    if len(domain.name) <= 6:
        strengths.append("Short, memorable domain name")
    if scores.rarity > 60:
        strengths.append("Above-average rarity score")
    if scores.momentum > 60:
        strengths.append("Strong market momentum")
    if domain.tld == "com":
        strengths.append("Premium .com extension")
    if domain.offer_count > 3:
        strengths.append("Active market interest")

    risks: list[str] = []
    if domain.days_until_expiry(now) < 90:
        risks.append("Approaching expiration date")
    if scores.risk > 60:
        risks.append("High risk score requires attention")
    if domain.lock_status:
        risks.append("Transfer restrictions in place")
    if domain.activity_30d < 5:
        risks.append("Limited recent market activity")

    return {
        "summary": summary,
        "investment_outlook": outlook,
        "key_strengths": strengths or ["Basic domain characteristics"],
        "key_risks": risks or ["Standard market risks"],
        "recommendation": _RECOMMENDATIONS[outlook],
        "confidence_level": 65.0,
    }


def validate_analysis_response(raw: Mapping[str, Any], domain: DomainAttributes) -> DomainAnalysis:
    """Fill gaps in an externally generated analysis.

    Unknown outlooks become ``fair``; confidence defaults to 70 and is
    clamped to [50, 95].
    """
    outlook = raw.get("investment_outlook")
    if outlook not in _OUTLOOKS:
        if outlook is not None:
            logger.debug("Unknown outlook %r for %s, using 'fair'", outlook, domain.full_name)
        outlook = "fair"

    try:
        confidence = float(raw.get("confidence_level") or 70)
    except (TypeError, ValueError):
        confidence = 70.0

    def _strings(value: Any, default: list[str]) -> list[str]:
        if isinstance(value, list) and value:
            return [str(v) for v in value]
        return default

    return {
        "summary": str(raw.get("summary") or (
            f"{domain.full_name} shows mixed signals with moderate investment potential."
        )),
        "investment_outlook": outlook,
        "key_strengths": _strings(raw.get("key_strengths"), ["Domain has basic commercial potential"]),
        "key_risks": _strings(raw.get("key_risks"), ["Market uncertainty", "Valuation challenges"]),
        "recommendation": str(raw.get("recommendation") or "Consider market conditions before investing."),
        "confidence_level": max(50.0, min(95.0, confidence)),
    }


# ---------------------------------------------------------------------------
# Markdown report
# ---------------------------------------------------------------------------

def _money(value: float) -> str:
    return f"${value:,.0f}"


def render_report(
    domain: DomainAttributes,
    scores: DomainScores,
    analysis: DomainAnalysis | None = None,
    now: datetime | None = None,
) -> str:
    """Markdown report: scores table, valuation, top factors, outlook."""
    if analysis is None:
        analysis = build_analysis(domain, scores, now)

    roi = (scores.projected_value - scores.current_value) / scores.current_value
    lines = [
        f"# {domain.full_name}",
        "",
        "| Score | Value |",
        "|---|---|",
        f"| Risk | {scores.risk:.1f} |",
        f"| Rarity | {scores.rarity:.1f} |",
        f"| Momentum | {scores.momentum:.1f} |",
        f"| Forecast | {scores.forecast:.1f} ({scores.forecast_low:.1f} - {scores.forecast_high:.1f}) |",
        "",
        "## Valuation",
        "",
        f"- Current: {_money(scores.current_value)}",
        f"- Projected (6mo): {_money(scores.projected_value)} ({roi:+.1%})",
        f"- Confidence: {scores.value_confidence:.0f}% ({scores.valuation_source})",
    ]
    ka = scores.keyword_analysis
    if ka:
        lines += [
            f"- Keywords: {', '.join(ka['keywords'])} ({scores.keyword_category})",
            f"- Brandability {ka['brandability']:.0f} / Memorability {ka['memorability']:.0f}"
            f" / Commercial {ka['commercial_value']:.0f}",
        ]
        if ka.get("reasoning"):
            lines.append(f"- Reasoning: {ka['reasoning']}")
    lines += [
        "",
        "## Key Factors",
        "",
    ]
    for key in ("risk", "rarity", "momentum", "value"):
        for factor in scores.explainers.get(key, []):
            lines.append(
                f"- **{key}** {factor.name}: {factor.description} "
                f"({factor.contribution:+.2f})"
            )

    lines += [
        "",
        f"## Outlook: {analysis['investment_outlook'].upper()}",
        "",
        analysis["summary"],
        "",
        "Strengths: " + "; ".join(analysis["key_strengths"]),
        "",
        "Risks: " + "; ".join(analysis["key_risks"]),
        "",
        f"Recommendation: {analysis['recommendation']}",
        "",
    ]
    return "\n".join(lines)
