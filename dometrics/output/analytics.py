"""Market analytics over a scored-domains DataFrame.

Functions:
  expiry_risk_distribution -- low / medium / high buckets by days left
  top_tlds                 -- TLDs by domain count, with average value
  top_movers               -- highest momentum domains
  summarize_scores         -- overview dict combining the above
"""

from __future__ import annotations

from typing import Any

import pandas as pd

from dometrics.config.defaults import EXPIRY_RISK_BUCKETS, HIGH_VALUE_THRESHOLD


def expiry_risk_distribution(scored: pd.DataFrame) -> dict[str, int]:
    """Count domains by expiry runway: >180d low, >60d medium, else high."""
    days = scored["days_until_expiry"]
    low = int((days > EXPIRY_RISK_BUCKETS["low"]).sum())
    medium = int(
        ((days > EXPIRY_RISK_BUCKETS["medium"]) & (days <= EXPIRY_RISK_BUCKETS["low"])).sum()
    )
    high = int(len(scored) - low - medium)
    return {"low": low, "medium": medium, "high": high}


def top_tlds(scored: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    """TLDs ranked by domain count (ties by total value)."""
    if scored.empty:
        return pd.DataFrame(columns=["tld", "count", "total_value", "avg_value"])
    grouped = (
        scored.groupby("tld")["current_value"]
        .agg(count="count", total_value="sum", avg_value="mean")
        .reset_index()
        .sort_values(["count", "total_value"], ascending=[False, False])
    )
    grouped["avg_value"] = grouped["avg_value"].round(2)
    return grouped.head(n).reset_index(drop=True)


def top_movers(scored: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    """Domains with the strongest momentum."""
    cols = ["domain", "momentum", "forecast", "current_value"]
    return (
        scored.sort_values(["momentum", "forecast"], ascending=[False, False])[cols]
        .head(n)
        .reset_index(drop=True)
    )


def summarize_scores(scored: pd.DataFrame, n_tlds: int = 3) -> dict[str, Any]:
    """Overview numbers for a batch of scored domains."""
    if scored.empty:
        return {
            "total_domains": 0,
            "avg_value": 0.0,
            "total_value": 0.0,
            "high_value_domains": 0,
            "avg_risk": 0.0,
            "avg_rarity": 0.0,
            "avg_momentum": 0.0,
            "risk_distribution": {"low": 0, "medium": 0, "high": 0},
            "top_tlds": [],
        }
    return {
        "total_domains": int(len(scored)),
        "avg_value": round(float(scored["current_value"].mean()), 2),
        "total_value": round(float(scored["current_value"].sum()), 2),
        "high_value_domains": int((scored["current_value"] >= HIGH_VALUE_THRESHOLD).sum()),
        "avg_risk": round(float(scored["risk"].mean()), 1),
        "avg_rarity": round(float(scored["rarity"].mean()), 1),
        "avg_momentum": round(float(scored["momentum"].mean()), 1),
        "risk_distribution": expiry_risk_distribution(scored),
        "top_tlds": [
            {
                "tld": str(row["tld"]),
                "count": int(row["count"]),
                "avg_value": float(row["avg_value"]),
            }
            for row in top_tlds(scored, n_tlds).to_dict(orient="records")
        ],
    }
