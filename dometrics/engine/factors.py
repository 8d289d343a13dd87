"""ScoreFactor -- one weighted input to a sub-score, with its explanation."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable


@dataclass(frozen=True)
class ScoreFactor:
    """A single factor's contribution.

    Attributes:
        name: Display name (e.g. ``"Expiry Buffer"``).
        value: The raw input the factor looked at (days, characters, ...).
        weight: Factor weight within its sub-score, or the multiplier
            applied for valuation steps.
        contribution: ``raw_score * weight`` for sub-scores; dollar delta
            for valuation steps.
        description: Human-readable explanation.
    """
    name: str
    value: float
    weight: float
    contribution: float
    description: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def top_factors(factors: Iterable[ScoreFactor], n: int | None = None) -> list[ScoreFactor]:
    """Sort by |contribution| descending and keep the first ``n``.

    The sort is stable, so equal magnitudes keep insertion order.
    """
    ranked = sorted(factors, key=lambda f: abs(f.contribution), reverse=True)
    return ranked if n is None else ranked[:n]


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))
