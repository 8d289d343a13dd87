"""Scoring engine: domain attributes, sub-scores, valuation.

Public API:
  DomainAttributes -- Raw per-domain input record
  RecentEvent      -- Timestamped market event
  ScoreFactor      -- One explained factor contribution

The entry points ``compute_scores_sync`` / ``compute_scores_async`` live
in ``dometrics.engine.scorer``.
"""

from dometrics.engine.attributes import DomainAttributes, RecentEvent
from dometrics.engine.factors import ScoreFactor

__all__ = [
    "DomainAttributes",
    "RecentEvent",
    "ScoreFactor",
]
