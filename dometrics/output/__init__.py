"""Output generation: domain reports and batch analytics.

Re-exports key public functions for convenience.
"""

from dometrics.output.analytics import summarize_scores
from dometrics.output.narrative import build_analysis, render_report

__all__ = [
    "build_analysis",
    "render_report",
    "summarize_scores",
]
