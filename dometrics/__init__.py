"""Dometrics -- domain scoring and valuation engine."""

__version__ = "0.1.0"
