"""Configuration loading, validation, and defaults."""

from dometrics.config.loader import load_config
from dometrics.config.schema import DEFAULT_WEIGHTS, DometricsConfig, ScoringWeights

__all__ = ["DEFAULT_WEIGHTS", "DometricsConfig", "ScoringWeights", "load_config"]
