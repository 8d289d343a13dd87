"""Pydantic models for config.yaml validation."""

from __future__ import annotations

import logging
import os
from typing import Any

from pydantic import BaseModel, Field, model_validator

from dometrics.config.defaults import (
    FORECAST_WEIGHTS,
    MOMENTUM_WEIGHTS,
    ORACLE_DEFAULTS,
    RARITY_WEIGHTS,
    RISK_WEIGHTS,
    WEIGHTS_VERSION,
)

logger = logging.getLogger(__name__)

_FROZEN = {"frozen": True}


def _check_weight_sum(section: str, weights: dict[str, float]) -> None:
    """Warn when a sub-score's factor weights drift from 1.0."""
    total = sum(weights.values())
    if abs(total - 1.0) > 1e-6:
        logger.warning(
            "%s factor weights sum to %.4f, scores may leave the 0-100 range",
            section,
            total,
        )


# ---------------------------------------------------------------------------
# Risk Factor Configs
# ---------------------------------------------------------------------------

class ExpiryBufferConfig(BaseModel):
    model_config = _FROZEN

    weight: float = RISK_WEIGHTS["expiry_buffer"]["weight"]
    high_risk_days: int = RISK_WEIGHTS["expiry_buffer"]["high_risk_days"]
    low_risk_days: int = RISK_WEIGHTS["expiry_buffer"]["low_risk_days"]


class LockStatusConfig(BaseModel):
    model_config = _FROZEN

    weight: float = RISK_WEIGHTS["lock_status"]["weight"]
    locked: float = RISK_WEIGHTS["lock_status"]["locked"]
    unlocked: float = RISK_WEIGHTS["lock_status"]["unlocked"]


class RegistrarQualityConfig(BaseModel):
    model_config = _FROZEN

    weight: float = RISK_WEIGHTS["registrar_quality"]["weight"]
    trusted: float = RISK_WEIGHTS["registrar_quality"]["trusted"]
    unknown: float = RISK_WEIGHTS["registrar_quality"]["unknown"]


class RenewalHistoryConfig(BaseModel):
    model_config = _FROZEN

    weight: float = RISK_WEIGHTS["renewal_history"]["weight"]
    threshold: int = RISK_WEIGHTS["renewal_history"]["threshold"]
    reduction: float = RISK_WEIGHTS["renewal_history"]["reduction"]


class LiquidityConfig(BaseModel):
    model_config = _FROZEN

    weight: float = RISK_WEIGHTS["liquidity"]["weight"]
    threshold: int = RISK_WEIGHTS["liquidity"]["threshold"]
    reduction: float = RISK_WEIGHTS["liquidity"]["reduction"]


class RiskWeightsConfig(BaseModel):
    model_config = _FROZEN

    expiry_buffer: ExpiryBufferConfig = Field(default_factory=ExpiryBufferConfig)
    lock_status: LockStatusConfig = Field(default_factory=LockStatusConfig)
    registrar_quality: RegistrarQualityConfig = Field(
        default_factory=RegistrarQualityConfig
    )
    renewal_history: RenewalHistoryConfig = Field(default_factory=RenewalHistoryConfig)
    liquidity: LiquidityConfig = Field(default_factory=LiquidityConfig)

    def factor_weights(self) -> dict[str, float]:
        return {
            "expiry_buffer": self.expiry_buffer.weight,
            "lock_status": self.lock_status.weight,
            "registrar_quality": self.registrar_quality.weight,
            "renewal_history": self.renewal_history.weight,
            "liquidity": self.liquidity.weight,
        }

    @model_validator(mode="after")
    def warn_on_weight_sum(self) -> "RiskWeightsConfig":
        _check_weight_sum("risk", self.factor_weights())
        return self


# ---------------------------------------------------------------------------
# Rarity Factor Configs
# ---------------------------------------------------------------------------

class NameLengthConfig(BaseModel):
    model_config = _FROZEN

    weight: float = RARITY_WEIGHTS["name_length"]["weight"]
    max_rarity_length: int = RARITY_WEIGHTS["name_length"]["max_rarity_length"]
    min_rarity_length: int = RARITY_WEIGHTS["name_length"]["min_rarity_length"]


class DictionaryBrandableConfig(BaseModel):
    model_config = _FROZEN

    weight: float = RARITY_WEIGHTS["dictionary_brandable"]["weight"]
    dictionary: float = RARITY_WEIGHTS["dictionary_brandable"]["dictionary"]
    brandable: float = RARITY_WEIGHTS["dictionary_brandable"]["brandable"]
    random: float = RARITY_WEIGHTS["dictionary_brandable"]["random"]
    brandable_min_length: int = RARITY_WEIGHTS["dictionary_brandable"]["brandable_min_length"]
    brandable_max_length: int = RARITY_WEIGHTS["dictionary_brandable"]["brandable_max_length"]


class TldScarcityConfig(BaseModel):
    model_config = _FROZEN

    weight: float = RARITY_WEIGHTS["tld_scarcity"]["weight"]
    buckets: dict[str, float] = Field(
        default_factory=lambda: dict(RARITY_WEIGHTS["tld_scarcity"]["buckets"])
    )


class HistoricDemandConfig(BaseModel):
    model_config = _FROZEN

    weight: float = RARITY_WEIGHTS["historic_demand"]["weight"]
    cap: float = RARITY_WEIGHTS["historic_demand"]["cap"]
    per_offer: float = RARITY_WEIGHTS["historic_demand"]["per_offer"]


class RarityWeightsConfig(BaseModel):
    model_config = _FROZEN

    name_length: NameLengthConfig = Field(default_factory=NameLengthConfig)
    dictionary_brandable: DictionaryBrandableConfig = Field(
        default_factory=DictionaryBrandableConfig
    )
    tld_scarcity: TldScarcityConfig = Field(default_factory=TldScarcityConfig)
    historic_demand: HistoricDemandConfig = Field(default_factory=HistoricDemandConfig)

    def factor_weights(self) -> dict[str, float]:
        return {
            "name_length": self.name_length.weight,
            "dictionary_brandable": self.dictionary_brandable.weight,
            "tld_scarcity": self.tld_scarcity.weight,
            "historic_demand": self.historic_demand.weight,
        }

    @model_validator(mode="after")
    def warn_on_weight_sum(self) -> "RarityWeightsConfig":
        _check_weight_sum("rarity", self.factor_weights())
        return self


# ---------------------------------------------------------------------------
# Momentum Factor Configs
# ---------------------------------------------------------------------------

class ActivityDeltaConfig(BaseModel):
    model_config = _FROZEN

    weight: float = MOMENTUM_WEIGHTS["activity_delta"]["weight"]
    recent_days: int = MOMENTUM_WEIGHTS["activity_delta"]["recent_days"]
    baseline_days: int = MOMENTUM_WEIGHTS["activity_delta"]["baseline_days"]
    normalizer: float = MOMENTUM_WEIGHTS["activity_delta"]["normalizer"]


class RecentEventsConfig(BaseModel):
    model_config = _FROZEN

    weight: float = MOMENTUM_WEIGHTS["recent_events"]["weight"]
    window_hours: int = MOMENTUM_WEIGHTS["recent_events"]["window_hours"]
    points_per_event: float = MOMENTUM_WEIGHTS["recent_events"]["points_per_event"]


class MomentumWeightsConfig(BaseModel):
    model_config = _FROZEN

    activity_delta: ActivityDeltaConfig = Field(default_factory=ActivityDeltaConfig)
    recent_events: RecentEventsConfig = Field(default_factory=RecentEventsConfig)

    def factor_weights(self) -> dict[str, float]:
        return {
            "activity_delta": self.activity_delta.weight,
            "recent_events": self.recent_events.weight,
        }

    @model_validator(mode="after")
    def warn_on_weight_sum(self) -> "MomentumWeightsConfig":
        _check_weight_sum("momentum", self.factor_weights())
        return self


# ---------------------------------------------------------------------------
# Forecast Config
# ---------------------------------------------------------------------------

class ForecastWeightsConfig(BaseModel):
    model_config = _FROZEN

    base: float = FORECAST_WEIGHTS["base"]
    momentum: float = FORECAST_WEIGHTS["momentum"]
    rarity: float = FORECAST_WEIGHTS["rarity"]
    risk: float = FORECAST_WEIGHTS["risk"]
    interval_base: float = FORECAST_WEIGHTS["interval_base"]
    interval_risk_multiplier: float = FORECAST_WEIGHTS["interval_risk_multiplier"]


# ---------------------------------------------------------------------------
# Scoring Weights (versioned, immutable)
# ---------------------------------------------------------------------------

class ScoringWeights(BaseModel):
    """Complete weights configuration for one scoring model version.

    Immutable once built. To change the model, construct a full
    alternate instance and pass it to the engine; there is no partial
    merge at scoring time.
    """

    model_config = _FROZEN

    version: str = WEIGHTS_VERSION
    risk: RiskWeightsConfig = Field(default_factory=RiskWeightsConfig)
    rarity: RarityWeightsConfig = Field(default_factory=RarityWeightsConfig)
    momentum: MomentumWeightsConfig = Field(default_factory=MomentumWeightsConfig)
    forecast: ForecastWeightsConfig = Field(default_factory=ForecastWeightsConfig)


DEFAULT_WEIGHTS = ScoringWeights()


# ---------------------------------------------------------------------------
# Valuation Oracle Config
# ---------------------------------------------------------------------------

class OracleConfig(BaseModel):
    enabled: bool = True
    api_key: str = ""
    api_key_env: str = ORACLE_DEFAULTS["api_key_env"]
    base_url: str = ORACLE_DEFAULTS["base_url"]
    model: str = ORACLE_DEFAULTS["model"]
    timeout_seconds: float = ORACLE_DEFAULTS["timeout_seconds"]
    temperature: float = ORACLE_DEFAULTS["temperature"]
    max_tokens: int = ORACLE_DEFAULTS["max_tokens"]

    def resolve_api_key(self) -> str:
        """Explicit key first, then the configured environment variable."""
        return self.api_key or os.environ.get(self.api_key_env, "")


# ---------------------------------------------------------------------------
# Top-Level Config
# ---------------------------------------------------------------------------

class DometricsConfig(BaseModel):
    """Root configuration model for Dometrics."""

    version: int = 1
    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    oracle: OracleConfig = Field(default_factory=OracleConfig)

    @model_validator(mode="before")
    @classmethod
    def coerce_none_to_defaults(cls, data: Any) -> Any:
        """YAML parses empty keys as None. Coerce to proper defaults."""
        if isinstance(data, dict):
            for key in ("weights", "oracle"):
                if key in data and data[key] is None:
                    data[key] = {}
        return data
