"""All calibrated default values for the domain scoring engine.

Weights and thresholds match the v1 scoring model used by the dashboard.
Every sub-score's factor weights sum to 1.0; the 0-100 output range
depends on it.

Do not change these without bumping ``WEIGHTS_VERSION``.
"""

WEIGHTS_VERSION = "v1"

# ---------------------------------------------------------------------------
# Risk Sub-Score (higher = riskier)
# ---------------------------------------------------------------------------
RISK_WEIGHTS = {
    "expiry_buffer": {
        "weight": 0.45,
        "high_risk_days": 30,    # at or below -> 100
        "low_risk_days": 180,    # at or above -> 0
    },
    "lock_status": {
        "weight": 0.25,
        "locked": 25,
        "unlocked": 0,
    },
    "registrar_quality": {
        "weight": 0.15,
        "trusted": 0,
        "unknown": 15,
    },
    "renewal_history": {
        "weight": 0.10,
        "threshold": 2,
        "reduction": -10,
    },
    "liquidity": {
        "weight": 0.05,
        "threshold": 3,
        "reduction": -5,
    },
}

# ---------------------------------------------------------------------------
# Rarity Sub-Score (higher = rarer)
# ---------------------------------------------------------------------------
RARITY_WEIGHTS = {
    "name_length": {
        "weight": 0.40,
        "max_rarity_length": 4,   # at or below -> 100
        "min_rarity_length": 12,  # at or above -> 0
    },
    "dictionary_brandable": {
        "weight": 0.25,
        "dictionary": 25,
        "brandable": 15,
        "random": 0,
        "brandable_min_length": 4,
        "brandable_max_length": 8,
    },
    "tld_scarcity": {
        "weight": 0.25,
        "buckets": {"ultra": 25, "rare": 20, "common": 10, "abundant": 0},
    },
    "historic_demand": {
        "weight": 0.10,
        "cap": 10,
        "per_offer": 2,
    },
}

# ---------------------------------------------------------------------------
# Momentum Sub-Score (higher = more active)
# ---------------------------------------------------------------------------
MOMENTUM_WEIGHTS = {
    "activity_delta": {
        "weight": 0.70,
        "recent_days": 7,
        "baseline_days": 30,
        "normalizer": 4.3,   # 7d -> 30d equivalent
    },
    "recent_events": {
        "weight": 0.30,
        "window_hours": 72,
        "points_per_event": 33,
    },
}

# ---------------------------------------------------------------------------
# Forecast Sub-Score
# ---------------------------------------------------------------------------
FORECAST_WEIGHTS = {
    "base": 50,
    "momentum": 0.5,
    "rarity": 0.3,
    "risk": -0.4,   # higher risk lowers the forecast
    "interval_base": 0.10,
    "interval_risk_multiplier": 0.10,
}

# ---------------------------------------------------------------------------
# Explanation list sizes
# ---------------------------------------------------------------------------
TOP_FACTORS = {
    "risk": 3,
    "rarity": 3,
    "momentum": 2,
    "value": 4,
}

# ---------------------------------------------------------------------------
# Static lookup tables
# ---------------------------------------------------------------------------
TRUSTED_REGISTRARS = frozenset({1, 2, 3, 101, 102, 103})

TLD_SCARCITY = {
    "com": "common",
    "net": "common",
    "org": "common",
    "io": "rare",
    "xyz": "abundant",
    "eth": "ultra",
    "crypto": "rare",
    "nft": "rare",
    "dao": "rare",
    "defi": "ultra",
}
DEFAULT_TLD_BUCKET = "common"

HIGH_VALUE_KEYWORDS = frozenset({
    "bitcoin", "chain", "coin", "crypto", "dao", "defi", "exchange",
    "finance", "meta", "nft", "stake", "swap", "token", "vault", "wallet",
    "web3", "yield",
})

MEDIUM_VALUE_KEYWORDS = frozenset({
    "app", "cloud", "data", "digital", "game", "home", "labs", "market",
    "pay", "shop", "smart", "store", "tech", "trade", "verse", "web",
})

DICTIONARY_WORDS = HIGH_VALUE_KEYWORDS | MEDIUM_VALUE_KEYWORDS

VOWELS = frozenset("aeiou")

# ---------------------------------------------------------------------------
# Algorithmic Valuation
# ---------------------------------------------------------------------------
VALUATION = {
    "base_value": 100.0,
    "value_floor": 100.0,
    # (max_length, multiplier), first match wins
    "length_tiers": [(3, 50.0), (4, 25.0), (5, 10.0), (7, 5.0), (10, 2.0)],
    "length_default": 1.0,
    "keyword_high": 15.0,
    "keyword_medium": 5.0,
    "exact_high": 2.0,
    "exact_medium": 1.5,
    "tld_multipliers": {"ultra": 3.0, "rare": 2.0, "common": 1.2, "abundant": 0.8},
    "offer_multiplier": 0.1,
    "activity_multiplier": 0.02,
    "market_cap": 3.0,
    "risk_shrink": 0.7,
    "risk_floor": 0.3,
}

PROJECTION = {
    "hot_momentum": 75,
    "hot_bonus": 0.5,
    "warm_momentum": 50,
    "warm_bonus": 0.2,
    "cold_momentum": 25,
    "cold_penalty": -0.2,
    "rare_threshold": 80,
    "rare_bonus": 0.3,
}

VALUE_CONFIDENCE = {
    "base": 70,
    "activity_threshold": 10,
    "offer_threshold": 3,
    "bonus": 10,
    "cap": 95,
}

# ---------------------------------------------------------------------------
# Valuation Oracle (LLM appraisal API)
# ---------------------------------------------------------------------------
ORACLE_DEFAULTS = {
    "base_url": "https://api.deepseek.com/v1/chat/completions",
    "model": "deepseek-chat",
    "api_key_env": "DEEPSEEK_API_KEY",
    "timeout_seconds": 8.0,
    "temperature": 0.3,
    "max_tokens": 1500,
}

ORACLE_RESPONSE = {
    "default_current_value": 1000.0,
    "projected_growth": 1.1,
    "default_confidence": 75.0,
    "confidence_min": 50.0,
    "confidence_max": 95.0,
    "default_sub_score": 50.0,
}

# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------
EXPIRY_RISK_BUCKETS = {
    "low": 180,     # more than 180 days left
    "medium": 60,   # more than 60 days left
}

HIGH_VALUE_THRESHOLD = 10_000.0
