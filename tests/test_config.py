"""Tests for the configuration system."""

from __future__ import annotations

import logging

import pytest
import yaml
from pydantic import ValidationError

from dometrics.config.defaults import (
    FORECAST_WEIGHTS,
    MOMENTUM_WEIGHTS,
    RARITY_WEIGHTS,
    RISK_WEIGHTS,
    TLD_SCARCITY,
    VALUATION,
)
from dometrics.config.loader import _expand_env_vars, load_config
from dometrics.config.schema import (
    DEFAULT_WEIGHTS,
    DometricsConfig,
    OracleConfig,
    RiskWeightsConfig,
    ScoringWeights,
)


class TestDefaults:
    """Verify the calibrated v1 defaults."""

    @pytest.mark.parametrize("table", [RISK_WEIGHTS, RARITY_WEIGHTS, MOMENTUM_WEIGHTS])
    def test_factor_weights_sum_to_1(self, table):
        total = sum(section["weight"] for section in table.values())
        assert abs(total - 1.0) < 1e-9

    def test_forecast_risk_weight_is_negative(self):
        assert FORECAST_WEIGHTS["risk"] < 0
        assert FORECAST_WEIGHTS["momentum"] > 0
        assert FORECAST_WEIGHTS["rarity"] > 0

    def test_length_tiers_ascending(self):
        lengths = [max_len for max_len, _ in VALUATION["length_tiers"]]
        mults = [mult for _, mult in VALUATION["length_tiers"]]
        assert lengths == sorted(lengths)
        assert mults == sorted(mults, reverse=True)

    def test_tld_buckets_known(self):
        buckets = set(RARITY_WEIGHTS["tld_scarcity"]["buckets"])
        assert set(TLD_SCARCITY.values()) <= buckets

    def test_default_weights_match_tables(self):
        w = DEFAULT_WEIGHTS
        assert w.version == "v1"
        assert w.risk.expiry_buffer.weight == 0.45
        assert w.rarity.name_length.weight == 0.40
        assert w.momentum.recent_events.window_hours == 72
        assert w.forecast.risk == -0.4


class TestWeights:
    """ScoringWeights is immutable and validated."""

    def test_frozen(self):
        with pytest.raises(ValidationError):
            DEFAULT_WEIGHTS.risk.expiry_buffer.weight = 0.9

    def test_alternate_instance(self):
        alt = ScoringWeights(version="v2", forecast={"base": 60})
        assert alt.version == "v2"
        assert alt.forecast.base == 60
        assert alt.forecast.momentum == DEFAULT_WEIGHTS.forecast.momentum
        assert DEFAULT_WEIGHTS.forecast.base == 50

    def test_bad_sum_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="dometrics.config.schema"):
            RiskWeightsConfig(expiry_buffer={"weight": 0.9})
        assert "risk factor weights sum to" in caplog.text

    def test_default_sum_does_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="dometrics.config.schema"):
            ScoringWeights()
        assert caplog.text == ""


class TestConfigLoading:
    """Test config file loading and validation."""

    def test_load_defaults_no_file(self):
        config = load_config("/nonexistent/path.yaml")
        assert isinstance(config, DometricsConfig)
        assert config.version == 1
        assert config.weights == DEFAULT_WEIGHTS

    def test_load_from_yaml(self, tmp_path):
        yaml_content = {
            "version": 1,
            "weights": {
                "version": "tuned",
                "forecast": {"base": 55},
                "rarity": {"tld_scarcity": {"buckets": {"ultra": 30, "rare": 20,
                                                         "common": 10, "abundant": 0}}},
            },
            "oracle": {"model": "custom-model", "timeout_seconds": 3},
        }
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump(yaml_content))

        config = load_config(config_file)
        assert config.weights.version == "tuned"
        assert config.weights.forecast.base == 55
        assert config.weights.rarity.tld_scarcity.buckets["ultra"] == 30
        assert config.oracle.model == "custom-model"
        assert config.oracle.timeout_seconds == 3.0

    def test_empty_sections_use_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("version: 1\nweights:\noracle:\n")
        config = load_config(config_file)
        assert config.weights == DEFAULT_WEIGHTS
        assert config.oracle.enabled is True

    def test_invalid_value_rejected(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("oracle:\n  timeout_seconds: soon\n")
        with pytest.raises(ValidationError):
            load_config(config_file)

    def test_env_var_in_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DOMETRICS_TEST_KEY", "sk-test")
        config_file = tmp_path / "config.yaml"
        config_file.write_text('oracle:\n  api_key: "${DOMETRICS_TEST_KEY}"\n')
        config = load_config(config_file)
        assert config.oracle.api_key == "sk-test"

    def test_logs_explicit_path(self, tmp_path, caplog):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("version: 1\n")
        with caplog.at_level(logging.INFO, logger="dometrics.config.loader"):
            load_config(config_file)
        assert f"Using config {config_file} (explicit path)" in caplog.text

    def test_missing_explicit_path_warns(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="dometrics.config.loader"):
            load_config(tmp_path / "absent.yaml")
        assert "does not exist, using defaults" in caplog.text

    def test_working_directory_config_found(self, tmp_path, monkeypatch, caplog):
        (tmp_path / "config.yaml").write_text("oracle:\n  model: local-model\n")
        monkeypatch.chdir(tmp_path)
        with caplog.at_level(logging.INFO, logger="dometrics.config.loader"):
            config = load_config()
        assert config.oracle.model == "local-model"
        assert "(working directory)" in caplog.text

    def test_top_level_list_rejected(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- version\n- 1\n")
        with pytest.raises(ValueError, match="expected a mapping"):
            load_config(config_file)


class TestEnvExpansion:

    def test_expand_string(self, monkeypatch):
        monkeypatch.setenv("DOMETRICS_A", "alpha")
        assert _expand_env_vars("x-${DOMETRICS_A}-y") == "x-alpha-y"

    def test_missing_var_expands_empty(self, monkeypatch):
        monkeypatch.delenv("DOMETRICS_MISSING", raising=False)
        assert _expand_env_vars("${DOMETRICS_MISSING}") == ""

    def test_nested(self, monkeypatch):
        monkeypatch.setenv("DOMETRICS_B", "beta")
        raw = {"a": ["${DOMETRICS_B}", 3], "b": {"c": "${DOMETRICS_B}"}}
        assert _expand_env_vars(raw) == {"a": ["beta", 3], "b": {"c": "beta"}}


class TestOracleConfig:

    def test_explicit_key_wins(self, monkeypatch):
        monkeypatch.setenv("DEEPSEEK_API_KEY", "from-env")
        assert OracleConfig(api_key="explicit").resolve_api_key() == "explicit"

    def test_key_from_env(self, monkeypatch):
        monkeypatch.setenv("DEEPSEEK_API_KEY", "from-env")
        assert OracleConfig().resolve_api_key() == "from-env"

    def test_no_key(self, monkeypatch):
        monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)
        assert OracleConfig().resolve_api_key() == ""
