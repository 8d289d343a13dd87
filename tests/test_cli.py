"""CLI smoke tests via click's CliRunner."""

from __future__ import annotations

import json

import pandas as pd
import pytest
import yaml
from click.testing import CliRunner

from dometrics import __version__
from dometrics.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        "version": 1,
        "oracle": {"api_key": "sk-secret", "model": "deepseek-chat"},
    }))
    return str(path)


@pytest.fixture
def records_file(tmp_path, registry_record):
    path = tmp_path / "names.yaml"
    path.write_text(yaml.dump({"domains": [
        registry_record,
        {"name": "ab.com", "expiresAt": "2030-01-01T00:00:00Z", "offerCount": 5},
        {"name": "broken.com"},
    ]}))
    return str(path)


class TestTopLevel:

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("score", "batch", "config"):
            assert command in result.output

    def test_quiet(self, runner, config_file):
        result = runner.invoke(cli, ["-q", "--config", config_file, "score", "ab.com", "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["domain"] == "ab.com"

    def test_verbose_and_quiet_conflict(self, runner):
        result = runner.invoke(cli, ["-v", "-q", "config", "show"])
        assert result.exit_code == 2
        assert "mutually exclusive" in result.output


class TestScoreCommand:

    def test_json(self, runner, config_file):
        result = runner.invoke(cli, [
            "--config", config_file, "score", "ab.com",
            "--expires-in", "200", "--registrar-id", "1", "--renewals", "3",
            "--offers", "5", "--activity-7d", "10", "--activity-30d", "20", "--json",
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["domain"] == "ab.com"
        assert data["risk"] == 0.0
        assert data["rarity"] == pytest.approx(43.5)
        assert data["current_value"] == pytest.approx(11_400.0)
        assert data["valuation_source"] == "algorithmic"
        assert data["analysis"]["investment_outlook"] == "fair"

    def test_report(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "score", "crypto.io", "--locked"])
        assert result.exit_code == 0, result.output
        assert result.output.startswith("# crypto.io")
        assert "Transfer restrictions in place" in result.output

    def test_expires_at(self, runner, config_file):
        result = runner.invoke(cli, [
            "--config", config_file, "score", "zorp.xyz",
            "--expires-at", "2000-01-01T00:00:00Z", "--json",
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["explainers"]["risk"][0]["name"] == "Expiry Buffer"
        assert data["explainers"]["risk"][0]["value"] < 0

    def test_oracle_without_key_falls_back(self, runner, tmp_path, monkeypatch):
        monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)
        empty = tmp_path / "empty.yaml"
        empty.write_text("version: 1\n")
        result = runner.invoke(cli, ["--config", str(empty), "score", "ab.com", "--oracle", "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["valuation_source"] == "algorithmic"

    def test_missing_tld(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "score", "crypto"])
        assert result.exit_code == 2
        assert "NAME.TLD" in result.output

    def test_bad_expires_at(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "score", "a.com", "--expires-at", "soon"])
        assert result.exit_code == 2

    def test_external_analysis(self, runner, config_file, tmp_path):
        path = tmp_path / "analysis.json"
        path.write_text(json.dumps({
            "summary": "Worth a look.",
            "investment_outlook": "stellar",
            "key_strengths": ["Short name"],
            "confidence_level": 99,
        }))
        result = runner.invoke(cli, ["--config", config_file, "score", "ab.com",
                                     "--analysis", str(path), "--json"])
        assert result.exit_code == 0, result.output
        analysis = json.loads(result.output)["analysis"]
        assert analysis["summary"] == "Worth a look."
        assert analysis["investment_outlook"] == "fair"
        assert analysis["key_risks"] == ["Market uncertainty", "Valuation challenges"]
        assert analysis["confidence_level"] == 95.0

    def test_external_analysis_not_a_mapping(self, runner, config_file, tmp_path):
        path = tmp_path / "analysis.yaml"
        path.write_text("- just\n- a list\n")
        result = runner.invoke(cli, ["--config", config_file, "score", "ab.com", "--analysis", str(path)])
        assert result.exit_code == 2
        assert "expected a mapping" in result.output


class TestBatchCommand:

    def test_batch_with_csv(self, runner, config_file, records_file, tmp_path):
        out = tmp_path / "scored.csv"
        result = runner.invoke(cli, ["--config", config_file, "batch", records_file, "--csv", str(out)])
        assert result.exit_code == 0, result.output
        assert "Scored: 2 of 3 records" in result.output
        assert '"total_domains": 2' in result.output
        df = pd.read_csv(out)
        assert sorted(df["domain"]) == ["ab.com", "crypto.io"]

    def test_batch_bad_file(self, runner, config_file, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("nope: 1\n")
        result = runner.invoke(cli, ["--config", config_file, "batch", str(path)])
        assert result.exit_code == 2
        assert "expected a list" in result.output


class TestConfigCommands:

    def test_show_masks_key(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "config", "show"])
        assert result.exit_code == 0, result.output
        assert "sk-secret" not in result.output
        data = json.loads(result.output)
        assert data["oracle"]["api_key"] == "****"
        assert data["weights"]["version"] == "v1"

    def test_validate(self, runner, config_file):
        result = runner.invoke(cli, ["--config", config_file, "config", "validate"])
        assert result.exit_code == 0, result.output
        assert "Config is valid." in result.output
        assert "Oracle: on" in result.output

    def test_validate_rejects_bad_config(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("oracle:\n  timeout_seconds: soon\n")
        result = runner.invoke(cli, ["--config", str(path), "config", "validate"])
        assert result.exit_code == 1
