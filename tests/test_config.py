import json

import pytest

from config import DEFAULT_CONFIG, load_config, load_config_from_env, parse_watchlist, save_config
from scheduler import validate_expression


def test_missing_file_is_created_from_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("USE_ENV_CONFIG", raising=False)
    path = tmp_path / "config.json"

    config = load_config(str(path))

    assert path.exists()
    assert config["PRICE_CHANGE_THRESHOLD"] == 5.0
    assert config["VOLUME_SPIKE_THRESHOLD"] == 200.0
    assert config["WATCHLIST"][:2] == ["ETH", "STRK"]


def test_file_values_are_merged_with_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("USE_ENV_CONFIG", raising=False)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"WATCHLIST": "eth, lords", "OUTPUT_FORMAT": "BOTH"}))

    config = load_config(str(path))

    assert config["WATCHLIST"] == ["ETH", "LORDS"]
    assert config["OUTPUT_FORMAT"] == "both"
    assert config["TOP_VOLUME_COUNT"] == DEFAULT_CONFIG["TOP_VOLUME_COUNT"]


def test_invalid_output_format_fails(tmp_path, monkeypatch):
    monkeypatch.delenv("USE_ENV_CONFIG", raising=False)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"OUTPUT_FORMAT": "pdf"}))

    with pytest.raises(ValueError):
        load_config(str(path))


def test_corrupt_file_falls_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("USE_ENV_CONFIG", raising=False)
    path = tmp_path / "config.json"
    path.write_text("{not json")

    assert load_config(str(path))["NETWORK"] == "mainnet"


def test_env_config(monkeypatch):
    monkeypatch.setenv("USE_ENV_CONFIG", "true")
    monkeypatch.setenv("PRICE_CHANGE_THRESHOLD", "7.5")
    monkeypatch.setenv("TOP_MOVERS_COUNT", "5")
    monkeypatch.setenv("WATCHLIST", "eth,strk")
    monkeypatch.setenv("ENABLE_TELEGRAM", "TRUE")
    monkeypatch.setenv("NETWORK", "Sepolia")

    config = load_config("does-not-matter.json")

    assert config["PRICE_CHANGE_THRESHOLD"] == 7.5
    assert config["TOP_MOVERS_COUNT"] == 5
    assert config["WATCHLIST"] == ["ETH", "STRK"]
    assert config["ENABLE_TELEGRAM"] is True
    assert config["NETWORK"] == "sepolia"


def test_unparseable_env_value_uses_default(monkeypatch):
    monkeypatch.setenv("VOLUME_SPIKE_THRESHOLD", "lots")

    assert load_config_from_env()["VOLUME_SPIKE_THRESHOLD"] == 200.0


def test_parse_watchlist():
    assert parse_watchlist(" eth , ,Strk") == ["ETH", "STRK"]
    assert parse_watchlist(["usdc"]) == ["USDC"]


def test_save_config(tmp_path):
    path = tmp_path / "saved.json"

    assert save_config({"NETWORK": "sepolia"}, str(path)) is True
    assert json.loads(path.read_text()) == {"NETWORK": "sepolia"}


def test_default_schedules_use_supported_grammar():
    for key in ("SNAPSHOT_SCHEDULE", "REPORT_SCHEDULE", "ALERT_SCHEDULE"):
        assert validate_expression(DEFAULT_CONFIG[key])
