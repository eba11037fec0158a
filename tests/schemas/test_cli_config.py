import pytest
from pydantic import ValidationError

from caseglobe.schemas import CLIConfig, ParamConfig, UserConfig, resolve_config


def test_empty_cli_config_has_no_overrides():
    assert CLIConfig().to_internal_overrides() == {}


def test_cli_overrides_are_nested():
    cli = CLIConfig(input_path="cases.csv", mode="DAILY", top_n=4, period_ms=150, log_level="WARNING")

    assert cli.to_internal_overrides() == {
        "input_path": "cases.csv",
        "query": {"mode": "daily", "top_n": 4},
        "playback": {"period_ms": 150},
        "logging": {"level": "WARNING"},
    }


def test_cli_rejects_non_positive_top_n():
    with pytest.raises(ValidationError):
        CLIConfig(top_n=0)


def test_cli_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        CLIConfig(radius=3)


def test_cli_log_level_beats_user_log_level():
    config = resolve_config(ParamConfig(), UserConfig(LOG_LEVEL="DEBUG"), CLIConfig(log_level="ERROR"))
    assert config.logging.level == "ERROR"
