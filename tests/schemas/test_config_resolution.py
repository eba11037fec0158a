"""Test config resolution and validation with Pydantic."""

import pytest
from pydantic import ValidationError

from caseglobe.schemas import ParamConfig, UserConfig, CLIConfig, InternalConfig
from caseglobe.schemas.resolve import deep_merge, resolve_config
from caseglobe.schemas.user import UserIngestionConfig, UserPlaybackConfig


class TestConfigResolution:
    """Test resolve_config() precedence and merging."""

    def test_resolve_config_all_defaults(self):
        """Resolving with no user/CLI overrides uses all ParamConfig defaults."""
        config = resolve_config(ParamConfig(), None, None)

        assert isinstance(config, InternalConfig)
        assert config.query.mode == "daily"
        assert config.query.top_n == 10
        assert config.registry.key_precision == 4
        assert config.registry.sphere_radius == 1.5
        assert config.playback.period_ms == 400
        assert config.playback.autoplay is False
        assert config.ingestion.min_fields == 7
        assert config.input_path is None

    def test_user_config_overrides_param_config(self):
        config = resolve_config(ParamConfig(), UserConfig(top_n=3, mode="cumulative"), None)

        assert config.query.top_n == 3
        assert config.query.mode == "cumulative"

    def test_cli_overrides_user(self):
        """Full precedence: CLI > User > Param."""
        user = UserConfig(top_n=3, period_ms=800, input_path="user.csv")
        cli = CLIConfig(top_n=5, input_path="cli.csv")
        config = resolve_config(ParamConfig(), user, cli)

        assert config.query.top_n == 5
        assert config.input_path == "cli.csv"
        # User still wins where the CLI is silent
        assert config.playback.period_ms == 800

    def test_dict_inputs_are_validated(self):
        config = resolve_config({}, {"TOP_N": 7}, {"mode": "CUMULATIVE"})

        assert config.query.top_n == 7
        assert config.query.mode == "cumulative"

    def test_nested_overrides_merge_with_flat_aliases(self):
        user = UserConfig(
            autoplay=True,
            playback=UserPlaybackConfig(period_ms=250),
            ingestion=UserIngestionConfig(delimiter=";"),
        )
        config = resolve_config(ParamConfig(), user, None)

        assert config.playback.autoplay is True
        assert config.playback.period_ms == 250
        assert config.ingestion.delimiter == ";"
        assert config.ingestion.count_column == 6


class TestValidation:

    def test_user_value_outside_expert_range_is_rejected(self):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig(period_ms=50), None)

    def test_column_outside_min_fields_is_rejected(self):
        user = UserConfig(ingestion=UserIngestionConfig(min_fields=5))
        with pytest.raises(ValidationError, match="min_fields"):
            resolve_config(ParamConfig(), user, None)

    def test_invalid_mode_is_rejected(self):
        with pytest.raises(ValidationError):
            UserConfig(mode="weekly")

    def test_param_config_forbids_unknown_fields(self):
        with pytest.raises(ValidationError):
            ParamConfig.model_validate({"query": {"colour": "red"}})

    def test_internal_config_is_frozen(self, internal_config):
        with pytest.raises(ValidationError):
            internal_config.input_path = "other.csv"


def test_deep_merge_keeps_untouched_branches():
    merged = deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}}, {"d": 4})
    assert merged == {"a": {"b": 1, "c": 3}, "d": 4}
