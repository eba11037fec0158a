import pytest

from caseglobe.schemas.user import UserConfig, UserQueryConfig


def test_uppercase_keys_are_handled():
    raw = {
        "INPUT_PATH": "data/cases.csv",
        "MODE": "Cumulative",
        "TOP_N": 15,
        "SPHERE_RADIUS": 2,
        "LOG_LEVEL": "debug",
    }

    user = UserConfig.model_validate(raw)

    assert user.input_path == "data/cases.csv"
    assert user.mode == "cumulative"
    assert user.top_n == 15
    assert isinstance(user.sphere_radius, float) and user.sphere_radius == 2.0
    assert user.log_level == "DEBUG"


def test_unknown_keys_are_ignored():
    raw = {"MODE": "daily", "UNKNOWN_LEGACY": 12345}
    user = UserConfig.model_validate(raw)

    assert user.mode == "daily"
    assert not hasattr(user, "UNKNOWN_LEGACY")


def test_overrides_only_contain_set_values():
    user = UserConfig(PERIOD_MS=200, DATE_FORMAT="%d %b")

    assert user.to_internal_overrides() == {
        "playback": {"period_ms": 200},
        "display": {"date_format": "%d %b"},
    }


@pytest.mark.parametrize("value", ["hourly", "cumulative-daily"])
def test_invalid_mode_raises(value):
    with pytest.raises(ValueError):
        UserConfig(MODE=value)


def test_nested_section_exports_only_set_fields():
    section = UserQueryConfig(top_n=4, mode=" DAILY ")

    assert section.explicit_values() == {"top_n": 4, "mode": "daily"}
    assert UserQueryConfig().explicit_values() == {}
