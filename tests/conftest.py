"""Root-level pytest fixtures for the caseglobe test suite.

Provides shared configuration fixtures and CSV builders. Tests use these
fixtures instead of creating raw dict configs.
"""

import pytest

from caseglobe.schemas import ParamConfig, UserConfig, resolve_config

HEADER = "Province/State,Region,Country,Lat,Long,Date,Confirmed"


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Examples
    --------
    >>> def test_custom_top_n(make_config):
    ...     config = make_config(top_n=3)
    ...     assert config.query.top_n == 3
    """
    def _make(**user_overrides):
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# CSV Fixtures
# =============================================================================

@pytest.fixture
def make_csv():
    """Build CSV text from (country, lat, lon, date, count) tuples.

    Rows given as plain strings are inserted verbatim.
    """
    def _make(*rows, header=HEADER):
        lines = [header]
        for row in rows:
            if isinstance(row, str):
                lines.append(row)
            else:
                country, lat, lon, date, count = row
                lines.append(f",,{country},{lat},{lon},{date},{count}")
        return "\n".join(lines) + "\n"

    return _make


@pytest.fixture
def outbreak_csv(make_csv):
    """Small realistic dataset: three countries, four dates, one correction."""
    return make_csv(
        ("China", 30.9756, 112.2707, "1/22/20", 444),
        ("China", 30.9756, 112.2707, "1/23/20", 444),
        ("China", 30.9756, 112.2707, "1/25/20", 1052),
        ("China", 23.3417, 113.4244, "1/22/20", 26),
        ("China", 23.3417, 113.4244, "1/24/20", 53),
        ("Italy", 41.8719, 12.5674, "1/24/20", 2),
        ("Italy", 41.8719, 12.5674, "1/25/20", 1),
        ("Japan", 36.0, 138.0, "1/23/20", 1),
        ("Japan", 36.0, 138.0, "1/25/20", 3),
    )


@pytest.fixture
def csv_file(tmp_path, outbreak_csv):
    path = tmp_path / "cases.csv"
    path.write_text(outbreak_csv)
    return path
