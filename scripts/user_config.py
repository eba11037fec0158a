"""caseglobe user configuration.

This is the user-facing configuration file. Modify settings here to
customize the engine. Expert defaults live in caseglobe.schemas.param.

Usage:
    python scripts/run_case_engine.py --config scripts/user_config.py
    python scripts/run_case_engine.py --config scripts/user_config.py --mode daily
"""

CONFIG = {
    # ========================================================================
    # INPUT
    # ========================================================================
    "INPUT_PATH": "data/CV_LatLon_21Jan_12Mar.csv",

    # ========================================================================
    # QUERY SETTINGS
    # ========================================================================
    "MODE": "cumulative",     # "cumulative" or "daily"
    "TOP_N": 10,              # Countries in the ranking panel (1-50)
    "UNKNOWN_COUNTRY": "Unknown",

    # ========================================================================
    # PLAYBACK SETTINGS
    # ========================================================================
    "PERIOD_MS": 400,         # Milliseconds between ticks (100-2000)

    # ========================================================================
    # LOCATION SETTINGS
    # ========================================================================
    "KEY_PRECISION": 4,       # Decimal digits in location keys (~11 m merge distance)
    "SPHERE_RADIUS": 1.5,

    # ========================================================================
    # DISPLAY
    # ========================================================================
    "DATE_FORMAT": "%Y-%m-%d",
    # Note: CSV column positions are configured in caseglobe.schemas.param
}
