#!/usr/bin/env python3
"""Case engine runner.

Usage:
    python scripts/run_case_engine.py data/CV_LatLon_21Jan_12Mar.csv
    python scripts/run_case_engine.py --config scripts/user_config.py --mode cumulative
    python scripts/run_case_engine.py data/cases.csv --date 2020-03-01 --top-n 5
    python scripts/run_case_engine.py data/cases.csv --play 20 --period-ms 200

Note: User config in scripts/user_config.py, expert defaults in caseglobe.schemas.param
"""

import sys

from caseglobe.cli import main


if __name__ == "__main__":
    sys.exit(main())
