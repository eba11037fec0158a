"""Command-line interface for the case engine.

This package contains the runner logic so scripts/ stays a thin wrapper.
"""

from caseglobe.cli.run_engine import run_case_engine, setup_logging, main

__all__ = ['run_case_engine', 'setup_logging', 'main']
