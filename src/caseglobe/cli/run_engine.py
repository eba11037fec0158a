"""Core case engine runner.

This module contains the actual runner, separated from argument parsing.
It loads a case report file, prints a dataset summary and the top-country
panel for one date, and can optionally play through the dates printing the
panel on every tick.
"""

import argparse
import importlib.util
import json
import logging
import sys
import threading
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from caseglobe.core.errors import CaseGlobeError
from caseglobe.pipeline.engine import CaseEngine
from caseglobe.query.engine import format_top_panel
from caseglobe.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig

__all__ = ['run_case_engine', 'setup_logging', 'load_user_config_dict', 'main']

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level: str = "INFO", log_file: Optional[Path | str] = None) -> None:
    """Configure the root logger with console and optional file handlers.

    Existing root handlers are removed first so repeated calls do not
    duplicate output.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.debug("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_file)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load config module from {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def _resolve_date_index(engine: CaseEngine, date: Optional[str]) -> int:
    """Date argument as an index: an integer index, a date string, or the last date."""
    if date is None:
        return max(engine.date_count - 1, 0)
    try:
        return int(date)
    except ValueError:
        return engine.date_index_of(date)


def run_case_engine(
    input_path: Optional[str] = None,
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    date: Optional[str] = None,
    play_ticks: int = 0,
    log_file: Optional[str] = None,
    verbose: bool = False,
    out: Optional[TextIO] = None,
) -> CaseEngine:
    """Load a case report file and print its ranking panel.

    Parameters
    ----------
    input_path : str, optional
        CSV file. Overrides ``input_path`` from the user config.
    user_config_path : str, optional
        Python file with a CONFIG dict.
    cli_args : dict, optional
        CLI overrides: mode, top_n, period_ms, log_level.
    date : str, optional
        Date index (integer) or date (``YYYY-MM-DD``); defaults to the last date.
    play_ticks : int
        If positive, play this many ticks and print the panel on each.
    log_file : str, optional
        Also write logs to this file.
    verbose : bool
        DEBUG logging and print the resolved configuration.
    out : TextIO, optional
        Where panels are printed (default: stdout).

    Returns
    -------
    CaseEngine
        The loaded engine (playback stopped).

    Raises
    ------
    ValueError
        If no input file is configured.
    FileNotFoundError
        If the input or config file does not exist.
    DateIndexOutOfRange, UnknownDate
        If ``date`` is outside the observed range.
    """
    out = out or sys.stdout

    param_cfg = ParamConfig()
    user_cfg = UserConfig()
    if user_config_path:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))

    cli_args = dict(cli_args or {})
    if input_path is not None:
        cli_args["input_path"] = input_path
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)
    setup_logging(config.logging.level, log_file)

    if not config.input_path:
        raise ValueError("No input file: pass a CSV path or set INPUT_PATH in the config")

    lock = threading.Lock()
    done = threading.Event()
    remaining = [play_ticks]

    def print_tick(index: int) -> None:
        with lock:
            if remaining[0] <= 0:
                return
            remaining[0] -= 1
            label = engine.date_label(index)
            ranking = engine.top_countries(index)
            print(f"\n[{label}]", file=out)
            print(format_top_panel(ranking), file=out)
            if remaining[0] == 0:
                done.set()

    engine = CaseEngine(config, on_tick=print_tick)
    engine.load(config.input_path)
    report = engine.ingest_report

    print(f"\n{'='*60}", file=out)
    print("Case Engine", file=out)
    print('='*60, file=out)
    print(f"Input:     {config.input_path}", file=out)
    print(f"Rows:      {report.valid_rows} valid, {report.dropped_rows} dropped", file=out)
    print(f"Locations: {engine.location_count}", file=out)
    print(f"Dates:     {engine.date_count}", file=out)
    print(f"Mode:      {config.query.mode}", file=out)
    print('='*60, file=out)

    if verbose:
        print("\nFull Internal Configuration:", file=out)
        print(json.dumps(config.model_dump(), indent=2), file=out)
        print('='*60, file=out)

    if engine.is_empty:
        print(format_top_panel([]), file=out)
        return engine

    index = _resolve_date_index(engine, date)
    ranking = engine.top_countries(index)
    engine.seek(index)
    print(f"\n[{engine.date_label(index)}]", file=out)
    print(format_top_panel(ranking), file=out)

    if play_ticks > 0:
        engine.play()
        try:
            timeout = (play_ticks + 5) * config.playback.period_ms / 1000.0
            if not done.wait(timeout):
                logger.warning("Playback did not finish %d ticks within %.1f s", play_ticks, timeout)
        except KeyboardInterrupt:
            logger.info("Playback interrupted")
        finally:
            engine.stop()

    return engine


def main(argv=None) -> int:
    """Command-line entry point.

    Returns 0 on success and 2 when the input, the configuration or the
    requested date cannot be used.
    """
    parser = argparse.ArgumentParser(description="Rank countries by case counts for a date")
    parser.add_argument("input", nargs="?", help="Case report CSV file")
    parser.add_argument("--config", help="Path to user config file (Python, CONFIG dict)")
    parser.add_argument("--date", help="Date index or YYYY-MM-DD (default: last date)")
    parser.add_argument("--mode", choices=["cumulative", "daily"], help="Display mode")
    parser.add_argument("--top-n", type=int, help="Number of countries to show")
    parser.add_argument("--play", type=int, default=0, metavar="N", help="Play N ticks")
    parser.add_argument("--period-ms", type=int, help="Milliseconds between playback ticks")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    try:
        run_case_engine(
            input_path=args.input,
            user_config_path=args.config,
            cli_args={
                "mode": args.mode,
                "top_n": args.top_n,
                "period_ms": args.period_ms,
            },
            date=args.date,
            play_ticks=args.play,
            log_file=args.log_file,
            verbose=args.verbose,
        )
    except (CaseGlobeError, ValueError, OSError) as e:
        # pydantic ValidationError is a ValueError
        logger.error("%s", e)
        return 2
    return 0
