"""Tests for the command-line runner."""

import io
import logging

import pytest

from caseglobe.cli import main, run_case_engine, setup_logging
from caseglobe.cli.run_engine import load_user_config_dict

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_setup_logging_is_idempotent(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    setup_logging("debug", log_file)
    setup_logging("debug", log_file)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 2
    assert log_file.exists()


def test_summary_and_panel_for_last_date(csv_file):
    out = io.StringIO()
    engine = run_case_engine(input_path=str(csv_file), out=out)
    text = out.getvalue()

    assert engine.location_count == 4
    assert "Locations: 4" in text
    assert "Rows:      9 valid, 0 dropped" in text
    assert "[2020-01-25]" in text
    assert "1. China: 608" in text
    assert "2. Japan: 2" in text


def test_cli_overrides(csv_file):
    out = io.StringIO()
    run_case_engine(
        input_path=str(csv_file),
        cli_args={"mode": "cumulative", "top_n": 1},
        date="2020-01-24",
        out=out,
    )
    text = out.getvalue()

    assert "[2020-01-24]" in text
    assert "1. China: 497" in text
    assert "Italy" not in text


def test_user_config_file(tmp_path, csv_file):
    config_path = tmp_path / "user_config.py"
    config_path.write_text(
        f'CONFIG = {{"INPUT_PATH": {str(csv_file)!r}, "MODE": "cumulative", "TOP_N": 2}}\n'
    )

    assert load_user_config_dict(str(config_path))["TOP_N"] == 2

    out = io.StringIO()
    run_case_engine(user_config_path=str(config_path), date="3", out=out)
    text = out.getvalue()

    assert "1. China: 1105" in text
    assert "2. Japan: 3" in text
    assert "3. Italy" not in text


def test_config_file_without_dict(tmp_path):
    config_path = tmp_path / "empty.py"
    config_path.write_text("VALUE = 1\n")
    with pytest.raises(ValueError, match="No CONFIG dict"):
        load_user_config_dict(str(config_path))


def test_play_prints_each_tick(csv_file):
    out = io.StringIO()
    engine = run_case_engine(
        input_path=str(csv_file),
        cli_args={"period_ms": 100},
        play_ticks=2,
        out=out,
    )
    text = out.getvalue()

    # Starts on the last date and wraps around
    assert "[2020-01-22]" in text
    assert "[2020-01-23]" in text
    assert not engine.playback.is_playing


def test_empty_file_prints_no_data(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("Province/State,Region,Country,Lat,Long,Date,Confirmed\n")
    out = io.StringIO()

    engine = run_case_engine(input_path=str(path), out=out)

    assert engine.is_empty
    assert "No data" in out.getvalue()


def test_missing_input_path_raises():
    with pytest.raises(ValueError, match="No input file"):
        run_case_engine(out=io.StringIO())


def test_main_returns_zero(csv_file, capsys):
    assert main([str(csv_file), "--top-n", "3"]) == 0
    assert "1. China" in capsys.readouterr().out


@pytest.mark.parametrize("date", ["99", "2019-12-31"])
def test_main_reports_bad_date(csv_file, date):
    assert main([str(csv_file), "--date", date]) == 2


@pytest.mark.parametrize("argv", [
    [],
    ["missing.csv"],
    ["--top-n", "0", "cases.csv"],
    ["--config", "no_such_config.py"],
])
def test_main_reports_unusable_input(tmp_path, monkeypatch, argv):
    monkeypatch.chdir(tmp_path)
    assert main(argv) == 2


def test_main_drops_out_of_range_year(tmp_path, make_csv):
    path = tmp_path / "cases.csv"
    path.write_text(make_csv(
        ("China", 31.0, 112.0, "1/22/20", 5),
        ("China", 31.0, 112.0, "1/1/3000", 7),
    ))
    assert main([str(path)]) == 0
