"""
tests/test_cli.py
=================

Smoke tests for the ``timestate`` command line.
"""

import json

from timestate.cli import main


def test_parse(capsys):
    assert main(["parse", "2023-07-25T23:43:16Z"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["unix"] == 1690328596
    assert out["weekday_name"] == "Tuesday"


def test_unix(capsys):
    assert main(["unix", "86400"]) == 0
    assert json.loads(capsys.readouterr().out)["rfc3339"] == "1970-01-02T00:00:00Z"


def test_offset_rolls_month_overflow(capsys):
    assert main(["offset", "--base", "2024-01-31T00:00:00Z", "--months", "1"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["target"] == "2024-03-02T00:00:00Z"
    assert out["import_id"] == "2024-01-31T00:00:00Z,,1,,,,"


def test_offset_without_units_fails(capsys):
    assert main(["offset", "--base", "2024-01-31T00:00:00Z"]) == 2
    assert "error:" in capsys.readouterr().err


def test_check(capsys):
    assert main(["check", "2024-01-08T00:00:00Z", "--now", "2024-01-08T00:00:00Z"]) == 0
    assert main(["check", "2024-01-08T00:00:00Z", "--now", "2024-01-08T00:00:01Z"]) == 1
    assert capsys.readouterr().out.split() == ["FRESH", "EXPIRED"]


def test_import(capsys):
    assert main(["import", "2024-01-01T00:00:00Z,0,0,7,0,0"]) == 0
    assert json.loads(capsys.readouterr().out)["target"] == "2024-01-08T00:00:00Z"


def test_import_bad_identifier(capsys):
    assert main(["import", "not-an-id"]) == 2


def test_sleep_timeout_returns_130():
    assert main(["sleep", "1h", "--timeout", "0.05"]) == 130


def test_sleep_completes():
    assert main(["sleep", "10ms"]) == 0


def test_static(capsys):
    assert main(["static", "--base", "2024-02-29T12:00:00+02:00"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["base"] == "2024-02-29T10:00:00Z"
    assert out["target"] is None
    assert out["import_id"] == "2024-02-29T10:00:00Z"


def test_sleep_out_of_range_duration(capsys):
    assert main(["sleep", "99999999999999h"]) == 2
    assert "error:" in capsys.readouterr().err
