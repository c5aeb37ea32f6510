"""Tests for CLI commands: help, parse, stats, review and config."""

import json
from datetime import date
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from mneme.interface.cli import app

runner = CliRunner()

GEOGRAPHY_NOTE = """#flashcards/geo

Capital of France::Paris

Capital of Italy::Rome
<!--SR:!2024-03-01,10,250-->

Capital of Spain::Madrid
<!--SR:!2024-03-10,10,250-->
"""


@pytest.fixture
def vault(mock_home, mock_vault):
    (mock_vault / "geo.md").write_text(GEOGRAPHY_NOTE, encoding="utf-8")
    return mock_vault


@pytest.fixture
def fixed_today():
    with patch("mneme.infrastructure.clock.SystemClock.today", return_value=date(2024, 3, 1)):
        yield


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "spaced-repetition flashcards" in result.stdout
    assert "review" in result.stdout
    assert "stats" in result.stdout
    assert "parse" in result.stdout


# --- Parse ---


def test_parse_json(vault):
    result = runner.invoke(app, ["parse", str(vault / "geo.md"), "--json"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert [q["type"] for q in data] == ["SingleLineBasic"] * 3
    assert data[1] == {
        "type": "SingleLineBasic",
        "first_line": 4,
        "last_line": 5,
        "text": "Capital of Italy::Rome\n<!--SR:!2024-03-01,10,250-->",
    }


def test_parse_plain(vault):
    result = runner.invoke(app, ["parse", str(vault / "geo.md")])
    assert result.exit_code == 0
    assert "SingleLineBasic [2-2]" in result.stdout
    assert "3 question(s)" in result.stdout


def test_parse_missing_file(mock_home, tmp_path):
    result = runner.invoke(app, ["parse", str(tmp_path / "nope.md")])
    assert result.exit_code == 2


# --- Stats ---


def test_stats(vault, fixed_today):
    result = runner.invoke(app, ["-v", "stats", str(vault)])
    assert result.exit_code == 0
    assert "All decks: due 1, new 1, total 3" in result.stdout
    assert "geo: due 1, new 1, total 3" in result.stdout


# --- Review ---


def test_review_session(vault, fixed_today):
    result = runner.invoke(app, ["review", str(vault)], input="s\ng\ns\ne\n")
    assert result.exit_code == 0
    assert "Capital of Italy" in result.stdout
    assert "Reviewed 2 card(s)." in result.stdout

    text = (vault / "geo.md").read_text(encoding="utf-8")
    assert "Capital of Italy::Rome\n<!--SR:!2024-03-26,25,250-->" in text
    assert "Capital of France::Paris\n<!--SR:!2024-03-05,4,270-->" in text


def test_review_quit(vault, fixed_today):
    result = runner.invoke(app, ["review", str(vault), "--deck", "geo"], input="q\n")
    assert result.exit_code == 0
    assert "Reviewed 0 card(s)." in result.stdout
    assert (vault / "geo.md").read_text(encoding="utf-8") == GEOGRAPHY_NOTE


def test_review_cram_leaves_notes_alone(vault, fixed_today):
    result = runner.invoke(app, ["review", str(vault), "--cram"], input="s\ne\ns\ne\ns\ne\n")
    assert result.exit_code == 0
    assert "Reviewed 3 card(s)." in result.stdout
    assert (vault / "geo.md").read_text(encoding="utf-8") == GEOGRAPHY_NOTE


def test_review_invalid_settings(vault, fixed_today, monkeypatch):
    monkeypatch.setenv("MNEME_BASE_EASE", "0")
    result = runner.invoke(app, ["review", str(vault)])
    assert result.exit_code == 1
    assert "base_ease must be positive" in result.stdout


# --- Config ---


def test_config_show(vault, monkeypatch):
    monkeypatch.setenv("MNEME_VAULT_ROOT", str(vault))
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["vault_root"] == str(vault.resolve())
    assert data["base_ease"] == 250
    assert data["card_order"] == "due_first_sequential"
    assert "log_dir" not in data
