from __future__ import annotations

import json
from pathlib import Path

import pytest

from tourney import cli
from tourney.engine import Board


@pytest.fixture()
def board(rows, state) -> Board:
    return Board(rows=rows, state=state, source="test.csv")


def test_handle_date_all_shows_count(board, capsys):
    cli.handle(board, "date all")
    out = capsys.readouterr().out
    assert "Listings: 6 / 6" in out
    assert "(1 rows with closed late registration hidden" in out
    assert board.state.date_bucket is None


def test_handle_area_toggle_and_url(board, capsys):
    cli.handle(board, 'area "渋谷"')
    cli.handle(board, "sortmult on")
    capsys.readouterr()
    cli.handle(board, "url")
    out = capsys.readouterr().out.strip()
    assert out == "?area=%E6%B8%8B%E8%B0%B7&sortMult=1&debug_time=2026-02-14T20%3A00%3A00"


def test_handle_search_without_quotes(board, capsys):
    cli.handle(board, "search Shibuya Poker")
    assert board.state.search == "Shibuya Poker"
    assert "Main Event" in capsys.readouterr().out
    cli.handle(board, "search")
    assert board.state.search == ""


def test_handle_no_match_prints_placeholder(board, capsys):
    cli.handle(board, "search nothing-like-this")
    assert "該当データがありません" in capsys.readouterr().out


def test_handle_sort_twice_flips_direction(board):
    cli.handle(board, "sort entry_fee")
    assert (board.state.sort_key, board.state.sort_dir) == ("entry_fee", "asc")
    cli.handle(board, "sort entry_fee")
    assert board.state.sort_dir == "desc"


def test_handle_now_and_clear(board):
    cli.handle(board, "now 2026-02-15 01:00")
    assert board.state.now_override.hour == 1
    cli.handle(board, "now clear")
    assert board.state.now_override is None


def test_handle_query_replaces_state(board):
    cli.handle(board, 'query "date=tomorrow&mult=40-49&debug_time=2026-02-14T20:00"')
    assert board.state.date_bucket == "tomorrow"
    assert board.state.mult_bucket == "40-49"
    assert board.render().matched == 1


def test_handle_undo(board, capsys):
    cli.handle(board, "showlate on")
    assert board.state.show_expired
    cli.handle(board, "undo")
    assert not board.state.show_expired
    assert "Undone." in capsys.readouterr().out


@pytest.mark.parametrize("line", ["mult 99", "showlate maybe", "date yesterday", "now not-a-time", "area"])
def test_handle_bad_input_raises_value_error(board, line):
    with pytest.raises(ValueError):
        cli.handle(board, line)


def test_handle_export_json(board, tmp_path: Path, capsys):
    out = tmp_path / "rows.json"
    cli.handle(board, f'export json "{out}"')
    assert "Exported 3 rows" in capsys.readouterr().out
    assert len(json.loads(out.read_text(encoding="utf-8"))) == 3


def test_main_load_failure(tmp_path: Path, capsys):
    code = cli.main(["--source", str(tmp_path / "missing.csv")])
    assert code == 1
    out = capsys.readouterr().out
    assert cli.LOADING_MESSAGE in out
    assert cli.LOAD_FAILED_MESSAGE in out


def test_main_bad_config(csv_file: Path, tmp_path: Path, capsys):
    code = cli.main(["--source", str(csv_file), "--config", str(tmp_path / "nope.yml")])
    assert code == 2
    assert "Config error" in capsys.readouterr().out


def test_main_repl_session(csv_file: Path, monkeypatch, capsys):
    lines = iter(["date all", "mult 50plus", "showlate on", "quit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    code = cli.main(["--source", str(csv_file), "--debug-time", "2026-02-14T20:00"])
    assert code == 0
    out = capsys.readouterr().out
    assert "Loaded 6 listings" in out
    assert "Deepstack" in out


def test_main_stops_on_eof(csv_file: Path, monkeypatch):
    def eof(prompt=""):
        raise EOFError
    monkeypatch.setattr("builtins.input", eof)
    assert cli.main(["--source", str(csv_file), "--query", "date=all"]) == 0
