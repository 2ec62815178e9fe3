"""
Board Command Line Interface (CLI)
==================================

The interactive terminal board you run like:

    tourney --source "https://docs.google.com/.../pub?output=csv"
    tourney --source listings.csv --query "date=tomorrow&sortMult=1"

It:
- loads the sheet once (nothing is written back),
- keeps the current filters/sort as a BoardState,
- re-renders the board after every command that changes the state.
"""

from __future__ import annotations
import argparse
import logging
import shlex
from pathlib import Path
from typing import List, Optional

from .config import BoardConfig, ConfigError, load_config
from .engine import Board, RenderResult
from .loader import LoadError, load_listings
from .log import setup_logging
from .state import BoardState, MULT_BUCKETS

logger = logging.getLogger(__name__)

LOADING_MESSAGE = "読み込み中..."
LOAD_FAILED_MESSAGE = "読み込みに失敗しました。ネットワークやCSVの公開設定を確認してください。"

HELP_TEXT = """
Board commands
--------------

1) View
   help
   show [n]                         (example: show 20)
   tabs                             today / tomorrow labels
   url                              query string of the current board

2) Filters (each re-renders the board)
   date today|tomorrow|all
   area "<keyword>"                 toggle (example: area "渋谷")
   title "<keyword>"                toggle (example: title "Main")
   mult 10-19|20-29|30-39|40-49|50plus   toggle
   search <text>                    no text clears the search
   shop "<shop name>"               search for a shop
   showlate on|off                  show rows whose late registration closed

3) Sorting
   sort <column>                    same column again flips the direction
   sortmult on|off                  multiplier, highest first

4) Time
   now "<YYYY-MM-DDTHH:MM>"         freeze "now" (debug)
   now clear

5) State
   query "<query string>"           replace the board state
   undo | redo | reset

6) Export (visible rows)
   export csv "<out.csv>"
   export json "<out.json>"
   report "<out.docx>"

7) Exit
   quit
"""

# commands that only read the board; everything else goes in the command log
_READ_ONLY = ("help", "show", "tabs", "url", "quit", "exit")


def _on_off(value: str) -> bool:
    v = value.lower()
    if v in ("on", "1", "true", "yes"):
        return True
    if v in ("off", "0", "false", "no"):
        return False
    raise ValueError("expected on|off")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the board CLI.

    1) Load config + dataset
    2) Build the initial state (query string, debug time)
    3) Start an interactive REPL
    """
    ap = argparse.ArgumentParser(prog="tourney", description="Poker tournament listings board")
    ap.add_argument("--source", required=True, help="CSV path/URL or .xlsx export of the listings sheet")
    ap.add_argument("--config", type=Path, help="Optional YAML config (multiplier / day bucket tuning)")
    ap.add_argument("--query", default="", help="Initial board state as a URL query string")
    ap.add_argument("--debug-time", help="Freeze 'now' (ISO date-time, e.g. 2026-02-14T23:30)")
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args(argv)

    setup_logging(verbose=args.verbose)

    try:
        config = load_config(args.config) if args.config else BoardConfig()
    except ConfigError as e:
        print(f"Config error: {e}")
        return 2

    state = BoardState.from_query(args.query)
    if args.debug_time:
        try:
            state = state.with_debug_time(args.debug_time)
        except ValueError as e:
            logger.error("%s", e)

    print(LOADING_MESSAGE)
    try:
        rows = load_listings(args.source, config=config)
    except LoadError as e:
        logger.error("%s", e)
        print(LOAD_FAILED_MESSAGE)
        return 1

    board = Board(rows=rows, config=config, source=args.source, state=state)
    print(f"Loaded {len(rows)} listings. Type 'help' for commands.")
    _print_board(board.render())

    while True:
        try:
            line = input("board> ")
        except EOFError:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("quit", "exit"):
            break
        if stripped.split()[0].lower() not in _READ_ONLY:
            # Keep a lightweight log of commands for the report (reproducibility).
            board.command_log.append(stripped)
        try:
            handle(board, stripped)
        except Exception as e:
            print(f"Error: {e}")
    return 0


def handle(board: Board, line: str) -> None:
    """Handle one CLI command line."""
    # allow search text without quoting
    if line.lower().startswith("search"):
        term = line[len("search"):].strip()
        board.apply(lambda s: s.with_search(term))
        _print_board(board.render())
        return

    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP_TEXT)
        return

    if cmd == "show":
        n = int(parts[1]) if len(parts) >= 2 else 20
        _print_board(board.render(), limit=n)
        return

    if cmd == "tabs":
        today, tomorrow = board.render().tab_labels
        print(f"today: {today} | tomorrow: {tomorrow}")
        return

    if cmd == "url":
        qs = board.query_string()
        print("?" + qs if qs else "(default board)")
        return

    if cmd == "undo":
        print("Undone." if board.undo() else "Nothing to undo.")
        _print_board(board.render())
        return

    if cmd == "redo":
        print("Redone." if board.redo() else "Nothing to redo.")
        _print_board(board.render())
        return

    if cmd == "reset":
        board.reset()
        print("State reset.")
        _print_board(board.render())
        return

    if cmd == "export":
        if len(parts) < 3:
            print('Usage: export csv "out.csv"  OR  export json "out.json"')
            return
        fmt, out_path = parts[1].lower(), parts[2]
        if fmt == "csv":
            n = board.export_csv(out_path)
        elif fmt == "json":
            n = board.export_json(out_path)
        else:
            print("Unknown export format. Use: csv or json")
            return
        print(f"Exported {n} rows to {out_path}")
        return

    if cmd == "report":
        from .report import ReportConfig, generate_docx_report
        if len(parts) < 2:
            print('Usage: report "out.docx"')
            return
        result = board.render()
        views = result.visible_rows
        rows = [board.rows[v.row_id] for v in views]
        cfg = ReportConfig(
            source=board.source,
            command_log=board.command_log,
            query_string=board.query_string(),
        )
        generate_docx_report(rows, views, parts[1], config=cfg)
        print(f"Report written to {parts[1]}")
        return

    # Everything below changes the state and re-renders.
    if len(parts) < 2:
        raise ValueError(f"'{cmd}' needs an argument. Type 'help'.")
    arg = parts[1]

    if cmd == "date":
        bucket = None if arg.lower() == "all" else arg.lower()
        board.apply(lambda s: s.select_date(bucket))
    elif cmd == "area":
        board.apply(lambda s: s.toggle_area(arg))
    elif cmd == "title":
        board.apply(lambda s: s.toggle_title(arg))
    elif cmd == "mult":
        if arg not in MULT_BUCKETS:
            raise ValueError(f"mult must be one of: {', '.join(MULT_BUCKETS)}")
        board.apply(lambda s: s.toggle_mult(arg))
    elif cmd == "shop":
        board.apply(lambda s: s.search_shop(arg))
    elif cmd == "showlate":
        show = _on_off(arg)
        board.apply(lambda s: s.with_show_expired(show))
    elif cmd == "sort":
        board.apply(lambda s: s.sort_by(arg))
    elif cmd == "sortmult":
        on = _on_off(arg)
        board.apply(lambda s: s.with_sort_by_multiplier(on))
    elif cmd == "now":
        text = None if arg.lower() == "clear" else " ".join(parts[1:])
        board.apply(lambda s: s.with_debug_time(text))
    elif cmd == "query":
        board.apply(lambda s: BoardState.from_query(arg))
    else:
        print("Unknown command. Type 'help'.")
        return
    _print_board(board.render())


def _print_board(result: RenderResult, limit: int = 20) -> None:
    print(f"Listings:{result.count_label}")
    if result.placeholder:
        print(f"  {result.placeholder}")
        return
    visible = result.visible_rows
    for v in visible[:limit]:
        mark = f" [{v.row_class}]" if v.row_class else ""
        print(f"[{v.row_id}] {v.date} {v.start} (late {v.late or '-'}) | {v.area} | {v.shop_name} | "
              f"{v.title} | fee={v.entry_fee} add_on={v.add_on} prize={v.total_prize} {v.multiplier}{mark}")
    hidden = len(result.rows) - len(visible)
    if len(visible) > limit:
        print(f"... ({len(visible)} visible, showing {limit})")
    if hidden:
        print(f"({hidden} rows with closed late registration hidden; 'showlate on' to show)")


if __name__ == "__main__":
    raise SystemExit(main())
