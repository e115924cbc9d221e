from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Sequence

import sqlitesync


def _parse_value(text: str) -> Any:
    # JSON literals give numbers and null; anything else is taken as text.
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _parse_named(items: Sequence[str]) -> dict[str, Any]:
    named: dict[str, Any] = {}
    for item in items:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got {item!r}")
        named[name] = _parse_value(value)
    return named


def _jsonable(v: Any) -> Any:
    if isinstance(v, bytes):
        return {"_type": "bytes", "hex": v.hex(), "len": len(v)}
    return v


def execute(
    db_path: str,
    sql: str,
    params: Sequence[Any] = (),
    *,
    mode: str = "all",
) -> tuple[list[str], list[dict[str, Any]]]:
    """Run ``sql`` once against ``db_path``; returns (column names, rows)."""
    with sqlitesync.DatabaseSync(db_path) as db:
        with db.prepare(sql) as stmt:
            columns = stmt.column_names
            if mode == "run":
                stmt.run(*params)
                rows = []
            elif mode == "get":
                row = stmt.get(*params)
                rows = [] if row is None else [row]
            else:
                rows = stmt.all(*params)
    return columns, rows


def _print_table(columns: list[str], rows: list[dict[str, Any]]) -> None:
    from rich.console import Console
    from rich.table import Table as RichTable

    table = RichTable(show_lines=False)
    for name in columns:
        table.add_column(name)
    for row in rows:
        table.add_row(*("NULL" if v is None else str(_jsonable(v)) for v in row.values()))
    Console().print(table)


def main(argv: Sequence[str] | None = None) -> int:
    p = argparse.ArgumentParser(
        prog="python -m sqlitesync",
        description="Prepare one SQL statement against a SQLite database and execute it",
    )
    p.add_argument("db", help=f"Path to the database file ({sqlitesync.MEMORY} for a scratch database)")
    p.add_argument("sql", help="SQL text of a single statement")
    p.add_argument("params", nargs="*", help="Anonymous parameter values (JSON literals or text)")
    p.add_argument(
        "--named",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Named parameter, e.g. --named '$id=1' (repeatable)",
    )
    p.add_argument("--mode", choices=("run", "get", "all"), default="all", help="Execution mode")
    p.add_argument("--format", choices=("json", "table"), default="json", help="Output format")
    args = p.parse_args(argv)

    params: list[Any] = [_parse_value(v) for v in args.params]
    try:
        named = _parse_named(args.named)
    except argparse.ArgumentTypeError as e:
        p.error(str(e))
    if named:
        params.append(named)

    try:
        columns, rows = execute(args.db, args.sql, params, mode=args.mode)
    except sqlitesync.Error as e:
        error = {"code": e.code, "message": e.message}
        if isinstance(e, sqlitesync.SQLiteError):
            error["errcode"] = e.errcode
            error["errstr"] = e.errstr
        if args.format == "table":
            print(f"{e.code}: {e.message}", file=sys.stderr)
        else:
            print(json.dumps({"ok": False, "error": error, "rows": []}, ensure_ascii=False))
        return 1

    if args.format == "table":
        _print_table(columns, rows)
    else:
        payload = {
            "ok": True,
            "error": None,
            "rows": [{k: _jsonable(v) for k, v in row.items()} for row in rows],
        }
        print(json.dumps(payload, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
