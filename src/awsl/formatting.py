"""Pipe formatters: render lists of records as CSV or as a text table."""

from __future__ import annotations

import csv
import io
from typing import Callable

from .builtins import builtin_error
from .values import VHash, VList, VNull, VString, Value

Formatter = Callable[[Value], Value]

VALUE_COLUMN = "value"


def _cell(v: Value) -> str:
    if isinstance(v, VNull):
        return ""
    return v.inspect()


def _records(value: Value) -> list[Value] | None:
    if isinstance(value, VList):
        return value.elements
    if isinstance(value, VHash):
        return [value]
    return None


def to_rows(records: list[Value]) -> tuple[list[str], list[list[str]]]:
    """Flatten records into a header and rows of cell text.

    Hash records contribute one column per key, in first-seen order; any
    other record fills a single "value" column.
    """
    header: list[str] = []
    seen: set[str] = set()
    dicts: list[dict[str, str]] = []
    for rec in records:
        if isinstance(rec, VHash):
            cells = {k: _cell(v) for k, v in rec.pairs.items()}
        else:
            cells = {VALUE_COLUMN: _cell(rec)}
        for key in cells:
            if key not in seen:
                seen.add(key)
                header.append(key)
        dicts.append(cells)
    rows = [[d.get(key, "") for key in header] for d in dicts]
    return header, rows


def format_csv(value: Value) -> Value:
    records = _records(value)
    if records is None:
        return builtin_error("cannot format " + value.type_name() + " as csv")
    if not records:
        return VString("")
    header, rows = to_rows(records)
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return VString(buf.getvalue().removesuffix("\n"))


def format_table(value: Value) -> Value:
    records = _records(value)
    if records is None:
        return builtin_error("cannot format " + value.type_name() + " as table")
    if not records:
        return VString("")
    header, rows = to_rows(records)
    widths = [len(h) for h in header]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    lines = [header, ["-" * w for w in widths]] + rows
    out = ["  ".join(c.ljust(w) for c, w in zip(line, widths)).rstrip() for line in lines]
    return VString("\n".join(out))


FORMATTERS: dict[str, Formatter] = {
    "csv": format_csv,
    "table": format_table,
}


def register_formatter(name: str, fn: Formatter) -> None:
    FORMATTERS[name] = fn
