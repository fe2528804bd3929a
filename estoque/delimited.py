"""Flat CSV rendering for report downloads."""

from __future__ import annotations

import csv
import io
from typing import Any, Mapping, Sequence


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_delimited_text(rows: Sequence[Mapping[str, Any]]) -> str:
    """Render rows as comma-separated text with every value double-quoted.

    The header is the first row's keys, unquoted. Embedded quotes in values
    are doubled. Returns an empty string for no rows.
    """
    if not rows:
        return ""
    keys = list(rows[0].keys())
    buf = io.StringIO()
    buf.write(",".join(keys) + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow([_text(row.get(k)) for k in keys])
    return buf.getvalue().rstrip("\n")
