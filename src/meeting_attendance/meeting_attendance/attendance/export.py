from __future__ import annotations

import csv
import io
from typing import Iterable

from .model import AttendanceRow

CSV_HEADER = ("Date", "Meeting", "Person", "Marked At")


def rows_to_csv(rows: Iterable[AttendanceRow]) -> str:
    """Flatten attendance rows (in the given order) into CSV text; data cells are always quoted."""
    out = io.StringIO()
    csv.writer(out, lineterminator="\n").writerow(CSV_HEADER)
    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for r in rows:
        marked = r.marked_at.strftime("%Y-%m-%d %H:%M:%S") if r.marked_at else ""
        writer.writerow([r.date, r.meeting_name, r.person_name, marked])
    return out.getvalue()
