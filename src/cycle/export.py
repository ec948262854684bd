"""CSV export of the daily log collection."""

from __future__ import annotations

import csv
import io
from typing import Iterable

from src.models.tracking import LogEntry

CSV_HEADERS = ["Date", "Flow", "Spotting", "Mood", "WaterIntake", "Symptoms"]


def logs_to_csv(logs: Iterable[LogEntry]) -> str:
    """One row per entry in the given order; symptoms joined with ``;``.

    Empty optional fields become empty cells.  Values containing a comma or
    quote are quoted per RFC 4180.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for entry in logs:
        writer.writerow(
            [
                entry.date,
                entry.flow.value if entry.flow else "",
                entry.spotting or "",
                entry.mood or "",
                str(entry.water_intake),
                ";".join(entry.symptoms),
            ]
        )
    return buf.getvalue().rstrip("\n")
