"""CSV rendering of completed sessions (semicolon separated, UTF-8 with BOM)."""

import csv
import io
import re
from datetime import datetime
from typing import Iterable

from worktime.utils.timekeeping import as_utc, format_duration

BOM = "\ufeff"
DATE_FORMAT = "%d.%m.%Y"
TIME_FORMAT = "%H:%M:%S"

SESSIONS_HEADER = [
    "Dátum", "Čas", "ID Zamestnanca", "Meno Zamestnanca",
    "ID Projektu", "Názov Projektu", "Trvanie (minúty)", "Trvanie (formát)",
]
PROJECT_SESSIONS_HEADER = ["Dátum", "Čas", "Zamestnanec", "Trvanie", "Trvanie (minúty)"]


def _writer(output: io.StringIO):
    return csv.writer(output, delimiter=";", lineterminator="\n")


def _date_and_time(timestamp: datetime):
    ts = as_utc(timestamp)
    return ts.strftime(DATE_FORMAT), ts.strftime(TIME_FORMAT)


def sessions_to_csv(sessions: Iterable) -> str:
    output = io.StringIO()
    output.write(BOM)
    writer = _writer(output)
    writer.writerow(SESSIONS_HEADER)
    for s in sessions:
        day, clock = _date_and_time(s.timestamp)
        writer.writerow([
            day,
            clock,
            s.employee_id,
            s.employee_name,
            s.project_id,
            s.project_name,
            s.duration_minutes,
            format_duration(s.duration_minutes),
        ])
    return output.getvalue()


def project_sessions_to_csv(sessions: Iterable) -> str:
    output = io.StringIO()
    output.write(BOM)
    writer = _writer(output)
    writer.writerow(PROJECT_SESSIONS_HEADER)
    for s in sessions:
        day, clock = _date_and_time(s.timestamp)
        writer.writerow([day, clock, s.employee_name, format_duration(s.duration_minutes), s.duration_minutes])
    return output.getvalue()


def export_filename(prefix: str, name: str = "") -> str:
    """``report_2024-05-01.csv`` style names; whitespace in ``name`` becomes ``_``."""
    slug = re.sub(r"\s+", "_", name.strip())
    slug = re.sub(r"[^\w.-]", "", slug, flags=re.ASCII)
    return f"{prefix}_{slug}.csv" if slug else f"{prefix}.csv"
