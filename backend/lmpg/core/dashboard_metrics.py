"""Dashboard Metrics — pure aggregation of per-session attendance counts.

Invariants:
    - Input rows are (session_date, present, absent) tuples; no IO
    - averageAttendance and growthRate are whole numbers (JS Math.round semantics)
    - growthRate compares the earliest and latest ISO weeks present in the data
"""

import math
from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class SessionCounts:
    session_date: date
    present: int
    absent: int


def js_round(value: float) -> int:
    """Round half up, as Math.round does (Python's round() is banker's rounding)."""
    return math.floor(value + 0.5)


def growth_rate(sessions: list[SessionCounts]) -> int:
    """Percent change of average present count between first and last ISO week."""
    weekly: dict[tuple[int, int], list[int]] = {}
    for s in sessions:
        iso = s.session_date.isocalendar()
        weekly.setdefault((iso[0], iso[1]), []).append(s.present)

    if len(weekly) < 2:
        return 0
    weeks = sorted(weekly)
    first = weekly[weeks[0]]
    last = weekly[weeks[-1]]
    first_avg = sum(first) / len(first)
    last_avg = sum(last) / len(last)
    if first_avg > 0:
        return js_round((last_avg - first_avg) / first_avg * 100)
    if last_avg > 0:
        return 100
    return 0


def compute_dashboard_metrics(
    sessions: list[SessionCounts], total_individuals: int,
) -> dict:
    """Build the dashboard payload. Sessions are reported newest first."""
    total_sessions = len(sessions)
    total_present = sum(s.present for s in sessions)
    total_absent = sum(s.absent for s in sessions)
    average = js_round(total_present / total_sessions) if total_sessions else 0

    ordered = sorted(sessions, key=lambda s: s.session_date, reverse=True)
    return {
        "total_sessions": total_sessions,
        "total_present": total_present,
        "total_absent": total_absent,
        "average_attendance": average,
        "growth_rate": growth_rate(sessions),
        "total_individuals": total_individuals,
        "attendance_data": [
            {
                "date": s.session_date.isoformat(),
                "present": s.present,
                "absent": s.absent,
                "total": s.present + s.absent,
            }
            for s in ordered
        ],
    }
