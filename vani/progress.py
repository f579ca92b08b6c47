"""
Progress statistics over a user's practice history.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional

ACTIVITY_DAYS = 7

# Postgres trims trailing zeros from microseconds; fromisoformat on 3.10 wants 3 or 6 digits
FRACTION_PATTERN = re.compile(r"([T ]\d{2}:\d{2}:\d{2})\.(\d+)")


@dataclass
class ProgressSummary:
    total_sessions: int = 0
    avg_score: int = 0
    this_week_sessions: int = 0
    # index 0 is six days ago, index 6 is today
    weekly_activity: list[int] = field(default_factory=lambda: [0] * ACTIVITY_DAYS)


def _pad_fraction(match: re.Match) -> str:
    return f"{match.group(1)}.{(match.group(2) + '000000')[:6]}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Timestamps from PostgREST come back as ISO strings; naive ones are UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            text = str(value).replace("Z", "+00:00")
            text = FRACTION_PATTERN.sub(_pad_fraction, text)
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def summarize_sessions(sessions: Iterable[dict], now: Optional[datetime] = None) -> ProgressSummary:
    """
    Compute the dashboard numbers.

    Sessions without a score count as 0 towards the average, which is
    rounded half up. Calendar days are taken in UTC.
    """
    now = parse_timestamp(now) if now is not None else datetime.now(timezone.utc)
    week_ago = now - timedelta(days=ACTIVITY_DAYS)
    today = now.astimezone(timezone.utc).date()

    summary = ProgressSummary()
    score_total = 0.0

    for session in sessions:
        summary.total_sessions += 1
        score_total += session.get("score") or 0

        completed_at = parse_timestamp(session.get("completed_at"))
        if completed_at is None:
            continue
        if completed_at > week_ago:
            summary.this_week_sessions += 1

        days_ago = (today - completed_at.astimezone(timezone.utc).date()).days
        if 0 <= days_ago < ACTIVITY_DAYS:
            summary.weekly_activity[ACTIVITY_DAYS - 1 - days_ago] += 1

    if summary.total_sessions:
        summary.avg_score = int(math.floor(score_total / summary.total_sessions + 0.5))

    return summary
