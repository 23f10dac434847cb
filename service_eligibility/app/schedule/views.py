"""
Schedule grouping and ordering.

Times follow ``H:MM AM|PM`` and dates ``DD.MM.YYYY``. Anything else sorts
first instead of failing, so one malformed entry cannot break a listing.
"""

import re
from datetime import date
from typing import Dict, Iterable, List

from ..rules.models import Event

_TIME_RE = re.compile(r"(\d+):(\d+)\s*(AM|PM)", re.IGNORECASE)
EPOCH = date(1970, 1, 1)


def parse_time_of_day(text: str) -> int:
    """Minutes from midnight for ``H:MM AM|PM``; 0 when unparsable."""
    match = _TIME_RE.search(text or "")
    if not match:
        return 0
    hour, minute = int(match.group(1)), int(match.group(2))
    period = match.group(3).upper()
    if period == "PM" and hour < 12:
        hour += 12
    if period == "AM" and hour == 12:
        hour = 0
    return hour * 60 + minute


def parse_event_date(text: str) -> date:
    """Calendar date for ``DD.MM.YYYY``; the epoch when unparsable."""
    parts = (text or "").strip().split(".")
    if len(parts) != 3:
        return EPOCH
    try:
        day, month, year = (int(p) for p in parts)
        return date(year, month, day)
    except (ValueError, OverflowError):
        return EPOCH


def group_events_by_date(events: Iterable[Event]) -> Dict[str, List[Event]]:
    """Events keyed by date string, each list ordered by time of day."""
    groups: Dict[str, List[Event]] = {}
    for event in events:
        groups.setdefault(event.date, []).append(event)
    for items in groups.values():
        items.sort(key=lambda e: parse_time_of_day(e.time))
    return groups


def sort_dates_chronologically(dates: Iterable[str]) -> List[str]:
    return sorted(dates, key=parse_event_date)


def schedule_by_date(events: Iterable[Event]) -> List[Dict[str, object]]:
    """Grouped events in date order, as rendered by every portal."""
    groups = group_events_by_date(events)
    return [{"date": d, "events": groups[d]} for d in sort_dates_chronologically(groups)]
