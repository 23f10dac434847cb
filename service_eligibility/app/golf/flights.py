"""
Golf flight lookups and delegate reconciliation.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from shared.logging import get_logger
from ..rules.models import Delegate, GolfAssignment, GolfGrouping

logger = get_logger("eligibility.golf")

DayAssignments = Tuple[Optional[GolfAssignment], Optional[GolfAssignment]]


def flight_roster_for(delegate_id: str, day: int, groupings: Iterable[GolfGrouping]) -> Optional[GolfGrouping]:
    """The flight holding the delegate on the given day, if any.

    When a delegate was placed in several flights the first one in list
    order is their assignment.
    """
    for grouping in groupings:
        if grouping.day == day and delegate_id in grouping.players:
            return grouping
    return None


def flights_for_day(groupings: Iterable[GolfGrouping], day: int) -> List[GolfGrouping]:
    return sorted((g for g in groupings if g.day == day), key=lambda g: g.flight_number)


def reconcile_golf_assignments(
    delegates: Iterable[Delegate],
    groupings: List[GolfGrouping],
    previous: Iterable[GolfGrouping] = (),
) -> Dict[str, DayAssignments]:
    """Per-day assignments that differ from what the delegates record.

    Every delegate named in ``groupings`` or ``previous`` is considered, so a
    player removed from all flights has their assignment cleared. Returns
    ``{delegate_id: (golf_day1, golf_day2)}`` for the delegates to update.
    """
    involved = set()
    for grouping in list(previous) + list(groupings):
        involved.update(grouping.players)

    changes: Dict[str, DayAssignments] = {}
    for delegate in delegates:
        if delegate.id not in involved:
            continue

        day1 = flight_roster_for(delegate.id, 1, groupings)
        day2 = flight_roster_for(delegate.id, 2, groupings)
        new_day1 = day1.assignment() if day1 else None
        new_day2 = day2.assignment() if day2 else None

        if new_day1 != delegate.golf_day1 or new_day2 != delegate.golf_day2:
            changes[delegate.id] = (new_day1, new_day2)

    if changes:
        logger.info("Golf assignments reconciled", delegates=len(changes))
    return changes


def duplicate_players(groupings: Iterable[GolfGrouping]) -> Dict[int, List[str]]:
    """Delegate ids placed in more than one flight on the same day."""
    seen: Dict[int, set] = {}
    duplicates: Dict[int, List[str]] = {}
    for grouping in groupings:
        day_seen = seen.setdefault(grouping.day, set())
        for player in grouping.players:
            if player in day_seen and player not in duplicates.get(grouping.day, []):
                duplicates.setdefault(grouping.day, []).append(player)
            day_seen.add(player)
    return duplicates
