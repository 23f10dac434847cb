"""
Check-in at a staff station.

A station is bound to one itinerary event. Scanning a delegate first checks
their package against the event, then refuses a second check-in to the same
event so the first arrival time is never overwritten.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from shared.logging import get_logger
from shared.errors import AccessDeniedError, AlreadyCheckedInError
from ..rules.engine import evaluate_event_access
from ..rules.models import Delegate, Event, PackageCatalog, RuleCatalog

logger = get_logger("eligibility.checkin")

# Shorter queries only match by id
MIN_NAME_QUERY = 4


@dataclass
class CheckInReceipt:
    """Outcome of a successful check-in."""
    delegate: Delegate
    event_id: str
    checked_in_at: str


def find_delegate(query: Optional[str], delegates: Iterable[Delegate]) -> Optional[Delegate]:
    """Resolve a scanned code or typed text to a delegate.

    Exact id match wins (case-insensitive); otherwise the first delegate whose
    name contains the query, for queries of at least four characters.
    """
    needle = (query or "").strip().upper()
    if not needle:
        return None

    candidates = list(delegates)
    for delegate in candidates:
        if delegate.id.upper() == needle:
            return delegate

    if len(needle) >= MIN_NAME_QUERY:
        for delegate in candidates:
            if needle in delegate.name.upper():
                return delegate

    return None


def check_in(
    delegate: Delegate,
    event: Event,
    packages: PackageCatalog,
    rules: RuleCatalog,
    at: Optional[datetime] = None,
) -> CheckInReceipt:
    """Record the delegate's arrival at the event.

    Raises AccessDeniedError when the package does not admit the delegate and
    AlreadyCheckedInError when a timestamp for the event already exists. The
    given delegate is left untouched; the receipt carries the updated copy.
    """
    result = evaluate_event_access(delegate, event, packages, rules)
    if not result.allowed:
        logger.info("Check-in denied", delegate_id=delegate.id, event_id=event.id, reason=result.reason)
        raise AccessDeniedError(
            f'ACCESS DENIED: Package "{delegate.package}" does not grant entry for "{event.title or event.id}".',
            {"delegate_id": delegate.id, "event_id": event.id, "package": delegate.package}
        )

    existing = delegate.checked_in_events.get(event.id)
    if existing:
        logger.info("Duplicate check-in rejected", delegate_id=delegate.id, event_id=event.id, checked_in_at=existing)
        raise AlreadyCheckedInError(delegate.id, event.id, existing)

    timestamp = (at or datetime.now(timezone.utc)).isoformat()
    updated = replace(
        delegate,
        checked_in_events={**delegate.checked_in_events, event.id: timestamp},
        check_in_count=delegate.check_in_count + 1,
        last_checked_in_event=event.id,
    )

    logger.info(
        "Delegate checked in",
        delegate_id=delegate.id,
        event_id=event.id,
        matched_rules=result.matched_rules,
        checked_in_at=timestamp
    )
    return CheckInReceipt(delegate=updated, event_id=event.id, checked_in_at=timestamp)


def check_in_counts(events: Iterable[Event], delegates: Iterable[Delegate]) -> Dict[str, int]:
    """Number of delegates checked in to each event."""
    counts = {event.id: 0 for event in events}
    for delegate in delegates:
        for event_id in delegate.checked_in_events:
            if event_id in counts:
                counts[event_id] += 1
    return counts
