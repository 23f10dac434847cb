"""
Eligibility evaluation for the Eligibility Service.

Every function here is a pure function of the snapshots passed in. Nothing
is cached between calls, so an edit to the rule catalog is visible to the
very next evaluation.
"""

import time
from typing import Iterable, List, Optional, Set

from shared.logging import get_logger
from .models import (
    Delegate, Event, GolfDay, GrantType, Package, PackageCatalog, Rule, RuleCatalog,
    EvaluationResult
)

logger = get_logger("eligibility.rule_engine")


def resolve_package(delegate: Optional[Delegate], packages: Optional[PackageCatalog]) -> Optional[Package]:
    """Return the delegate's package, or None when it is unset or dangling."""
    if delegate is None or not delegate.package or not packages:
        return None
    return packages.get(delegate.package)


def category_rules(package: Package, rules: Optional[RuleCatalog]) -> List[Rule]:
    """Rules of the package's category; an unknown category has none."""
    if not rules:
        return []
    return list(rules.get(package.category) or [])


def granted_rules(package: Package, rules: Optional[RuleCatalog]) -> List[Rule]:
    """Rules of the package's category that the package grants.

    Keys in the package's permissions that no longer name a rule are ignored.
    """
    return [rule for rule in category_rules(package, rules) if package.grants(rule.id)]


def evaluate_event_access(
    delegate: Optional[Delegate],
    event: Optional[Event],
    packages: Optional[PackageCatalog],
    rules: Optional[RuleCatalog],
) -> EvaluationResult:
    """Decide whether a delegate's package admits them to an event."""
    start_time = time.time()

    def elapsed() -> float:
        return (time.time() - start_time) * 1000

    try:
        if event is None or not event.id:
            return EvaluationResult(allowed=False, reason="Unknown event", evaluation_time_ms=elapsed())

        package = resolve_package(delegate, packages)
        if package is None:
            logger.debug(
                "Package not in catalog",
                delegate_id=getattr(delegate, "id", None),
                package=getattr(delegate, "package", None)
            )
            return EvaluationResult(allowed=False, reason="Package not found", evaluation_time_ms=elapsed())

        # Direct grant on the event's own permission id
        if package.grants(event.permission_id):
            return EvaluationResult(
                allowed=True,
                reason=f"Package '{package.code}' grants '{event.permission_id}'",
                matched_rules=[event.permission_id],
                grant_type=GrantType.DIRECT,
                evaluation_time_ms=elapsed()
            )

        # Granted rule whose linked itinerary lists the event
        for rule in granted_rules(package, rules):
            if event.id in rule.linked_events:
                return EvaluationResult(
                    allowed=True,
                    reason=f"Rule '{rule.name}' links '{event.id}'",
                    matched_rules=[rule.id],
                    grant_type=GrantType.LINKED,
                    evaluation_time_ms=elapsed()
                )

        return EvaluationResult(
            allowed=False,
            reason=f"Package '{package.code}' does not grant '{event.title or event.id}'",
            evaluation_time_ms=elapsed()
        )

    except Exception as e:
        logger.error("Eligibility evaluation error", error=str(e))
        return EvaluationResult(allowed=False, reason="Eligibility evaluation error", evaluation_time_ms=elapsed())


def is_event_permitted(
    delegate: Optional[Delegate],
    event: Optional[Event],
    packages: Optional[PackageCatalog],
    rules: Optional[RuleCatalog],
) -> bool:
    """Whether the delegate's package admits them to the event."""
    return evaluate_event_access(delegate, event, packages, rules).allowed


def golf_rule_ids(package: Package, day: int, rules: Optional[RuleCatalog]) -> Set[str]:
    """Ids of the package category's rules tagged for the given golf day."""
    golf_day = GolfDay.for_day(day)
    if golf_day is None:
        return set()
    return {rule.id for rule in category_rules(package, rules) if rule.golf_type == golf_day}


def is_golf_eligible(
    delegate: Optional[Delegate],
    day: int,
    packages: Optional[PackageCatalog],
    rules: Optional[RuleCatalog],
) -> bool:
    """Whether the delegate qualifies as a golfer on tournament day 1 or 2."""
    try:
        if delegate is None or not delegate.is_golf_participant:
            return False

        package = resolve_package(delegate, packages)
        if package is None:
            return False

        return any(package.grants(rule_id) for rule_id in golf_rule_ids(package, day, rules))

    except Exception as e:
        logger.error("Golf eligibility error", error=str(e))
        return False


def permitted_events(
    delegate: Optional[Delegate],
    events: Iterable[Event],
    packages: Optional[PackageCatalog],
    rules: Optional[RuleCatalog],
) -> List[Event]:
    """The itinerary entries the delegate may attend, in input order."""
    return [event for event in events if is_event_permitted(delegate, event, packages, rules)]
