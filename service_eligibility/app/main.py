"""
Eligibility service for the Delegate Access Layer.
"""

from dataclasses import replace
from typing import Dict, Any, List, Optional

from fastapi import Query

from shared.base_service import BaseService
from shared.errors import NotFoundError, ValidationError
from shared.logging import set_delegate_context

from .checkin.station import check_in, check_in_counts, find_delegate
from .golf.flights import duplicate_players, flight_roster_for, flights_for_day, reconcile_golf_assignments
from .registry.seed import PACKAGES_DOC, RULES_DOC, seed_defaults
from .registry.store import RegistryStore
from .rules.catalog import CatalogManager, repoint_delegates
from .rules.engine import evaluate_event_access, is_golf_eligible, permitted_events
from .rules.models import (
    Delegate, Event, GolfGrouping, Package, Rule,
    load_package_catalog, load_rule_catalog,
    EligibilityCheckRequest, EligibilityCheckResponse, GolfEligibilityResponse,
    CheckInRequest, CheckInResponse,
    RuleCreateRequest, RuleUpdateRequest, RuleResponse,
    PackageCreateRequest, PackageUpdateRequest, PackageResponse, GrantUpdateRequest,
    GolfGroupingPayload, EventPayload, DelegatePayload,
)
from .schedule.views import schedule_by_date


def _rule_response(category: str, rule: Rule) -> RuleResponse:
    return RuleResponse(
        category=category,
        id=rule.id,
        name=rule.name,
        date=rule.date,
        linked_events=rule.linked_events,
        golf_type=rule.golf_type
    )


def _package_response(package: Package) -> PackageResponse:
    return PackageResponse(code=package.code, category=package.category, permissions=package.permissions)


class EligibilityService(BaseService):
    """Eligibility service implementation."""

    def __init__(self, store: Optional[RegistryStore] = None):
        super().__init__("eligibility", 8020)

        self.store = store or RegistryStore()
        self.catalog = CatalogManager()
        self.delegates: Dict[str, Delegate] = {}
        self.events: Dict[str, Event] = {}
        self.groupings: List[GolfGrouping] = []

        self._unsubscribe = [
            self.store.on_snapshot("delegates", self._on_delegates),
            self.store.on_snapshot("events", self._on_events),
            self.store.on_snapshot("golf_groupings", self._on_groupings),
            self.store.on_snapshot("config", self._on_config),
        ]

        if self.config.seed_defaults:
            seed_defaults(self.store)

        self._setup_eligibility_routes()

    # Snapshot handlers

    def _on_delegates(self, documents: List[Dict[str, Any]]):
        self.delegates = {d.id: d for d in (Delegate.from_dict(doc) for doc in documents)}

    def _on_events(self, documents: List[Dict[str, Any]]):
        self.events = {e.id: e for e in (Event.from_dict(doc) for doc in documents)}

    def _on_groupings(self, documents: List[Dict[str, Any]]):
        self.groupings = [GolfGrouping.from_dict(doc) for doc in documents]

    def _on_config(self, documents: List[Dict[str, Any]]):
        by_id = {doc.get("id"): doc for doc in documents}
        packages = (by_id.get(PACKAGES_DOC) or {}).get("data") or {}
        rules = (by_id.get(RULES_DOC) or {}).get("data") or {}
        self.catalog = CatalogManager(load_package_catalog(packages), load_rule_catalog(rules))

    # Lookups

    def _delegate(self, delegate_id: str) -> Delegate:
        delegate = self.delegates.get(delegate_id)
        if delegate is None:
            raise NotFoundError("Delegate", delegate_id)
        return delegate

    def _event(self, event_id: str) -> Event:
        event = self.events.get(event_id)
        if event is None:
            raise NotFoundError("Event", event_id)
        return event

    def _save_catalog(self, batch=None):
        """Write both catalog documents, in the given batch or a new one."""
        packages, rules = self.catalog.to_documents()
        if batch is not None:
            batch.set("config", PACKAGES_DOC, {"id": PACKAGES_DOC, "data": packages})
            batch.set("config", RULES_DOC, {"id": RULES_DOC, "data": rules})
            return
        with self.store.batch() as new_batch:
            self._save_catalog(new_batch)

    def _setup_eligibility_routes(self):
        """Set up eligibility-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "eligibility",
                "message": "Delegate Access Layer - Eligibility Service",
                "version": "1.0.0",
                "capabilities": ["eligibility", "checkin", "catalog_admin", "golf_flights"]
            }

        # Eligibility

        @self.app.post("/eligibility/check", response_model=EligibilityCheckResponse)
        async def check_eligibility(request: EligibilityCheckRequest):
            """Explain whether a delegate may attend an event."""
            delegate = self._delegate(request.delegate_id)
            event = self._event(request.event_id)
            packages, rules = self.catalog.snapshot()

            with self.metrics.time_operation("eligibility_check_duration_seconds"):
                result = evaluate_event_access(delegate, event, packages, rules)

            self.metrics.increment_counter(
                "eligibility_checks_total",
                decision="allow" if result.allowed else "deny",
                grant_type=result.grant_type.value if result.grant_type else "none"
            )

            return EligibilityCheckResponse(
                delegate_id=delegate.id,
                event_id=event.id,
                allowed=result.allowed,
                reason=result.reason,
                matched_rules=result.matched_rules,
                grant_type=result.grant_type
            )

        @self.app.get("/eligibility/golf/{delegate_id}/{day}", response_model=GolfEligibilityResponse)
        async def golf_eligibility(delegate_id: str, day: int):
            """Golf-day qualification plus the delegate's current flight."""
            if day not in (1, 2):
                raise ValidationError("Golf day must be 1 or 2", {"day": day})
            delegate = self._delegate(delegate_id)
            packages, rules = self.catalog.snapshot()
            flight = flight_roster_for(delegate.id, day, self.groupings)

            return GolfEligibilityResponse(
                delegate_id=delegate.id,
                day=day,
                eligible=is_golf_eligible(delegate, day, packages, rules),
                flight=flight.to_dict() if flight else None
            )

        # Guest portal

        @self.app.get("/delegates/{delegate_id}/itinerary")
        async def delegate_itinerary(delegate_id: str):
            """Events the delegate's package admits them to, grouped by date."""
            delegate = self._delegate(delegate_id)
            packages, rules = self.catalog.snapshot()
            package = packages.get(delegate.package)
            allowed = permitted_events(delegate, self.events.values(), packages, rules)

            return {
                "delegate_id": delegate.id,
                "package": delegate.package,
                "category": package.category if package else None,
                "days": [
                    {"date": day["date"], "events": [e.to_dict() for e in day["events"]]}
                    for day in schedule_by_date(allowed)
                ]
            }

        @self.app.get("/delegates/{delegate_id}/flight/{day}")
        async def delegate_flight(delegate_id: str, day: int):
            """The delegate's flight on a tournament day."""
            delegate = self._delegate(delegate_id)
            flight = flight_roster_for(delegate.id, day, self.groupings)
            return {"delegate_id": delegate.id, "day": day, "flight": flight.to_dict() if flight else None}

        @self.app.get("/schedule")
        async def get_schedule():
            """Full itinerary grouped by date."""
            return {
                "days": [
                    {"date": day["date"], "events": [e.to_dict() for e in day["events"]]}
                    for day in schedule_by_date(self.events.values())
                ]
            }

        # Staff portal

        @self.app.post("/checkin", response_model=CheckInResponse)
        async def process_check_in(request: CheckInRequest):
            """Check a scanned delegate in to the station's event."""
            event = self._event(request.event_id)
            delegate = find_delegate(request.query, self.delegates.values())
            if delegate is None:
                self.metrics.increment_counter("checkins_total", outcome="not_found")
                raise NotFoundError("Delegate", request.query.strip().upper())

            set_delegate_context(delegate.id)
            packages, rules = self.catalog.snapshot()

            try:
                receipt = check_in(delegate, event, packages, rules)
            except Exception as e:
                self.metrics.increment_counter("checkins_total", outcome=getattr(e, "code", "error").lower())
                raise

            self.store.set("delegates", receipt.delegate.id, receipt.delegate.to_dict())
            self.metrics.increment_counter("checkins_total", outcome="success")
            self.metrics.record_business_event("delegate_checked_in")

            return CheckInResponse(
                delegate_id=receipt.delegate.id,
                delegate_name=receipt.delegate.name,
                event_id=receipt.event_id,
                checked_in_at=receipt.checked_in_at,
                check_in_count=receipt.delegate.check_in_count
            )

        @self.app.get("/checkin/stats")
        async def check_in_stats():
            """Check-in count per event, in itinerary order."""
            counts = check_in_counts(self.events.values(), self.delegates.values())
            return {
                "days": [
                    {
                        "date": day["date"],
                        "events": [
                            {"event_id": e.id, "time": e.time, "title": e.title, "count": counts.get(e.id, 0)}
                            for e in day["events"]
                        ]
                    }
                    for day in schedule_by_date(self.events.values())
                ],
                "total": sum(counts.values())
            }

        # Admin portal: rules

        @self.app.get("/admin/rules/{category}", response_model=List[RuleResponse])
        async def list_rules(category: str):
            return [_rule_response(category, rule) for rule in self.catalog.get_rules(category)]

        @self.app.post("/admin/rules/{category}", response_model=RuleResponse, status_code=201)
        async def create_rule(category: str, request: RuleCreateRequest):
            """Add a rule; every package of the category gets it ungranted."""
            rule = self.catalog.add_rule(
                category,
                request.name,
                date=request.date,
                linked_events=request.linked_events,
                golf_type=request.golf_type
            )
            self._save_catalog()
            return _rule_response(category, rule)

        @self.app.put("/admin/rules/{category}/{rule_id}", response_model=RuleResponse)
        async def update_rule(category: str, rule_id: str, request: RuleUpdateRequest):
            rule = self.catalog.update_rule(
                category,
                rule_id,
                name=request.name,
                date=request.date,
                linked_events=request.linked_events,
                golf_type=request.golf_type,
                clear_golf_type=request.clear_golf_type
            )
            self._save_catalog()
            return _rule_response(category, rule)

        @self.app.delete("/admin/rules/{category}/{rule_id}")
        async def delete_rule(category: str, rule_id: str):
            """Delete a rule and its grant from every package of the category."""
            self.catalog.remove_rule(category, rule_id)
            self._save_catalog()
            return {"success": True, "message": "Rule deleted successfully"}

        # Admin portal: packages

        @self.app.get("/admin/packages", response_model=List[PackageResponse])
        async def list_packages(category: Optional[str] = Query(None, description="Filter by category")):
            return [
                _package_response(p) for p in self.catalog.packages.values()
                if category is None or p.category == category
            ]

        @self.app.post("/admin/packages", response_model=PackageResponse, status_code=201)
        async def create_package(request: PackageCreateRequest):
            package = self.catalog.add_package(request.code, request.category.value)
            self._save_catalog()
            return _package_response(package)

        @self.app.put("/admin/packages/{code}", response_model=PackageResponse)
        async def update_package(code: str, request: PackageUpdateRequest):
            """Rename and/or recategorize; renamed packages carry their delegates."""
            package = self.catalog.update_package(
                code,
                new_code=request.code,
                category=request.category.value if request.category else None
            )

            with self.store.batch() as batch:
                self._save_catalog(batch)
                if package.code != code:
                    for delegate in repoint_delegates(self.delegates.values(), code, package.code):
                        batch.set("delegates", delegate.id, delegate.to_dict())

            return _package_response(package)

        @self.app.delete("/admin/packages/{code}")
        async def delete_package(code: str):
            self.catalog.remove_package(code)
            self._save_catalog()
            return {"success": True, "message": "Package deleted successfully"}

        @self.app.put("/admin/packages/{code}/grants/{rule_id}", response_model=PackageResponse)
        async def update_grant(code: str, rule_id: str, request: GrantUpdateRequest):
            """Set a grant explicitly, or toggle it when no value is given."""
            if request.granted is None:
                self.catalog.toggle_grant(code, rule_id)
            else:
                self.catalog.set_grant(code, rule_id, request.granted)
            self._save_catalog()
            return _package_response(self.catalog.get_package(code))

        # Admin portal: itinerary and delegates

        @self.app.put("/admin/events/{event_id}")
        async def save_event(event_id: str, payload: EventPayload):
            """Create or edit an itinerary entry."""
            event = Event(id=event_id, **payload.model_dump())
            created = event_id not in self.events
            self.store.set("events", event_id, event.to_dict())
            self.logger.info("Event saved", event_id=event_id, created=created)
            return event.to_dict()

        @self.app.delete("/admin/events/{event_id}")
        async def delete_event(event_id: str):
            """Delete an itinerary entry. Rules linking it keep the dangling id."""
            self._event(event_id)
            self.store.delete("events", event_id)
            self.logger.info("Event deleted", event_id=event_id)
            return {"success": True, "message": "Event deleted successfully"}

        @self.app.put("/admin/delegates/{delegate_id}")
        async def save_delegate(delegate_id: str, payload: DelegatePayload):
            """Create or edit a delegate's registration.

            A changed package must exist; an unchanged dangling one is kept.
            """
            existing = self.delegates.get(delegate_id)
            repointed = existing is None or existing.package != payload.package
            if repointed and payload.package not in self.catalog.packages:
                raise ValidationError(
                    f"Package '{payload.package}' does not exist",
                    {"package": payload.package}
                )

            if existing is None:
                delegate = Delegate(id=delegate_id, **payload.model_dump())
            else:
                delegate = replace(existing, **payload.model_dump())

            self.store.set("delegates", delegate_id, delegate.to_dict())
            self.logger.info("Delegate saved", delegate_id=delegate_id, package=delegate.package,
                             created=existing is None)
            return delegate.to_dict()

        @self.app.delete("/admin/delegates/{delegate_id}")
        async def delete_delegate(delegate_id: str):
            """Delete a delegate and remove them from every flight."""
            self._delegate(delegate_id)
            with self.store.batch() as batch:
                batch.delete("delegates", delegate_id)
                for grouping in self.groupings:
                    if delegate_id in grouping.players:
                        players = [p for p in grouping.players if p != delegate_id]
                        batch.set("golf_groupings", grouping.id, replace(grouping, players=players).to_dict())
            self.logger.info("Delegate deleted", delegate_id=delegate_id)
            return {"success": True, "message": "Delegate deleted successfully"}

        # Admin portal: golf

        @self.app.get("/admin/golf/groupings")
        async def list_groupings(day: Optional[int] = Query(None, ge=1, le=2)):
            groupings = flights_for_day(self.groupings, day) if day else self.groupings
            return [g.to_dict() for g in groupings]

        @self.app.put("/admin/golf/groupings")
        async def replace_groupings(payload: List[GolfGroupingPayload]):
            """Replace all flights and bring delegates' golf details in line."""
            new_groupings = [GolfGrouping(**item.model_dump()) for item in payload]
            previous = list(self.groupings)
            changes = reconcile_golf_assignments(self.delegates.values(), new_groupings, previous)

            new_ids = {g.id for g in new_groupings}
            with self.store.batch() as batch:
                for grouping in previous:
                    if grouping.id not in new_ids:
                        batch.delete("golf_groupings", grouping.id)
                for grouping in new_groupings:
                    batch.set("golf_groupings", grouping.id, grouping.to_dict())
                for delegate_id, (day1, day2) in changes.items():
                    delegate = replace(self.delegates[delegate_id], golf_day1=day1, golf_day2=day2)
                    batch.set("delegates", delegate_id, delegate.to_dict())

            return {
                "groupings": len(new_groupings),
                "delegates_updated": sorted(changes),
                "duplicates": duplicate_players(new_groupings)
            }

        @self.app.get("/eligibility/stats")
        async def get_stats():
            """Catalog and registry statistics."""
            return {
                "catalog": self.catalog.get_catalog_stats(),
                "registry": self.store.get_store_stats()
            }

    async def _check_dependencies(self):
        """The registry is in-process; report its document counts."""
        stats = self.store.get_store_stats()
        return {"registry": "ok" if stats["documents"]["config"] else "empty"}

    def stop(self):
        """Drop registry subscriptions."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        self.logger.info("Eligibility service stopped")


def create_app(store: Optional[RegistryStore] = None):
    """Create eligibility service application."""
    service = EligibilityService(store)
    return service.app


if __name__ == "__main__":
    service = EligibilityService()
    service.run()
