"""
Eligibility Service package for the Delegate Access Layer.

This package decides whether a conference delegate's package admits them
to an itinerary event, and serves the guest, staff and admin portals that
depend on that decision. It provides:

- app.main: API surface for eligibility checks, check-in and catalog admin.
- app.rules: Catalog model, eligibility evaluator and catalog administration.
- app.schedule: Date grouping and time ordering of the itinerary.
- app.golf: Flight roster lookup and delegate golf reconciliation.
- app.checkin: Delegate lookup and idempotent check-in.
- app.registry: In-memory registry with snapshot subscriptions.

Guidelines:
- Evaluation is pure; always pass the latest catalog snapshots.
- Unknown packages, rules and events deny rather than raise.
"""
