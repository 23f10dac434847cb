"""
Rules package.

Defines the catalog data model, the eligibility evaluator and the catalog
administration used by the Eligibility Service. The evaluator returns a
fail-closed allow/deny decision and the rule that explains it.

Modules of interest:
- models: Dataclasses for packages, rules, events, delegates and flights.
- engine: Direct and linked-itinerary event grants; golf-day eligibility.
- catalog: Rule and package edits that keep package grants in step with
  the rule catalog.
"""
