"""
Registry storage for delegates, itinerary, flights and catalog documents.

- store: In-memory collections with batched writes and snapshot
  subscriptions.
- seed: Default itinerary, rule catalog and packages.
"""
