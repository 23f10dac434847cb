"""
Itinerary views shared by the guest, staff and admin portals.
"""
