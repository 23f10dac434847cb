"""
Check-in station logic: delegate lookup, idempotent check-in and counts.
"""
