"""
Golf tournament flights: roster lookup and delegate reconciliation.
"""
