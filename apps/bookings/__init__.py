"""Bookings app package.

This app encapsulates the room booking domain: the booking model, the
single rule configuration record, fair-usage limits, the conflict checker
and the admission engine. Overlapping confirmed bookings are prevented by
admitting every booking inside one serializable database transaction that
locks the room row.
"""
