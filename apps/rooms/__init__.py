"""Rooms app package.

Rooms and maintenance blocks are the read-only resources the booking
engine checks against. They are edited through the Django admin.
"""
