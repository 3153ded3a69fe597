"""Audit app package.

Stores an append-only trail of booking and rule changes. Entries are
written by event handlers that run after the originating transaction
commits, so a failed or rolled back change never leaves an audit row.
"""
