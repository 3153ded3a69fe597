"""Domain apps of the room booking service."""
