"""
Shared Kernel

Base classes and utilities shared across the domain apps: domain events,
value objects, the unit of work and the message bus.
"""
