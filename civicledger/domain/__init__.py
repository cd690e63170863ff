"""Domain layer: complaint entities, value objects and errors.

Nothing in this package performs I/O. Application services and
infrastructure adapters depend on it, never the other way round.
"""
