"""
Infrastructure layer - persistence and data lifecycle.

- kvstore: Key-value store backends, entity repositories, the legacy
  migration, and the data context that wires them together

These wrappers translate between stored JSON and the records the app uses.
"""
