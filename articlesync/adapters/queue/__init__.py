"""Deferred work queue adapters.

Implementations:
- In-memory (process-scoped, drained explicitly)
"""
