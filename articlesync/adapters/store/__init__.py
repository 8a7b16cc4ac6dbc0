"""Article store adapters for persistence and export queries.

Implementations:
- SQLite (zero-config, single-file; also serves as the media store)
"""
