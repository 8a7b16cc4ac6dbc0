"""External adapters for the articlesync import/export adapter.

This package contains all external dependencies (SQLite, etc.) and provides
implementations of the core port interfaces.

Adapter Organization:

- store/: Adapters for article persistence and export queries (SQLite)
- queue/: Adapters for deferred work (in-memory)
- cli/: Command-line interface for import and export commands
"""
