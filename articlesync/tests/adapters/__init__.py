"""Integration tests for adapter implementations.

Tests verify adapter behavior against real backends (SQLite in a
temporary directory) and the in-memory deferred work queue.
"""
