"""Test suite for the articlesync import/export adapter.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - Minimal dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Integration tests for adapter implementations
   - Runs against a real SQLite database in a temporary directory

3. fakes/: Port implementations for testing
   - In-memory implementations of ArticleStorePort and MediaStorePort
   - Used by core unit tests
"""
