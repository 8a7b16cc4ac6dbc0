"""Fake/mock implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without external dependencies:

- FakeArticleStorePort: In-memory article store with transactional rollback
- FakeMediaStorePort: In-memory media lookup
"""

from .store import FakeArticleStorePort, FakeMediaStorePort

__all__ = [
    "FakeArticleStorePort",
    "FakeMediaStorePort",
]
