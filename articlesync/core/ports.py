"""Port interfaces for the articlesync import/export adapter.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - ArticleStorePort / ArticleStoreSession: relational store for articles,
     details, suppliers, images, prices and relations
   - MediaStorePort: resolve stored media files
   - DeferredWorkPort: queue for work that cannot complete synchronously

2. **Driving Ports** (adapters/external systems call into core)
   - ImportPort: batch upsert of import records
   - ExportPort: reconstitution of record graphs for export
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any

from .models import (
    ArticleEntry,
    ArticleImage,
    DeferredTask,
    ExportResult,
    ImportRecord,
    Media,
    PriceEntry,
    RelationKind,
    StoredDetail,
    Supplier,
    WriteResult,
)


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class ArticleStoreSession(ABC):
    """Typed operations against the relational store inside one transaction.

    Obtained from ArticleStorePort.transaction(). Every write issued through
    a session is committed together when the transaction block exits
    normally and rolled back when it raises.

    Implementations must raise StorageError for constraint violations and
    connectivity failures.
    """

    @abstractmethod
    async def get_detail_by_order_number(self, order_number: str) -> StoredDetail | None:
        """Look up an article detail by its natural key.

        Returns:
            The stored detail, or None if the order number is unseen.
        """

    @abstractmethod
    async def get_supplier_by_id(self, supplier_id: int) -> Supplier | None:
        """Look up a supplier by id."""

    @abstractmethod
    async def get_supplier_by_name(self, name: str) -> Supplier | None:
        """Look up a supplier by exact name."""

    @abstractmethod
    async def create_supplier(self, name: str) -> Supplier:
        """Insert a supplier and return it with its id.

        Idempotent by name: if a supplier with that name was created
        concurrently, the existing supplier is returned.
        """

    @abstractmethod
    async def insert_article(
        self, entry: ArticleEntry, supplier_id: int
    ) -> StoredDetail:
        """Insert a new article and its main detail.

        Returns:
            The newly created main detail.
        """

    @abstractmethod
    async def insert_variant(
        self, article_id: int, entry: ArticleEntry
    ) -> StoredDetail:
        """Insert a variant detail for an existing article."""

    @abstractmethod
    async def update_article(
        self,
        detail: StoredDetail,
        entry: ArticleEntry,
        supplier_id: int | None,
    ) -> None:
        """Update an existing article and detail in place.

        Only fields set on `entry` are changed. `supplier_id` of None keeps
        the current supplier link.
        """

    @abstractmethod
    async def count_images(self, article_id: int) -> int:
        """Number of images currently linked to an article."""

    @abstractmethod
    async def find_image(self, article_id: int, media_id: int) -> int | None:
        """Id of the image row linking a media to an article, if any."""

    @abstractmethod
    async def insert_image(self, article_id: int, image: ArticleImage) -> int:
        """Link an image row to an article and return the new row id."""

    @abstractmethod
    async def update_image(
        self,
        image_id: int,
        image: ArticleImage,
        keep_main: bool = False,
        keep_position: bool = False,
    ) -> None:
        """Update an existing image row in place.

        Args:
            image_id: Row to update.
            image: New image values.
            keep_main: Leave the stored main flag untouched.
            keep_position: Leave the stored position untouched.
        """

    @abstractmethod
    async def replace_prices(
        self,
        detail: StoredDetail,
        customer_group: str,
        prices: Sequence[PriceEntry],
    ) -> None:
        """Replace all prices of a detail for one customer group."""

    @abstractmethod
    async def category_exists(self, category_id: int) -> bool:
        """Whether a category with that id exists."""

    @abstractmethod
    async def link_category(self, article_id: int, category_id: int) -> None:
        """Assign an article to a category. Existing links are kept."""

    @abstractmethod
    async def article_exists(self, article_id: int) -> bool:
        """Whether an article with that id exists."""

    @abstractmethod
    async def link_relation(
        self, article_id: int, related_article_id: int, kind: RelationKind
    ) -> None:
        """Link a similar or accessory article. Existing links are kept."""


class ArticleStorePort(ABC):
    """Port for the relational store holding articles and their entities.

    Adapters implementing this port provide transactional writes and
    flat row reads for export. Uniqueness of detail order numbers and
    supplier names is enforced by the store, not by the core.
    """

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[ArticleStoreSession]:
        """Open a transaction.

        Usage:
            async with store.transaction() as session:
                await session.get_supplier_by_name("Acme")

        Raises:
            StorageError: If the store is unavailable or the commit fails.
        """

    @abstractmethod
    async def fetch_rows(
        self, entity_type: str, article_ids: Sequence[int]
    ) -> list[dict[str, Any]]:
        """Fetch export rows of one entity type for the given articles.

        Args:
            entity_type: One of the readable sections (article, price, ...).
            article_ids: Article ids to filter on.

        Returns:
            Rows keyed by qualified column name (e.g. "article.id").
            Empty list if nothing matches.
        """

    @abstractmethod
    async def list_article_ids(
        self,
        offset: int = 0,
        limit: int | None = None,
        category_id: int | None = None,
    ) -> list[int]:
        """List article ids in ascending order, optionally by category."""


class MediaStorePort(ABC):
    """Port for resolving already stored media files. Read-only."""

    @abstractmethod
    async def get_media(self, media_id: int) -> Media | None:
        """Return the stored media, or None if the id is unknown."""


class DeferredWorkPort(ABC):
    """Port for work the write path hands off for asynchronous completion.

    Records are grouped into buckets ("articlesImages") and sub-buckets
    ("default"). A separate consumer drains the queue; nothing is retried
    or cleared by the core.
    """

    @abstractmethod
    def enqueue(
        self, bucket: str, record: dict[str, Any], sub_bucket: str = "default"
    ) -> DeferredTask:
        """Append a record to a bucket."""

    @abstractmethod
    def drain(self, bucket: str | None = None) -> list[DeferredTask]:
        """Remove and return queued tasks in enqueue order.

        Args:
            bucket: Only drain this bucket. If None, drain everything.
        """

    @abstractmethod
    def snapshot(self) -> dict[str, dict[str, list[dict[str, Any]]]]:
        """Copy of the queued records as bucket -> sub-bucket -> records."""


# ============================================================================
# DRIVING PORTS (Adapters/external systems call into core)
# ============================================================================


class ImportPort(ABC):
    """Port for importing batches of article records."""

    @abstractmethod
    async def write(self, records: ImportRecord) -> WriteResult:
        """Upsert a batch of hierarchical article records.

        Raises:
            ValidationError: If the batch holds no articles or is malformed.
            MissingSupplierError: If a new article has no supplier reference.
            ReferenceNotFoundError: If a referenced entity does not exist.
            StorageError: If the store fails.
        """

    @abstractmethod
    def get_unprocessed_data(self) -> dict[str, dict[str, list[dict[str, Any]]]]:
        """Records deferred by previous write calls."""

    @abstractmethod
    def get_log_messages(self) -> list[str]:
        """Messages recorded for articles skipped by the most recent write call."""


class ExportPort(ABC):
    """Port for exporting article record graphs."""

    @abstractmethod
    async def read(
        self, ids: Sequence[int], columns: dict[str, Any]
    ) -> ExportResult:
        """Reconstitute records for the given article ids.

        Raises:
            ValidationError: If ids or columns are empty or unknown.
            StorageError: If the store fails.
        """

    @abstractmethod
    async def read_record_ids(
        self,
        start: int = 0,
        limit: int | None = None,
        category_id: int | None = None,
    ) -> list[int]:
        """Article ids available for export, paged."""

    @abstractmethod
    def get_default_columns(self) -> dict[str, list[str]]:
        """All exportable column expressions per section."""

    @abstractmethod
    def get_sections(self) -> list[str]:
        """Names of the readable sections."""
