"""Articles service: implements ImportPort and ExportPort.

This is the core service of the adapter. The write path validates a
batch, then upserts one article per store transaction together with its
supplier link, variant details, images, prices, categories and relations.
Images that are only known by URL are never fetched here; they are
handed to the deferred work queue once their article has been committed.

The read path projects the requested columns of each export section for
a set of article ids.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .columns import SECTIONS, default_column_expressions, parse_columns, project
from .errors import (
    ImportAdapterError,
    MissingSupplierError,
    ReferenceNotFoundError,
    StorageError,
    ValidationError,
)
from .media import derive_extension
from .models import (
    ArticleDependents,
    ArticleEntry,
    ArticleImage,
    ExportResult,
    ImageEntry,
    ImportRecord,
    PriceEntry,
    ReadRequest,
    StoredDetail,
    WriteResult,
)
from .normalizer import RecordNormalizer
from .ports import (
    ArticleStorePort,
    ArticleStoreSession,
    DeferredWorkPort,
    ExportPort,
    ImportPort,
    MediaStorePort,
)
from .suppliers import resolve_or_create_supplier

logger = logging.getLogger(__name__)

ARTICLE_IMAGES_BUCKET = "articlesImages"


@dataclass
class _ArticleOutcome:
    created: bool = False
    supplier_created: bool = False
    images_attached: int = 0
    deferred: list[dict[str, Any]] = field(default_factory=list)


class ArticlesService(ImportPort, ExportPort):
    """Core implementation of the import and export ports.

    Each instance owns its deferred work queue and log messages; they
    are not shared between service instances.
    """

    def __init__(
        self,
        store: ArticleStorePort,
        media_store: MediaStorePort,
        deferred_work: DeferredWorkPort,
        normalizer: RecordNormalizer | None = None,
        skip_invalid_articles: bool = False,
        image_bucket: str = ARTICLE_IMAGES_BUCKET,
    ):
        """Initialize the articles service.

        Args:
            store: ArticleStorePort implementation for persistence.
            media_store: MediaStorePort implementation for stored media.
            deferred_work: DeferredWorkPort receiving image downloads.
            normalizer: RecordNormalizer for incoming batches.
            skip_invalid_articles: If True, an article failing a business
                rule is logged and skipped instead of aborting the batch.
                Storage errors always abort.
            image_bucket: Deferred work bucket for image downloads.
        """
        self.store = store
        self.media_store = media_store
        self.deferred_work = deferred_work
        self.normalizer = normalizer or RecordNormalizer()
        self.skip_invalid_articles = skip_invalid_articles
        self.image_bucket = image_bucket
        self._log_messages: list[str] = []

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    async def write(self, records: ImportRecord) -> WriteResult:
        """Upsert a batch of hierarchical article records.

        Articles are written in batch order, each in its own transaction.
        A failing article does not roll back articles committed before it.

        Args:
            records: Entity type -> ordered list of attribute mappings.

        Returns:
            WriteResult with counts of the work done.

        Raises:
            ValidationError: If the batch holds no articles or is malformed.
            MissingSupplierError: If a new article has no supplier reference.
            ReferenceNotFoundError: If a supplier, media, category or
                related article does not exist.
            StorageError: If the store fails.
        """
        self._log_messages = []
        batch = self.normalizer.normalize(records)

        created = updated = skipped = suppliers_created = 0
        images_attached = images_deferred = 0

        for article in batch.articles:
            try:
                outcome = await self._write_article(article, batch.dependents_of(article))
            except StorageError:
                raise
            except ImportAdapterError as e:
                if not self.skip_invalid_articles:
                    raise
                skipped += 1
                self._log_messages.append(str(e))
                logger.warning(
                    f"Skipped article {article.order_number}: {e}",
                    extra={"order_number": article.order_number},
                )
                continue

            for record in outcome.deferred:
                self.deferred_work.enqueue(self.image_bucket, record)

            if outcome.created:
                created += 1
            else:
                updated += 1
            suppliers_created += int(outcome.supplier_created)
            images_attached += outcome.images_attached
            images_deferred += len(outcome.deferred)

        result = WriteResult(
            articles_created=created,
            articles_updated=updated,
            articles_skipped=skipped,
            suppliers_created=suppliers_created,
            images_attached=images_attached,
            images_deferred=images_deferred,
        )
        logger.info(
            f"Import finished: {created} created, {updated} updated, {skipped} skipped",
            extra={
                "articles_created": created,
                "articles_updated": updated,
                "articles_skipped": skipped,
                "images_deferred": images_deferred,
            },
        )
        return result

    def get_unprocessed_data(self) -> dict[str, dict[str, list[dict[str, Any]]]]:
        """Records deferred by previous write calls, by bucket and sub-bucket."""
        return self.deferred_work.snapshot()

    def get_log_messages(self) -> list[str]:
        """Messages of articles skipped by the most recent write call."""
        return list(self._log_messages)

    async def _write_article(
        self, article: ArticleEntry, dependents: ArticleDependents
    ) -> _ArticleOutcome:
        """Upsert one article and its dependents atomically."""
        outcome = _ArticleOutcome()

        async with self.store.transaction() as session:
            detail = await session.get_detail_by_order_number(article.order_number)

            if detail is None:
                outcome.created = True
                if article.is_variant:
                    detail = await self._insert_variant(session, article)
                else:
                    if not article.has_supplier_reference:
                        raise MissingSupplierError(article.order_number)
                    missing = [
                        name
                        for name, value in (("name", article.name), ("taxId", article.tax_id))
                        if value is None
                    ]
                    if missing:
                        raise ValidationError(
                            f"Article {article.order_number} is missing required "
                            f"fields: {', '.join(missing)}"
                        )
                    supplier, outcome.supplier_created = await resolve_or_create_supplier(
                        session, article
                    )
                    detail = await session.insert_article(article, supplier.id)
            else:
                supplier_id = None
                if article.has_supplier_reference:
                    supplier, outcome.supplier_created = await resolve_or_create_supplier(
                        session, article
                    )
                    supplier_id = supplier.id
                await session.update_article(detail, article, supplier_id)

            outcome.images_attached, outcome.deferred = await self._write_images(
                session, article, detail, dependents.images
            )
            await self._write_prices(session, detail, dependents.prices)
            await self._write_categories(session, article, detail, dependents)
            await self._write_relations(session, article, detail, dependents)

        logger.debug(
            f"{'Created' if outcome.created else 'Updated'} article {article.order_number}",
            extra={
                "order_number": article.order_number,
                "article_id": detail.article_id,
                "detail_id": detail.id,
            },
        )
        return outcome

    @staticmethod
    async def _insert_variant(
        session: ArticleStoreSession, article: ArticleEntry
    ) -> StoredDetail:
        main_detail = await session.get_detail_by_order_number(article.main_number)
        if main_detail is None:
            raise ReferenceNotFoundError("main article", article.main_number, article.order_number)
        return await session.insert_variant(main_detail.article_id, article)

    async def _write_images(
        self,
        session: ArticleStoreSession,
        article: ArticleEntry,
        detail: StoredDetail,
        images: Sequence[ImageEntry],
    ) -> tuple[int, list[dict[str, Any]]]:
        """Attach stored media and collect URL-only images for deferral."""
        deferred: list[dict[str, Any]] = []
        attached = 0
        existing: int | None = None

        for image in images:
            if image.is_deferred:
                record: dict[str, Any] = {
                    "ordernumber": article.order_number,
                    "image": image.image_url,
                }
                if image.description:
                    record["description"] = image.description
                if image.main is not None:
                    record["main"] = image.main
                deferred.append(record)
                continue

            media = await self.media_store.get_media(image.media_id)
            if media is None:
                raise ReferenceNotFoundError("media", image.media_id, article.order_number)

            if existing is None:
                existing = await session.count_images(detail.article_id)

            row = ArticleImage(
                path=image.path or media.name,
                media_id=media.id,
                extension=derive_extension(media),
                description=image.description,
                main=image.main if image.main is not None else existing == 0,
                position=image.position if image.position is not None else existing + 1,
            )
            image_id = await session.find_image(detail.article_id, media.id)
            if image_id is None:
                await session.insert_image(detail.article_id, row)
                existing += 1
            else:
                await session.update_image(
                    image_id,
                    row,
                    keep_main=image.main is None,
                    keep_position=image.position is None,
                )
            attached += 1

        return attached, deferred

    @staticmethod
    async def _write_prices(
        session: ArticleStoreSession,
        detail: StoredDetail,
        prices: Sequence[PriceEntry],
    ) -> None:
        by_group: dict[str, list[PriceEntry]] = {}
        for price in prices:
            by_group.setdefault(price.customer_group, []).append(price)

        for customer_group, entries in by_group.items():
            entries.sort(key=lambda entry: entry.from_quantity)
            await session.replace_prices(detail, customer_group, entries)

    @staticmethod
    async def _write_categories(
        session: ArticleStoreSession,
        article: ArticleEntry,
        detail: StoredDetail,
        dependents: ArticleDependents,
    ) -> None:
        for category in dependents.categories:
            if not await session.category_exists(category.category_id):
                raise ReferenceNotFoundError(
                    "category", category.category_id, article.order_number
                )
            await session.link_category(detail.article_id, category.category_id)

    @staticmethod
    async def _write_relations(
        session: ArticleStoreSession,
        article: ArticleEntry,
        detail: StoredDetail,
        dependents: ArticleDependents,
    ) -> None:
        for relation in dependents.relations:
            if relation.order_number:
                target = await session.get_detail_by_order_number(relation.order_number)
                if target is None:
                    raise ReferenceNotFoundError(
                        f"{relation.kind.value} article",
                        relation.order_number,
                        article.order_number,
                    )
                related_id = target.article_id
            else:
                related_id = relation.article_id
                if not await session.article_exists(related_id):
                    raise ReferenceNotFoundError(
                        f"{relation.kind.value} article", related_id, article.order_number
                    )

            if related_id == detail.article_id:
                logger.warning(
                    f"Ignoring {relation.kind.value} link of article "
                    f"{article.order_number} to itself",
                    extra={"order_number": article.order_number},
                )
                continue
            await session.link_relation(detail.article_id, related_id, relation.kind)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    async def read(
        self, ids: Sequence[int], columns: Mapping[str, Any]
    ) -> ExportResult:
        """Reconstitute record graphs for the given article ids.

        Every requested section appears in the result, holding an empty
        list when no rows match.

        Args:
            ids: Article ids to export.
            columns: Section -> column expression or list of expressions.

        Returns:
            Section -> list of rows keyed by the requested column names.

        Raises:
            ValidationError: If ids or columns are empty, or a section or
                column is unknown. Raised before the store is touched.
            StorageError: If the store fails.
        """
        if not ids:
            raise ValidationError("Can not read articles without ids")
        if not columns:
            raise ValidationError("Can not read articles without column names")

        try:
            article_ids = tuple(int(article_id) for article_id in ids)
        except (TypeError, ValueError):
            raise ValidationError(f"Article ids must be integers, got {list(ids)!r}") from None

        request = ReadRequest(ids=article_ids, columns=parse_columns(columns))

        result: ExportResult = {}
        for section, section_columns in request.columns.items():
            rows = await self.store.fetch_rows(section, request.ids)
            result[section] = project(rows, section_columns)

        logger.debug(
            f"Read {len(request.ids)} articles",
            extra={
                "sections": list(result),
                "rows": {section: len(rows) for section, rows in result.items()},
            },
        )
        return result

    async def read_record_ids(
        self,
        start: int = 0,
        limit: int | None = None,
        category_id: int | None = None,
    ) -> list[int]:
        """Article ids available for export, in ascending order.

        Raises:
            ValidationError: If start or limit is negative.
        """
        if start < 0:
            raise ValidationError(f"start must be non-negative, got {start}")
        if limit is not None and limit < 0:
            raise ValidationError(f"limit must be non-negative, got {limit}")
        return await self.store.list_article_ids(
            offset=start, limit=limit, category_id=category_id
        )

    def get_default_columns(self) -> dict[str, list[str]]:
        return default_column_expressions()

    def get_sections(self) -> list[str]:
        return list(SECTIONS)
