"""Fake ArticleStorePort and MediaStorePort implementations for testing."""

import copy
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from articlesync.core.errors import StorageError
from articlesync.core.models import (
    ArticleEntry,
    ArticleImage,
    DetailKind,
    Media,
    PriceEntry,
    RelationKind,
    StoredDetail,
    Supplier,
)
from articlesync.core.ports import ArticleStorePort, ArticleStoreSession, MediaStorePort


@dataclass
class _State:
    suppliers: dict[int, Supplier] = field(default_factory=dict)
    articles: dict[int, dict[str, Any]] = field(default_factory=dict)
    details: dict[int, dict[str, Any]] = field(default_factory=dict)
    images: dict[int, dict[str, Any]] = field(default_factory=dict)
    prices: list[dict[str, Any]] = field(default_factory=list)
    categories: dict[int, str] = field(default_factory=dict)
    article_categories: list[tuple[int, int]] = field(default_factory=list)
    relations: dict[RelationKind, list[tuple[int, int]]] = field(
        default_factory=lambda: {kind: [] for kind in RelationKind}
    )
    next_id: int = 1

    def new_id(self) -> int:
        value = self.next_id
        self.next_id += 1
        return value


class FakeArticleSession(ArticleStoreSession):
    """Session operating directly on the fake store's state."""

    def __init__(self, store: "FakeArticleStorePort"):
        self.store = store

    @property
    def state(self) -> _State:
        return self.store.state

    def _record(self, name: str) -> None:
        self.store.calls.append(name)
        if name in self.store.fail_on:
            raise StorageError(f"Simulated failure in {name}")

    async def get_detail_by_order_number(self, order_number: str) -> StoredDetail | None:
        self._record("get_detail_by_order_number")
        for detail in self.state.details.values():
            if detail["ordernumber"] == order_number:
                return self.store.stored_detail(detail["id"])
        return None

    async def get_supplier_by_id(self, supplier_id: int) -> Supplier | None:
        self._record("get_supplier_by_id")
        return self.state.suppliers.get(supplier_id)

    async def get_supplier_by_name(self, name: str) -> Supplier | None:
        self._record("get_supplier_by_name")
        for supplier in self.state.suppliers.values():
            if supplier.name == name:
                return supplier
        return None

    async def create_supplier(self, name: str) -> Supplier:
        self._record("create_supplier")
        for supplier in self.state.suppliers.values():
            if supplier.name == name:
                return supplier
        supplier = Supplier(id=self.state.new_id(), name=name)
        self.state.suppliers[supplier.id] = supplier
        return supplier

    async def insert_article(self, entry: ArticleEntry, supplier_id: int) -> StoredDetail:
        self._record("insert_article")
        article_id = self.state.new_id()
        self.state.articles[article_id] = {
            "id": article_id,
            "name": entry.name,
            "description": entry.description,
            "supplierID": supplier_id,
            "taxID": entry.tax_id,
            "active": True if entry.active is None else entry.active,
        }
        detail_id = self._insert_detail(article_id, entry, DetailKind.MAIN)
        self.state.articles[article_id]["main_detail_id"] = detail_id
        return self.store.stored_detail(detail_id)

    async def insert_variant(self, article_id: int, entry: ArticleEntry) -> StoredDetail:
        self._record("insert_variant")
        detail_id = self._insert_detail(article_id, entry, DetailKind.VARIANT)
        return self.store.stored_detail(detail_id)

    def _insert_detail(self, article_id: int, entry: ArticleEntry, kind: DetailKind) -> int:
        if any(d["ordernumber"] == entry.order_number for d in self.state.details.values()):
            raise StorageError(f"Order number {entry.order_number} already exists")
        detail_id = self.state.new_id()
        self.state.details[detail_id] = {
            "id": detail_id,
            "articleID": article_id,
            "ordernumber": entry.order_number,
            "kind": kind,
            "instock": entry.in_stock or 0,
            "active": True if entry.active is None else entry.active,
        }
        return detail_id

    async def update_article(
        self, detail: StoredDetail, entry: ArticleEntry, supplier_id: int | None
    ) -> None:
        self._record("update_article")
        article = self.state.articles[detail.article_id]
        if entry.name is not None:
            article["name"] = entry.name
        if entry.description is not None:
            article["description"] = entry.description
        if entry.tax_id is not None:
            article["taxID"] = entry.tax_id
        if entry.active is not None:
            article["active"] = entry.active
            self.state.details[detail.id]["active"] = entry.active
        if supplier_id is not None:
            article["supplierID"] = supplier_id
        if entry.in_stock is not None:
            self.state.details[detail.id]["instock"] = entry.in_stock

    async def count_images(self, article_id: int) -> int:
        self._record("count_images")
        return sum(1 for image in self.state.images.values() if image["articleID"] == article_id)

    async def insert_image(self, article_id: int, image: ArticleImage) -> int:
        self._record("insert_image")
        image_id = self.state.new_id()
        self.state.images[image_id] = {
            "id": image_id,
            "articleID": article_id,
            "img": image.path,
            "main": image.main,
            "description": image.description,
            "position": image.position,
            "extension": image.extension,
            "media_id": image.media_id,
        }
        return image_id

    async def find_image(self, article_id: int, media_id: int) -> int | None:
        self._record("find_image")
        for image in self.state.images.values():
            if image["articleID"] == article_id and image["media_id"] == media_id:
                return image["id"]
        return None

    async def update_image(
        self,
        image_id: int,
        image: ArticleImage,
        keep_main: bool = False,
        keep_position: bool = False,
    ) -> None:
        self._record("update_image")
        row = self.state.images[image_id]
        row["img"] = image.path
        row["extension"] = image.extension
        if image.description:
            row["description"] = image.description
        if not keep_main:
            row["main"] = image.main
        if not keep_position:
            row["position"] = image.position

    async def replace_prices(
        self, detail: StoredDetail, customer_group: str, prices: Sequence[PriceEntry]
    ) -> None:
        self._record("replace_prices")
        self.state.prices = [
            row
            for row in self.state.prices
            if not (row["articledetailsID"] == detail.id and row["pricegroup"] == customer_group)
        ]
        for price in prices:
            self.state.prices.append(
                {
                    "id": self.state.new_id(),
                    "articleID": detail.article_id,
                    "articledetailsID": detail.id,
                    "pricegroup": customer_group,
                    "from": price.from_quantity,
                    "to": price.to_quantity,
                    "price": price.price,
                    "pseudoprice": price.pseudo_price,
                }
            )

    async def category_exists(self, category_id: int) -> bool:
        self._record("category_exists")
        return category_id in self.state.categories

    async def link_category(self, article_id: int, category_id: int) -> None:
        self._record("link_category")
        if (article_id, category_id) not in self.state.article_categories:
            self.state.article_categories.append((article_id, category_id))

    async def article_exists(self, article_id: int) -> bool:
        self._record("article_exists")
        return article_id in self.state.articles

    async def link_relation(
        self, article_id: int, related_article_id: int, kind: RelationKind
    ) -> None:
        self._record("link_relation")
        links = self.state.relations[kind]
        if (article_id, related_article_id) not in links:
            links.append((article_id, related_article_id))


class FakeArticleStorePort(ArticleStorePort):
    """In-memory article store for testing.

    Transactions snapshot the state on entry and restore it when the
    block raises. Every store operation is appended to `calls` for
    assertions; operation names listed in `fail_on` raise StorageError.
    """

    def __init__(self):
        """Initialize with an empty store."""
        self.state = _State()
        self.calls: list[str] = []
        self.fail_on: set[str] = set()
        self.transactions_committed = 0
        self.transactions_rolled_back = 0
        # section -> list of (article_id, qualified row) for sections
        # the fake cannot derive from its own state
        self.extra_rows: dict[str, list[tuple[int, dict[str, Any]]]] = {}

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[ArticleStoreSession]:
        self.calls.append("transaction")
        snapshot = copy.deepcopy(self.state)
        try:
            yield FakeArticleSession(self)
        except BaseException:
            self.state = snapshot
            self.transactions_rolled_back += 1
            raise
        self.transactions_committed += 1

    async def fetch_rows(
        self, entity_type: str, article_ids: Sequence[int]
    ) -> list[dict[str, Any]]:
        self.calls.append("fetch_rows")
        ids = set(article_ids)

        if entity_type == "article":
            rows = []
            for detail in self.state.details.values():
                article = self.state.articles[detail["articleID"]]
                if article["id"] not in ids:
                    continue
                supplier = self.state.suppliers.get(article["supplierID"])
                main = self.state.details.get(article.get("main_detail_id"))
                rows.append(
                    {
                        "article.id": article["id"],
                        "article.name": article["name"],
                        "article.description": article["description"],
                        "article.active": article["active"],
                        "article.taxId": article["taxID"],
                        "supplier.id": supplier.id if supplier else None,
                        "supplier.name": supplier.name if supplier else None,
                        "variant.id": detail["id"],
                        "variant.number": detail["ordernumber"],
                        "variant.kind": detail["kind"].value,
                        "variant.inStock": detail["instock"],
                        "variant.active": detail["active"],
                        "mainVariant.number": main["ordernumber"] if main else None,
                    }
                )
            return rows

        if entity_type == "price":
            return [
                {
                    "prices.id": row["id"],
                    "prices.articleId": row["articleID"],
                    "prices.articleDetailsId": row["articledetailsID"],
                    "prices.customerGroupKey": row["pricegroup"],
                    "prices.from": row["from"],
                    "prices.to": row["to"],
                    "prices.price": row["price"],
                    "prices.pseudoPrice": row["pseudoprice"],
                }
                for row in self.state.prices
                if row["articleID"] in ids
            ]

        if entity_type == "image":
            return [
                {
                    "images.id": image["id"],
                    "images.articleId": image["articleID"],
                    "images.path": image["img"],
                    "images.extension": image["extension"],
                    "images.main": image["main"],
                    "images.description": image["description"],
                    "images.position": image["position"],
                    "images.mediaId": image["media_id"],
                }
                for image in self.state.images.values()
                if image["articleID"] in ids
            ]

        if entity_type == "category":
            return [
                {
                    "categories.id": category_id,
                    "categories.articleId": article_id,
                    "categories.name": self.state.categories[category_id],
                }
                for article_id, category_id in self.state.article_categories
                if article_id in ids
            ]

        return [
            dict(row)
            for article_id, row in self.extra_rows.get(entity_type, [])
            if article_id in ids
        ]

    async def list_article_ids(
        self,
        offset: int = 0,
        limit: int | None = None,
        category_id: int | None = None,
    ) -> list[int]:
        self.calls.append("list_article_ids")
        ids = sorted(self.state.articles)
        if category_id is not None:
            linked = {a for a, c in self.state.article_categories if c == category_id}
            ids = [article_id for article_id in ids if article_id in linked]
        end = None if limit is None else offset + limit
        return ids[offset:end]

    # Test helpers

    def stored_detail(self, detail_id: int) -> StoredDetail:
        detail = self.state.details[detail_id]
        article = self.state.articles[detail["articleID"]]
        return StoredDetail(
            id=detail["id"],
            article_id=detail["articleID"],
            order_number=detail["ordernumber"],
            kind=detail["kind"],
            supplier_id=article["supplierID"],
        )

    def add_supplier(self, name: str) -> Supplier:
        supplier = Supplier(id=self.state.new_id(), name=name)
        self.state.suppliers[supplier.id] = supplier
        return supplier

    def add_article(
        self, order_number: str, name: str = "Existing article", supplier_id: int | None = None
    ) -> StoredDetail:
        article_id = self.state.new_id()
        detail_id = self.state.new_id()
        self.state.articles[article_id] = {
            "id": article_id,
            "name": name,
            "description": None,
            "supplierID": supplier_id,
            "taxID": 1,
            "active": True,
            "main_detail_id": detail_id,
        }
        self.state.details[detail_id] = {
            "id": detail_id,
            "articleID": article_id,
            "ordernumber": order_number,
            "kind": DetailKind.MAIN,
            "instock": 0,
            "active": True,
        }
        return self.stored_detail(detail_id)

    def add_category(self, name: str) -> int:
        category_id = self.state.new_id()
        self.state.categories[category_id] = name
        return category_id

    def details_for(self, order_number: str) -> list[dict[str, Any]]:
        return [d for d in self.state.details.values() if d["ordernumber"] == order_number]

    def images_for(self, article_id: int) -> list[dict[str, Any]]:
        return [i for i in self.state.images.values() if i["articleID"] == article_id]

    def reset(self) -> None:
        """Reset all collected data and statistics."""
        self.state = _State()
        self.calls.clear()
        self.fail_on.clear()
        self.extra_rows.clear()
        self.transactions_committed = 0
        self.transactions_rolled_back = 0


class FakeMediaStorePort(MediaStorePort):
    """In-memory media store for testing."""

    def __init__(self):
        self.media: dict[int, Media] = {}
        self.get_media_calls: list[int] = []

    async def get_media(self, media_id: int) -> Media | None:
        self.get_media_calls.append(media_id)
        return self.media.get(media_id)

    def add_media(self, media: Media) -> Media:
        self.media[media.id] = media
        return media
