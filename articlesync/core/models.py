"""Domain models for the articlesync import/export adapter.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeAlias

# Raw import payload: entity type -> ordered list of flat attribute mappings.
ImportRecord: TypeAlias = Mapping[str, Sequence[Mapping[str, Any]]]

# Export result: entity type -> projected rows.
ExportResult: TypeAlias = dict[str, list[dict[str, Any]]]


class DetailKind(Enum):
    """Kind of an article detail row."""

    MAIN = 1
    VARIANT = 2


@dataclass(frozen=True)
class Supplier:
    """Manufacturer or vendor referenced by articles."""

    id: int
    name: str


@dataclass(frozen=True)
class Media:
    """A file already held by the media store."""

    id: int
    name: str
    path: str
    extension: str | None = None
    mime_type: str | None = None


@dataclass(frozen=True)
class StoredDetail:
    """An article detail as currently persisted, looked up by order number."""

    id: int
    article_id: int
    order_number: str
    kind: DetailKind
    supplier_id: int | None


@dataclass(frozen=True)
class ArticleEntry:
    """A normalized article entry of an import batch.

    `correlation_id` is the key dependent entries use to refer to this
    article; it is assigned during normalization and never depends on
    list positions afterwards.
    """

    correlation_id: str
    order_number: str
    main_number: str
    name: str | None = None
    tax_id: int | None = None
    supplier_id: int | None = None
    supplier_name: str | None = None
    description: str | None = None
    active: bool | None = None
    in_stock: int | None = None

    @property
    def is_variant(self) -> bool:
        return self.main_number != self.order_number

    @property
    def has_supplier_reference(self) -> bool:
        return self.supplier_id is not None or bool(self.supplier_name)


@dataclass(frozen=True)
class ImageEntry:
    """An image to attach to an article.

    Either `media_id` (already stored media) or `image_url` (deferred
    download) is set; `media_id` takes precedence when both are present.
    """

    correlation_id: str
    media_id: int | None = None
    image_url: str | None = None
    path: str | None = None
    description: str = ""
    main: bool | None = None
    position: int | None = None

    @property
    def is_deferred(self) -> bool:
        return self.media_id is None


@dataclass(frozen=True)
class ArticleImage:
    """An image row ready to be linked to an article."""

    path: str
    media_id: int
    extension: str
    description: str = ""
    main: bool = False
    position: int = 1


@dataclass(frozen=True)
class PriceEntry:
    """A graduated price of an article detail for one customer group."""

    correlation_id: str
    price: Decimal
    customer_group: str
    from_quantity: int = 1
    to_quantity: int | None = None
    pseudo_price: Decimal | None = None


@dataclass(frozen=True)
class CategoryEntry:
    """Assignment of an article to an existing category."""

    correlation_id: str
    category_id: int


class RelationKind(Enum):
    """Kinds of article-to-article relations."""

    SIMILAR = "similar"
    ACCESSORY = "accessory"


@dataclass(frozen=True)
class RelationEntry:
    """A similar or accessory link to another article.

    The target is given by order number or by article id.
    """

    correlation_id: str
    kind: RelationKind
    order_number: str | None = None
    article_id: int | None = None


@dataclass(frozen=True)
class ArticleDependents:
    """All dependent entries that belong to one article of a batch."""

    images: tuple[ImageEntry, ...] = ()
    prices: tuple[PriceEntry, ...] = ()
    categories: tuple[CategoryEntry, ...] = ()
    relations: tuple[RelationEntry, ...] = ()


@dataclass(frozen=True)
class ArticleBatch:
    """A validated import batch.

    Dependents are grouped by the correlation id of their owning article.
    """

    articles: tuple[ArticleEntry, ...]
    dependents: Mapping[str, ArticleDependents] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Convert dependents dict to read-only proxy."""
        if isinstance(self.dependents, dict):
            object.__setattr__(self, "dependents", MappingProxyType(self.dependents))

    def dependents_of(self, article: ArticleEntry) -> ArticleDependents:
        return self.dependents.get(article.correlation_id, ArticleDependents())


@dataclass(frozen=True)
class ColumnExpression:
    """A requested export column such as ``article.id as articleId``."""

    source: str  # qualified column, e.g. "article.id"
    alias: str  # key in the exported row


@dataclass(frozen=True)
class ReadRequest:
    """A validated export request."""

    ids: tuple[int, ...]
    columns: Mapping[str, tuple[ColumnExpression, ...]]

    def __post_init__(self) -> None:
        """Validate request invariants and freeze the column mapping."""
        if not self.ids:
            raise ValueError("ids must not be empty")
        if not self.columns:
            raise ValueError("columns must not be empty")
        if isinstance(self.columns, dict):
            object.__setattr__(self, "columns", MappingProxyType(self.columns))


@dataclass(frozen=True)
class DeferredTask:
    """A unit of work that could not complete inside the write call."""

    bucket: str
    sub_bucket: str
    payload: dict[str, Any] | MappingProxyType[str, Any]  # converted to proxy in __post_init__

    def __post_init__(self) -> None:
        """Convert payload dict to read-only proxy."""
        if isinstance(self.payload, dict):
            object.__setattr__(self, "payload", MappingProxyType(self.payload))


@dataclass(frozen=True)
class WriteResult:
    """Summary of a write call."""

    articles_created: int = 0
    articles_updated: int = 0
    articles_skipped: int = 0
    suppliers_created: int = 0
    images_attached: int = 0
    images_deferred: int = 0
