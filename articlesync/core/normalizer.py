"""Validation and normalization of raw import records.

Turns an ImportRecord (entity type -> list of flat mappings) into an
ArticleBatch. Positional `parentIndexElement` references are resolved here,
once, into explicit correlation ids so that nothing downstream depends on
list ordering. No storage is touched.
"""

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import ValidationError
from .models import (
    ArticleBatch,
    ArticleDependents,
    ArticleEntry,
    CategoryEntry,
    ImageEntry,
    ImportRecord,
    PriceEntry,
    RelationEntry,
    RelationKind,
)

logger = logging.getLogger(__name__)

ARTICLE_SECTION = "article"
DEPENDENT_SECTIONS = ("image", "price", "category", "similar", "accessory")

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off", ""}


class RecordNormalizer:
    """Validates import records and groups dependents by article."""

    def __init__(self, default_customer_group: str = "EK"):
        """Initialize the normalizer.

        Args:
            default_customer_group: Customer group for prices without
                an explicit `priceGroup`.
        """
        self.default_customer_group = default_customer_group

    def normalize(self, records: ImportRecord) -> ArticleBatch:
        """Validate and normalize a raw import batch.

        Raises:
            ValidationError: If the batch holds no articles or any entry
                is malformed.
        """
        if not records or not isinstance(records, Mapping):
            raise ValidationError("No articles found")
        raw_articles = records.get(ARTICLE_SECTION)
        if not raw_articles:
            raise ValidationError("No articles found")

        articles = self._normalize_articles(raw_articles)

        grouped: dict[str, dict[str, list[Any]]] = {
            article.correlation_id: {
                "images": [],
                "prices": [],
                "categories": [],
                "relations": [],
            }
            for article in articles
        }

        for section, entries in records.items():
            if section == ARTICLE_SECTION:
                continue
            if section not in DEPENDENT_SECTIONS:
                logger.warning(
                    f"Ignoring unsupported import section '{section}'",
                    extra={"section": section, "entries": len(entries or ())},
                )
                continue
            for position, raw in enumerate(entries or ()):
                correlation_id = self._resolve_parent(raw, articles, section, position)
                bucket, entry = self._normalize_dependent(section, raw, correlation_id, position)
                grouped[correlation_id][bucket].append(entry)

        dependents = {
            correlation_id: ArticleDependents(
                images=tuple(parts["images"]),
                prices=tuple(parts["prices"]),
                categories=tuple(parts["categories"]),
                relations=tuple(parts["relations"]),
            )
            for correlation_id, parts in grouped.items()
        }

        logger.debug(
            f"Normalized batch of {len(articles)} articles",
            extra={"articles": len(articles)},
        )
        return ArticleBatch(articles=tuple(articles), dependents=dependents)

    def _normalize_articles(
        self, raw_articles: Sequence[Mapping[str, Any]]
    ) -> list[ArticleEntry]:
        articles: list[ArticleEntry] = []
        seen: set[str] = set()

        for position, raw in enumerate(raw_articles):
            if not isinstance(raw, Mapping):
                raise ValidationError(f"Article at position {position} is not a mapping")

            order_number = _clean_str(raw.get("orderNumber"))
            if not order_number:
                raise ValidationError(f"Article at position {position} has no orderNumber")
            if order_number in seen:
                raise ValidationError(f"Duplicate orderNumber {order_number} in batch")
            seen.add(order_number)

            context = f"article {order_number}"
            articles.append(
                ArticleEntry(
                    correlation_id=order_number,
                    order_number=order_number,
                    main_number=_clean_str(raw.get("mainNumber")) or order_number,
                    name=_clean_str(raw.get("name")),
                    tax_id=_to_int(raw.get("taxId"), "taxId", context),
                    supplier_id=_to_int(raw.get("supplierId"), "supplierId", context),
                    supplier_name=_clean_str(raw.get("supplierName")),
                    description=_clean_str(raw.get("description")),
                    active=_to_bool(raw.get("active"), "active", context),
                    in_stock=_to_int(raw.get("inStock"), "inStock", context),
                )
            )
        return articles

    @staticmethod
    def _resolve_parent(
        raw: Mapping[str, Any],
        articles: Sequence[ArticleEntry],
        section: str,
        position: int,
    ) -> str:
        context = f"{section} at position {position}"
        if not isinstance(raw, Mapping):
            raise ValidationError(f"{context} is not a mapping")
        index = _to_int(raw.get("parentIndexElement"), "parentIndexElement", context)
        if index is None:
            raise ValidationError(f"{context} has no parentIndexElement")
        if index < 0 or index >= len(articles):
            raise ValidationError(
                f"{context} references missing article index {index}"
            )
        return articles[index].correlation_id

    def _normalize_dependent(
        self,
        section: str,
        raw: Mapping[str, Any],
        correlation_id: str,
        position: int,
    ) -> tuple[str, Any]:
        context = f"{section} at position {position} (article {correlation_id})"

        if section == "image":
            media_id = _to_int(raw.get("mediaId"), "mediaId", context)
            image_url = _clean_str(raw.get("imageUrl"))
            if media_id is None and not image_url:
                raise ValidationError(f"{context} needs a mediaId or an imageUrl")
            return "images", ImageEntry(
                correlation_id=correlation_id,
                media_id=media_id,
                image_url=image_url,
                path=_clean_str(raw.get("path")),
                description=_clean_str(raw.get("description")) or "",
                main=_to_bool(raw.get("main"), "main", context),
                position=_to_int(raw.get("position"), "position", context),
            )

        if section == "price":
            price = _to_decimal(raw.get("price"), "price", context)
            if price is None or price <= 0:
                raise ValidationError(f"{context} needs a positive price")
            from_quantity = _to_int(raw.get("from"), "from", context) or 1
            to_quantity = _to_int(raw.get("to"), "to", context)
            if to_quantity is not None and to_quantity < from_quantity:
                raise ValidationError(f"{context} has 'to' lower than 'from'")
            return "prices", PriceEntry(
                correlation_id=correlation_id,
                price=price,
                customer_group=_clean_str(raw.get("priceGroup")) or self.default_customer_group,
                from_quantity=from_quantity,
                to_quantity=to_quantity,
                pseudo_price=_to_decimal(raw.get("pseudoPrice"), "pseudoPrice", context),
            )

        if section == "category":
            category_id = _to_int(raw.get("categoryId"), "categoryId", context)
            if category_id is None:
                raise ValidationError(f"{context} has no categoryId")
            return "categories", CategoryEntry(
                correlation_id=correlation_id, category_id=category_id
            )

        kind = RelationKind(section)
        order_number = _clean_str(raw.get("ordernumber") or raw.get("orderNumber"))
        article_id = _to_int(raw.get(f"{section}Id"), f"{section}Id", context)
        if not order_number and article_id is None:
            raise ValidationError(f"{context} needs an ordernumber or {section}Id")
        return "relations", RelationEntry(
            correlation_id=correlation_id,
            kind=kind,
            order_number=order_number,
            article_id=article_id,
        )


def _clean_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_int(value: Any, field: str, context: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, float):
        # JSON decoders turn 1.0 into a float
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{context}: {field} must be an integer, got {value!r}")
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError(f"{context}: {field} must be an integer, got {value!r}") from None


def _to_decimal(value: Any, field: str, context: str) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        # CSV exports commonly use a decimal comma
        number = Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation:
        raise ValidationError(f"{context}: {field} must be a number, got {value!r}") from None
    if not number.is_finite():
        raise ValidationError(f"{context}: {field} must be a finite number, got {value!r}")
    return number


def _to_bool(value: Any, field: str, context: str) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValidationError(f"{context}: {field} must be a boolean, got {value!r}")
