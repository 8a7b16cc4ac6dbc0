"""Supplier resolution by id or natural key.

Kept separate from the article upsert so that on-demand supplier
creation is an explicit, auditable step rather than a side effect of
saving an article.
"""

import logging

from .errors import MissingSupplierError, ReferenceNotFoundError
from .models import ArticleEntry, Supplier
from .ports import ArticleStoreSession

logger = logging.getLogger(__name__)


async def resolve_or_create_supplier(
    session: ArticleStoreSession, entry: ArticleEntry
) -> tuple[Supplier, bool]:
    """Resolve the supplier an article entry refers to.

    A `supplier_id` must reference an existing supplier and is never
    written. Otherwise the supplier is looked up by exact name and created
    when no supplier of that name exists.

    Args:
        session: Open store session of the current article transaction.
        entry: Article entry carrying the supplier reference.

    Returns:
        Tuple of (supplier, created).

    Raises:
        MissingSupplierError: If the entry has no supplier reference.
        ReferenceNotFoundError: If `supplier_id` is unknown.
    """
    if entry.supplier_id is not None:
        supplier = await session.get_supplier_by_id(entry.supplier_id)
        if supplier is None:
            raise ReferenceNotFoundError("supplier", entry.supplier_id, entry.order_number)
        return supplier, False

    if not entry.supplier_name:
        raise MissingSupplierError(entry.order_number)

    supplier = await session.get_supplier_by_name(entry.supplier_name)
    if supplier is not None:
        return supplier, False

    supplier = await session.create_supplier(entry.supplier_name)
    logger.info(
        f"Created supplier '{supplier.name}'",
        extra={"supplier_id": supplier.id, "order_number": entry.order_number},
    )
    return supplier, True
