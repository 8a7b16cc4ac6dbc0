"""Error taxonomy for the articlesync import/export adapter.

Every error raised by the core derives from ImportAdapterError so that
driving adapters (CLI, scripts) can convert failures into reports without
catching unrelated exceptions.
"""


class ImportAdapterError(Exception):
    """Base class for all articlesync errors."""


class ValidationError(ImportAdapterError):
    """An import batch or read request is empty or malformed.

    Raised before any storage access.
    """


class MissingSupplierError(ImportAdapterError):
    """A new article carries neither a supplier id nor a supplier name."""

    def __init__(self, order_number: str):
        self.order_number = order_number
        super().__init__(f"Supplier for article {order_number} not found")


class ReferenceNotFoundError(ImportAdapterError):
    """A record references an entity that does not exist (dangling key)."""

    def __init__(self, entity: str, reference: object, order_number: str | None = None):
        self.entity = entity
        self.reference = reference
        self.order_number = order_number
        message = f"{entity} {reference!r} not found"
        if order_number:
            message += f" (article {order_number})"
        super().__init__(message)


class StorageError(ImportAdapterError):
    """Constraint violation or connectivity failure in the underlying store."""


__all__ = [
    "ImportAdapterError",
    "MissingSupplierError",
    "ReferenceNotFoundError",
    "StorageError",
    "ValidationError",
]
