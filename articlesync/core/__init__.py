"""Core domain logic for the articlesync import/export adapter.

This package contains zero external dependencies and represents
the pure business logic of the application. All adapters and
external integrations are handled by the adapters package.
"""

from .errors import (
    ImportAdapterError,
    MissingSupplierError,
    ReferenceNotFoundError,
    StorageError,
    ValidationError,
)
from .models import (
    ArticleBatch,
    ArticleEntry,
    ArticleImage,
    DeferredTask,
    DetailKind,
    ImageEntry,
    Media,
    PriceEntry,
    StoredDetail,
    Supplier,
    WriteResult,
)

__all__ = [
    "ArticleBatch",
    "ArticleEntry",
    "ArticleImage",
    "DeferredTask",
    "DetailKind",
    "ImageEntry",
    "ImportAdapterError",
    "Media",
    "MissingSupplierError",
    "PriceEntry",
    "ReferenceNotFoundError",
    "StorageError",
    "StoredDetail",
    "Supplier",
    "ValidationError",
    "WriteResult",
]
