from .exceptions import (
    IdentifierSpaceExhausted,
    InsufficientStock,
    InvalidProductRequest,
    LockAcquireTimeout,
    ProductCatalogError,
    ProductConflict,
    ProductNotFound,
)

__all__ = [
    "ProductCatalogError",
    "ProductNotFound",
    "InvalidProductRequest",
    "InsufficientStock",
    "ProductConflict",
    "IdentifierSpaceExhausted",
    "LockAcquireTimeout",
]
