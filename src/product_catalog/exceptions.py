"""
Exception hierarchy for product_catalog.

This module defines all public exceptions raised by the app.

Callers are encouraged to catch `ProductCatalogError` when they want to handle
every catalog failure, or more specific subclasses such as `ProductConflict`
when they need fine-grained control. The HTTP layer maps each class to a
response through its `status` attribute.
"""


class ProductCatalogError(Exception):
    """
    Base exception for all product_catalog errors.

    Example
    -------
    >>> try:
    ...     service.add(product)
    ... except ProductCatalogError as exc:
    ...     return error_response(exc)
    """

    #: Error code for programmatic handling by API clients.
    code: str = "product_catalog_error"

    #: HTTP status the endpoint layer answers with.
    status: int = 500

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = "An unspecified product_catalog error occurred."
        super().__init__(message)


class ProductNotFound(ProductCatalogError):
    """The referenced product id does not exist."""

    code: str = "product_not_found"
    status: int = 404


class InvalidProductRequest(ProductCatalogError):
    """
    Raised for a malformed request body or an attempt to change `id`
    through an update.
    """

    code: str = "invalid_request"
    status: int = 400

    def __init__(
        self, message: str | None = None, errors: dict | None = None
    ) -> None:
        super().__init__(message)
        #: Per-field validation errors, when the body failed form validation.
        self.errors = errors


class InsufficientStock(ProductCatalogError):
    """A decrement asked for more units than are on hand."""

    code: str = "insufficient_stock"
    status: int = 400


class ProductConflict(ProductCatalogError):
    """
    Raised when an insert targets an id that is already persisted.

    Caller-supplied ids bypass the allocator, so the primary key constraint
    is what catches the duplicate.
    """

    code: str = "product_conflict"
    status: int = 409


class IdentifierSpaceExhausted(ProductCatalogError):
    """
    Raised when the allocator gives up after its maximum number of draws.

    Common causes
    -------------
    - The id range is nearly full
    - Many ids are still reserved from recent allocations
    - `ID_MAX_ATTEMPTS` is configured too low
    """

    code: str = "identifier_space_exhausted"
    status: int = 503


class LockAcquireTimeout(ProductCatalogError):
    """
    Raised when a lock cannot be acquired within the specified timeout.

    This typically indicates that another thread currently holds the lock.

    Example
    -------
    >>> try:
    ...     with lock("product-id-allocator", timeout=1):
    ...         claim()
    ... except LockAcquireTimeout:
    ...     retry_later()
    """

    code: str = "lock_acquire_timeout"
    status: int = 503
