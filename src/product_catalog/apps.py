from django.apps import AppConfig


class ProductCatalogConfig(AppConfig):
    """
    Owns the process-wide ProductService.

    The allocator inside it keeps the id reservation lock, so there must be
    exactly one per process; views reach it through `get_service()`.
    """

    name = "product_catalog"
    verbose_name = "Product Catalog"

    def ready(self) -> None:
        from .allocator import IdentifierAllocator
        from .repository import ProductRepository
        from .services import ProductService

        repository = ProductRepository()
        self.service = ProductService(
            repository, IdentifierAllocator.from_settings(repository.exists)
        )
