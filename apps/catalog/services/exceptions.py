"""Domain-specific exceptions for catalog services."""

from config.exceptions import ServiceError, NotFoundServiceError


class CatalogServiceError(ServiceError):
    """Base exception for catalog service errors."""
    pass


class ProductNotFoundError(NotFoundServiceError, CatalogServiceError):
    """Raised when a product does not exist in the business."""
    pass


class CategoryNotFoundError(NotFoundServiceError, CatalogServiceError):
    """Raised when a category does not exist in the business."""
    pass


class BrandNotFoundError(NotFoundServiceError, CatalogServiceError):
    """Raised when a brand does not exist in the business."""
    pass


class DuplicateSkuError(CatalogServiceError):
    """Raised when a SKU is already used by another product of the business."""
    pass


class DuplicateNameError(CatalogServiceError):
    """Raised when a category or brand name already exists in the business."""
    pass


class InvalidProductError(CatalogServiceError):
    """Raised when product fields fail validation."""
    pass


class InvalidImportError(CatalogServiceError):
    """Raised when an uploaded catalog workbook cannot be read."""
    pass
