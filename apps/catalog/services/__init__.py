"""Catalog services: taxonomy, products, shop stock and Excel export and import."""

from .exceptions import (
    CatalogServiceError,
    ProductNotFoundError,
    CategoryNotFoundError,
    BrandNotFoundError,
    DuplicateSkuError,
    DuplicateNameError,
    InvalidProductError,
    InvalidImportError,
)
from .taxonomy import create_category, create_brand, delete_category, delete_brand
from .product_management import (
    get_product,
    create_product,
    update_product,
    toggle_product_status,
    delete_product,
    set_shop_stock,
    remove_from_shop,
    list_products,
    list_products_for_shop,
)
from .product_export import (
    CONTENT_TYPE,
    write_header,
    build_products_workbook,
    export_filename,
    export_products,
)
from .product_import import import_products

__all__ = [
    # Exceptions
    'CatalogServiceError',
    'ProductNotFoundError',
    'CategoryNotFoundError',
    'BrandNotFoundError',
    'DuplicateSkuError',
    'DuplicateNameError',
    'InvalidProductError',
    'InvalidImportError',

    # Taxonomy
    'create_category',
    'create_brand',
    'delete_category',
    'delete_brand',

    # Products
    'get_product',
    'create_product',
    'update_product',
    'toggle_product_status',
    'delete_product',
    'set_shop_stock',
    'remove_from_shop',
    'list_products',
    'list_products_for_shop',

    # Export and import
    'CONTENT_TYPE',
    'write_header',
    'build_products_workbook',
    'export_filename',
    'export_products',
    'import_products',
]
