"""
Excel import of the product catalog.

Reads back the workbook built by ``export_products`` after an admin edited
it. Rows of the first sheet are applied one by one, each on its own
savepoint: a bad row is reported as ``Row <n>: <reason>`` and skipped
without undoing the rows around it.

Row semantics:

- ``Product ID`` empty or ``NEW`` creates a product, otherwise the product
  with that id is updated.
- ``Active`` set to ``NO`` saves the product inactive; ``DELETE``
  deactivates an existing product and ignores the rest of the row.
- Category and Brand are matched by name, case-insensitively. Unknown
  names leave the field empty.
- For every shop whose ``[<Shop>] Assigned`` column is present, a mark
  (``✓``, ``Y``, ``YES``, ``1``, ``TRUE``) assigns the product with the
  ``[<Shop>] Stock`` quantity, and a blank cell removes the assignment.
"""

import logging
from collections import Counter
from decimal import Decimal, InvalidOperation
from uuid import UUID
from zipfile import BadZipFile

from django.db import transaction
import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.catalog.models import Brand, Category, Product, ShopProduct
from apps.tenants.models import Business

from .exceptions import CatalogServiceError, InvalidImportError, InvalidProductError, ProductNotFoundError
from .product_export import ASSIGNED_MARK
from .product_management import _check_sku, _validate_fields

logger = logging.getLogger(__name__)

NEW_MARKER = 'NEW'
ASSIGNED_VALUES = {ASSIGNED_MARK, 'Y', 'YES', '1', 'TRUE'}
DEFAULT_LOW_STOCK_THRESHOLD = 5

PRICE_COLUMNS = (
    ('Cost Price', 'cost_price'),
    ('Cash Price', 'cash_price'),
    ('Layaway Price', 'layaway_price'),
    ('Credit Price', 'credit_price'),
)
RESULT_KEYS = ('created', 'updated', 'deactivated', 'shop_assignments', 'shop_removals')


def _text(value) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _decimal(value, title: str) -> Decimal:
    text = _text(value)
    if not text:
        return Decimal('0')
    try:
        return Decimal(text)
    except InvalidOperation:
        raise InvalidProductError(f"{title} must be a number")


def _integer(value, title: str, default: int) -> int:
    text = _text(value)
    if not text:
        return default
    try:
        number = int(Decimal(text))
    except InvalidOperation:
        raise InvalidProductError(f"{title} must be a whole number")
    if number < 0:
        raise InvalidProductError(f"{title} must be 0 or greater")
    return number


def _read_rows(file) -> tuple[list[str], list[tuple[int, dict]]]:
    """Header titles and ``(row number, values)`` for each filled row of the first sheet."""
    try:
        workbook = openpyxl.load_workbook(file, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError) as exc:
        raise InvalidImportError("Upload an Excel workbook (.xlsx)") from exc

    try:
        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header = next(rows, None) or ()
        titles = [_text(value) for value in header]
        records = [
            (row_number, dict(zip(titles, values)))
            for row_number, values in enumerate(rows, start=2)
            if any(_text(value) for value in values)
        ]
    finally:
        workbook.close()

    if not records:
        raise InvalidImportError("Excel file is empty")
    return titles, records


def _existing_product(business: Business, product_id: str) -> Product:
    try:
        UUID(product_id)
        return Product.objects.select_for_update().get(business=business, id=product_id)
    except (ValueError, Product.DoesNotExist):
        raise ProductNotFoundError(f'Product ID "{product_id}" not found')


def _apply_shop_columns(product: Product, row: dict, shops) -> Counter:
    counts = Counter()
    for shop in shops:
        assigned = _text(row.get(f"[{shop.name}] Assigned")).upper() in ASSIGNED_VALUES
        if assigned:
            stock = _integer(row.get(f"[{shop.name}] Stock"), f"{shop.name} stock", 0)
            ShopProduct.objects.update_or_create(
                shop=shop, product=product, defaults={'stock_quantity': stock}
            )
            counts['shop_assignments'] += 1
        else:
            removed, _ = ShopProduct.objects.filter(shop=shop, product=product).delete()
            if removed:
                counts['shop_removals'] += 1
    return counts


def _apply_row(*, business: Business, actor: User, row: dict, shops,
               categories: dict, brands: dict) -> Counter:
    product_id = _text(row.get('Product ID'))
    name = _text(row.get('Name'))
    if not name and not product_id:
        return Counter()
    if not name:
        raise InvalidProductError("Product name is required")

    is_new = not product_id or product_id.upper() == NEW_MARKER
    active = _text(row.get('Active')).upper()

    if active == 'DELETE':
        if is_new:
            return Counter()
        product = _existing_product(business, product_id)
        product.is_active = False
        product.save(update_fields=['is_active', 'updated_at'])
        log_action(
            actor=actor,
            action='PRODUCT_DEACTIVATED_VIA_EXCEL',
            entity_type='Product',
            entity_id=product.id,
            metadata={'name': product.name, 'source': 'Excel Import'},
        )
        return Counter(deactivated=1)

    fields = _validate_fields({
        'name': name,
        'sku': _text(row.get('SKU')),
        'description': _text(row.get('Description')),
        **{field: _decimal(row.get(title), title) for title, field in PRICE_COLUMNS},
    })
    fields['low_stock_threshold'] = _integer(
        row.get('Low Stock Threshold'), 'Low stock threshold', DEFAULT_LOW_STOCK_THRESHOLD
    )
    fields['is_active'] = active != 'NO'
    category = categories.get(_text(row.get('Category')).lower())
    brand = brands.get(_text(row.get('Brand')).lower())

    if is_new:
        _check_sku(business, fields['sku'])
        product = Product.objects.create(business=business, category=category, brand=brand, **fields)
        counts = Counter(created=1)
        action = 'PRODUCT_CREATED_VIA_EXCEL'
    else:
        product = _existing_product(business, product_id)
        _check_sku(business, fields['sku'], exclude_id=product.id)
        for key, value in fields.items():
            setattr(product, key, value)
        product.category = category
        product.brand = brand
        product.save()
        counts = Counter(updated=1)
        action = 'PRODUCT_UPDATED_VIA_EXCEL'

    log_action(
        actor=actor,
        action=action,
        entity_type='Product',
        entity_id=product.id,
        metadata={'name': product.name, 'sku': product.sku, 'source': 'Excel Import'},
    )
    counts.update(_apply_shop_columns(product, row, shops))
    return counts


@transaction.atomic
def import_products(*, business: Business, file, actor: User) -> dict:
    """
    Apply an edited catalog workbook to ``business``.

    Args:
        business: Business whose catalog is updated
        file: Uploaded ``.xlsx`` file (path or file-like object)
        actor: User performing the import

    Returns:
        Dict with ``created``, ``updated``, ``deactivated``,
        ``shop_assignments``, ``shop_removals`` counts, the per-row
        ``errors`` and a one-line ``message``

    Raises:
        InvalidImportError: If the file is not a workbook or has no rows
    """
    titles, rows = _read_rows(file)
    shops = [
        shop for shop in business.shops.order_by('name')
        if f"[{shop.name}] Assigned" in titles
    ]
    categories = {c.name.lower(): c for c in Category.objects.filter(business=business)}
    brands = {b.name.lower(): b for b in Brand.objects.filter(business=business)}

    totals = Counter()
    errors = []
    for row_number, row in rows:
        try:
            with transaction.atomic():
                totals.update(_apply_row(
                    business=business, actor=actor, row=row, shops=shops,
                    categories=categories, brands=brands,
                ))
        except CatalogServiceError as exc:
            errors.append(f"Row {row_number}: {exc}")

    results = {key: totals[key] for key in RESULT_KEYS}
    results['errors'] = errors
    results['message'] = (
        f"Import completed: {results['created']} created, {results['updated']} updated, "
        f"{results['shop_assignments']} shop assignments, {results['shop_removals']} shop removals, "
        f"{results['deactivated']} deactivated"
    )

    log_action(
        actor=actor,
        action='PRODUCTS_IMPORTED',
        entity_type='Business',
        entity_id=business.id,
        metadata={key: results[key] for key in RESULT_KEYS + ('errors',)},
    )
    logger.info("Product import for %s: %s (%d row errors)", business.slug, results['message'], len(errors))
    return results
