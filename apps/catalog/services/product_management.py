"""
Product management service.

Products belong to a business; shops carry them through ``ShopProduct``
rows holding the local stock level.
"""

import logging
from decimal import Decimal
from uuid import UUID

from django.db import transaction
from django.db.models import Q, QuerySet

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.catalog.models import Brand, Category, Product, ShopProduct
from apps.tenants.models import Business, Shop

from .exceptions import (
    BrandNotFoundError,
    CategoryNotFoundError,
    DuplicateSkuError,
    InvalidProductError,
    ProductNotFoundError,
)

logger = logging.getLogger(__name__)

PRICE_FIELDS = ('cost_price', 'cash_price', 'layaway_price', 'credit_price')
EDITABLE_FIELDS = PRICE_FIELDS + (
    'name', 'sku', 'description', 'low_stock_threshold', 'is_active',
)


def _resolve_taxonomy(business: Business, category_id, brand_id):
    category = brand = None
    if category_id:
        try:
            category = Category.objects.get(business=business, id=category_id)
        except Category.DoesNotExist:
            raise CategoryNotFoundError("Category not found in this business")
    if brand_id:
        try:
            brand = Brand.objects.get(business=business, id=brand_id)
        except Brand.DoesNotExist:
            raise BrandNotFoundError("Brand not found in this business")
    return category, brand


def _validate_fields(fields: dict) -> dict:
    cleaned = dict(fields)
    if 'name' in cleaned:
        cleaned['name'] = (cleaned['name'] or '').strip()
        if not cleaned['name']:
            raise InvalidProductError("Product name is required")
    if 'sku' in cleaned:
        cleaned['sku'] = (cleaned['sku'] or '').strip() or None
    if 'description' in cleaned:
        cleaned['description'] = (cleaned['description'] or '').strip()
    for field in PRICE_FIELDS:
        if field in cleaned and cleaned[field] is not None:
            cleaned[field] = Decimal(cleaned[field])
            if cleaned[field] < 0:
                raise InvalidProductError(
                    f"{field.replace('_', ' ').capitalize()} must be 0 or greater"
                )
    return cleaned


def _check_sku(business: Business, sku, exclude_id=None) -> None:
    if not sku:
        return
    queryset = Product.objects.filter(business=business, sku=sku)
    if exclude_id is not None:
        queryset = queryset.exclude(id=exclude_id)
    if queryset.exists():
        raise DuplicateSkuError("A product with this SKU already exists")


def get_product(*, business: Business, product_id: UUID) -> Product:
    try:
        return Product.objects.select_related('category', 'brand').get(
            business=business, id=product_id
        )
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product with ID {product_id} not found")


@transaction.atomic
def create_product(
    *,
    business: Business,
    name: str,
    actor: User,
    category_id: UUID | None = None,
    brand_id: UUID | None = None,
    shop_stock: dict | None = None,
    **fields,
) -> Product:
    """
    Create a product and optionally assign it to shops.

    Args:
        business: Owning business
        name: Product name (required)
        actor: User performing the action
        category_id: Optional category of the same business
        brand_id: Optional brand of the same business
        shop_stock: Optional ``{shop_id: stock_quantity}`` assignments
        **fields: sku, description, prices, low_stock_threshold, is_active

    Returns:
        Created Product instance

    Raises:
        InvalidProductError: If the name is blank or a price is negative
        DuplicateSkuError: If the SKU is already used in the business
    """
    fields = _validate_fields({'name': name, **{k: v for k, v in fields.items() if k in EDITABLE_FIELDS}})
    _check_sku(business, fields.get('sku'))
    category, brand = _resolve_taxonomy(business, category_id, brand_id)

    product = Product.objects.create(business=business, category=category, brand=brand, **fields)

    for shop_id, quantity in (shop_stock or {}).items():
        set_shop_stock(business=business, product=product, shop_id=shop_id,
                       stock_quantity=quantity, actor=actor)

    log_action(
        actor=actor,
        action='PRODUCT_CREATED',
        entity_type='Product',
        entity_id=product.id,
        metadata={
            'business': business.slug,
            'name': product.name,
            'sku': product.sku,
            'cash_price': product.cash_price,
            'credit_price': product.credit_price,
        },
    )
    logger.info("Product %s created in %s", product.name, business.slug)
    return product


@transaction.atomic
def update_product(
    *,
    business: Business,
    product_id: UUID,
    actor: User,
    category_id=...,
    brand_id=...,
    **fields,
) -> Product:
    """
    Update product fields. Pass ``category_id=None`` to clear the category.

    Raises:
        ProductNotFoundError: If the product is not in the business
        DuplicateSkuError: If the new SKU collides with another product
    """
    try:
        product = Product.objects.select_for_update().get(business=business, id=product_id)
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product with ID {product_id} not found")

    fields = _validate_fields({k: v for k, v in fields.items() if k in EDITABLE_FIELDS})
    if 'sku' in fields:
        _check_sku(business, fields['sku'], exclude_id=product.id)

    previous = {key: getattr(product, key) for key in fields}
    for key, value in fields.items():
        setattr(product, key, value)

    if category_id is not ...:
        product.category, _ = _resolve_taxonomy(business, category_id, None)
    if brand_id is not ...:
        _, product.brand = _resolve_taxonomy(business, None, brand_id)

    product.save()

    log_action(
        actor=actor,
        action='PRODUCT_UPDATED',
        entity_type='Product',
        entity_id=product.id,
        metadata={'previous': previous, 'new': fields},
    )
    return product


@transaction.atomic
def toggle_product_status(*, business: Business, product_id: UUID, actor: User) -> Product:
    """Flip a product between active and inactive."""
    try:
        product = Product.objects.select_for_update().get(business=business, id=product_id)
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product with ID {product_id} not found")

    product.is_active = not product.is_active
    product.save(update_fields=['is_active', 'updated_at'])

    log_action(
        actor=actor,
        action='PRODUCT_ACTIVATED' if product.is_active else 'PRODUCT_DEACTIVATED',
        entity_type='Product',
        entity_id=product.id,
        metadata={'name': product.name},
    )
    return product


@transaction.atomic
def delete_product(*, business: Business, product_id: UUID, actor: User) -> None:
    """
    Delete a product.

    Products that already appear on purchases are deactivated instead so
    the sales history keeps its reference.
    """
    try:
        product = Product.objects.select_for_update().get(business=business, id=product_id)
    except Product.DoesNotExist:
        raise ProductNotFoundError(f"Product with ID {product_id} not found")

    if product.purchase_items.exists():
        product.is_active = False
        product.save(update_fields=['is_active', 'updated_at'])
        action = 'PRODUCT_DEACTIVATED'
    else:
        product.delete()
        action = 'PRODUCT_DELETED'

    log_action(
        actor=actor,
        action=action,
        entity_type='Product',
        entity_id=product_id,
        metadata={'name': product.name},
    )


@transaction.atomic
def set_shop_stock(
    *,
    business: Business,
    product: Product,
    shop_id: UUID,
    stock_quantity: int,
    actor: User,
) -> ShopProduct:
    """
    Assign a product to a shop of the same business and set its stock.

    Raises:
        InvalidProductError: If the shop is outside the business or the
            quantity is negative
    """
    if int(stock_quantity) < 0:
        raise InvalidProductError("Stock quantity must be 0 or greater")
    try:
        shop = Shop.objects.get(business=business, id=shop_id)
    except Shop.DoesNotExist:
        raise InvalidProductError("Shop not found in this business")

    shop_product, _ = ShopProduct.objects.update_or_create(
        shop=shop,
        product=product,
        defaults={'stock_quantity': int(stock_quantity)},
    )

    log_action(
        actor=actor,
        action='SHOP_STOCK_SET',
        entity_type='ShopProduct',
        entity_id=shop_product.id,
        metadata={'shop': shop.slug, 'product': product.name, 'stock': shop_product.stock_quantity},
    )
    return shop_product


@transaction.atomic
def remove_from_shop(*, business: Business, product: Product, shop_id: UUID, actor: User) -> None:
    """Unassign a product from a shop."""
    deleted, _ = ShopProduct.objects.filter(
        shop__business=business, shop_id=shop_id, product=product
    ).delete()
    if deleted:
        log_action(
            actor=actor,
            action='SHOP_STOCK_REMOVED',
            entity_type='Product',
            entity_id=product.id,
            metadata={'shop_id': shop_id},
        )


def list_products(*, business: Business, search: str | None = None,
                  is_active: bool | None = None) -> QuerySet:
    queryset = (
        Product.objects
        .filter(business=business)
        .select_related('category', 'brand')
        .prefetch_related('shop_products__shop')
    )
    if search:
        queryset = queryset.filter(Q(name__icontains=search) | Q(sku__icontains=search))
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    return queryset


def list_products_for_shop(*, shop: Shop, in_stock_only: bool = False) -> QuerySet:
    """Active products assigned to the shop, for the sales screens."""
    queryset = (
        ShopProduct.objects
        .filter(shop=shop, product__is_active=True)
        .select_related('product__category', 'product__brand')
    )
    if in_stock_only:
        queryset = queryset.filter(stock_quantity__gt=0)
    return queryset
