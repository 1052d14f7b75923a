"""Shop management service."""

import logging
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.tenants.models import Business, Shop

from .exceptions import DuplicateSlugError, ShopNotFoundError
from .slugs import unique_slug

logger = logging.getLogger(__name__)


def _get_shop(shop_id: UUID, business: Business | None = None) -> Shop:
    queryset = Shop.objects.select_for_update().select_related('business')
    if business is not None:
        queryset = queryset.filter(business=business)
    try:
        return queryset.get(id=shop_id)
    except Shop.DoesNotExist:
        raise ShopNotFoundError(f"Shop with ID {shop_id} not found")


@transaction.atomic
def create_shop(
    *,
    business: Business,
    name: str,
    actor: User,
    slug: str | None = None,
    address: str = "",
    country: str = "Ghana",
) -> Shop:
    """
    Create a shop under a business.

    Raises:
        DuplicateSlugError: If an explicit slug is taken
    """
    if slug:
        if Shop.objects.filter(slug=slug).exists():
            raise DuplicateSlugError(f"Shop slug '{slug}' is already taken")
    else:
        slug = unique_slug(Shop, name)

    shop = Shop.objects.create(
        business=business,
        name=name.strip(),
        slug=slug,
        address=address.strip(),
        country=country or 'Ghana',
    )

    log_action(
        actor=actor,
        action='SHOP_CREATED',
        entity_type='Shop',
        entity_id=shop.id,
        metadata={'name': shop.name, 'slug': shop.slug, 'business': business.slug},
    )
    logger.info("Shop %s created in business %s", shop.slug, business.slug)
    return shop


@transaction.atomic
def update_shop(*, shop_id: UUID, actor: User, business: Business | None = None, **fields) -> Shop:
    """Update name, address or country of a shop."""
    shop = _get_shop(shop_id, business)

    previous = {key: getattr(shop, key) for key in fields}
    for key, value in fields.items():
        if key in ('name', 'address', 'country'):
            setattr(shop, key, value.strip() if isinstance(value, str) else value)
    shop.save()

    log_action(
        actor=actor,
        action='SHOP_UPDATED',
        entity_type='Shop',
        entity_id=shop.id,
        metadata={'previous': previous, 'new': fields},
    )
    return shop


@transaction.atomic
def set_shop_active(*, shop_id: UUID, is_active: bool, actor: User,
                    business: Business | None = None) -> Shop:
    """Activate or suspend a shop."""
    shop = _get_shop(shop_id, business)
    shop.is_active = is_active
    shop.save(update_fields=['is_active', 'updated_at'])

    log_action(
        actor=actor,
        action='SHOP_ACTIVATED' if is_active else 'SHOP_SUSPENDED',
        entity_type='Shop',
        entity_id=shop.id,
        metadata={'name': shop.name, 'slug': shop.slug},
    )
    logger.info("Shop %s is_active=%s", shop.slug, is_active)
    return shop


@transaction.atomic
def delete_shop(*, shop_id: UUID, actor: User) -> None:
    """Delete a shop and everything scoped to it."""
    shop = _get_shop(shop_id)
    metadata = {'name': shop.name, 'slug': shop.slug}
    shop.delete()

    log_action(
        actor=actor,
        action='SHOP_DELETED',
        entity_type='Shop',
        entity_id=shop_id,
        metadata=metadata,
    )
    logger.info("Shop %s deleted", metadata['slug'])
