"""Category and brand management."""

from uuid import UUID

from django.db import IntegrityError, transaction

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.catalog.models import Brand, Category
from apps.tenants.models import Business

from .exceptions import BrandNotFoundError, CategoryNotFoundError, DuplicateNameError

_MODELS = {
    'category': (Category, CategoryNotFoundError),
    'brand': (Brand, BrandNotFoundError),
}


@transaction.atomic
def _create(kind: str, *, business: Business, name: str, description: str, actor: User):
    model, _ = _MODELS[kind]
    name = name.strip()
    if model.objects.filter(business=business, name__iexact=name).exists():
        raise DuplicateNameError(f"A {kind} named '{name}' already exists")
    try:
        with transaction.atomic():
            obj = model.objects.create(business=business, name=name, description=description.strip())
    except IntegrityError:
        raise DuplicateNameError(f"A {kind} named '{name}' already exists")

    log_action(
        actor=actor,
        action=f'{kind.upper()}_CREATED',
        entity_type=model.__name__,
        entity_id=obj.id,
        metadata={'business': business.slug, 'name': name},
    )
    return obj


@transaction.atomic
def _delete(kind: str, *, business: Business, object_id: UUID, actor: User) -> None:
    model, not_found = _MODELS[kind]
    try:
        obj = model.objects.get(business=business, id=object_id)
    except model.DoesNotExist:
        raise not_found(f"{kind.capitalize()} not found")
    name = obj.name
    obj.delete()
    log_action(
        actor=actor,
        action=f'{kind.upper()}_DELETED',
        entity_type=model.__name__,
        entity_id=object_id,
        metadata={'business': business.slug, 'name': name},
    )


def create_category(*, business: Business, name: str, actor: User, description: str = "") -> Category:
    """Create a category; names are unique per business (case-insensitive)."""
    return _create('category', business=business, name=name, description=description, actor=actor)


def create_brand(*, business: Business, name: str, actor: User, description: str = "") -> Brand:
    """Create a brand; names are unique per business (case-insensitive)."""
    return _create('brand', business=business, name=name, description=description, actor=actor)


def delete_category(*, business: Business, category_id: UUID, actor: User) -> None:
    """Delete a category. Its products keep existing without a category."""
    _delete('category', business=business, object_id=category_id, actor=actor)


def delete_brand(*, business: Business, brand_id: UUID, actor: User) -> None:
    """Delete a brand. Its products keep existing without a brand."""
    _delete('brand', business=business, object_id=brand_id, actor=actor)
