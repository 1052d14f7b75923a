"""Business (tenant) management service."""

import logging
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User, UserRole
from apps.accounts.services import (
    EmailAlreadyRegisteredError,
    UserRegistrationError,
    create_role_user,
)
from apps.audit.services import log_action
from apps.tenants.models import Business

from .exceptions import BusinessNotFoundError, DuplicateSlugError
from .slugs import unique_slug

logger = logging.getLogger(__name__)


@transaction.atomic
def create_business(
    *,
    name: str,
    owner_email: str,
    owner_name: str,
    owner_password: str | None = None,
    slug: str | None = None,
    actor: User,
) -> Business:
    """
    Create a business together with its business admin login.

    When a user with ``owner_email`` already exists and is a business admin
    the business is attached to that user; otherwise a new business admin
    account is created, which requires ``owner_password``.

    Args:
        name: Business name
        owner_email: Email of the business admin
        owner_name: Name of the business admin
        owner_password: Password for a new business admin account
        slug: Optional explicit slug, derived from the name when omitted
        actor: Super admin performing the action

    Returns:
        Created Business instance

    Raises:
        DuplicateSlugError: If an explicit slug is taken
        EmailAlreadyRegisteredError: If the email belongs to a non-admin user
    """
    if slug:
        if Business.objects.filter(slug=slug).exists():
            raise DuplicateSlugError(f"Business slug '{slug}' is already taken")
    else:
        slug = unique_slug(Business, name)

    email = owner_email.strip().lower()
    owner = User.objects.filter(email=email).first()
    if owner is None:
        if not owner_password:
            raise UserRegistrationError("A password is required for a new business admin")
        owner = create_role_user(
            email=email,
            password=owner_password,
            name=owner_name,
            role=UserRole.BUSINESS_ADMIN,
            actor=actor,
        )
    elif owner.role != UserRole.BUSINESS_ADMIN:
        raise EmailAlreadyRegisteredError(
            f"{email} is already registered with role {owner.get_role_display()}"
        )

    business = Business.objects.create(name=name.strip(), slug=slug, owner=owner)

    log_action(
        actor=actor,
        action='BUSINESS_CREATED',
        entity_type='Business',
        entity_id=business.id,
        metadata={'name': business.name, 'slug': business.slug, 'owner': owner.email},
    )
    logger.info("Business %s created for %s", business.slug, owner.email)
    return business


@transaction.atomic
def set_business_active(*, business_id: UUID, is_active: bool, actor: User) -> Business:
    """Activate or suspend a business."""
    try:
        business = Business.objects.select_for_update().get(id=business_id)
    except Business.DoesNotExist:
        raise BusinessNotFoundError(f"Business with ID {business_id} not found")

    business.is_active = is_active
    business.save(update_fields=['is_active', 'updated_at'])

    log_action(
        actor=actor,
        action='BUSINESS_ACTIVATED' if is_active else 'BUSINESS_SUSPENDED',
        entity_type='Business',
        entity_id=business.id,
        metadata={'name': business.name},
    )
    logger.info("Business %s is_active=%s", business.slug, is_active)
    return business
