"""Staff membership management service."""

import logging
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.accounts.services import create_role_user
from apps.audit.services import log_action
from apps.tenants.models import ACCOUNTANT_PERMISSION_FLAGS, Business, Shop, StaffMember, StaffRole

from .exceptions import (
    AlreadyStaffMemberError,
    InvalidStaffInputError,
    StaffMemberNotFoundError,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@transaction.atomic
def create_staff_member(
    *,
    shop: Shop,
    email: str,
    name: str,
    password: str,
    role: str,
    actor: User,
    permissions: dict | None = None,
) -> StaffMember:
    """
    Create a staff login and its membership in ``shop``.

    Args:
        shop: Shop the member works in
        email: Login email
        name: Display name (required)
        password: Initial password, at least 8 characters
        role: One of ``StaffRole``
        actor: Admin performing the action
        permissions: Accountant permission flags, ignored for other roles

    Returns:
        Created StaffMember instance

    Raises:
        InvalidStaffInputError: If name, email, password or role are invalid
        AlreadyStaffMemberError: If the user already belongs to the shop
        EmailAlreadyRegisteredError: If the email is taken
    """
    if not name or not name.strip():
        raise InvalidStaffInputError("Name is required")
    if not email or '@' not in email:
        raise InvalidStaffInputError("Valid email is required")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidStaffInputError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    if role not in StaffRole.values:
        raise InvalidStaffInputError(f"Unknown staff role '{role}'")

    normalized = email.strip().lower()
    if StaffMember.objects.filter(user__email=normalized, shop=shop).exists():
        raise AlreadyStaffMemberError("This user is already a member of your shop")

    user = create_role_user(
        email=normalized,
        password=password,
        name=name,
        role=role,
        actor=actor,
    )

    flags = {}
    if role == StaffRole.ACCOUNTANT and permissions:
        flags = {key: bool(permissions[key]) for key in ACCOUNTANT_PERMISSION_FLAGS if key in permissions}

    member = StaffMember.objects.create(user=user, shop=shop, role=role, **flags)

    log_action(
        actor=actor,
        action=f'{role}_CREATED',
        entity_type='StaffMember',
        entity_id=member.id,
        metadata={'shop': shop.slug, 'email': normalized, 'name': user.name, **flags},
    )
    logger.info("Staff member %s (%s) added to %s", normalized, role, shop.slug)
    return member


def _get_member(member_id: UUID, *, shop: Shop | None = None,
                business: Business | None = None, role: str | None = None) -> StaffMember:
    queryset = StaffMember.objects.select_for_update().select_related('user', 'shop__business')
    if shop is not None:
        queryset = queryset.filter(shop=shop)
    if business is not None:
        queryset = queryset.filter(shop__business=business)
    if role is not None:
        queryset = queryset.filter(role=role)
    try:
        return queryset.get(id=member_id)
    except StaffMember.DoesNotExist:
        raise StaffMemberNotFoundError(f"Staff member with ID {member_id} not found")


@transaction.atomic
def set_staff_active(
    *,
    member_id: UUID,
    is_active: bool,
    actor: User,
    shop: Shop | None = None,
    business: Business | None = None,
    role: str | None = None,
) -> StaffMember:
    """Activate or deactivate a membership within the caller's scope."""
    member = _get_member(member_id, shop=shop, business=business, role=role)
    member.is_active = is_active
    member.save(update_fields=['is_active', 'updated_at'])

    log_action(
        actor=actor,
        action='STAFF_ACTIVATED' if is_active else 'STAFF_DEACTIVATED',
        entity_type='StaffMember',
        entity_id=member.id,
        metadata={'shop': member.shop.slug, 'email': member.user.email},
    )
    return member


@transaction.atomic
def update_accountant_permissions(
    *,
    member_id: UUID,
    business: Business,
    permissions: dict,
    actor: User,
) -> StaffMember:
    """Set accountant permission flags; unknown keys are ignored."""
    member = _get_member(member_id, business=business, role=StaffRole.ACCOUNTANT)

    previous = {key: getattr(member, key) for key in ACCOUNTANT_PERMISSION_FLAGS}
    for key in ACCOUNTANT_PERMISSION_FLAGS:
        if key in permissions:
            setattr(member, key, bool(permissions[key]))
    member.save()

    log_action(
        actor=actor,
        action='ACCOUNTANT_PERMISSIONS_UPDATED',
        entity_type='StaffMember',
        entity_id=member.id,
        metadata={
            'previous': previous,
            'new': {key: getattr(member, key) for key in ACCOUNTANT_PERMISSION_FLAGS},
        },
    )
    return member


def list_staff(*, shop: Shop | None = None, business: Business | None = None,
               role: str | None = None) -> QuerySet:
    queryset = StaffMember.objects.select_related('user', 'shop')
    if shop is not None:
        queryset = queryset.filter(shop=shop)
    if business is not None:
        queryset = queryset.filter(shop__business=business)
    if role:
        queryset = queryset.filter(role=role)
    return queryset
