"""
Tenant access resolution.

Every role surface is addressed by a business or shop slug. These helpers
load the tenant, check that it is active and that the user holds the
right role in it, and return what the view needs to continue.
"""

from dataclasses import dataclass

from apps.accounts.models import User, UserRole
from apps.tenants.models import Business, Shop, StaffMember, StaffRole

from .exceptions import (
    BusinessNotFoundError,
    InactiveTenantError,
    MissingPermissionError,
    ShopNotFoundError,
    TenantAccessDeniedError,
)


@dataclass
class TenantContext:
    """What a role-scoped request resolved to."""
    business: Business
    shop: Shop | None = None
    membership: StaffMember | None = None


def _load_business(slug: str) -> Business:
    try:
        business = Business.objects.select_related('owner').get(slug=slug)
    except Business.DoesNotExist:
        raise BusinessNotFoundError(f"Business '{slug}' not found")
    if not business.is_active:
        raise InactiveTenantError("This business is suspended")
    return business


def _load_shop(slug: str) -> Shop:
    try:
        shop = Shop.objects.select_related('business__owner').get(slug=slug)
    except Shop.DoesNotExist:
        raise ShopNotFoundError(f"Shop '{slug}' not found")
    if not shop.is_active or not shop.business.is_active:
        raise InactiveTenantError("This shop is suspended")
    return shop


def resolve_business_admin(user: User, business_slug: str) -> TenantContext:
    """Business owners reach their own business; super admins reach any."""
    business = _load_business(business_slug)
    if user.role == UserRole.SUPER_ADMIN:
        return TenantContext(business=business)
    if user.role == UserRole.BUSINESS_ADMIN and business.owner_id == user.id:
        return TenantContext(business=business)
    raise TenantAccessDeniedError("You do not have access to this business")


def resolve_shop_admin(user: User, shop_slug: str) -> TenantContext:
    """Shop admins of the shop, the owning business admin, or a super admin."""
    shop = _load_shop(shop_slug)
    context = TenantContext(business=shop.business, shop=shop)
    if user.role == UserRole.SUPER_ADMIN:
        return context
    if user.role == UserRole.BUSINESS_ADMIN and shop.business.owner_id == user.id:
        return context

    membership = StaffMember.objects.filter(
        user=user, shop=shop, role=StaffRole.SHOP_ADMIN, is_active=True
    ).first()
    if membership is None:
        raise TenantAccessDeniedError("You do not have admin access to this shop")
    context.membership = membership
    return context


def resolve_shop_staff(user: User, shop_slug: str, role: str) -> TenantContext:
    """Active members of the shop holding ``role``."""
    shop = _load_shop(shop_slug)
    membership = StaffMember.objects.filter(
        user=user, shop=shop, role=role, is_active=True
    ).select_related('user').first()
    if membership is None:
        raise TenantAccessDeniedError(
            f"You are not an active {StaffRole(role).label.lower()} of this shop"
        )
    return TenantContext(business=shop.business, shop=shop, membership=membership)


def resolve_accountant(user: User, business_slug: str) -> TenantContext:
    """
    Accountants attached to any shop of the business.

    An accountant attached to several shops acts through the membership
    created first, so the permission flags in force are stable.
    """
    business = _load_business(business_slug)
    membership = StaffMember.objects.filter(
        user=user,
        shop__business=business,
        role=StaffRole.ACCOUNTANT,
        is_active=True,
    ).select_related('shop').order_by('created_at').first()
    if membership is None:
        raise TenantAccessDeniedError("You are not an accountant for this business")
    return TenantContext(business=business, shop=membership.shop, membership=membership)


def require_permission(membership: StaffMember | None, flag: str, message: str) -> None:
    """
    Enforce an accountant permission flag.

    Admin callers carry no accountant membership and are always allowed.
    """
    if membership is None or membership.role != StaffRole.ACCOUNTANT:
        return
    if not membership.has_permission(flag):
        raise MissingPermissionError(message)
