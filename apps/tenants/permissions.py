"""
Role permission classes for the tenant-scoped API surfaces.

Each class resolves the business or shop named in the URL, checks the
user's role in it, and stores the resulting ``TenantContext`` on
``request.tenant`` for the view.

Usage:
    class ProductViewSet(viewsets.ModelViewSet):
        permission_classes = [IsAuthenticated, IsBusinessAdmin]

        def get_queryset(self):
            return Product.objects.filter(business=self.request.tenant.business)
"""
from rest_framework.permissions import BasePermission

from apps.accounts.models import UserRole
from apps.tenants.models import StaffRole
from apps.tenants.services import (
    resolve_accountant,
    resolve_business_admin,
    resolve_shop_admin,
    resolve_shop_staff,
)


class IsSuperAdmin(BasePermission):
    """Platform operators only."""

    message = 'Super admin access required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == UserRole.SUPER_ADMIN)


class IsCustomer(BasePermission):
    """Customer portal users."""

    message = 'Customer portal access required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == UserRole.CUSTOMER)


class _TenantPermission(BasePermission):
    slug_kwarg = None

    def resolve(self, user, slug):
        raise NotImplementedError

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        request.tenant = self.resolve(user, view.kwargs[self.slug_kwarg])
        return True


class IsBusinessAdmin(_TenantPermission):
    """Owner of the business in ``<business_slug>`` (or a super admin)."""

    slug_kwarg = 'business_slug'

    def resolve(self, user, slug):
        return resolve_business_admin(user, slug)


class IsAccountant(_TenantPermission):
    """Accountant attached to a shop of the business in ``<business_slug>``."""

    slug_kwarg = 'business_slug'

    def resolve(self, user, slug):
        return resolve_accountant(user, slug)


class IsShopAdmin(_TenantPermission):
    """Shop admin of ``<shop_slug>``, its business admin, or a super admin."""

    slug_kwarg = 'shop_slug'

    def resolve(self, user, slug):
        return resolve_shop_admin(user, slug)


class IsSalesStaff(_TenantPermission):
    slug_kwarg = 'shop_slug'

    def resolve(self, user, slug):
        return resolve_shop_staff(user, slug, StaffRole.SALES_STAFF)


class IsCollector(_TenantPermission):
    slug_kwarg = 'shop_slug'

    def resolve(self, user, slug):
        return resolve_shop_staff(user, slug, StaffRole.DEBT_COLLECTOR)
