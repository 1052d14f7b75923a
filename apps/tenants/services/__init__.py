"""
Tenants app services layer.

Businesses, shops, staff memberships and the access rules that scope every
role surface to a tenant.
"""

from .exceptions import (
    TenantsServiceError,
    BusinessNotFoundError,
    ShopNotFoundError,
    StaffMemberNotFoundError,
    TenantAccessDeniedError,
    InactiveTenantError,
    MissingPermissionError,
    DuplicateSlugError,
    AlreadyStaffMemberError,
    InvalidStaffInputError,
)
from .access import (
    TenantContext,
    resolve_business_admin,
    resolve_shop_admin,
    resolve_shop_staff,
    resolve_accountant,
    require_permission,
)
from .business_management import create_business, set_business_active
from .shop_management import create_shop, update_shop, set_shop_active, delete_shop
from .staff_management import (
    create_staff_member,
    set_staff_active,
    update_accountant_permissions,
    list_staff,
)

__all__ = [
    # Exceptions
    'TenantsServiceError',
    'BusinessNotFoundError',
    'ShopNotFoundError',
    'StaffMemberNotFoundError',
    'TenantAccessDeniedError',
    'InactiveTenantError',
    'MissingPermissionError',
    'DuplicateSlugError',
    'AlreadyStaffMemberError',
    'InvalidStaffInputError',

    # Access
    'TenantContext',
    'resolve_business_admin',
    'resolve_shop_admin',
    'resolve_shop_staff',
    'resolve_accountant',
    'require_permission',

    # Businesses & shops
    'create_business',
    'set_business_active',
    'create_shop',
    'update_shop',
    'set_shop_active',
    'delete_shop',

    # Staff
    'create_staff_member',
    'set_staff_active',
    'update_accountant_permissions',
    'list_staff',
]
