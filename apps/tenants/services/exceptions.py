"""
Domain-specific exceptions for tenants app.

These exceptions represent business rule violations and are turned into
HTTP responses by the project exception handler.
"""

from config.exceptions import ServiceError, NotFoundServiceError, PermissionServiceError


class TenantsServiceError(ServiceError):
    """Base exception for all tenants service errors."""
    pass


class BusinessNotFoundError(NotFoundServiceError, TenantsServiceError):
    """Raised when a business does not exist."""
    pass


class ShopNotFoundError(NotFoundServiceError, TenantsServiceError):
    """Raised when a shop does not exist."""
    pass


class StaffMemberNotFoundError(NotFoundServiceError, TenantsServiceError):
    """Raised when a staff membership does not exist in the given scope."""
    pass


class TenantAccessDeniedError(PermissionServiceError, TenantsServiceError):
    """Raised when a user has no role in the requested business or shop."""
    pass


class InactiveTenantError(PermissionServiceError, TenantsServiceError):
    """Raised when the requested business or shop is suspended."""
    pass


class MissingPermissionError(PermissionServiceError, TenantsServiceError):
    """Raised when an accountant lacks the permission flag for an action."""
    pass


class DuplicateSlugError(TenantsServiceError):
    """Raised when a requested slug is already taken."""
    pass


class AlreadyStaffMemberError(TenantsServiceError):
    """Raised when a user is already a member of the shop."""
    pass


class InvalidStaffInputError(TenantsServiceError):
    """Raised when staff account details fail validation."""
    pass
