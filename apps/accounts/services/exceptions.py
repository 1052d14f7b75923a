"""Domain-specific exceptions for accounts services."""

from config.exceptions import ServiceError, NotFoundServiceError, PermissionServiceError


class AccountsServiceError(ServiceError):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when user registration fails."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    status_code = 401


class InactiveAccountError(PermissionServiceError, AccountsServiceError):
    """Raised when account is deactivated."""
    pass


class UserNotFoundError(NotFoundServiceError, AccountsServiceError):
    """Raised when user does not exist."""
    pass


class PasswordConfirmationError(AccountsServiceError):
    """Raised when password confirmation fails."""
    pass


class EmailAlreadyRegisteredError(AccountsServiceError):
    """Raised when an email address is already taken."""
    pass
