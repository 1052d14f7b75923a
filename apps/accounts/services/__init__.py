"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    PasswordConfirmationError,
    EmailAlreadyRegisteredError,
)
from .user_registration import create_role_user, register_customer_account
from .user_authentication import authenticate_user
from .account_management import change_password, set_user_active

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'UserNotFoundError',
    'PasswordConfirmationError',
    'EmailAlreadyRegisteredError',
    # Services
    'create_role_user',
    'register_customer_account',
    'authenticate_user',
    'change_password',
    'set_user_active',
]
