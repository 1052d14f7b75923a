"""User authentication service."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.audit.services import log_action

from .exceptions import InvalidCredentialsError, InactiveAccountError

logger = logging.getLogger(__name__)

User = get_user_model()


@transaction.atomic
def authenticate_user(*, email: str, password: str, ip: str = '', user_agent: str = '') -> User:
    """
    Authenticate a platform user or portal customer by email and password.

    A successful login stamps ``last_login`` and writes a LOGIN audit entry
    carrying the client address and user agent.

    Args:
        email: Login email (case-insensitive)
        password: Raw password
        ip: Client address for the audit trail
        user_agent: Client user agent for the audit trail

    Returns:
        Authenticated User instance

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        InactiveAccountError: If the account is deactivated
    """
    normalized = email.strip().lower()
    user = User.objects.select_for_update().filter(email=normalized).first()
    if user is None or not user.check_password(password):
        logger.info("Failed login for %s from %s", normalized, ip or 'unknown')
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    log_action(
        actor=user,
        action='LOGIN',
        entity_type='User',
        entity_id=user.id,
        metadata={
            'email': user.email,
            'role': user.role,
            'ip': ip or 'unknown',
            'user_agent': user_agent or 'unknown',
        },
    )
    return user
