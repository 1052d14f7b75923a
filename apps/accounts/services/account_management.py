"""Account management service."""

from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction

from apps.audit.services import log_action

from .exceptions import PasswordConfirmationError, UserNotFoundError

User = get_user_model()

MIN_PASSWORD_LENGTH = 8


@transaction.atomic
def change_password(
    *,
    user: User,
    current_password: str,
    new_password: str,
    confirm_password: str,
) -> None:
    """
    Change the password of a logged-in user.

    Raises:
        PasswordConfirmationError: If the current password is wrong, the new
            one is shorter than 8 characters, or the confirmation differs
    """
    if not user.check_password(current_password):
        raise PasswordConfirmationError("Current password is incorrect")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise PasswordConfirmationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    if new_password != confirm_password:
        raise PasswordConfirmationError("Passwords do not match")

    user.set_password(new_password)
    user.save(update_fields=['password', 'updated_at'])

    log_action(actor=user, action='PASSWORD_CHANGED', entity_type='User', entity_id=user.id)


@transaction.atomic
def set_user_active(*, user_id: UUID, is_active: bool, actor: User | None = None) -> User:
    """Activate or deactivate a login."""
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except User.DoesNotExist:
        raise UserNotFoundError(f"User with ID {user_id} not found")

    user.is_active = is_active
    user.save(update_fields=['is_active', 'updated_at'])

    log_action(
        actor=actor,
        action='USER_ACTIVATED' if is_active else 'USER_DEACTIVATED',
        entity_type='User',
        entity_id=user.id,
    )
    return user
