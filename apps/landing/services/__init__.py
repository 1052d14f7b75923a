"""Public landing page services."""

from .exceptions import (
    LandingServiceError,
    InvalidContactMessageError,
    ContactMessageNotFoundError,
)
from .public import (
    get_public_stats,
    submit_contact_message,
    list_contact_messages,
    mark_contact_message_read,
)

__all__ = [
    # Exceptions
    'LandingServiceError',
    'InvalidContactMessageError',
    'ContactMessageNotFoundError',

    # Public
    'get_public_stats',
    'submit_contact_message',
    'list_contact_messages',
    'mark_contact_message_read',
]
