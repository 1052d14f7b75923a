"""Public landing page data and the contact form."""

import logging
from decimal import Decimal
from uuid import UUID

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import QuerySet, Sum

from apps.customers.models import Customer
from apps.landing.models import ContactMessage
from apps.purchases.models import Payment, PaymentStatus
from apps.tenants.models import Business, Shop

from .exceptions import ContactMessageNotFoundError, InvalidContactMessageError

logger = logging.getLogger(__name__)


def get_public_stats() -> dict:
    """Platform-wide counters safe to show anonymously."""
    collected = Payment.objects.filter(
        status=PaymentStatus.COMPLETED, is_confirmed=True
    ).aggregate(total=Sum('amount'))['total']
    return {
        'businesses': Business.objects.filter(is_active=True).count(),
        'shops': Shop.objects.filter(is_active=True).count(),
        'customers': Customer.objects.count(),
        'total_collected': collected or Decimal('0.00'),
    }


def submit_contact_message(*, name: str, email: str, subject: str, message: str,
                           phone: str = '') -> ContactMessage:
    """
    Store a contact form message for super admin review.

    Values are trimmed and the e-mail lower-cased.

    Raises:
        InvalidContactMessageError: Missing required field or invalid e-mail
    """
    name, email, subject, message = (
        (value or '').strip() for value in (name, email, subject, message)
    )
    if not (name and email and subject and message):
        raise InvalidContactMessageError("Please fill in all required fields.")

    email = email.lower()
    try:
        validate_email(email)
    except ValidationError:
        raise InvalidContactMessageError("Please enter a valid email address.")

    contact = ContactMessage.objects.create(
        name=name,
        email=email,
        phone=(phone or '').strip(),
        subject=subject,
        message=message,
    )
    logger.info("Contact message %s received from %s", contact.id, email)
    return contact


def list_contact_messages(*, is_read: bool | None = None) -> QuerySet:
    queryset = ContactMessage.objects.all()
    if is_read is not None:
        queryset = queryset.filter(is_read=is_read)
    return queryset


@transaction.atomic
def mark_contact_message_read(*, message_id: UUID) -> ContactMessage:
    try:
        contact = ContactMessage.objects.select_for_update().get(id=message_id)
    except ContactMessage.DoesNotExist:
        raise ContactMessageNotFoundError(f"Contact message with ID {message_id} not found")
    if not contact.is_read:
        contact.is_read = True
        contact.save(update_fields=['is_read'])
    return contact
