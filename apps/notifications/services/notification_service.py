"""In-app notifications."""

import logging
from uuid import UUID

from django.db import DatabaseError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.notifications.models import Notification, NotificationType

from .exceptions import NotificationNotFoundError

logger = logging.getLogger(__name__)


def notify(*, user: User, title: str, message: str, type: str = NotificationType.GENERAL,
           customer=None) -> Notification | None:
    """
    Create a notification for ``user``.

    Runs in a savepoint so a failure here never rolls back the action that
    triggered it; the failure is logged and ``None`` returned.
    """
    try:
        with transaction.atomic():
            return Notification.objects.create(
                user=user,
                customer=customer,
                type=type,
                title=title,
                message=message,
            )
    except DatabaseError:
        logger.exception("Could not notify user %s (%s)", user.pk, type)
        return None


def list_notifications(*, user: User, unread_only: bool = False) -> QuerySet:
    queryset = Notification.objects.filter(user=user)
    if unread_only:
        queryset = queryset.filter(is_read=False)
    return queryset


def unread_count(user: User) -> int:
    return Notification.objects.filter(user=user, is_read=False).count()


@transaction.atomic
def mark_notification_read(*, user: User, notification_id: UUID) -> Notification:
    """
    Mark one of the user's notifications as read.

    Raises:
        NotificationNotFoundError: If it does not belong to the user
    """
    try:
        notification = Notification.objects.select_for_update().get(id=notification_id, user=user)
    except Notification.DoesNotExist:
        raise NotificationNotFoundError(f"Notification with ID {notification_id} not found")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=['is_read', 'read_at'])
    return notification


def mark_all_read(*, user: User) -> int:
    """Returns the number of notifications updated."""
    return Notification.objects.filter(user=user, is_read=False).update(
        is_read=True, read_at=timezone.now()
    )
