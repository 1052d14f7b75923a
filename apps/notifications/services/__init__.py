from .exceptions import NotificationsServiceError, NotificationNotFoundError
from .notification_service import (
    notify,
    list_notifications,
    unread_count,
    mark_notification_read,
    mark_all_read,
)

__all__ = [
    'NotificationsServiceError',
    'NotificationNotFoundError',
    'notify',
    'list_notifications',
    'unread_count',
    'mark_notification_read',
    'mark_all_read',
]
