from config.exceptions import NotFoundServiceError, ServiceError


class NotificationsServiceError(ServiceError):
    """Base exception for notification service errors."""
    pass


class NotificationNotFoundError(NotFoundServiceError, NotificationsServiceError):
    pass
