"""Exceptions for the public landing pages."""

from config.exceptions import NotFoundServiceError, ServiceError


class LandingServiceError(ServiceError):
    """Base exception for landing services."""
    pass


class InvalidContactMessageError(LandingServiceError):
    """Raised when a contact form submission is incomplete or malformed."""
    pass


class ContactMessageNotFoundError(NotFoundServiceError, LandingServiceError):
    pass
