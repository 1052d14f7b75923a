"""Domain-specific exceptions for customers services."""

from config.exceptions import ServiceError, NotFoundServiceError


class CustomersServiceError(ServiceError):
    """Base exception for customers service errors."""
    pass


class CustomerNotFoundError(NotFoundServiceError, CustomersServiceError):
    """Raised when a customer does not exist in the shop."""
    pass


class DuplicateCustomerError(CustomersServiceError):
    """Raised when the shop already has a customer with the phone number."""
    pass


class InvalidCustomerError(CustomersServiceError):
    """Raised when customer fields fail validation."""
    pass


class InvalidCollectorError(CustomersServiceError):
    """Raised when the selected debt collector is not active in the shop."""
    pass
