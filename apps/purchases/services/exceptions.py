"""
Domain exceptions for the purchases app.

Raised by purchase, payment and policy services; the project exception
handler turns them into the error envelope.
"""

from config.exceptions import NotFoundServiceError, PermissionServiceError, ServiceError


class PurchasesServiceError(ServiceError):
    """Base exception for purchase service errors."""
    pass


class InvalidPolicyError(PurchasesServiceError):
    """Raised when shop policy values are out of range."""
    pass


class InvalidPurchaseError(PurchasesServiceError):
    """Raised when purchase input is inconsistent (no items, bad down payment...)."""
    pass


class InsufficientStockError(PurchasesServiceError):
    """Raised when a shop does not hold enough stock for a sale."""
    pass


class PurchaseNotFoundError(NotFoundServiceError, PurchasesServiceError):
    pass


class PaymentNotFoundError(NotFoundServiceError, PurchasesServiceError):
    pass


class InvalidPaymentError(PurchasesServiceError):
    """Raised for non-positive amounts, overpayments or closed purchases."""
    pass


class PaymentAlreadyProcessedError(PurchasesServiceError):
    """Raised when confirming or rejecting a payment that is no longer pending."""
    pass


class CustomerNotAssignedError(PermissionServiceError, PurchasesServiceError):
    """Raised when a collector records a payment for someone else's customer."""
    pass
