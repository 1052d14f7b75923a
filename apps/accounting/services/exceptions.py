"""
Domain exceptions for the accounting app.
"""

from config.exceptions import NotFoundServiceError, ServiceError


class AccountingServiceError(ServiceError):
    """Base exception for accounting service errors."""
    pass


class InvalidExpenseError(AccountingServiceError):
    pass


class InvalidBudgetError(AccountingServiceError):
    """Raised for a non-positive amount or an inverted date range."""
    pass


class BudgetNotFoundError(NotFoundServiceError, AccountingServiceError):
    pass


class InvalidScheduledReportError(AccountingServiceError):
    """Raised when recipients are missing or malformed."""
    pass


class ScheduledReportNotFoundError(NotFoundServiceError, AccountingServiceError):
    pass
