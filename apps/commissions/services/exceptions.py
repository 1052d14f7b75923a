"""
Domain exceptions for commissions and bonuses.
"""

from config.exceptions import NotFoundServiceError, ServiceError


class CommissionsServiceError(ServiceError):
    """Base exception for commission and bonus service errors."""
    pass


class InvalidCommissionInputError(CommissionsServiceError):
    """Raised for out-of-range rates or an inverted period."""
    pass


class CommissionNotFoundError(NotFoundServiceError, CommissionsServiceError):
    pass


class InvalidCommissionTransitionError(CommissionsServiceError):
    """Raised when a commission is not in the state the transition expects."""
    pass


class BonusRuleNotFoundError(NotFoundServiceError, CommissionsServiceError):
    pass


class InvalidBonusRuleError(CommissionsServiceError):
    """Raised for a blank name, non-positive value or malformed tiers."""
    pass
