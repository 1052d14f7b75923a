"""Commission and bonus services."""

from .exceptions import (
    CommissionsServiceError,
    InvalidCommissionInputError,
    CommissionNotFoundError,
    InvalidCommissionTransitionError,
    BonusRuleNotFoundError,
    InvalidBonusRuleError,
)
from .commission_calculation import (
    commission_amount,
    calculate_commissions,
    approve_commission,
    mark_commission_paid,
    list_commissions,
)
from .bonus_engine import (
    get_period_bounds,
    compute_bonus_amount,
    trigger_bonus,
    calculate_target_bonuses,
    get_bonus_rule,
    create_bonus_rule,
    update_bonus_rule,
    delete_bonus_rule,
    list_bonus_records,
    approve_bonus_records,
    mark_bonus_records_paid,
    reject_bonus_records,
    get_bonus_summary,
    get_staff_bonus_summary,
)

__all__ = [
    # Exceptions
    'CommissionsServiceError',
    'InvalidCommissionInputError',
    'CommissionNotFoundError',
    'InvalidCommissionTransitionError',
    'BonusRuleNotFoundError',
    'InvalidBonusRuleError',

    # Commissions
    'commission_amount',
    'calculate_commissions',
    'approve_commission',
    'mark_commission_paid',
    'list_commissions',

    # Bonuses
    'get_period_bounds',
    'compute_bonus_amount',
    'trigger_bonus',
    'calculate_target_bonuses',
    'get_bonus_rule',
    'create_bonus_rule',
    'update_bonus_rule',
    'delete_bonus_rule',
    'list_bonus_records',
    'approve_bonus_records',
    'mark_bonus_records_paid',
    'reject_bonus_records',
    'get_bonus_summary',
    'get_staff_bonus_summary',
]
