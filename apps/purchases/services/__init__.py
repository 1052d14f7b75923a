"""Purchase, payment and shop policy services."""

from .exceptions import (
    PurchasesServiceError,
    InvalidPolicyError,
    InvalidPurchaseError,
    InsufficientStockError,
    PurchaseNotFoundError,
    PaymentNotFoundError,
    InvalidPaymentError,
    PaymentAlreadyProcessedError,
    CustomerNotAssignedError,
)
from .policy_management import (
    default_policy,
    get_shop_policy,
    validate_policy_values,
    upsert_shop_policy,
)
from .purchase_management import (
    get_purchase,
    list_purchases,
    next_purchase_number,
    create_purchase,
    refresh_overdue_status,
    refresh_overdue_purchases,
    get_purchase_summary,
)
from .payment_management import (
    get_payment,
    apply_confirmed_payments,
    record_payment,
    record_collector_payment,
    confirm_payment,
    reject_payment,
    list_payments,
    collector_totals,
)
from .dashboards import (
    get_sales_dashboard,
    get_collector_dashboard,
)
from .record_export import (
    PAYMENT_STATUS_FILTERS,
    build_purchases_workbook,
    build_payments_workbook,
    export_purchases,
    export_payments,
)

__all__ = [
    # Exceptions
    'PurchasesServiceError',
    'InvalidPolicyError',
    'InvalidPurchaseError',
    'InsufficientStockError',
    'PurchaseNotFoundError',
    'PaymentNotFoundError',
    'InvalidPaymentError',
    'PaymentAlreadyProcessedError',
    'CustomerNotAssignedError',

    # Policy
    'default_policy',
    'get_shop_policy',
    'validate_policy_values',
    'upsert_shop_policy',

    # Purchases
    'get_purchase',
    'list_purchases',
    'next_purchase_number',
    'create_purchase',
    'refresh_overdue_status',
    'refresh_overdue_purchases',
    'get_purchase_summary',

    # Payments
    'get_payment',
    'apply_confirmed_payments',
    'record_payment',
    'record_collector_payment',
    'confirm_payment',
    'reject_payment',
    'list_payments',
    'collector_totals',

    # Dashboards
    'get_sales_dashboard',
    'get_collector_dashboard',

    # Exports
    'PAYMENT_STATUS_FILTERS',
    'build_purchases_workbook',
    'build_payments_workbook',
    'export_purchases',
    'export_payments',
]
