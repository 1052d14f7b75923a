"""Customer services."""

from .exceptions import (
    CustomersServiceError,
    CustomerNotFoundError,
    DuplicateCustomerError,
    InvalidCustomerError,
    InvalidCollectorError,
)
from .customer_management import (
    normalize_phone,
    get_customer,
    create_customer,
    update_customer,
    toggle_customer_status,
    assign_collector,
    delete_customer,
    customers_with_summary,
    get_customer_summary,
)
from .portal import get_portal_customer, get_portal_dashboard

__all__ = [
    # Exceptions
    'CustomersServiceError',
    'CustomerNotFoundError',
    'DuplicateCustomerError',
    'InvalidCustomerError',
    'InvalidCollectorError',

    # Services
    'normalize_phone',
    'get_customer',
    'create_customer',
    'update_customer',
    'toggle_customer_status',
    'assign_collector',
    'delete_customer',
    'customers_with_summary',
    'get_customer_summary',
    'get_portal_customer',
    'get_portal_dashboard',
]
