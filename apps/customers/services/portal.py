"""Customer portal read models."""

from apps.accounts.models import User
from apps.customers.models import Customer
from apps.notifications.services import unread_count

from .customer_management import get_customer_summary
from .exceptions import CustomerNotFoundError


def get_portal_customer(user: User) -> Customer:
    """
    Customer record linked to a portal login.

    Raises:
        CustomerNotFoundError: If the user has no linked customer
    """
    try:
        return Customer.objects.select_related('shop', 'assigned_collector__user').get(user=user)
    except Customer.DoesNotExist:
        raise CustomerNotFoundError("No customer profile is linked to this account")


def get_portal_dashboard(customer: Customer) -> dict:
    open_purchases = customer.purchases.filter(
        status__in=['PENDING', 'ACTIVE', 'OVERDUE']
    ).order_by('due_date')
    next_due = open_purchases.first()
    return {
        'customer': customer,
        'shop_name': customer.shop.name,
        'summary': get_customer_summary(customer=customer),
        'unread_notifications': unread_count(customer.user),
        'next_due_purchase': next_due.purchase_number if next_due else None,
        'next_due_date': next_due.due_date if next_due else None,
        'next_due_balance': next_due.outstanding_balance if next_due else None,
    }
