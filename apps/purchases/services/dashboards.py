"""Home screen figures for sales staff and debt collectors."""

from django.db.models import Sum
from django.utils import timezone

from apps.catalog.models import ShopProduct
from apps.customers.models import Customer
from apps.purchases.models import OPEN_STATUSES, Purchase
from apps.purchases.pricing import ZERO
from apps.tenants.models import StaffMember

from .payment_management import collector_totals


def get_sales_dashboard(membership: StaffMember) -> dict:
    sales = Purchase.objects.filter(sold_by=membership)
    month_start = timezone.now().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return {
        'sales_count': sales.count(),
        'sales_total': sales.aggregate(total=Sum('total_amount'))['total'] or ZERO,
        'sales_this_month': sales.filter(
            created_at__gte=month_start
        ).aggregate(total=Sum('total_amount'))['total'] or ZERO,
        'customers_count': Customer.objects.filter(shop=membership.shop, is_active=True).count(),
        'products_in_stock': ShopProduct.objects.filter(
            shop=membership.shop, stock_quantity__gt=0, product__is_active=True
        ).count(),
        'recent_sales': list(
            sales.select_related('customer').prefetch_related('items').order_by('-created_at')[:5]
        ),
    }


def get_collector_dashboard(membership: StaffMember) -> dict:
    customers = Customer.objects.filter(assigned_collector=membership, is_active=True)
    outstanding = Purchase.objects.filter(
        customer__assigned_collector=membership,
        status__in=OPEN_STATUSES,
    ).aggregate(total=Sum('outstanding_balance'))['total'] or ZERO
    return {
        'assigned_customers': customers.count(),
        'total_outstanding': outstanding,
        **collector_totals(membership),
    }
