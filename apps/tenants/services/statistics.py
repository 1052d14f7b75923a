"""Dashboard counters for super admins and business admins."""

from decimal import Decimal

from django.db.models import Count, Q, Sum

from apps.accounts.models import User
from apps.catalog.models import Product
from apps.customers.models import Customer
from apps.purchases.models import Payment, Purchase, PurchaseStatus
from apps.tenants.models import Business, Shop


def get_platform_overview() -> dict:
    """Counts across every tenant, for the super admin dashboard."""
    business_counts = Business.objects.aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(is_active=True)),
    )
    shop_counts = Shop.objects.aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(is_active=True)),
    )
    collected = Payment.objects.filter(is_confirmed=True).aggregate(
        total=Sum('amount')
    )['total'] or Decimal('0.00')

    return {
        'businesses': business_counts['total'],
        'active_businesses': business_counts['active'],
        'shops': shop_counts['total'],
        'active_shops': shop_counts['active'],
        'users': User.objects.count(),
        'customers': Customer.objects.count(),
        'purchases': Purchase.objects.count(),
        'total_collected': collected,
    }


def get_business_stats(*, business: Business) -> dict:
    """Counters shown on the business admin dashboard."""
    shop_counts = business.shops.aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(is_active=True)),
        suspended=Count('id', filter=Q(is_active=False)),
    )
    purchases = Purchase.objects.filter(customer__shop__business=business)
    totals = purchases.aggregate(
        sales=Sum('total_amount'),
        paid=Sum('amount_paid'),
        outstanding=Sum('outstanding_balance'),
    )

    return {
        'business': {'id': business.id, 'name': business.name, 'slug': business.slug},
        'shops': shop_counts['total'],
        'active_shops': shop_counts['active'],
        'suspended_shops': shop_counts['suspended'],
        'products': Product.objects.filter(business=business).count(),
        'customers': Customer.objects.filter(shop__business=business).count(),
        'purchases': purchases.count(),
        'active_purchases': purchases.filter(status=PurchaseStatus.ACTIVE).count(),
        'overdue_purchases': purchases.filter(status=PurchaseStatus.OVERDUE).count(),
        'total_sales': totals['sales'] or Decimal('0.00'),
        'total_collected': totals['paid'] or Decimal('0.00'),
        'total_outstanding': totals['outstanding'] or Decimal('0.00'),
    }
