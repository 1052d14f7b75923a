"""
Financial reports for accountants.

All figures come from the purchase and payment tables. Collections only
count confirmed payments.
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, DecimalField, F, Q, Sum
from django.db.models.functions import Coalesce, TruncDate, TruncMonth, TruncWeek
from django.utils import timezone

from apps.customers.models import Customer
from apps.purchases.models import (
    OPEN_STATUSES,
    Payment,
    PaymentMethod,
    Purchase,
    PurchaseItem,
    PurchaseStatus,
    PurchaseType,
)
from apps.tenants.models import Business, Shop

ZERO = Decimal('0.00')
CENT = Decimal('0.01')

AGING_BUCKETS = (
    ('current', 30),
    ('days_31_60', 60),
    ('days_61_90', 90),
)

TRUNCATE = {
    'day': TruncDate,
    'week': TruncWeek,
    'month': TruncMonth,
}


def _sum(queryset, field):
    return queryset.aggregate(total=Sum(field))['total'] or ZERO


def _business_purchases(business: Business, shop_id=None):
    purchases = Purchase.objects.filter(customer__shop__business=business)
    if shop_id:
        purchases = purchases.filter(customer__shop_id=shop_id)
    return purchases


def _confirmed_payments(business: Business, shop_id=None):
    payments = Payment.objects.filter(
        purchase__customer__shop__business=business, is_confirmed=True
    )
    if shop_id:
        payments = payments.filter(purchase__customer__shop_id=shop_id)
    return payments


def aging_bucket(days_overdue: int) -> str:
    """Bucket for an outstanding balance ``days_overdue`` days past due."""
    for bucket, limit in AGING_BUCKETS:
        if days_overdue <= limit:
            return bucket
    return 'over_90'


def get_aging_report(*, business: Business, shop_id=None, as_of=None) -> list[dict]:
    """
    Outstanding balances per customer split by days past due.

    Balances not yet due, or up to 30 days late, count as ``current``.
    Sorted by total outstanding, largest first.
    """
    as_of = as_of or timezone.now()
    purchases = _business_purchases(business, shop_id).filter(
        status__in=OPEN_STATUSES, outstanding_balance__gt=0
    ).select_related('customer__shop')

    rows = {}
    for purchase in purchases:
        customer = purchase.customer
        row = rows.setdefault(customer.id, {
            'customer_id': customer.id,
            'customer_name': customer.full_name,
            'customer_phone': customer.phone,
            'shop_name': customer.shop.name,
            'current': ZERO,
            'days_31_60': ZERO,
            'days_61_90': ZERO,
            'over_90': ZERO,
            'total_outstanding': ZERO,
            'oldest_due_date': None,
        })
        days_overdue = (as_of - purchase.due_date).days
        row[aging_bucket(days_overdue)] += purchase.outstanding_balance
        row['total_outstanding'] += purchase.outstanding_balance
        if row['oldest_due_date'] is None or purchase.due_date < row['oldest_due_date']:
            row['oldest_due_date'] = purchase.due_date

    return sorted(rows.values(), key=lambda row: row['total_outstanding'], reverse=True)


def get_revenue_report(*, business: Business, start_date: date, end_date: date,
                       group_by: str = 'day', shop_id=None) -> list[dict]:
    """
    Sales and collections per day, week (starting Monday) or month.
    """
    truncate = TRUNCATE[group_by]
    purchases = _business_purchases(business, shop_id).filter(
        created_at__date__gte=start_date, created_at__date__lte=end_date
    )
    payments = _confirmed_payments(business, shop_id).filter(
        confirmed_at__date__gte=start_date, confirmed_at__date__lte=end_date
    )

    rows = defaultdict(lambda: {
        'revenue': ZERO,
        'collections': ZERO,
        'cash_sales': 0,
        'credit_sales': 0,
        'layaway_sales': 0,
        'payment_count': 0,
    })

    sales = purchases.annotate(bucket=truncate('created_at')).values('bucket').annotate(
        revenue=Sum('total_amount'),
        cash_sales=Count('id', filter=Q(purchase_type=PurchaseType.CASH)),
        credit_sales=Count('id', filter=Q(purchase_type=PurchaseType.CREDIT)),
        layaway_sales=Count('id', filter=Q(purchase_type=PurchaseType.LAYAWAY)),
    )
    for entry in sales:
        row = rows[_bucket_key(entry['bucket'], group_by)]
        row['revenue'] += entry['revenue'] or ZERO
        row['cash_sales'] += entry['cash_sales']
        row['credit_sales'] += entry['credit_sales']
        row['layaway_sales'] += entry['layaway_sales']

    collected = payments.annotate(bucket=truncate('confirmed_at')).values('bucket').annotate(
        collections=Sum('amount'),
        payment_count=Count('id'),
    )
    for entry in collected:
        row = rows[_bucket_key(entry['bucket'], group_by)]
        row['collections'] += entry['collections'] or ZERO
        row['payment_count'] += entry['payment_count']

    return [{'period': key, **values} for key, values in sorted(rows.items())]


def _bucket_key(value, group_by: str) -> str:
    if hasattr(value, 'date'):
        value = value.date()
    if group_by == 'month':
        return value.strftime('%Y-%m')
    return value.isoformat()


def get_collection_performance(*, business: Business, start_date: date | None = None,
                               end_date: date | None = None) -> list[dict]:
    """Confirmed collections per collector, best first."""
    payments = _confirmed_payments(business).filter(collector__isnull=False)
    if start_date:
        payments = payments.filter(confirmed_at__date__gte=start_date)
    if end_date:
        payments = payments.filter(confirmed_at__date__lte=end_date)

    zero = Decimal('0.00')
    money = DecimalField(max_digits=14, decimal_places=2)
    rows = payments.values(
        'collector_id',
        name=F('collector__user__name'),
        email=F('collector__user__email'),
        shop_name=F('collector__shop__name'),
    ).annotate(
        total_collected=Sum('amount'),
        payment_count=Count('id'),
        cash_collected=Coalesce(Sum('amount', filter=Q(payment_method=PaymentMethod.CASH)), zero, output_field=money),
        mobile_money_collected=Coalesce(
            Sum('amount', filter=Q(payment_method=PaymentMethod.MOBILE_MONEY)), zero, output_field=money
        ),
        bank_transfer_collected=Coalesce(
            Sum('amount', filter=Q(payment_method=PaymentMethod.BANK_TRANSFER)), zero, output_field=money
        ),
    ).order_by('-total_collected')
    return list(rows)


def get_profit_margin_report(*, business: Business, shop_id=None, date_from: date | None = None,
                             date_to: date | None = None) -> list[dict]:
    """
    Revenue, cost of goods and margin per shop.

    Cost is the product's current cost price times the quantity sold;
    free-text items carry no cost.
    """
    purchases = _business_purchases(business, shop_id)
    if date_from:
        purchases = purchases.filter(created_at__date__gte=date_from)
    if date_to:
        purchases = purchases.filter(created_at__date__lte=date_to)

    revenue_by_shop = {
        row['customer__shop_id']: row
        for row in purchases.values('customer__shop_id', 'customer__shop__name').annotate(
            revenue=Sum('total_amount')
        )
    }
    items = PurchaseItem.objects.filter(purchase__in=purchases).values(
        'purchase__customer__shop_id'
    ).annotate(
        items_sold=Sum('quantity'),
        cost=Sum(F('product__cost_price') * F('quantity'), output_field=DecimalField(max_digits=14, decimal_places=2)),
    )
    cost_by_shop = {row['purchase__customer__shop_id']: row for row in items}

    report = []
    for shop_id_, row in revenue_by_shop.items():
        revenue = row['revenue'] or ZERO
        cost = (cost_by_shop.get(shop_id_) or {}).get('cost') or ZERO
        profit = revenue - cost
        margin = (profit / revenue * 100).quantize(CENT, rounding=ROUND_HALF_UP) if revenue > 0 else ZERO
        report.append({
            'shop_id': shop_id_,
            'shop_name': row['customer__shop__name'],
            'revenue': revenue,
            'cost': cost,
            'profit': profit,
            'margin': margin,
            'items_sold': (cost_by_shop.get(shop_id_) or {}).get('items_sold') or 0,
        })
    return sorted(report, key=lambda entry: entry['revenue'], reverse=True)


def get_accountant_dashboard(*, business: Business) -> dict:
    """Headline figures for the accountant home screen."""
    now = timezone.now()
    today = timezone.localdate()
    week_start = today - timedelta(days=today.weekday())
    month_start = today.replace(day=1)

    customers = Customer.objects.filter(shop__business=business)
    purchases = _business_purchases(business)
    payments = _confirmed_payments(business)

    overdue = purchases.filter(
        Q(status=PurchaseStatus.OVERDUE)
        | Q(status=PurchaseStatus.ACTIVE, due_date__lt=now)
    )

    shops = []
    for shop in Shop.objects.filter(business=business, is_active=True).order_by('name'):
        shop_purchases = purchases.filter(customer__shop=shop)
        shops.append({
            'id': shop.id,
            'name': shop.name,
            'customer_count': shop.customers.count(),
            'total_collected': _sum(payments.filter(purchase__customer__shop=shop), 'amount'),
            'total_outstanding': _sum(shop_purchases, 'outstanding_balance'),
        })

    monthly = []
    for offset in range(5, -1, -1):
        year, month = today.year, today.month - offset
        while month < 1:
            month += 12
            year -= 1
        month_purchases = purchases.filter(created_at__year=year, created_at__month=month)
        month_payments = payments.filter(confirmed_at__year=year, confirmed_at__month=month)
        monthly.append({
            'month': date(year, month, 1).strftime('%b'),
            'revenue': _sum(month_purchases, 'total_amount'),
            'collections': _sum(month_payments, 'amount'),
            'payment_count': month_payments.count(),
        })

    def collected_since(day):
        subset = payments.filter(confirmed_at__date__gte=day)
        return _sum(subset, 'amount'), subset.count()

    today_total, today_count = collected_since(today)
    week_total, week_count = collected_since(week_start)
    month_total, month_count = collected_since(month_start)

    return {
        'total_customers': customers.count(),
        'active_customers': customers.filter(is_active=True).count(),
        'total_purchases': purchases.count(),
        'active_purchases': purchases.filter(status=PurchaseStatus.ACTIVE).count(),
        'overdue_purchases': overdue.count(),
        'total_revenue': _sum(purchases, 'total_amount'),
        'total_collected': _sum(payments, 'amount'),
        'total_outstanding': _sum(purchases.filter(status__in=OPEN_STATUSES), 'outstanding_balance'),
        'total_overdue_amount': _sum(overdue, 'outstanding_balance'),
        'today_collections': today_total,
        'today_payment_count': today_count,
        'week_collections': week_total,
        'week_payment_count': week_count,
        'month_collections': month_total,
        'month_payment_count': month_count,
        'collections_by_method': {
            method: _sum(payments.filter(payment_method=method), 'amount')
            for method in PaymentMethod.values
        },
        'cash_sales_count': purchases.filter(purchase_type=PurchaseType.CASH).count(),
        'credit_sales_count': purchases.filter(purchase_type=PurchaseType.CREDIT).count(),
        'layaway_sales_count': purchases.filter(purchase_type=PurchaseType.LAYAWAY).count(),
        'shop_count': len(shops),
        'shops': shops,
        'monthly': monthly,
    }
