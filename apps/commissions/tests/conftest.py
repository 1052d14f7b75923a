import pytest
from decimal import Decimal

from django.utils import timezone

from apps.commissions.models import Commission
from apps.purchases.services import confirm_payment, create_purchase, record_collector_payment


@pytest.fixture
def commission(business, shop, sales_staff):
    """Pending 50.00 commission for today."""
    today = timezone.localdate()
    return Commission.objects.create(
        business=business,
        shop=shop,
        staff_member=sales_staff,
        period_start=today,
        period_end=today,
        base_amount=Decimal('1000.00'),
        rate=Decimal('0.05'),
        amount=Decimal('50.00'),
    )


@pytest.fixture
def activity(shop, customer, product, sales_staff, collector, shop_admin):
    """A 1000 sale by ``sales_staff`` and a confirmed 400 collection by ``collector``."""
    purchase = create_purchase(
        shop=shop,
        customer_id=customer.id,
        items=[{'product_id': product.id}],
        actor=sales_staff.user,
        sold_by=sales_staff,
    )
    payment = record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('400'))
    confirm_payment(payment_id=payment.id, actor=shop_admin.user)
    return purchase
