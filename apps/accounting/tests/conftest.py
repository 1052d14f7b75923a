import pytest
from decimal import Decimal

from apps.purchases.models import PaymentMethod
from apps.purchases.services import confirm_payment, create_purchase, record_collector_payment


@pytest.fixture
def pending_payment(shop, customer, product, shop_admin, collector):
    """Collector payment of 250 waiting for confirmation on a 1000 sale."""
    purchase = create_purchase(
        shop=shop,
        customer_id=customer.id,
        items=[{'product_id': product.id}],
        actor=shop_admin.user,
    )
    return record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('250'))


@pytest.fixture
def sale(shop, customer, product, shop_admin):
    return create_purchase(
        shop=shop,
        customer_id=customer.id,
        items=[{'product_id': product.id, 'quantity': 2}],
        actor=shop_admin.user,
    )


@pytest.fixture
def collection(sale, collector, shop_admin):
    payment = record_collector_payment(
        collector=collector, purchase_id=sale.id, amount=Decimal('400'), payment_method=PaymentMethod.MOBILE_MONEY
    )
    return confirm_payment(payment_id=payment.id, actor=shop_admin.user)
