import pytest

from apps.purchases.services import create_purchase


@pytest.fixture
def purchase(shop, customer, product, shop_admin):
    """1000.00 CREDIT purchase of one television, nothing paid yet."""
    return create_purchase(
        shop=shop,
        customer_id=customer.id,
        items=[{'product_id': product.id, 'quantity': 1}],
        actor=shop_admin.user,
    )
