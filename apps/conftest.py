"""
Fixtures shared by the tests of every app: users, tenants, staff, catalog
and customers, plus authenticated clients. Fixtures used by a single app
live in that app's ``tests/conftest.py``.
"""

import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, UserRole
from apps.catalog.models import Product, ShopProduct
from apps.customers.models import Customer
from apps.tenants.models import Business, Shop, StaffMember, StaffRole

PASSWORD = 'TestPass123!'


def make_user(email, role, name=''):
    return User.objects.create_user(email=email, password=PASSWORD, name=name or email.split('@')[0], role=role)


def authenticate(client, user):
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


# =============================================================================
# Users and tenants
# =============================================================================

@pytest.fixture
def super_admin(db):
    return make_user('root@example.com', UserRole.SUPER_ADMIN, 'Root')


@pytest.fixture
def business_owner(db):
    return make_user('owner@example.com', UserRole.BUSINESS_ADMIN, 'Business Owner')


@pytest.fixture
def business(business_owner):
    return Business.objects.create(name='Acme Electronics', slug='acme', owner=business_owner)


@pytest.fixture
def shop(business):
    return Shop.objects.create(business=business, name='Acme Accra', slug='acme-accra', address='Ring Road')


@pytest.fixture
def second_shop(business):
    return Shop.objects.create(business=business, name='Acme Kumasi', slug='acme-kumasi')


@pytest.fixture
def other_business(db):
    owner = make_user('rival@example.com', UserRole.BUSINESS_ADMIN, 'Rival Owner')
    return Business.objects.create(name='Rival Furniture', slug='rival', owner=owner)


@pytest.fixture
def other_shop(other_business):
    return Shop.objects.create(business=other_business, name='Rival Tema', slug='rival-tema')


def _member(shop, email, role, **flags):
    user = make_user(email, role)
    return StaffMember.objects.create(user=user, shop=shop, role=role, **flags)


@pytest.fixture
def shop_admin(shop):
    return _member(shop, 'shopadmin@example.com', StaffRole.SHOP_ADMIN)


@pytest.fixture
def sales_staff(shop):
    return _member(shop, 'sales@example.com', StaffRole.SALES_STAFF)


@pytest.fixture
def collector(shop):
    return _member(shop, 'collector@example.com', StaffRole.DEBT_COLLECTOR)


@pytest.fixture
def other_collector(shop):
    return _member(shop, 'collector2@example.com', StaffRole.DEBT_COLLECTOR)


@pytest.fixture
def accountant(shop):
    """Accountant with every permission flag switched off."""
    return _member(shop, 'accountant@example.com', StaffRole.ACCOUNTANT)


@pytest.fixture
def trusted_accountant(shop):
    return _member(
        shop,
        'trusted@example.com',
        StaffRole.ACCOUNTANT,
        can_confirm_payments=True,
        can_view_profit_margins=True,
        can_approve_commissions=True,
        can_pay_commissions=True,
        can_manage_budgets=True,
    )


# =============================================================================
# Catalog and customers
# =============================================================================

@pytest.fixture
def product(business, shop):
    """Product stocked with 10 units in ``shop``."""
    product = Product.objects.create(
        business=business,
        name='32" Television',
        sku='TV-32',
        cost_price=Decimal('600.00'),
        cash_price=Decimal('900.00'),
        layaway_price=Decimal('950.00'),
        credit_price=Decimal('1000.00'),
    )
    ShopProduct.objects.create(shop=shop, product=product, stock_quantity=10)
    return product


@pytest.fixture
def customer(shop, collector):
    return Customer.objects.create(
        shop=shop,
        first_name='Ama',
        last_name='Mensah',
        phone='0244000001',
        assigned_collector=collector,
    )


@pytest.fixture
def portal_user(customer):
    user = make_user('ama@example.com', UserRole.CUSTOMER, 'Ama Mensah')
    customer.user = user
    customer.save(update_fields=['user'])
    return user


# =============================================================================
# Authenticated clients
# =============================================================================

@pytest.fixture
def super_admin_client(super_admin):
    return authenticate(APIClient(), super_admin)


@pytest.fixture
def owner_client(business_owner):
    return authenticate(APIClient(), business_owner)


@pytest.fixture
def shop_admin_client(shop_admin):
    return authenticate(APIClient(), shop_admin.user)


@pytest.fixture
def sales_client(sales_staff):
    return authenticate(APIClient(), sales_staff.user)


@pytest.fixture
def collector_client(collector):
    return authenticate(APIClient(), collector.user)


@pytest.fixture
def other_collector_client(other_collector):
    return authenticate(APIClient(), other_collector.user)


@pytest.fixture
def accountant_client(accountant):
    return authenticate(APIClient(), accountant.user)


@pytest.fixture
def trusted_accountant_client(trusted_accountant):
    return authenticate(APIClient(), trusted_accountant.user)


@pytest.fixture
def portal_client(portal_user):
    return authenticate(APIClient(), portal_user)


@pytest.fixture
def rival_client(other_business):
    return authenticate(APIClient(), other_business.owner)
