import pytest
from decimal import Decimal

from apps.audit.models import AuditLog
from apps.commissions.models import BonusRecord, BonusRule
from apps.customers.services import (
    DuplicateCustomerError,
    InvalidCollectorError,
    InvalidCustomerError,
    assign_collector,
    create_customer,
    customers_with_summary,
    normalize_phone,
    update_customer,
)
from apps.purchases.services import create_purchase
from apps.tenants.models import StaffRole


def test_normalize_phone_strips_all_whitespace():
    assert normalize_phone(' 024 400\t0009 ') == '0244000009'
    assert normalize_phone(None) == ''


@pytest.mark.django_db
class TestCreateCustomer:

    def test_trims_and_normalises(self, shop, shop_admin):
        customer = create_customer(
            shop=shop,
            first_name='  Kwame ',
            last_name=' Asante',
            phone='024 111 2222',
            email=' kwame@example.com ',
            actor=shop_admin.user,
        )

        assert customer.full_name == 'Kwame Asante'
        assert customer.phone == '0241112222'
        assert customer.email == 'kwame@example.com'
        assert AuditLog.objects.filter(action='CUSTOMER_CREATED', entity_id=str(customer.id)).exists()

    def test_phone_is_unique_per_shop(self, shop, second_shop, customer, shop_admin):
        with pytest.raises(DuplicateCustomerError):
            create_customer(shop=shop, first_name='A', last_name='B', phone='0244 000 001', actor=shop_admin.user)

        other = create_customer(
            shop=second_shop, first_name='A', last_name='B', phone='0244000001', actor=shop_admin.user
        )
        assert other.shop == second_shop

    def test_required_fields(self, shop, shop_admin):
        with pytest.raises(InvalidCustomerError, match='Last name'):
            create_customer(shop=shop, first_name='A', last_name='  ', phone='1', actor=shop_admin.user)

    def test_collector_must_belong_to_shop(self, shop, second_shop, sales_staff, shop_admin):
        from apps.tenants.models import StaffMember

        foreign = StaffMember.objects.create(
            user=sales_staff.user, shop=second_shop, role=StaffRole.DEBT_COLLECTOR
        )
        with pytest.raises(InvalidCollectorError):
            create_customer(
                shop=shop, first_name='A', last_name='B', phone='2',
                assigned_collector_id=foreign.id, actor=shop_admin.user,
            )
        with pytest.raises(InvalidCollectorError):
            create_customer(
                shop=shop, first_name='A', last_name='B', phone='3',
                assigned_collector_id=sales_staff.id, actor=shop_admin.user,
            )

    def test_credits_customer_created_bonus(self, shop, sales_staff):
        BonusRule.objects.create(
            business=shop.business, name='Sign-up', target_role=StaffRole.SALES_STAFF,
            trigger_type='CUSTOMER_CREATED', calculation_type='FIXED', value=Decimal('5'),
        )
        create_customer(
            shop=shop, first_name='A', last_name='B', phone='4',
            actor=sales_staff.user, created_by=sales_staff,
        )

        record = BonusRecord.objects.get()
        assert record.staff_member == sales_staff
        assert record.amount == Decimal('5.00')


@pytest.mark.django_db
class TestUpdateCustomer:

    def test_phone_collision(self, shop, customer, shop_admin):
        create_customer(shop=shop, first_name='K', last_name='B', phone='0555', actor=shop_admin.user)
        with pytest.raises(DuplicateCustomerError):
            update_customer(shop=shop, customer_id=customer.id, phone='0555', actor=shop_admin.user)

    def test_keeps_own_phone(self, shop, customer, shop_admin):
        customer = update_customer(
            shop=shop, customer_id=customer.id, phone='0244000001', city='Accra', actor=shop_admin.user
        )
        assert customer.city == 'Accra'

    def test_unassign_collector(self, shop, customer, shop_admin):
        customer = assign_collector(shop=shop, customer_id=customer.id, collector_id=None, actor=shop_admin.user)
        assert customer.assigned_collector is None


@pytest.mark.django_db
def test_summary_annotations(shop, customer, product, shop_admin):
    create_purchase(
        shop=shop,
        customer_id=customer.id,
        items=[{'product_id': product.id}],
        down_payment=Decimal('300'),
        actor=shop_admin.user,
    )

    row = customers_with_summary(shop=shop).get(id=customer.id)

    assert row.total_purchases == 1
    assert row.active_purchases == 1
    assert row.total_owed == Decimal('700.00')
    assert row.total_paid == Decimal('300.00')
