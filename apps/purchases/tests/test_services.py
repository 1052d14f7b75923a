import pytest
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from apps.audit.models import AuditLog
from apps.catalog.models import ShopProduct
from apps.commissions.models import BonusRecord, BonusRule, CalculationType
from apps.notifications.models import Notification
from apps.purchases.models import (
    InterestType,
    Payment,
    PaymentStatus,
    PurchaseStatus,
    PurchaseType,
    ShopPolicy,
)
from apps.purchases.services import (
    CustomerNotAssignedError,
    InsufficientStockError,
    InvalidPaymentError,
    InvalidPolicyError,
    InvalidPurchaseError,
    PaymentAlreadyProcessedError,
    confirm_payment,
    create_purchase,
    get_purchase_summary,
    get_shop_policy,
    record_collector_payment,
    record_payment,
    refresh_overdue_status,
    reject_payment,
    upsert_shop_policy,
)
from apps.tenants.models import StaffRole


def sell(shop, customer, product, actor, **kwargs):
    kwargs.setdefault('items', [{'product_id': product.id, 'quantity': 1}])
    return create_purchase(shop=shop, customer_id=customer.id, actor=actor, **kwargs)


# =============================================================================
# Shop policy
# =============================================================================

@pytest.mark.django_db
class TestShopPolicy:

    def test_defaults_when_never_saved(self, shop):
        policy = get_shop_policy(shop)

        assert policy._state.adding
        assert not ShopPolicy.objects.filter(shop=shop).exists()
        assert policy.interest_type == InterestType.FLAT
        assert policy.interest_rate == Decimal('0.00')
        assert policy.grace_days == 3
        assert policy.max_tenor_days == 60
        assert policy.late_fee_fixed is None

    def test_upsert_creates_then_updates_and_audits(self, shop, shop_admin):
        upsert_shop_policy(shop=shop, actor=shop_admin.user, interest_rate=Decimal('10'))
        policy = upsert_shop_policy(shop=shop, actor=shop_admin.user, grace_days=7)

        assert ShopPolicy.objects.filter(shop=shop).count() == 1
        assert policy.interest_rate == Decimal('10')
        assert policy.grace_days == 7

        entries = AuditLog.objects.filter(action='SHOP_POLICY_UPDATED')
        previous = [entry.metadata['previous'] for entry in entries]
        assert len(previous) == 2
        assert None in previous
        assert next(p for p in previous if p)['grace_days'] == 3

    @pytest.mark.parametrize('values', [
        {'interest_rate': Decimal('101')},
        {'grace_days': 61},
        {'max_tenor_days': 0},
        {'late_fee_fixed': Decimal('-1')},
    ])
    def test_rejects_out_of_range_values(self, shop, shop_admin, values):
        with pytest.raises(InvalidPolicyError):
            upsert_shop_policy(shop=shop, actor=shop_admin.user, **values)


# =============================================================================
# Purchase creation
# =============================================================================

@pytest.mark.django_db
class TestCreatePurchase:

    def test_credit_price_and_flat_interest(self, shop, customer, product, shop_admin):
        upsert_shop_policy(shop=shop, actor=shop_admin.user, interest_rate=Decimal('10'))

        purchase = sell(shop, customer, product, shop_admin.user, installments=8)

        assert purchase.subtotal == Decimal('1000.00')
        assert purchase.interest_amount == Decimal('100.00')
        assert purchase.total_amount == Decimal('1100.00')
        assert purchase.outstanding_balance == Decimal('1100.00')
        assert purchase.status == PurchaseStatus.PENDING
        assert purchase.items.get().product_name == product.name

    def test_monthly_interest_uses_installment_months(self, shop, customer, product, shop_admin):
        upsert_shop_policy(
            shop=shop, actor=shop_admin.user,
            interest_type=InterestType.MONTHLY, interest_rate=Decimal('5'),
        )

        purchase = sell(shop, customer, product, shop_admin.user, installments=12)

        assert purchase.interest_amount == Decimal('150.00')
        assert purchase.interest_type == InterestType.MONTHLY

    def test_cash_sale_uses_cash_price_without_interest(self, shop, customer, product, shop_admin):
        upsert_shop_policy(shop=shop, actor=shop_admin.user, interest_rate=Decimal('10'))

        purchase = sell(
            shop, customer, product, shop_admin.user,
            purchase_type=PurchaseType.CASH, down_payment=Decimal('900'),
        )

        assert purchase.total_amount == Decimal('900.00')
        assert purchase.interest_amount == Decimal('0.00')
        assert purchase.status == PurchaseStatus.COMPLETED
        assert purchase.outstanding_balance == Decimal('0.00')

    def test_down_payment_activates_and_records_confirmed_payment(self, shop, customer, product, shop_admin):
        purchase = sell(shop, customer, product, shop_admin.user, down_payment=Decimal('200'))

        assert purchase.status == PurchaseStatus.ACTIVE
        assert purchase.amount_paid == Decimal('200.00')
        assert purchase.outstanding_balance == Decimal('800.00')
        payment = purchase.payments.get()
        assert payment.is_confirmed
        assert payment.status == PaymentStatus.COMPLETED

    def test_down_payment_above_total_is_rejected(self, shop, customer, product, shop_admin):
        with pytest.raises(InvalidPurchaseError):
            sell(shop, customer, product, shop_admin.user, down_payment=Decimal('1000.01'))

    def test_numbers_are_sequential_per_customer(self, shop, customer, product, shop_admin):
        first = sell(shop, customer, product, shop_admin.user)
        second = sell(shop, customer, product, shop_admin.user)

        assert first.purchase_number == 'HP-0001'
        assert second.purchase_number == 'HP-0002'

    def test_decrements_shop_stock(self, shop, customer, product, shop_admin):
        sell(shop, customer, product, shop_admin.user, items=[{'product_id': product.id, 'quantity': 3}])

        assert ShopProduct.objects.get(shop=shop, product=product).stock_quantity == 7

    def test_insufficient_stock(self, shop, customer, product, shop_admin):
        with pytest.raises(InsufficientStockError):
            sell(shop, customer, product, shop_admin.user, items=[{'product_id': product.id, 'quantity': 11}])

        assert ShopProduct.objects.get(shop=shop, product=product).stock_quantity == 10

    def test_free_text_item_needs_a_price(self, shop, customer, shop_admin, product):
        with pytest.raises(InvalidPurchaseError):
            sell(shop, customer, product, shop_admin.user, items=[{'product_name': 'Fan', 'quantity': 1}])

        purchase = sell(
            shop, customer, product, shop_admin.user,
            items=[{'product_name': 'Fan', 'quantity': 2, 'unit_price': Decimal('150')}],
        )
        assert purchase.subtotal == Decimal('300.00')

    def test_customer_of_another_shop_is_rejected(self, second_shop, customer, product, shop_admin):
        with pytest.raises(InvalidPurchaseError):
            sell(second_shop, customer, product, shop_admin.user)

    def test_tenor_above_policy_maximum_is_rejected(self, shop, customer, product, shop_admin):
        with pytest.raises(InvalidPurchaseError):
            sell(shop, customer, product, shop_admin.user, tenor_days=61)

    def test_sale_triggers_bonus_and_notifies_portal_user(self, shop, customer, portal_user, product, sales_staff):
        BonusRule.objects.create(
            business=shop.business,
            name='Sales 2%',
            target_role=StaffRole.SALES_STAFF,
            trigger_type='SALE',
            calculation_type=CalculationType.PERCENTAGE,
            value=Decimal('2'),
        )

        purchase = sell(shop, customer, product, sales_staff.user, sold_by=sales_staff)

        record = BonusRecord.objects.get(staff_member=sales_staff)
        assert record.amount == Decimal('20.00')
        assert record.source_ref == purchase.purchase_number
        assert Notification.objects.filter(user=portal_user, type='PURCHASE_CREATED').exists()


# =============================================================================
# Payments
# =============================================================================

@pytest.mark.django_db
class TestRecordPayment:

    def test_admin_payment_is_confirmed_and_reduces_balance(self, shop, customer, product, shop_admin):
        purchase = sell(shop, customer, product, shop_admin.user)

        payment = record_payment(shop=shop, purchase_id=purchase.id, amount=Decimal('400'), actor=shop_admin.user)
        purchase.refresh_from_db()

        assert payment.is_confirmed
        assert purchase.outstanding_balance == Decimal('600.00')
        assert purchase.amount_paid == Decimal('400.00')
        assert purchase.status == PurchaseStatus.ACTIVE

    def test_completed_when_balance_reaches_zero(self, shop, customer, product, shop_admin):
        purchase = sell(shop, customer, product, shop_admin.user, down_payment=Decimal('100'))

        record_payment(shop=shop, purchase_id=purchase.id, amount=Decimal('900'), actor=shop_admin.user)
        purchase.refresh_from_db()

        assert purchase.outstanding_balance == Decimal('0.00')
        assert purchase.status == PurchaseStatus.COMPLETED

        with pytest.raises(InvalidPaymentError):
            record_payment(shop=shop, purchase_id=purchase.id, amount=Decimal('1'), actor=shop_admin.user)

    def test_amount_must_be_positive(self, shop, customer, product, shop_admin):
        purchase = sell(shop, customer, product, shop_admin.user)

        with pytest.raises(InvalidPaymentError):
            record_payment(shop=shop, purchase_id=purchase.id, amount=Decimal('0'), actor=shop_admin.user)

    def test_partial_payment_clears_overdue_flag(self, shop, customer, product, shop_admin):
        purchase = sell(shop, customer, product, shop_admin.user, down_payment=Decimal('100'))
        refresh_overdue_status(purchase, purchase.due_date + timedelta(days=10))
        assert purchase.status == PurchaseStatus.OVERDUE

        record_payment(shop=shop, purchase_id=purchase.id, amount=Decimal('100'), actor=shop_admin.user)
        purchase.refresh_from_db()

        assert purchase.status == PurchaseStatus.ACTIVE
        assert purchase.outstanding_balance == Decimal('800.00')


@pytest.mark.django_db
class TestCollectorPayments:

    def test_pending_until_confirmed(self, shop, customer, product, shop_admin, collector):
        purchase = sell(shop, customer, product, shop_admin.user)

        payment = record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('250'))
        purchase.refresh_from_db()

        assert payment.status == PaymentStatus.PENDING
        assert not payment.is_confirmed
        assert purchase.outstanding_balance == Decimal('1000.00')

        confirm_payment(payment_id=payment.id, shop=shop, actor=shop_admin.user)
        purchase.refresh_from_db()

        assert purchase.outstanding_balance == Decimal('750.00')
        assert purchase.status == PurchaseStatus.ACTIVE

    def test_only_assigned_collector_may_collect(self, shop, customer, product, shop_admin, other_collector):
        purchase = sell(shop, customer, product, shop_admin.user)

        with pytest.raises(CustomerNotAssignedError):
            record_collector_payment(collector=other_collector, purchase_id=purchase.id, amount=Decimal('10'))

    def test_cannot_collect_more_than_outstanding(self, shop, customer, product, shop_admin, collector):
        purchase = sell(shop, customer, product, shop_admin.user)

        with pytest.raises(InvalidPaymentError):
            record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('1000.01'))

    def test_confirming_final_payment_completes_and_awards_bonuses(
        self, shop, customer, product, shop_admin, collector
    ):
        for trigger, value in (('COLLECTION', Decimal('5')), ('FULL_PAYMENT', Decimal('50'))):
            BonusRule.objects.create(
                business=shop.business,
                name=trigger,
                target_role=StaffRole.DEBT_COLLECTOR,
                trigger_type=trigger,
                calculation_type=(
                    CalculationType.PERCENTAGE if trigger == 'COLLECTION' else CalculationType.FIXED
                ),
                value=value,
            )
        purchase = sell(shop, customer, product, shop_admin.user)
        payment = record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('1000'))

        confirm_payment(payment_id=payment.id, shop=shop, actor=shop_admin.user)
        purchase.refresh_from_db()

        assert purchase.status == PurchaseStatus.COMPLETED
        amounts = dict(
            BonusRecord.objects.filter(staff_member=collector).values_list('trigger_type', 'amount')
        )
        assert amounts == {'COLLECTION': Decimal('50.00'), 'FULL_PAYMENT': Decimal('50.00')}

    def test_confirm_twice_is_rejected(self, shop, customer, product, shop_admin, collector):
        purchase = sell(shop, customer, product, shop_admin.user)
        payment = record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('100'))
        confirm_payment(payment_id=payment.id, shop=shop, actor=shop_admin.user)

        with pytest.raises(PaymentAlreadyProcessedError):
            confirm_payment(payment_id=payment.id, shop=shop, actor=shop_admin.user)

    def test_pending_payment_cannot_be_confirmed_once_settled(
        self, shop, customer, product, shop_admin, collector
    ):
        purchase = sell(shop, customer, product, shop_admin.user)
        pending = record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('600'))
        record_payment(shop=shop, purchase_id=purchase.id, amount=Decimal('1000'), actor=shop_admin.user)

        with pytest.raises(InvalidPaymentError):
            confirm_payment(payment_id=pending.id, shop=shop, actor=shop_admin.user)

        purchase.refresh_from_db()
        pending.refresh_from_db()
        assert purchase.status == PurchaseStatus.COMPLETED
        assert purchase.amount_paid == purchase.total_amount == Decimal('1000.00')
        assert pending.status == PaymentStatus.PENDING

    def test_pending_payment_above_remaining_balance_is_refused(
        self, shop, customer, product, shop_admin, collector
    ):
        purchase = sell(shop, customer, product, shop_admin.user)
        pending = record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('600'))
        record_payment(shop=shop, purchase_id=purchase.id, amount=Decimal('500'), actor=shop_admin.user)

        with pytest.raises(InvalidPaymentError):
            confirm_payment(payment_id=pending.id, shop=shop, actor=shop_admin.user)

        purchase.refresh_from_db()
        assert purchase.amount_paid == Decimal('500.00')
        assert purchase.outstanding_balance == Decimal('500.00')

    def test_rejected_payment_never_counts(self, shop, customer, product, shop_admin, collector):
        purchase = sell(shop, customer, product, shop_admin.user)
        payment = record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('100'))

        rejected = reject_payment(payment_id=payment.id, shop=shop, actor=shop_admin.user, reason='Fake slip')
        purchase.refresh_from_db()

        assert rejected.status == PaymentStatus.REJECTED
        assert rejected.rejection_reason == 'Fake slip'
        assert purchase.outstanding_balance == Decimal('1000.00')
        with pytest.raises(PaymentAlreadyProcessedError):
            confirm_payment(payment_id=payment.id, shop=shop, actor=shop_admin.user)

    def test_outstanding_is_total_minus_confirmed_payments(self, shop, customer, product, shop_admin, collector):
        purchase = sell(shop, customer, product, shop_admin.user, down_payment=Decimal('100'))
        record_payment(shop=shop, purchase_id=purchase.id, amount=Decimal('150'), actor=shop_admin.user)
        record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('300'))
        purchase.refresh_from_db()

        confirmed = sum(p.amount for p in Payment.objects.filter(purchase=purchase, is_confirmed=True))
        assert purchase.outstanding_balance == purchase.total_amount - confirmed == Decimal('750.00')


# =============================================================================
# Overdue and summary
# =============================================================================

@pytest.mark.django_db
class TestOverdueAndSummary:

    def test_overdue_only_after_grace(self, shop, customer, product, shop_admin):
        purchase = sell(shop, customer, product, shop_admin.user, down_payment=Decimal('100'))
        within_grace = purchase.due_date + timedelta(days=3)

        assert refresh_overdue_status(purchase, within_grace).status == PurchaseStatus.ACTIVE
        assert refresh_overdue_status(purchase, within_grace + timedelta(minutes=1)).status == PurchaseStatus.OVERDUE

    def test_summary_adds_late_fee_after_grace(self, shop, customer, product, shop_admin, collector):
        upsert_shop_policy(
            shop=shop, actor=shop_admin.user,
            late_fee_fixed=Decimal('25'), late_fee_rate=Decimal('1'),
        )
        purchase = sell(shop, customer, product, shop_admin.user, down_payment=Decimal('200'))
        record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('50'))

        on_time = get_purchase_summary(purchase=purchase, as_of=timezone.now())
        late = get_purchase_summary(purchase=purchase, as_of=purchase.due_date + timedelta(days=4))

        assert on_time['late_fee'] == Decimal('0.00')
        assert on_time['pending_amount'] == Decimal('50.00')
        assert on_time['confirmed_paid'] == Decimal('200.00')
        assert late['is_past_grace'] is True
        assert late['late_fee'] == Decimal('33.00')
        assert late['amount_due_now'] == Decimal('833.00')
