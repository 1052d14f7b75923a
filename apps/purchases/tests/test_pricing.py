from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from types import SimpleNamespace

from apps.purchases.models import InterestType
from apps.purchases.pricing import (
    calculate_due_date,
    calculate_interest,
    calculate_late_fee,
    calculate_outstanding,
    calculate_subtotal,
    months_for_installments,
)

DUE = datetime(2025, 3, 1, 12, 0, tzinfo=dt_timezone.utc)


def policy(**overrides):
    values = dict(grace_days=3, late_fee_fixed=None, late_fee_rate=None)
    values.update(overrides)
    return SimpleNamespace(**values)


class TestSubtotal:

    def test_sums_price_times_quantity(self):
        items = [(Decimal('500.00'), 2), (Decimal('19.99'), 3)]
        assert calculate_subtotal(items) == Decimal('1059.97')

    def test_empty_is_zero(self):
        assert calculate_subtotal([]) == Decimal('0.00')


class TestInterest:

    def test_flat_is_charged_once(self):
        interest = calculate_interest(Decimal('1000'), InterestType.FLAT, Decimal('10'), installments=12)
        assert interest == Decimal('100.00')

    def test_monthly_multiplies_by_months_of_weekly_installments(self):
        # 12 weekly installments = 3 months
        interest = calculate_interest(Decimal('1000'), InterestType.MONTHLY, Decimal('5'), installments=12)
        assert interest == Decimal('150.00')

    def test_monthly_rounds_partial_month_up(self):
        assert months_for_installments(5) == 2
        interest = calculate_interest(Decimal('1000'), InterestType.MONTHLY, Decimal('5'), installments=5)
        assert interest == Decimal('100.00')

    def test_monthly_charges_at_least_one_month(self):
        assert months_for_installments(1) == 1
        assert months_for_installments(0) == 1

    def test_zero_or_negative_rate_charges_nothing(self):
        assert calculate_interest(Decimal('1000'), InterestType.FLAT, Decimal('0'), 4) == Decimal('0.00')
        assert calculate_interest(Decimal('1000'), InterestType.MONTHLY, Decimal('-1'), 4) == Decimal('0.00')

    def test_rounds_half_up_to_cents(self):
        assert calculate_interest(Decimal('333.33'), InterestType.FLAT, Decimal('1.5'), 1) == Decimal('5.00')


class TestLateFee:

    def test_nothing_inside_grace_period(self):
        as_of = DUE + timedelta(days=3)
        fee = calculate_late_fee(policy(late_fee_fixed=Decimal('20')), Decimal('500'), DUE, as_of)
        assert fee == Decimal('0.00')

    def test_fixed_fee_after_grace_period(self):
        as_of = DUE + timedelta(days=3, seconds=1)
        fee = calculate_late_fee(policy(late_fee_fixed=Decimal('20')), Decimal('500'), DUE, as_of)
        assert fee == Decimal('20.00')

    def test_fixed_plus_rate_on_outstanding(self):
        as_of = DUE + timedelta(days=10)
        terms = policy(late_fee_fixed=Decimal('20'), late_fee_rate=Decimal('2.5'))
        assert calculate_late_fee(terms, Decimal('400'), DUE, as_of) == Decimal('30.00')

    def test_nothing_when_fully_paid(self):
        as_of = DUE + timedelta(days=30)
        fee = calculate_late_fee(policy(late_fee_fixed=Decimal('20')), Decimal('0'), DUE, as_of)
        assert fee == Decimal('0.00')

    def test_nothing_when_no_fee_configured(self):
        as_of = DUE + timedelta(days=30)
        assert calculate_late_fee(policy(), Decimal('400'), DUE, as_of) == Decimal('0.00')


class TestOutstanding:

    def test_total_minus_confirmed_payments(self):
        assert calculate_outstanding(Decimal('1000'), [Decimal('250'), Decimal('100.50')]) == Decimal('649.50')

    def test_never_below_zero(self):
        assert calculate_outstanding(Decimal('100'), [Decimal('150')]) == Decimal('0.00')


def test_due_date_adds_tenor_days():
    assert calculate_due_date(DUE, 60) == DUE + timedelta(days=60)
