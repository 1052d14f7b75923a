import pytest
from datetime import date, datetime
from decimal import Decimal

from django.utils import timezone

from apps.commissions.models import (
    BonusPeriod,
    BonusRecord,
    BonusRule,
    BonusStatus,
    CalculationType,
    CommissionStatus,
)
from apps.commissions.services import (
    InvalidBonusRuleError,
    InvalidCommissionInputError,
    InvalidCommissionTransitionError,
    approve_bonus_records,
    approve_commission,
    calculate_commissions,
    calculate_target_bonuses,
    commission_amount,
    compute_bonus_amount,
    create_bonus_rule,
    delete_bonus_rule,
    get_period_bounds,
    mark_bonus_records_paid,
    mark_commission_paid,
    reject_bonus_records,
    trigger_bonus,
)
from apps.tenants.models import StaffRole


def make_rule(business, **overrides):
    values = {
        'name': 'Collection bonus',
        'target_role': StaffRole.DEBT_COLLECTOR,
        'trigger_type': 'COLLECTION',
        'calculation_type': CalculationType.FIXED,
        'value': Decimal('50'),
    }
    values.update(overrides)
    return BonusRule.objects.create(business=business, **values)


# =============================================================================
# Commission arithmetic
# =============================================================================

class TestCommissionAmount:

    def test_base_times_rate(self):
        assert commission_amount(Decimal('1000'), Decimal('0.05')) == Decimal('50.00')

    def test_rounds_half_up(self):
        assert commission_amount(Decimal('333.33'), Decimal('0.015')) == Decimal('5.00')
        assert commission_amount(Decimal('0.50'), Decimal('0.01')) == Decimal('0.01')


# =============================================================================
# Commission workflow
# =============================================================================

@pytest.mark.django_db
class TestCalculateCommissions:

    def test_creates_pending_commission_per_active_member(self, business, activity, sales_staff, collector, accountant):
        today = timezone.localdate()
        commissions = calculate_commissions(
            business=business,
            period_start=today,
            period_end=today,
            sales_rate=Decimal('0.05'),
            collection_rate=Decimal('0.10'),
            actor=accountant.user,
        )

        by_member = {commission.staff_member_id: commission for commission in commissions}
        assert by_member[sales_staff.id].amount == Decimal('50.00')
        assert by_member[collector.id].base_amount == Decimal('400.00')
        assert by_member[collector.id].amount == Decimal('40.00')
        assert all(c.status == CommissionStatus.PENDING for c in commissions)

    def test_same_period_is_not_duplicated(self, business, activity, accountant):
        today = timezone.localdate()
        kwargs = dict(
            business=business,
            period_start=today,
            period_end=today,
            sales_rate=Decimal('0.05'),
            collection_rate=Decimal('0.10'),
            actor=accountant.user,
        )
        calculate_commissions(**kwargs)

        assert calculate_commissions(**kwargs) == []

    def test_members_without_activity_are_skipped(self, business, sales_staff, accountant):
        today = timezone.localdate()
        commissions = calculate_commissions(
            business=business,
            period_start=today,
            period_end=today,
            sales_rate=Decimal('0.05'),
            collection_rate=Decimal('0.05'),
            actor=accountant.user,
        )
        assert commissions == []

    def test_rate_out_of_range(self, business, accountant):
        with pytest.raises(InvalidCommissionInputError):
            calculate_commissions(
                business=business,
                period_start=date(2026, 1, 1),
                period_end=date(2026, 1, 31),
                sales_rate=Decimal('1.5'),
                collection_rate=Decimal('0'),
                actor=accountant.user,
            )

    def test_inverted_period(self, business, accountant):
        with pytest.raises(InvalidCommissionInputError, match='Period start'):
            calculate_commissions(
                business=business,
                period_start=date(2026, 2, 1),
                period_end=date(2026, 1, 1),
                sales_rate=Decimal('0.05'),
                collection_rate=Decimal('0.05'),
                actor=accountant.user,
            )


@pytest.mark.django_db
class TestCommissionTransitions:

    @pytest.fixture
    def commission(self, business, activity, sales_staff, accountant):
        today = timezone.localdate()
        commissions = calculate_commissions(
            business=business,
            period_start=today,
            period_end=today,
            sales_rate=Decimal('0.05'),
            collection_rate=Decimal('0'),
            actor=accountant.user,
        )
        return next(c for c in commissions if c.staff_member_id == sales_staff.id)

    def test_pending_approved_paid(self, business, commission, accountant):
        commission = approve_commission(business=business, commission_id=commission.id, actor=accountant.user)
        assert commission.status == CommissionStatus.APPROVED
        assert commission.approved_by == accountant.user

        commission = mark_commission_paid(
            business=business, commission_id=commission.id, actor=accountant.user, reference='MOMO-123'
        )
        assert commission.status == CommissionStatus.PAID
        assert commission.payment_reference == 'MOMO-123'

    def test_cannot_pay_pending(self, business, commission, accountant):
        with pytest.raises(InvalidCommissionTransitionError):
            mark_commission_paid(
                business=business, commission_id=commission.id, actor=accountant.user, reference='X'
            )

    def test_cannot_approve_twice(self, business, commission, accountant):
        approve_commission(business=business, commission_id=commission.id, actor=accountant.user)
        with pytest.raises(InvalidCommissionTransitionError):
            approve_commission(business=business, commission_id=commission.id, actor=accountant.user)

    def test_reference_is_required(self, business, commission, accountant):
        approve_commission(business=business, commission_id=commission.id, actor=accountant.user)
        with pytest.raises(InvalidCommissionInputError, match='reference'):
            mark_commission_paid(
                business=business, commission_id=commission.id, actor=accountant.user, reference='  '
            )


# =============================================================================
# Bonus arithmetic
# =============================================================================

class TestPeriodBounds:

    @property
    def reference(self):
        return timezone.make_aware(datetime(2026, 2, 18, 10, 30))

    def test_weekly_runs_monday_to_sunday(self):
        start, end = get_period_bounds(BonusPeriod.WEEKLY, self.reference)
        assert start.date() == date(2026, 2, 16)
        assert end.date() == date(2026, 2, 22)
        assert (end.hour, end.minute, end.second) == (23, 59, 59)

    def test_monthly(self):
        start, end = get_period_bounds(BonusPeriod.MONTHLY, self.reference)
        assert start.date() == date(2026, 2, 1)
        assert end.date() == date(2026, 2, 28)

    def test_quarterly(self):
        start, end = get_period_bounds(BonusPeriod.QUARTERLY, self.reference)
        assert start.date() == date(2026, 1, 1)
        assert end.date() == date(2026, 3, 31)

    def test_one_time(self):
        start, end = get_period_bounds(BonusPeriod.ONE_TIME, self.reference)
        assert start.date() == date(2020, 1, 1)
        assert end.date() == date(2099, 12, 31)


class TestComputeBonusAmount:

    def test_percentage(self):
        rule = BonusRule(calculation_type=CalculationType.PERCENTAGE, value=Decimal('2.5'))
        assert compute_bonus_amount(rule, Decimal('1000')) == Decimal('25.00')

    def test_fixed_ignores_base(self):
        rule = BonusRule(calculation_type=CalculationType.FIXED, value=Decimal('15'))
        assert compute_bonus_amount(rule, Decimal('1')) == Decimal('15.00')

    def test_tier_replaces_value(self):
        rule = BonusRule(
            calculation_type=CalculationType.PERCENTAGE,
            value=Decimal('1'),
            tiers=[
                {'min': 0, 'max': 500, 'value': 1},
                {'min': 500, 'max': 0, 'value': 3},
            ],
        )
        assert compute_bonus_amount(rule, Decimal('200')) == Decimal('2.00')
        assert compute_bonus_amount(rule, Decimal('1000')) == Decimal('30.00')

    def test_malformed_tiers_fall_back_to_value(self):
        rule = BonusRule(calculation_type=CalculationType.FIXED, value=Decimal('10'), tiers=[{'max': 5}])
        assert compute_bonus_amount(rule, Decimal('3')) == Decimal('10.00')


# =============================================================================
# Bonus triggers and records
# =============================================================================

@pytest.mark.django_db
class TestTriggerBonus:

    def test_cap_limits_period_total(self, business, shop, collector):
        make_rule(business, maximum_cap=Decimal('80'))

        amounts = []
        for _ in range(3):
            records = trigger_bonus(
                business=business, shop=shop, trigger_type='COLLECTION', staff_member=collector, amount=100
            )
            amounts.append([record.amount for record in records])

        assert amounts == [[Decimal('50.00')], [Decimal('30.00')], []]

    def test_minimum_threshold(self, business, shop, collector):
        make_rule(business, minimum_threshold=Decimal('500'))

        assert trigger_bonus(
            business=business, shop=shop, trigger_type='COLLECTION', staff_member=collector, amount=100
        ) == []
        assert len(trigger_bonus(
            business=business, shop=shop, trigger_type='COLLECTION', staff_member=collector, amount=500
        )) == 1

    def test_role_and_shop_scoping(self, business, shop, second_shop, collector, sales_staff):
        make_rule(business, shop=second_shop)
        make_rule(business, name='Sales only', target_role=StaffRole.SALES_STAFF)

        assert trigger_bonus(
            business=business, shop=shop, trigger_type='COLLECTION', staff_member=collector, amount=100
        ) == []

    def test_inactive_rule_is_ignored(self, business, shop, collector):
        make_rule(business, is_active=False)

        assert trigger_bonus(
            business=business, shop=shop, trigger_type='COLLECTION', staff_member=collector, amount=100
        ) == []

    def test_record_carries_period_and_source(self, business, shop, collector):
        make_rule(business, period=BonusPeriod.WEEKLY)

        record, = trigger_bonus(
            business=business, shop=shop, trigger_type='COLLECTION', staff_member=collector,
            amount=100, source_id='abc', source_ref='HP-0001',
        )

        assert record.status == BonusStatus.PENDING
        assert record.source_ref == 'HP-0001'
        assert record.period_start.weekday() == 0


@pytest.mark.django_db
class TestTargetBonuses:

    def test_target_hit_pays_once_per_period(self, business, activity, sales_staff, business_owner):
        make_rule(
            business,
            name='Monthly target',
            target_role=StaffRole.SALES_STAFF,
            trigger_type='TARGET_HIT',
            target_amount=Decimal('1000'),
            value=Decimal('100'),
        )

        created = calculate_target_bonuses(business=business, actor=business_owner)
        assert [record.staff_member_id for record in created] == [sales_staff.id]
        assert created[0].amount == Decimal('100.00')

        assert calculate_target_bonuses(business=business, actor=business_owner) == []

    def test_target_not_reached(self, business, activity, business_owner):
        make_rule(
            business,
            target_role=StaffRole.SALES_STAFF,
            trigger_type='TARGET_HIT',
            target_amount=Decimal('5000'),
        )
        assert calculate_target_bonuses(business=business, actor=business_owner) == []

    def test_zero_default_rewards_collectors(self, business, collector, other_collector, business_owner):
        make_rule(business, trigger_type='ZERO_DEFAULT', value=Decimal('25'))

        created = calculate_target_bonuses(business=business, actor=business_owner)

        assert {record.staff_member_id for record in created} == {collector.id, other_collector.id}


@pytest.mark.django_db
class TestBonusRulesAndRecords:

    def test_create_rule_validates(self, business, business_owner):
        with pytest.raises(InvalidBonusRuleError, match='name'):
            create_bonus_rule(
                business=business, actor=business_owner, name='  ',
                target_role=StaffRole.SALES_STAFF, trigger_type='SALE',
                calculation_type=CalculationType.FIXED, value=Decimal('5'),
            )

    def test_create_rule_rejects_foreign_shop(self, business, other_shop, business_owner):
        with pytest.raises(InvalidBonusRuleError, match='does not belong'):
            create_bonus_rule(
                business=business, actor=business_owner, shop_id=other_shop.id, name='Foreign',
                target_role=StaffRole.SALES_STAFF, trigger_type='SALE',
                calculation_type=CalculationType.FIXED, value=Decimal('5'),
            )

    def test_delete_deactivates_rule_with_records(self, business, shop, collector, business_owner):
        used = make_rule(business)
        unused = make_rule(business, name='Unused', trigger_type='RECOVERY')
        trigger_bonus(business=business, shop=shop, trigger_type='COLLECTION', staff_member=collector, amount=1)

        assert delete_bonus_rule(business=business, rule_id=used.id, actor=business_owner) is False
        assert delete_bonus_rule(business=business, rule_id=unused.id, actor=business_owner) is True
        used.refresh_from_db()
        assert used.is_active is False
        assert not BonusRule.objects.filter(id=unused.id).exists()

    def test_bulk_transitions(self, business, shop, collector, business_owner):
        make_rule(business)
        first, = trigger_bonus(business=business, shop=shop, trigger_type='COLLECTION', staff_member=collector, amount=1)
        second, = trigger_bonus(business=business, shop=shop, trigger_type='COLLECTION', staff_member=collector, amount=1)

        assert approve_bonus_records(business=business, record_ids=[first.id], actor=business_owner) == 1
        assert reject_bonus_records(
            business=business, record_ids=[second.id], actor=business_owner, reason='Duplicate'
        ) == 1
        assert mark_bonus_records_paid(
            business=business, record_ids=[first.id, second.id], actor=business_owner, reference='PAY-1'
        ) == 1

        first.refresh_from_db()
        second.refresh_from_db()
        assert first.status == BonusStatus.PAID
        assert second.status == BonusStatus.REJECTED
        assert second.notes == 'Rejected: Duplicate'
        assert BonusRecord.objects.filter(status=BonusStatus.PAID).count() == 1
