"""
Bonus rules engine.

Business admins define BonusRules. Event-driven rules (SALE, COLLECTION,
CUSTOMER_CREATED, FULL_PAYMENT...) fire from the services that perform
those actions through ``trigger_bonus``. Period rules (TARGET_HIT,
ZERO_DEFAULT) are evaluated on demand by ``calculate_target_bonuses``.

Every bonus lands as a PENDING BonusRecord and follows
PENDING -> APPROVED -> PAID, or is REJECTED.
"""

import calendar
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from uuid import UUID

from django.db import DatabaseError, transaction
from django.db.models import Count, Q, QuerySet, Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.commissions.models import (
    BonusPeriod,
    BonusRecord,
    BonusRule,
    BonusStatus,
    BonusTrigger,
    CalculationType,
)
from apps.purchases.models import Payment, Purchase, PurchaseStatus
from apps.tenants.models import Business, Shop, StaffMember, StaffRole

from .exceptions import BonusRuleNotFoundError, InvalidBonusRuleError

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
HUNDRED = Decimal('100')
ZERO = Decimal('0')

PERIOD_TRIGGERS = [BonusTrigger.TARGET_HIT, BonusTrigger.ZERO_DEFAULT]
COUNTED_STATUSES = [BonusStatus.PENDING, BonusStatus.APPROVED, BonusStatus.PAID]

RULE_FIELDS = (
    'name', 'description', 'target_role', 'trigger_type', 'calculation_type',
    'value', 'minimum_threshold', 'maximum_cap', 'target_amount', 'tiers',
    'period', 'is_active',
)


# =============================================================================
# Arithmetic
# =============================================================================

def _aware(day, at=time.min):
    return timezone.make_aware(datetime.combine(day, at))


def get_period_bounds(period: str, reference: datetime | None = None) -> tuple[datetime, datetime]:
    """
    Start and end of the period containing ``reference``.

    Weeks run Monday to Sunday. ONE_TIME covers 2020-01-01 through
    2099-12-31 23:59:59.
    """
    reference = timezone.localtime(reference or timezone.now())
    day = reference.date()
    end_of_day = time(23, 59, 59)

    if period == BonusPeriod.DAILY:
        return _aware(day), _aware(day, end_of_day)
    if period == BonusPeriod.WEEKLY:
        monday = day - timedelta(days=day.weekday())
        return _aware(monday), _aware(monday + timedelta(days=6), end_of_day)
    if period == BonusPeriod.MONTHLY:
        last = calendar.monthrange(day.year, day.month)[1]
        return _aware(day.replace(day=1)), _aware(day.replace(day=last), end_of_day)
    if period == BonusPeriod.QUARTERLY:
        first_month = (day.month - 1) // 3 * 3 + 1
        last_month = first_month + 2
        last = calendar.monthrange(day.year, last_month)[1]
        return (
            _aware(day.replace(month=first_month, day=1)),
            _aware(day.replace(month=last_month, day=last), end_of_day),
        )
    if period == BonusPeriod.YEARLY:
        return _aware(day.replace(month=1, day=1)), _aware(day.replace(month=12, day=31), end_of_day)
    return (
        _aware(date(2020, 1, 1)),
        _aware(date(2099, 12, 31), end_of_day),
    )


def _tier_value(tiers, base: Decimal) -> Decimal | None:
    """Value of the first tier containing ``base``; ``None`` when none applies."""
    if not isinstance(tiers, list):
        return None
    try:
        for tier in tiers:
            low = Decimal(str(tier['min']))
            high = Decimal(str(tier.get('max') or 0))
            if low <= base and (high == 0 or base <= high):
                return Decimal(str(tier['value']))
    except (KeyError, TypeError, InvalidOperation):
        logger.warning("Ignoring malformed bonus tiers: %r", tiers)
    return None


def compute_bonus_amount(rule: BonusRule, base_amount) -> Decimal:
    """
    Bonus for ``base_amount`` under ``rule`` before any period cap.

    PERCENTAGE pays ``base x value / 100``, FIXED pays ``value``. A matching
    tier replaces the rule's value.
    """
    base = Decimal(base_amount)
    value = _tier_value(rule.tiers, base)
    if value is None:
        value = Decimal(rule.value)

    if rule.calculation_type == CalculationType.PERCENTAGE:
        amount = base * value / HUNDRED
    else:
        amount = value
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _already_awarded(rule: BonusRule, member: StaffMember, start, end) -> Decimal:
    return BonusRecord.objects.filter(
        rule=rule,
        staff_member=member,
        period_start=start,
        period_end=end,
        status__in=COUNTED_STATUSES,
    ).aggregate(total=Sum('amount'))['total'] or ZERO


# =============================================================================
# Event triggers
# =============================================================================

def matching_rules(*, business: Business, shop: Shop | None, trigger_type: str,
                   role: str) -> QuerySet:
    rules = BonusRule.objects.filter(
        business=business,
        trigger_type=trigger_type,
        target_role=role,
        is_active=True,
    )
    if shop is not None:
        rules = rules.filter(Q(shop__isnull=True) | Q(shop=shop))
    else:
        rules = rules.filter(shop__isnull=True)
    return rules


def _award(rule, member, trigger_type, base, source_id, source_ref, now) -> BonusRecord | None:
    if rule.minimum_threshold is not None and base < rule.minimum_threshold:
        return None

    amount = compute_bonus_amount(rule, base)
    start, end = get_period_bounds(rule.period, now)

    if rule.maximum_cap is not None:
        awarded = _already_awarded(rule, member, start, end)
        if awarded >= rule.maximum_cap:
            return None
        amount = min(amount, rule.maximum_cap - awarded)

    if amount <= 0:
        return None

    return BonusRecord.objects.create(
        business=rule.business,
        shop=member.shop,
        rule=rule,
        staff_member=member,
        trigger_type=trigger_type,
        source_id=str(source_id) if source_id else '',
        source_ref=source_ref or '',
        base_amount=base,
        rate=rule.value if rule.calculation_type == CalculationType.PERCENTAGE else None,
        amount=amount,
        period_start=start,
        period_end=end,
    )


def trigger_bonus(
    *,
    business: Business,
    shop: Shop | None,
    trigger_type: str,
    staff_member: StaffMember | None,
    amount,
    source_id=None,
    source_ref: str = '',
) -> list[BonusRecord]:
    """
    Award bonuses for an event performed by ``staff_member``.

    Runs in its own savepoint. A failure is logged and swallowed so the
    sale, payment or customer that triggered it is never rolled back.

    Args:
        business: Business owning the rules
        shop: Shop where the event happened
        trigger_type: BonusTrigger value
        staff_member: Staff credited for the event
        amount: Base amount (sale total, payment amount, 1 for counts)
        source_id: Id of the purchase, payment or customer
        source_ref: Human readable reference

    Returns:
        Created BonusRecords (empty on failure or when nothing matched)
    """
    if staff_member is None:
        return []

    base = Decimal(amount)
    now = timezone.now()
    try:
        with transaction.atomic():
            rules = matching_rules(
                business=business, shop=shop, trigger_type=trigger_type, role=staff_member.role
            )
            created = [
                record for record in (
                    _award(rule, staff_member, trigger_type, base, source_id, source_ref, now)
                    for rule in rules.select_related('business')
                )
                if record is not None
            ]
    except (DatabaseError, InvalidOperation):
        logger.exception(
            "Bonus trigger %s failed for staff member %s", trigger_type, staff_member.pk
        )
        return []

    if created:
        logger.info(
            "%d %s bonus record(s) created for staff member %s",
            len(created), trigger_type, staff_member.pk,
        )
    return created


# =============================================================================
# Period targets
# =============================================================================

def _target_base(member: StaffMember, start, end) -> Decimal:
    if member.role == StaffRole.DEBT_COLLECTOR:
        total = Payment.objects.filter(
            collector=member,
            is_confirmed=True,
            confirmed_at__gte=start,
            confirmed_at__lte=end,
        ).aggregate(total=Sum('amount'))['total']
    else:
        total = Purchase.objects.filter(
            sold_by=member,
            created_at__gte=start,
            created_at__lte=end,
        ).aggregate(total=Sum('total_amount'))['total']
    return total or ZERO


@transaction.atomic
def calculate_target_bonuses(*, business: Business, actor: User, reference=None) -> list[BonusRecord]:
    """
    Evaluate TARGET_HIT and ZERO_DEFAULT rules for the current periods.

    TARGET_HIT pays when the member's sales (sales staff) or confirmed
    collections (collectors) in the period reach ``target_amount``.
    ZERO_DEFAULT pays collectors none of whose customers' purchases
    defaulted during the period. At most one record is created per
    rule, member and period.
    """
    now = reference or timezone.now()
    created = []

    rules = BonusRule.objects.filter(
        business=business, trigger_type__in=PERIOD_TRIGGERS, is_active=True
    )
    for rule in rules:
        start, end = get_period_bounds(rule.period, now)
        members = StaffMember.objects.select_related('shop', 'user').filter(
            shop__business=business, role=rule.target_role, is_active=True
        )
        if rule.shop_id:
            members = members.filter(shop_id=rule.shop_id)

        for member in members:
            already = BonusRecord.objects.filter(
                rule=rule, staff_member=member, period_start=start, period_end=end
            ).exists()
            if already:
                continue

            if rule.trigger_type == BonusTrigger.TARGET_HIT:
                if not rule.target_amount:
                    continue
                base = _target_base(member, start, end)
                if base < rule.target_amount:
                    continue
            else:
                defaults = Purchase.objects.filter(
                    customer__assigned_collector=member,
                    status=PurchaseStatus.DEFAULTED,
                    updated_at__gte=start,
                    updated_at__lte=end,
                ).count()
                if defaults:
                    continue
                base = Decimal('1')

            amount = compute_bonus_amount(rule, base)
            if rule.maximum_cap is not None:
                amount = min(amount, rule.maximum_cap)
            if amount <= 0:
                continue

            created.append(BonusRecord.objects.create(
                business=business,
                shop=member.shop,
                rule=rule,
                staff_member=member,
                trigger_type=rule.trigger_type,
                source_ref=f"{rule.period} target: {start.date()} - {end.date()}",
                base_amount=base,
                rate=rule.value if rule.calculation_type == CalculationType.PERCENTAGE else None,
                amount=amount,
                period_start=start,
                period_end=end,
            ))

    log_action(
        actor=actor,
        action='TARGET_BONUSES_CALCULATED',
        entity_type='BonusRecord',
        entity_id='batch',
        metadata={'business': business.slug, 'created': len(created)},
    )
    logger.info("Target bonuses for %s: %d created", business.slug, len(created))
    return created


# =============================================================================
# Rules
# =============================================================================

def _validate_rule(values: dict) -> None:
    if not (values.get('name') or '').strip():
        raise InvalidBonusRuleError("Bonus name is required")
    if Decimal(values.get('value') or 0) <= 0:
        raise InvalidBonusRuleError("Bonus value must be greater than 0")
    if values.get('target_role') not in StaffRole.values:
        raise InvalidBonusRuleError("Invalid target role")
    tiers = values.get('tiers')
    if tiers is not None and not isinstance(tiers, list):
        raise InvalidBonusRuleError("Tiers must be a list")


def get_bonus_rule(*, business: Business, rule_id: UUID) -> BonusRule:
    try:
        return BonusRule.objects.get(business=business, id=rule_id)
    except BonusRule.DoesNotExist:
        raise BonusRuleNotFoundError(f"Bonus rule with ID {rule_id} not found")


def _resolve_shop(business: Business, shop_id) -> Shop | None:
    if not shop_id:
        return None
    shop = Shop.objects.filter(business=business, id=shop_id).first()
    if shop is None:
        raise InvalidBonusRuleError("Shop does not belong to this business")
    return shop


@transaction.atomic
def create_bonus_rule(*, business: Business, actor: User, shop_id=None, **values) -> BonusRule:
    """
    Define a bonus rule.

    Raises:
        InvalidBonusRuleError: Blank name, non-positive value, unknown role
            or a shop outside the business
    """
    _validate_rule(values)
    values['name'] = values['name'].strip()
    values['description'] = (values.get('description') or '').strip()
    rule = BonusRule.objects.create(
        business=business,
        shop=_resolve_shop(business, shop_id),
        created_by=actor,
        **{key: value for key, value in values.items() if key in RULE_FIELDS},
    )

    log_action(
        actor=actor,
        action='BONUS_RULE_CREATED',
        entity_type='BonusRule',
        entity_id=rule.id,
        metadata={
            'name': rule.name,
            'target_role': rule.target_role,
            'trigger_type': rule.trigger_type,
            'calculation_type': rule.calculation_type,
            'value': rule.value,
            'period': rule.period,
        },
    )
    return rule


@transaction.atomic
def update_bonus_rule(*, business: Business, rule_id: UUID, actor: User, **values) -> BonusRule:
    rule = get_bonus_rule(business=business, rule_id=rule_id)
    if 'shop_id' in values:
        rule.shop = _resolve_shop(business, values.pop('shop_id'))

    for key, value in values.items():
        if key in RULE_FIELDS:
            setattr(rule, key, value)
    _validate_rule({field: getattr(rule, field) for field in RULE_FIELDS})
    rule.save()

    log_action(
        actor=actor,
        action='BONUS_RULE_UPDATED',
        entity_type='BonusRule',
        entity_id=rule.id,
        metadata={'changes': values},
    )
    return rule


@transaction.atomic
def delete_bonus_rule(*, business: Business, rule_id: UUID, actor: User) -> bool:
    """
    Delete a rule, or deactivate it when records already reference it.

    Returns:
        True if deleted, False if only deactivated
    """
    rule = get_bonus_rule(business=business, rule_id=rule_id)
    has_records = rule.records.exists()
    if has_records:
        rule.is_active = False
        rule.save(update_fields=['is_active', 'updated_at'])
    else:
        rule.delete()

    log_action(
        actor=actor,
        action='BONUS_RULE_DELETED',
        entity_type='BonusRule',
        entity_id=rule_id,
        metadata={'name': rule.name, 'had_records': has_records},
    )
    return not has_records


# =============================================================================
# Records
# =============================================================================

def list_bonus_records(*, business: Business, status: str | None = None,
                       staff_member_id: UUID | None = None, rule_id: UUID | None = None) -> QuerySet:
    queryset = BonusRecord.objects.select_related('rule', 'staff_member__user', 'shop').filter(
        business=business
    )
    if status:
        queryset = queryset.filter(status=status)
    if staff_member_id:
        queryset = queryset.filter(staff_member_id=staff_member_id)
    if rule_id:
        queryset = queryset.filter(rule_id=rule_id)
    return queryset


def _bulk_transition(business, record_ids, from_statuses, action, actor, metadata=None, **changes) -> int:
    updated = BonusRecord.objects.filter(
        business=business, id__in=record_ids, status__in=from_statuses
    ).update(**changes)

    log_action(
        actor=actor,
        action=action,
        entity_type='BonusRecord',
        entity_id=','.join(str(record_id) for record_id in record_ids),
        metadata={'count': updated, **(metadata or {})},
    )
    logger.info("%s: %d bonus record(s) in %s", action, updated, business.slug)
    return updated


@transaction.atomic
def approve_bonus_records(*, business: Business, record_ids: list, actor: User) -> int:
    """PENDING -> APPROVED. Returns the number of records updated."""
    return _bulk_transition(
        business, record_ids, [BonusStatus.PENDING], 'BONUS_RECORDS_APPROVED', actor,
        status=BonusStatus.APPROVED, approved_at=timezone.now(), approved_by=actor,
    )


@transaction.atomic
def mark_bonus_records_paid(*, business: Business, record_ids: list, actor: User,
                            reference: str = '') -> int:
    """PENDING or APPROVED -> PAID."""
    return _bulk_transition(
        business, record_ids, [BonusStatus.PENDING, BonusStatus.APPROVED], 'BONUS_RECORDS_PAID', actor,
        metadata={'reference': reference},
        status=BonusStatus.PAID, paid_at=timezone.now(), paid_by=actor,
        payment_reference=reference or '',
    )


@transaction.atomic
def reject_bonus_records(*, business: Business, record_ids: list, actor: User,
                         reason: str = '') -> int:
    """PENDING or APPROVED -> REJECTED, keeping the reason in the notes."""
    reason = (reason or '').strip()
    return _bulk_transition(
        business, record_ids, [BonusStatus.PENDING, BonusStatus.APPROVED], 'BONUS_RECORDS_REJECTED', actor,
        metadata={'reason': reason},
        status=BonusStatus.REJECTED,
        notes=f"Rejected: {reason}" if reason else "Rejected by admin",
    )


# =============================================================================
# Summaries
# =============================================================================

def _status_totals(records: QuerySet) -> dict:
    totals = {}
    for status in (BonusStatus.PENDING, BonusStatus.APPROVED, BonusStatus.PAID):
        subset = records.filter(status=status).aggregate(count=Count('id'), amount=Sum('amount'))
        key = status.lower()
        totals[f'{key}_count'] = subset['count']
        totals[f'{key}_amount'] = subset['amount'] or ZERO
    return totals


def get_bonus_summary(*, business: Business) -> dict:
    """Rule counts plus record counts and amounts by status and this month."""
    rules = BonusRule.objects.filter(business=business)
    records = BonusRecord.objects.filter(business=business)
    month_start, month_end = get_period_bounds(BonusPeriod.MONTHLY)
    this_month = records.filter(created_at__gte=month_start, created_at__lte=month_end)

    return {
        'total_rules': rules.count(),
        'active_rules': rules.filter(is_active=True).count(),
        **_status_totals(records),
        'this_month_count': this_month.count(),
        'this_month_amount': this_month.aggregate(total=Sum('amount'))['total'] or ZERO,
    }


def get_staff_bonus_summary(member: StaffMember) -> dict:
    """What a staff member can earn and has earned."""
    shop = member.shop
    active_rules = BonusRule.objects.filter(
        business_id=shop.business_id,
        target_role=member.role,
        is_active=True,
    ).filter(Q(shop__isnull=True) | Q(shop=shop))
    records = BonusRecord.objects.select_related('rule').filter(staff_member=member)
    earned = records.exclude(status=BonusStatus.REJECTED)
    month_start, _ = get_period_bounds(BonusPeriod.MONTHLY)

    totals = _status_totals(records)
    return {
        'active_rules': list(active_rules),
        'records': list(records[:50]),
        'total_earned': earned.aggregate(total=Sum('amount'))['total'] or ZERO,
        'total_pending': totals['pending_amount'],
        'total_approved': totals['approved_amount'],
        'total_paid': totals['paid_amount'],
        'this_month_earned': earned.filter(
            created_at__gte=month_start
        ).aggregate(total=Sum('amount'))['total'] or ZERO,
        'has_active_bonuses': active_rules.exists(),
    }
