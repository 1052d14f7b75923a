"""
Commission calculation and approval workflow.

Commissions move PENDING -> APPROVED -> PAID. Sales staff earn on the
total of the purchases they sold; debt collectors earn on the confirmed
payments they collected.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet, Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.commissions.models import Commission, CommissionStatus
from apps.purchases.models import Payment, Purchase
from apps.tenants.models import Business, Shop, StaffMember, StaffRole

from .exceptions import (
    CommissionNotFoundError,
    InvalidCommissionInputError,
    InvalidCommissionTransitionError,
)

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def commission_amount(base: Decimal, rate: Decimal) -> Decimal:
    """``base x rate`` rounded half up to cents."""
    return (Decimal(base) * Decimal(rate)).quantize(CENT, rounding=ROUND_HALF_UP)


def sales_base(member: StaffMember, period_start: date, period_end: date) -> Decimal:
    return Purchase.objects.filter(
        sold_by=member,
        created_at__date__gte=period_start,
        created_at__date__lte=period_end,
    ).aggregate(total=Sum('total_amount'))['total'] or Decimal('0')


def collection_base(member: StaffMember, period_start: date, period_end: date) -> Decimal:
    return Payment.objects.filter(
        collector=member,
        is_confirmed=True,
        confirmed_at__date__gte=period_start,
        confirmed_at__date__lte=period_end,
    ).aggregate(total=Sum('amount'))['total'] or Decimal('0')


def _check_rate(rate: Decimal, label: str) -> Decimal:
    rate = Decimal(rate)
    if not Decimal('0') <= rate <= Decimal('1'):
        raise InvalidCommissionInputError(f"{label} rate must be between 0 and 1")
    return rate


@transaction.atomic
def calculate_commissions(
    *,
    business: Business,
    period_start: date,
    period_end: date,
    sales_rate: Decimal,
    collection_rate: Decimal,
    actor: User,
    shop_id: UUID | None = None,
) -> list[Commission]:
    """
    Create PENDING commissions for every staff member with activity.

    Args:
        business: Business whose staff are paid
        period_start: First day of the period (inclusive)
        period_end: Last day of the period (inclusive)
        sales_rate: Fraction of sales paid to sales staff, 0..1
        collection_rate: Fraction of collections paid to collectors, 0..1
        actor: Accountant or business admin running the calculation
        shop_id: Restrict to one shop of the business

    Returns:
        Newly created commissions. Members with nothing to earn, or who
        already have a commission for the identical period, are skipped.

    Raises:
        InvalidCommissionInputError: If a rate is out of range or the
            period is inverted
    """
    sales_rate = _check_rate(sales_rate, "Sales")
    collection_rate = _check_rate(collection_rate, "Collection")
    if period_start > period_end:
        raise InvalidCommissionInputError("Period start must be on or before period end")

    shop = None
    if shop_id:
        shop = Shop.objects.filter(business=business, id=shop_id).first()
        if shop is None:
            raise InvalidCommissionInputError("Shop does not belong to this business")

    members = StaffMember.objects.select_related('shop', 'user').filter(
        shop__business=business,
        is_active=True,
        role__in=[StaffRole.SALES_STAFF, StaffRole.DEBT_COLLECTOR],
    )
    if shop is not None:
        members = members.filter(shop=shop)

    created = []
    for member in members:
        if member.role == StaffRole.SALES_STAFF:
            base, rate = sales_base(member, period_start, period_end), sales_rate
        else:
            base, rate = collection_base(member, period_start, period_end), collection_rate
        if base <= 0:
            continue

        exists = Commission.objects.filter(
            staff_member=member, period_start=period_start, period_end=period_end
        ).exists()
        if exists:
            logger.info("Commission for %s %s..%s already exists", member.id, period_start, period_end)
            continue

        created.append(Commission.objects.create(
            business=business,
            shop=member.shop,
            staff_member=member,
            period_start=period_start,
            period_end=period_end,
            base_amount=base,
            rate=rate,
            amount=commission_amount(base, rate),
        ))

    log_action(
        actor=actor,
        action='COMMISSIONS_CALCULATED',
        entity_type='Commission',
        metadata={
            'business': business.slug,
            'shop': shop.slug if shop else None,
            'period_start': period_start,
            'period_end': period_end,
            'sales_rate': sales_rate,
            'collection_rate': collection_rate,
            'created': len(created),
        },
    )
    logger.info("Calculated %d commissions for %s", len(created), business.slug)
    return created


def _lock_commission(business: Business, commission_id: UUID) -> Commission:
    try:
        return Commission.objects.select_for_update().get(id=commission_id, business=business)
    except Commission.DoesNotExist:
        raise CommissionNotFoundError(f"Commission with ID {commission_id} not found")


@transaction.atomic
def approve_commission(*, business: Business, commission_id: UUID, actor: User) -> Commission:
    """
    PENDING -> APPROVED.

    Raises:
        InvalidCommissionTransitionError: If the commission is not pending
    """
    commission = _lock_commission(business, commission_id)
    if commission.status != CommissionStatus.PENDING:
        raise InvalidCommissionTransitionError(
            f"Only pending commissions can be approved (current: {commission.status})"
        )

    commission.status = CommissionStatus.APPROVED
    commission.approved_at = timezone.now()
    commission.approved_by = actor
    commission.save(update_fields=['status', 'approved_at', 'approved_by', 'updated_at'])

    log_action(
        actor=actor,
        action='COMMISSION_APPROVED',
        entity_type='Commission',
        entity_id=commission.id,
        metadata={'amount': commission.amount},
    )
    logger.info("Commission %s approved", commission.id)
    return commission


@transaction.atomic
def mark_commission_paid(*, business: Business, commission_id: UUID, actor: User,
                         reference: str) -> Commission:
    """
    APPROVED -> PAID with a payment reference.

    Raises:
        InvalidCommissionInputError: If the reference is blank
        InvalidCommissionTransitionError: If the commission is not approved
    """
    reference = (reference or '').strip()
    if not reference:
        raise InvalidCommissionInputError("Payment reference is required")

    commission = _lock_commission(business, commission_id)
    if commission.status != CommissionStatus.APPROVED:
        raise InvalidCommissionTransitionError(
            f"Only approved commissions can be paid (current: {commission.status})"
        )

    commission.status = CommissionStatus.PAID
    commission.paid_at = timezone.now()
    commission.paid_by = actor
    commission.payment_reference = reference
    commission.save(update_fields=['status', 'paid_at', 'paid_by', 'payment_reference', 'updated_at'])

    log_action(
        actor=actor,
        action='COMMISSION_PAID',
        entity_type='Commission',
        entity_id=commission.id,
        metadata={'amount': commission.amount, 'reference': reference},
    )
    logger.info("Commission %s paid (%s)", commission.id, reference)
    return commission


def list_commissions(*, business: Business, status: str | None = None,
                     shop: Shop | None = None) -> QuerySet:
    queryset = Commission.objects.select_related('shop', 'staff_member__user').filter(business=business)
    if status:
        queryset = queryset.filter(status=status)
    if shop is not None:
        queryset = queryset.filter(shop=shop)
    return queryset
