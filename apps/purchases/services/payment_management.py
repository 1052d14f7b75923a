"""
Payment services.

Two paths lead money onto a purchase:

* shop or business admins record payments that count immediately;
* debt collectors record PENDING payments that only count once a shop
  admin or an accountant confirms them.

The purchase balance is always recomputed from confirmed payments.
"""

import logging
from decimal import Decimal
from uuid import UUID

from django.db import transaction
from django.db.models import Q, QuerySet, Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.commissions.services import trigger_bonus
from apps.notifications.services import notify
from apps.purchases.models import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    Purchase,
    PurchaseStatus,
)
from apps.purchases.pricing import ZERO, calculate_outstanding, quantize
from apps.tenants.models import Business, Shop, StaffMember

from .exceptions import (
    CustomerNotAssignedError,
    InvalidPaymentError,
    PaymentAlreadyProcessedError,
    PaymentNotFoundError,
    PurchaseNotFoundError,
)

logger = logging.getLogger(__name__)


def _lock_purchase(purchase_id: UUID, *, shop: Shop | None = None,
                   business: Business | None = None) -> Purchase:
    queryset = Purchase.objects.select_for_update().select_related('customer__shop__business')
    if shop is not None:
        queryset = queryset.filter(customer__shop=shop)
    if business is not None:
        queryset = queryset.filter(customer__shop__business=business)
    try:
        return queryset.get(id=purchase_id)
    except Purchase.DoesNotExist:
        raise PurchaseNotFoundError(f"Purchase with ID {purchase_id} not found")


def get_payment(*, payment_id: UUID, shop: Shop | None = None,
                business: Business | None = None, for_update: bool = False) -> Payment:
    queryset = Payment.objects.select_related(
        'purchase__customer__shop__business', 'collector__user', 'recorded_by'
    )
    if for_update:
        queryset = queryset.select_for_update(of=('self',))
    if shop is not None:
        queryset = queryset.filter(purchase__customer__shop=shop)
    if business is not None:
        queryset = queryset.filter(purchase__customer__shop__business=business)
    try:
        return queryset.get(id=payment_id)
    except Payment.DoesNotExist:
        raise PaymentNotFoundError(f"Payment with ID {payment_id} not found")


def apply_confirmed_payments(purchase: Purchase) -> Purchase:
    """
    Recompute ``amount_paid``, ``outstanding_balance`` and status.

    The balance is total minus the sum of confirmed payments. A purchase
    with nothing outstanding is COMPLETED; an open one with money paid is
    ACTIVE, which also clears an OVERDUE or DEFAULTED flag once money comes
    in. The overdue sweep flags it again if it falls behind.
    """
    confirmed = list(
        purchase.payments.filter(is_confirmed=True).values_list('amount', flat=True)
    )
    purchase.amount_paid = quantize(sum(confirmed, ZERO))
    purchase.outstanding_balance = calculate_outstanding(purchase.total_amount, confirmed)

    if purchase.outstanding_balance <= 0:
        purchase.status = PurchaseStatus.COMPLETED
    elif purchase.amount_paid > 0:
        purchase.status = PurchaseStatus.ACTIVE

    purchase.save(update_fields=['amount_paid', 'outstanding_balance', 'status', 'updated_at'])
    return purchase


def _check_amount(amount) -> Decimal:
    amount = quantize(amount)
    if amount <= 0:
        raise InvalidPaymentError("Payment amount must be greater than zero")
    return amount


def _credit_collection(payment: Payment, purchase: Purchase, was_completed: bool) -> None:
    """Bonus triggers and customer notification for a confirmed payment."""
    shop = purchase.customer.shop
    if payment.collector is not None:
        trigger_bonus(
            business=shop.business,
            shop=shop,
            trigger_type='COLLECTION',
            staff_member=payment.collector,
            amount=payment.amount,
            source_id=payment.id,
            source_ref=purchase.purchase_number,
        )
        if not was_completed and purchase.status == PurchaseStatus.COMPLETED:
            trigger_bonus(
                business=shop.business,
                shop=shop,
                trigger_type='FULL_PAYMENT',
                staff_member=payment.collector,
                amount=purchase.total_amount,
                source_id=purchase.id,
                source_ref=purchase.purchase_number,
            )

    customer = purchase.customer
    if customer.user_id:
        notify(
            user=customer.user,
            customer=customer,
            type='PAYMENT_CONFIRMED',
            title="Payment confirmed",
            message=(
                f"Your payment of {payment.amount} for {purchase.purchase_number} was confirmed. "
                f"Outstanding balance: {purchase.outstanding_balance}."
            ),
        )
        if not was_completed and purchase.status == PurchaseStatus.COMPLETED:
            notify(
                user=customer.user,
                customer=customer,
                type='PURCHASE_COMPLETED',
                title="Purchase completed",
                message=f"{purchase.purchase_number} is fully paid. Thank you!",
            )


@transaction.atomic
def record_payment(
    *,
    purchase_id: UUID,
    amount: Decimal,
    actor: User,
    shop: Shop | None = None,
    business: Business | None = None,
    payment_method: str = PaymentMethod.CASH,
    collector_id: UUID | None = None,
    reference: str = '',
    notes: str = '',
) -> Payment:
    """
    Record a payment taken by a shop or business admin.

    The payment is confirmed on the spot and the balance updated.

    Args:
        purchase_id: Purchase paid against (scoped by ``shop`` or ``business``)
        amount: Must be greater than zero
        actor: Admin recording the payment
        payment_method: CASH, MOBILE_MONEY, BANK_TRANSFER or CARD
        collector_id: Optional collector credited for the collection
        reference: External reference (mobile money id, bank slip...)
        notes: Free text

    Returns:
        Created Payment

    Raises:
        PurchaseNotFoundError: If the purchase is outside the scope
        InvalidPaymentError: If the amount is not positive or the purchase is closed
    """
    amount = _check_amount(amount)
    purchase = _lock_purchase(purchase_id, shop=shop, business=business)
    if purchase.status == PurchaseStatus.COMPLETED:
        raise InvalidPaymentError("This purchase is already fully paid")

    collector = None
    if collector_id:
        collector = StaffMember.objects.filter(
            id=collector_id, shop=purchase.customer.shop
        ).first()
        if collector is None:
            raise InvalidPaymentError("Invalid debt collector selected")

    now = timezone.now()
    payment = Payment.objects.create(
        purchase=purchase,
        amount=amount,
        payment_method=payment_method,
        status=PaymentStatus.COMPLETED,
        collector=collector,
        recorded_by=actor,
        is_confirmed=True,
        confirmed_at=now,
        confirmed_by=actor,
        reference=reference or '',
        notes=notes or '',
        paid_at=now,
    )
    apply_confirmed_payments(purchase)

    log_action(
        actor=actor,
        action='PAYMENT_RECORDED',
        entity_type='Payment',
        entity_id=payment.id,
        metadata={
            'purchase_number': purchase.purchase_number,
            'amount': amount,
            'method': payment_method,
            'outstanding_balance': purchase.outstanding_balance,
        },
    )
    logger.info("Payment %s of %s recorded on purchase %s", payment.id, amount, purchase.id)

    _credit_collection(payment, purchase, was_completed=False)
    return payment


@transaction.atomic
def record_collector_payment(
    *,
    collector: StaffMember,
    purchase_id: UUID,
    amount: Decimal,
    payment_method: str = PaymentMethod.CASH,
    reference: str = '',
    notes: str = '',
) -> Payment:
    """
    Record a payment collected in the field.

    The payment stays PENDING and the purchase balance is untouched until
    it is confirmed.

    Raises:
        PurchaseNotFoundError: If the purchase is not in the collector's shop
        CustomerNotAssignedError: If the customer is assigned to someone else
        InvalidPaymentError: If the purchase is completed or the amount
            exceeds the outstanding balance
    """
    amount = _check_amount(amount)
    purchase = _lock_purchase(purchase_id, shop=collector.shop)
    customer = purchase.customer
    if customer.assigned_collector_id != collector.id:
        raise CustomerNotAssignedError("This customer is not assigned to you")
    if purchase.status == PurchaseStatus.COMPLETED:
        raise InvalidPaymentError("This purchase is already fully paid")
    if amount > purchase.outstanding_balance:
        raise InvalidPaymentError(
            f"Amount exceeds the outstanding balance of {purchase.outstanding_balance}"
        )

    payment = Payment.objects.create(
        purchase=purchase,
        amount=amount,
        payment_method=payment_method,
        status=PaymentStatus.PENDING,
        collector=collector,
        recorded_by=collector.user,
        reference=reference or '',
        notes=notes or '',
        paid_at=timezone.now(),
    )

    log_action(
        actor=collector.user,
        action='COLLECTOR_PAYMENT_RECORDED',
        entity_type='Payment',
        entity_id=payment.id,
        metadata={
            'purchase_number': purchase.purchase_number,
            'customer': customer.full_name,
            'amount': amount,
            'method': payment_method,
        },
    )
    logger.info("Collector %s recorded pending payment %s", collector.id, payment.id)

    if customer.user_id:
        notify(
            user=customer.user,
            customer=customer,
            type='PAYMENT_RECORDED',
            title="Payment received",
            message=(
                f"A payment of {amount} for {purchase.purchase_number} was recorded "
                f"and is awaiting confirmation."
            ),
        )
    return payment


@transaction.atomic
def confirm_payment(*, payment_id: UUID, actor: User, shop: Shop | None = None,
                    business: Business | None = None) -> Payment:
    """
    Confirm a pending payment and apply it to the purchase balance.

    Raises:
        PaymentNotFoundError: If the payment is outside the scope
        PaymentAlreadyProcessedError: If already confirmed or rejected
        InvalidPaymentError: If the purchase is settled or the amount exceeds
            what is still owed
    """
    payment = get_payment(payment_id=payment_id, shop=shop, business=business, for_update=True)
    if payment.is_confirmed:
        raise PaymentAlreadyProcessedError("Payment is already confirmed")
    if payment.status == PaymentStatus.REJECTED:
        raise PaymentAlreadyProcessedError("Payment has been rejected")

    purchase = _lock_purchase(payment.purchase_id)
    if purchase.status == PurchaseStatus.COMPLETED:
        raise InvalidPaymentError("This purchase is already fully paid")
    if payment.amount > purchase.outstanding_balance:
        raise InvalidPaymentError(
            f"Amount exceeds the outstanding balance of {purchase.outstanding_balance}"
        )

    payment.is_confirmed = True
    payment.status = PaymentStatus.COMPLETED
    payment.confirmed_at = timezone.now()
    payment.confirmed_by = actor
    payment.save(update_fields=['is_confirmed', 'status', 'confirmed_at', 'confirmed_by'])

    apply_confirmed_payments(purchase)

    log_action(
        actor=actor,
        action='PAYMENT_CONFIRMED',
        entity_type='Payment',
        entity_id=payment.id,
        metadata={
            'purchase_number': purchase.purchase_number,
            'amount': payment.amount,
            'outstanding_balance': purchase.outstanding_balance,
            'purchase_status': purchase.status,
        },
    )
    logger.info("Payment %s confirmed by %s", payment.id, actor.id)

    payment.purchase = purchase
    _credit_collection(payment, purchase, was_completed=False)
    return payment


@transaction.atomic
def reject_payment(*, payment_id: UUID, actor: User, reason: str = '',
                   shop: Shop | None = None, business: Business | None = None) -> Payment:
    """
    Reject a pending payment. The purchase balance does not change.

    Raises:
        PaymentAlreadyProcessedError: If already confirmed or rejected
    """
    payment = get_payment(payment_id=payment_id, shop=shop, business=business, for_update=True)
    if payment.is_confirmed:
        raise PaymentAlreadyProcessedError("Cannot reject a confirmed payment")
    if payment.status == PaymentStatus.REJECTED:
        raise PaymentAlreadyProcessedError("Payment is already rejected")

    payment.status = PaymentStatus.REJECTED
    payment.rejected_at = timezone.now()
    payment.rejection_reason = (reason or '').strip()
    payment.save(update_fields=['status', 'rejected_at', 'rejection_reason'])

    purchase = payment.purchase
    log_action(
        actor=actor,
        action='PAYMENT_REJECTED',
        entity_type='Payment',
        entity_id=payment.id,
        metadata={
            'purchase_number': purchase.purchase_number,
            'amount': payment.amount,
            'reason': payment.rejection_reason,
        },
    )
    logger.info("Payment %s rejected by %s", payment.id, actor.id)

    customer = purchase.customer
    if customer.user_id:
        notify(
            user=customer.user,
            customer=customer,
            type='PAYMENT_REJECTED',
            title="Payment rejected",
            message=(
                f"Your payment of {payment.amount} for {purchase.purchase_number} was rejected."
                + (f" Reason: {payment.rejection_reason}" if payment.rejection_reason else "")
            ),
        )
    return payment


def list_payments(
    *,
    shop: Shop | None = None,
    business: Business | None = None,
    collector: StaffMember | None = None,
    status: str | None = None,
    is_confirmed: bool | None = None,
    payment_method: str | None = None,
    date_from=None,
    date_to=None,
    search: str | None = None,
) -> QuerySet:
    """Payments in scope, newest first, with optional filters."""
    queryset = Payment.objects.select_related(
        'purchase__customer__shop', 'collector__user', 'recorded_by', 'confirmed_by'
    )
    if shop is not None:
        queryset = queryset.filter(purchase__customer__shop=shop)
    if business is not None:
        queryset = queryset.filter(purchase__customer__shop__business=business)
    if collector is not None:
        queryset = queryset.filter(collector=collector)
    if status:
        queryset = queryset.filter(status=status)
    if is_confirmed is not None:
        queryset = queryset.filter(is_confirmed=is_confirmed)
    if payment_method:
        queryset = queryset.filter(payment_method=payment_method)
    if date_from:
        queryset = queryset.filter(paid_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(paid_at__date__lte=date_to)
    if search:
        queryset = queryset.filter(
            Q(purchase__purchase_number__icontains=search)
            | Q(purchase__customer__first_name__icontains=search)
            | Q(purchase__customer__last_name__icontains=search)
            | Q(purchase__customer__phone__icontains=search)
            | Q(reference__icontains=search)
        )
    return queryset.order_by('-paid_at')


def collector_totals(collector: StaffMember) -> dict:
    """Collected, pending and today's totals for a collector."""
    payments = Payment.objects.filter(collector=collector)
    today = timezone.localdate()
    confirmed = payments.filter(is_confirmed=True)
    return {
        'total_collected': confirmed.aggregate(total=Sum('amount'))['total'] or ZERO,
        'pending_count': payments.filter(status=PaymentStatus.PENDING).count(),
        'pending_amount': payments.filter(
            status=PaymentStatus.PENDING
        ).aggregate(total=Sum('amount'))['total'] or ZERO,
        'collected_today': confirmed.filter(
            confirmed_at__date=today
        ).aggregate(total=Sum('amount'))['total'] or ZERO,
    }
