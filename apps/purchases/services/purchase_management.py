"""
Purchase (hire-purchase agreement) services.

A purchase snapshots the shop policy at the time of sale: interest type
and rate are copied onto the row so later policy changes never reprice
existing agreements.
"""

import logging
from decimal import Decimal
from uuid import UUID

from django.db import transaction
from django.db.models import F, QuerySet, Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.catalog.models import Product, ShopProduct
from apps.commissions.services import trigger_bonus
from apps.customers.models import Customer
from apps.notifications.services import notify
from apps.purchases.models import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    Purchase,
    PurchaseItem,
    PurchaseStatus,
    PurchaseType,
)
from apps.purchases.pricing import (
    ZERO,
    calculate_due_date,
    calculate_interest,
    calculate_late_fee,
    calculate_subtotal,
    grace_deadline,
    quantize,
)
from apps.tenants.models import Shop, StaffMember

from .exceptions import (
    InsufficientStockError,
    InvalidPurchaseError,
    PurchaseNotFoundError,
)
from .policy_management import get_shop_policy

logger = logging.getLogger(__name__)


def get_purchase(*, shop: Shop, purchase_id: UUID, for_update: bool = False) -> Purchase:
    queryset = Purchase.objects.select_related('customer__shop', 'sold_by__user')
    if for_update:
        queryset = queryset.select_for_update(of=('self',))
    try:
        return queryset.get(id=purchase_id, customer__shop=shop)
    except Purchase.DoesNotExist:
        raise PurchaseNotFoundError(f"Purchase with ID {purchase_id} not found")


def list_purchases(*, shop: Shop | None = None, business=None, status: str | None = None,
                   customer_id: UUID | None = None, sold_by: StaffMember | None = None) -> QuerySet:
    queryset = Purchase.objects.select_related('customer', 'sold_by__user').prefetch_related('items')
    if shop is not None:
        queryset = queryset.filter(customer__shop=shop)
    if business is not None:
        queryset = queryset.filter(customer__shop__business=business)
    if status:
        queryset = queryset.filter(status=status)
    if customer_id:
        queryset = queryset.filter(customer_id=customer_id)
    if sold_by is not None:
        queryset = queryset.filter(sold_by=sold_by)
    return queryset


def next_purchase_number(customer: Customer) -> str:
    """``HP-0001`` style number, counted per customer."""
    return f"HP-{customer.purchases.count() + 1:04d}"


def _resolve_items(shop: Shop, items, purchase_type: str) -> list[dict]:
    """
    Turn item input into priced line items.

    Product items must be active products of the shop's business; their
    unit price defaults to the product's price for the purchase type.
    Free-text items need a name and a unit price.
    """
    if not items:
        raise InvalidPurchaseError("At least one item is required")

    resolved = []
    for item in items:
        quantity = item.get('quantity', 1)
        if quantity < 1:
            raise InvalidPurchaseError("Quantity must be at least 1")

        product = None
        product_id = item.get('product_id')
        unit_price = item.get('unit_price')
        name = (item.get('product_name') or '').strip()

        if product_id:
            try:
                product = Product.objects.get(
                    id=product_id, business_id=shop.business_id, is_active=True
                )
            except Product.DoesNotExist:
                raise InvalidPurchaseError("Product not found")
            name = product.name
            if unit_price is None:
                unit_price = product.price_for(purchase_type)
        elif not name:
            raise InvalidPurchaseError("Each item needs a product or a product name")

        if unit_price is None:
            raise InvalidPurchaseError(f"Unit price is required for {name}")
        unit_price = Decimal(unit_price)
        if unit_price < 0:
            raise InvalidPurchaseError("Unit price cannot be negative")

        resolved.append({
            'product': product,
            'product_name': name,
            'quantity': quantity,
            'unit_price': quantize(unit_price),
            'total_price': quantize(unit_price * quantity),
        })
    return resolved


def _take_stock(shop: Shop, items: list[dict]) -> None:
    """Decrement shop stock for product items tracked in the shop."""
    for item in items:
        if item['product'] is None:
            continue
        stock = ShopProduct.objects.select_for_update().filter(
            shop=shop, product=item['product']
        ).first()
        if stock is None:
            continue
        if stock.stock_quantity < item['quantity']:
            raise InsufficientStockError(
                f"Insufficient stock for {item['product_name']}. "
                f"Only {stock.stock_quantity} available."
            )
        stock.stock_quantity = F('stock_quantity') - item['quantity']
        stock.save(update_fields=['stock_quantity', 'updated_at'])


@transaction.atomic
def create_purchase(
    *,
    shop: Shop,
    customer_id: UUID,
    items: list[dict],
    actor: User,
    purchase_type: str = PurchaseType.CREDIT,
    installments: int = 1,
    down_payment: Decimal = ZERO,
    tenor_days: int | None = None,
    sold_by: StaffMember | None = None,
    notes: str = '',
) -> Purchase:
    """
    Create a hire-purchase agreement.

    Args:
        shop: Selling shop
        customer_id: Customer of that shop
        items: Dicts with ``product_id`` or ``product_name``, ``quantity``
            and optional ``unit_price``
        actor: User performing the sale
        purchase_type: CASH, LAYAWAY or CREDIT; CASH carries no interest
        installments: Number of weekly installments
        down_payment: Paid at the counter, 0..total
        tenor_days: Days to pay off, defaults to the policy maximum
        sold_by: Staff member credited with the sale
        notes: Free text

    Returns:
        Created Purchase with items

    Raises:
        InvalidPurchaseError: Unknown customer or product, bad quantity,
            down payment or tenor
        InsufficientStockError: If the shop holds too little stock
    """
    try:
        customer = Customer.objects.select_for_update().get(id=customer_id, shop=shop)
    except Customer.DoesNotExist:
        raise InvalidPurchaseError("Customer not found")
    if installments < 1:
        raise InvalidPurchaseError("Installments must be at least 1")

    policy = get_shop_policy(shop)
    if tenor_days is None:
        tenor_days = policy.max_tenor_days
    if not 1 <= tenor_days <= policy.max_tenor_days:
        raise InvalidPurchaseError(
            f"Tenor must be between 1 and {policy.max_tenor_days} days"
        )

    line_items = _resolve_items(shop, items, purchase_type)
    subtotal = calculate_subtotal((item['unit_price'], item['quantity']) for item in line_items)
    interest = ZERO
    if purchase_type != PurchaseType.CASH:
        interest = calculate_interest(subtotal, policy.interest_type, policy.interest_rate, installments)
    total = subtotal + interest

    down_payment = quantize(down_payment or ZERO)
    if down_payment < 0:
        raise InvalidPurchaseError("Down payment cannot be negative")
    if down_payment > total:
        raise InvalidPurchaseError("Down payment cannot exceed the total amount")

    _take_stock(shop, line_items)

    if down_payment == total:
        status = PurchaseStatus.COMPLETED
    elif down_payment > 0:
        status = PurchaseStatus.ACTIVE
    else:
        status = PurchaseStatus.PENDING

    now = timezone.now()
    purchase = Purchase.objects.create(
        purchase_number=next_purchase_number(customer),
        customer=customer,
        purchase_type=purchase_type,
        status=status,
        subtotal=subtotal,
        interest_amount=interest,
        total_amount=total,
        amount_paid=down_payment,
        outstanding_balance=total - down_payment,
        down_payment=down_payment,
        installments=installments,
        start_date=now,
        due_date=calculate_due_date(now, tenor_days),
        interest_type=policy.interest_type,
        interest_rate=policy.interest_rate,
        sold_by=sold_by,
        notes=notes or '',
    )
    PurchaseItem.objects.bulk_create([
        PurchaseItem(
            purchase=purchase,
            product=item['product'],
            product_name=item['product_name'],
            quantity=item['quantity'],
            unit_price=item['unit_price'],
            total_price=item['total_price'],
        )
        for item in line_items
    ])

    if down_payment > 0:
        Payment.objects.create(
            purchase=purchase,
            amount=down_payment,
            payment_method=PaymentMethod.CASH,
            status=PaymentStatus.COMPLETED,
            recorded_by=actor,
            is_confirmed=True,
            confirmed_at=now,
            confirmed_by=actor,
            paid_at=now,
            notes="Down payment at time of purchase",
        )

    log_action(
        actor=actor,
        action='PURCHASE_CREATED',
        entity_type='Purchase',
        entity_id=purchase.id,
        metadata={
            'shop': shop.slug,
            'customer': customer.full_name,
            'purchase_number': purchase.purchase_number,
            'total_amount': total,
            'down_payment': down_payment,
            'items': [item['product_name'] for item in line_items],
        },
    )
    logger.info(
        "Purchase %s created for customer %s in %s (total %s)",
        purchase.purchase_number, customer.id, shop.slug, total,
    )

    if sold_by is not None:
        trigger_bonus(
            business=shop.business,
            shop=shop,
            trigger_type='SALE',
            staff_member=sold_by,
            amount=total,
            source_id=purchase.id,
            source_ref=purchase.purchase_number,
        )
    if customer.user_id:
        notify(
            user=customer.user,
            customer=customer,
            type='PURCHASE_CREATED',
            title="New purchase",
            message=(
                f"Purchase {purchase.purchase_number} of {total} was created. "
                f"Outstanding balance: {purchase.outstanding_balance}."
            ),
        )
    return purchase


def refresh_overdue_status(purchase: Purchase, as_of=None) -> Purchase:
    """
    Flag an open purchase OVERDUE once the grace period after its due date passed.
    """
    as_of = as_of or timezone.now()
    if purchase.status not in (PurchaseStatus.ACTIVE, PurchaseStatus.PENDING):
        return purchase
    if purchase.outstanding_balance <= 0:
        return purchase

    policy = get_shop_policy(purchase.customer.shop)
    if as_of > grace_deadline(purchase.due_date, policy.grace_days):
        purchase.status = PurchaseStatus.OVERDUE
        purchase.save(update_fields=['status', 'updated_at'])
        logger.info("Purchase %s is now overdue", purchase.id)
    return purchase


def refresh_overdue_purchases(*, shop: Shop, as_of=None) -> int:
    """Apply ``refresh_overdue_status`` to every open purchase of the shop."""
    updated = 0
    candidates = Purchase.objects.select_related('customer__shop').filter(
        customer__shop=shop,
        status__in=[PurchaseStatus.ACTIVE, PurchaseStatus.PENDING],
    )
    for purchase in candidates:
        if refresh_overdue_status(purchase, as_of).status == PurchaseStatus.OVERDUE:
            updated += 1
    return updated


def get_purchase_summary(*, purchase: Purchase, as_of=None) -> dict:
    """
    Balance breakdown for one purchase.

    ``amount_due_now`` is the outstanding balance plus any late fee.
    """
    as_of = as_of or timezone.now()
    policy = get_shop_policy(purchase.customer.shop)
    payments = purchase.payments.all()
    confirmed = payments.filter(is_confirmed=True).aggregate(total=Sum('amount'))['total'] or ZERO
    pending = payments.filter(
        is_confirmed=False, status=PaymentStatus.PENDING
    ).aggregate(total=Sum('amount'))['total'] or ZERO
    late_fee = calculate_late_fee(policy, purchase.outstanding_balance, purchase.due_date, as_of)

    return {
        'purchase_id': purchase.id,
        'purchase_number': purchase.purchase_number,
        'status': purchase.status,
        'subtotal': purchase.subtotal,
        'interest_amount': purchase.interest_amount,
        'total_amount': purchase.total_amount,
        'confirmed_paid': quantize(confirmed),
        'pending_amount': quantize(pending),
        'outstanding_balance': purchase.outstanding_balance,
        'late_fee': late_fee,
        'amount_due_now': quantize(purchase.outstanding_balance + late_fee),
        'due_date': purchase.due_date,
        'is_past_grace': as_of > grace_deadline(purchase.due_date, policy.grace_days),
    }
