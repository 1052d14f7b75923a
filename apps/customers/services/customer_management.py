"""
Customer management service.

Customers belong to one shop. Phone numbers are normalised (whitespace
removed) and unique per shop.
"""

import logging
from decimal import Decimal
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import Count, DecimalField, Q, QuerySet, Sum, Value
from django.db.models.functions import Coalesce

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.commissions.services import trigger_bonus
from apps.customers.models import Customer, PreferredPayment
from apps.tenants.models import Shop, StaffMember, StaffRole

from .exceptions import (
    CustomerNotFoundError,
    DuplicateCustomerError,
    InvalidCollectorError,
    InvalidCustomerError,
)

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    'email', 'id_type', 'id_number', 'address', 'city', 'region', 'notes',
)


def normalize_phone(phone: str) -> str:
    return "".join((phone or "").split())


def _resolve_collector(shop: Shop, collector_id) -> StaffMember | None:
    if not collector_id:
        return None
    try:
        return StaffMember.objects.get(
            id=collector_id,
            shop=shop,
            role=StaffRole.DEBT_COLLECTOR,
            is_active=True,
        )
    except StaffMember.DoesNotExist:
        raise InvalidCollectorError("Invalid debt collector selected")


def get_customer(*, shop: Shop, customer_id: UUID, for_update: bool = False) -> Customer:
    queryset = Customer.objects.select_related('shop__business', 'assigned_collector__user')
    if for_update:
        queryset = queryset.select_for_update(of=('self',))
    try:
        return queryset.get(shop=shop, id=customer_id)
    except Customer.DoesNotExist:
        raise CustomerNotFoundError(f"Customer with ID {customer_id} not found")


@transaction.atomic
def create_customer(
    *,
    shop: Shop,
    first_name: str,
    last_name: str,
    phone: str,
    actor: User,
    assigned_collector_id: UUID | None = None,
    preferred_payment: str = PreferredPayment.BOTH,
    created_by: StaffMember | None = None,
    **fields,
) -> Customer:
    """
    Register a customer in a shop.

    Args:
        shop: Shop the customer buys from
        first_name: Required
        last_name: Required
        phone: Required, unique per shop after whitespace removal
        actor: User performing the action
        assigned_collector_id: Optional active debt collector of the shop
        preferred_payment: ONLINE, DEBT_COLLECTOR or BOTH
        created_by: Staff member credited for CUSTOMER_CREATED bonuses
        **fields: email, id_type, id_number, address, city, region, notes

    Returns:
        Created Customer instance

    Raises:
        InvalidCustomerError: If a required field is blank
        DuplicateCustomerError: If the phone is already registered in the shop
        InvalidCollectorError: If the collector is not an active collector here
    """
    first_name = (first_name or '').strip()
    last_name = (last_name or '').strip()
    phone = normalize_phone(phone)
    if not first_name:
        raise InvalidCustomerError("First name is required")
    if not last_name:
        raise InvalidCustomerError("Last name is required")
    if not phone:
        raise InvalidCustomerError("Phone number is required")

    if Customer.objects.filter(shop=shop, phone=phone).exists():
        raise DuplicateCustomerError("A customer with this phone number already exists")

    collector = _resolve_collector(shop, assigned_collector_id)
    extra = {key: (fields.get(key) or '').strip() for key in TEXT_FIELDS}

    try:
        with transaction.atomic():
            customer = Customer.objects.create(
                shop=shop,
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                preferred_payment=preferred_payment or PreferredPayment.BOTH,
                assigned_collector=collector,
                **extra,
            )
    except IntegrityError:
        raise DuplicateCustomerError("A customer with this phone number already exists")

    log_action(
        actor=actor,
        action='CUSTOMER_CREATED',
        entity_type='Customer',
        entity_id=customer.id,
        metadata={'shop': shop.slug, 'name': customer.full_name, 'phone': phone},
    )
    logger.info("Customer %s created in %s", customer.id, shop.slug)

    if created_by is not None:
        trigger_bonus(
            business=shop.business,
            shop=shop,
            trigger_type='CUSTOMER_CREATED',
            staff_member=created_by,
            source_id=customer.id,
            source_ref=customer.full_name,
            amount=Decimal('1'),
        )
    return customer


@transaction.atomic
def update_customer(*, shop: Shop, customer_id: UUID, actor: User, **fields) -> Customer:
    """
    Update customer details.

    Raises:
        CustomerNotFoundError: If the customer is not in the shop
        DuplicateCustomerError: If the new phone collides with another customer
    """
    customer = get_customer(shop=shop, customer_id=customer_id, for_update=True)
    previous = {}

    for key in ('first_name', 'last_name'):
        if key in fields:
            value = (fields[key] or '').strip()
            if not value:
                raise InvalidCustomerError(f"{key.replace('_', ' ').capitalize()} is required")
            previous[key] = getattr(customer, key)
            setattr(customer, key, value)

    if 'phone' in fields:
        phone = normalize_phone(fields['phone'])
        if not phone:
            raise InvalidCustomerError("Phone number is required")
        if Customer.objects.filter(shop=shop, phone=phone).exclude(id=customer.id).exists():
            raise DuplicateCustomerError("A customer with this phone number already exists")
        previous['phone'] = customer.phone
        customer.phone = phone

    for key in TEXT_FIELDS:
        if key in fields:
            previous[key] = getattr(customer, key)
            setattr(customer, key, (fields[key] or '').strip())

    if 'preferred_payment' in fields:
        previous['preferred_payment'] = customer.preferred_payment
        customer.preferred_payment = fields['preferred_payment']

    if 'assigned_collector_id' in fields:
        previous['assigned_collector_id'] = customer.assigned_collector_id
        customer.assigned_collector = _resolve_collector(shop, fields['assigned_collector_id'])

    customer.save()

    log_action(
        actor=actor,
        action='CUSTOMER_UPDATED',
        entity_type='Customer',
        entity_id=customer.id,
        metadata={'previous': previous},
    )
    return customer


@transaction.atomic
def toggle_customer_status(*, shop: Shop, customer_id: UUID, actor: User) -> Customer:
    customer = get_customer(shop=shop, customer_id=customer_id, for_update=True)
    customer.is_active = not customer.is_active
    customer.save(update_fields=['is_active', 'updated_at'])

    log_action(
        actor=actor,
        action='CUSTOMER_ACTIVATED' if customer.is_active else 'CUSTOMER_DEACTIVATED',
        entity_type='Customer',
        entity_id=customer.id,
    )
    return customer


@transaction.atomic
def assign_collector(*, shop: Shop, customer_id: UUID, collector_id: UUID | None,
                     actor: User) -> Customer:
    """Assign (or with ``collector_id=None`` unassign) the customer's debt collector."""
    customer = get_customer(shop=shop, customer_id=customer_id, for_update=True)
    previous = customer.assigned_collector_id
    customer.assigned_collector = _resolve_collector(shop, collector_id)
    customer.save(update_fields=['assigned_collector', 'updated_at'])

    log_action(
        actor=actor,
        action='COLLECTOR_ASSIGNED',
        entity_type='Customer',
        entity_id=customer.id,
        metadata={'previous': previous, 'new': collector_id},
    )
    return customer


@transaction.atomic
def delete_customer(*, shop: Shop, customer_id: UUID, actor: User) -> None:
    customer = get_customer(shop=shop, customer_id=customer_id, for_update=True)
    metadata = {'shop': shop.slug, 'name': customer.full_name, 'phone': customer.phone}
    customer.delete()

    log_action(
        actor=actor,
        action='CUSTOMER_DELETED',
        entity_type='Customer',
        entity_id=customer_id,
        metadata=metadata,
    )


def _zero():
    return Value(Decimal('0.00'), output_field=DecimalField(max_digits=14, decimal_places=2))


def customers_with_summary(*, shop: Shop | None = None, collector: StaffMember | None = None,
                           search: str | None = None) -> QuerySet:
    """
    Customers annotated with purchase counters.

    Adds ``total_purchases``, ``active_purchases``, ``total_owed`` and
    ``total_paid`` to each row.
    """
    queryset = Customer.objects.select_related('assigned_collector__user')
    if shop is not None:
        queryset = queryset.filter(shop=shop)
    if collector is not None:
        queryset = queryset.filter(assigned_collector=collector)
    if search:
        queryset = queryset.filter(
            Q(first_name__icontains=search)
            | Q(last_name__icontains=search)
            | Q(phone__icontains=search)
        )

    return queryset.annotate(
        total_purchases=Count('purchases', distinct=True),
        active_purchases=Count(
            'purchases',
            filter=Q(purchases__status__in=['ACTIVE', 'PENDING']),
            distinct=True,
        ),
        total_owed=Coalesce(Sum('purchases__outstanding_balance'), _zero()),
        total_paid=Coalesce(Sum('purchases__amount_paid'), _zero()),
    )


def get_customer_summary(*, customer: Customer) -> dict:
    """Purchase and payment totals for one customer."""
    purchases = customer.purchases.all()
    totals = purchases.aggregate(
        total_amount=Sum('total_amount'),
        amount_paid=Sum('amount_paid'),
        outstanding=Sum('outstanding_balance'),
    )
    return {
        'customer_id': customer.id,
        'name': customer.full_name,
        'phone': customer.phone,
        'total_purchases': purchases.count(),
        'active_purchases': purchases.filter(status__in=['ACTIVE', 'PENDING']).count(),
        'overdue_purchases': purchases.filter(status='OVERDUE').count(),
        'completed_purchases': purchases.filter(status='COMPLETED').count(),
        'total_amount': totals['total_amount'] or Decimal('0.00'),
        'total_paid': totals['amount_paid'] or Decimal('0.00'),
        'total_owed': totals['outstanding'] or Decimal('0.00'),
        'assigned_collector': (
            customer.assigned_collector.user.name if customer.assigned_collector else None
        ),
    }
