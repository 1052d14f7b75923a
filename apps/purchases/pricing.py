"""
Hire-purchase pricing.

Pure functions over Decimals. They never touch the database so they can be
used for quotes as well as for persisted purchases.

Example:
    Price a three-month agreement at 5% monthly interest::

        from decimal import Decimal
        from apps.purchases.models import InterestType
        from apps.purchases.pricing import calculate_interest, calculate_subtotal

        subtotal = calculate_subtotal([(Decimal('500.00'), 2)])
        interest = calculate_interest(subtotal, InterestType.MONTHLY, Decimal('5'), 12)
        # subtotal == 1000.00, interest == 150.00 (12 weekly installments = 3 months)
"""

import math
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from .models import InterestType

CENT = Decimal('0.01')
ZERO = Decimal('0.00')
HUNDRED = Decimal('100')

# Installments are collected weekly.
INSTALLMENTS_PER_MONTH = 4


def quantize(amount) -> Decimal:
    """Round a money amount to cents, half up."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_subtotal(items) -> Decimal:
    """
    Sum of ``unit_price x quantity`` over ``(unit_price, quantity)`` pairs.
    """
    return quantize(sum((Decimal(price) * quantity for price, quantity in items), ZERO))


def months_for_installments(installments: int) -> int:
    return max(1, math.ceil(installments / INSTALLMENTS_PER_MONTH))


def calculate_interest(subtotal, interest_type, rate, installments: int = 1) -> Decimal:
    """
    Interest charged on top of the subtotal.

    Args:
        subtotal: Price of the goods
        interest_type: FLAT (once) or MONTHLY (per month of the tenor)
        rate: Percentage, 0..100
        installments: Number of weekly installments

    Returns:
        Interest amount rounded to cents; zero for a non-positive rate
    """
    rate = Decimal(rate or 0)
    if rate <= 0:
        return ZERO

    interest = Decimal(subtotal) * rate / HUNDRED
    if interest_type == InterestType.MONTHLY:
        interest *= months_for_installments(installments)
    return quantize(interest)


def calculate_due_date(start, max_tenor_days: int):
    return start + timedelta(days=max_tenor_days)


def grace_deadline(due_date, grace_days: int):
    return due_date + timedelta(days=grace_days or 0)


def calculate_late_fee(policy, outstanding, due_date, as_of) -> Decimal:
    """
    Late fee owed on an agreement.

    Nothing is charged until ``as_of`` is past the due date plus the
    policy's grace days, or when nothing is outstanding. After that the
    fixed fee and the rate on the outstanding balance are added, each
    only when configured.
    """
    outstanding = Decimal(outstanding)
    if outstanding <= 0 or as_of <= grace_deadline(due_date, policy.grace_days):
        return ZERO

    fee = ZERO
    if policy.late_fee_fixed:
        fee += Decimal(policy.late_fee_fixed)
    if policy.late_fee_rate:
        fee += outstanding * Decimal(policy.late_fee_rate) / HUNDRED
    return quantize(fee)


def calculate_outstanding(total, confirmed_payments) -> Decimal:
    """``total`` minus the confirmed payment amounts, never below zero."""
    paid = sum((Decimal(amount) for amount in confirmed_payments), ZERO)
    return quantize(max(ZERO, Decimal(total) - paid))
