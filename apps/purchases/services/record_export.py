"""
Excel exports of purchases and payments for a business.

Both workbooks hold one sheet of records, newest first, using the same
header styling as the catalog export.
"""

from io import BytesIO

from django.utils import timezone
import openpyxl

from apps.catalog.services import write_header
from apps.purchases.models import Payment, PaymentStatus, Purchase
from apps.tenants.models import Business

from .exceptions import InvalidPaymentError

PURCHASE_COLUMNS = [
    ('Purchase Number', 18),
    ('Shop Slug', 15),
    ('Shop Name', 20),
    ('Customer Name', 25),
    ('Customer Phone', 15),
    ('Products', 40),
    ('SKUs', 20),
    ('Quantities', 15),
    ('Unit Prices', 20),
    ('Purchase Type', 12),
    ('Subtotal', 12),
    ('Interest Amount', 14),
    ('Total Amount', 12),
    ('Down Payment', 12),
    ('Amount Paid', 12),
    ('Outstanding', 12),
    ('Installments', 12),
    ('Status', 12),
    ('Start Date', 12),
    ('Due Date', 12),
    ('Notes', 30),
    ('Created At', 12),
]

PAYMENT_COLUMNS = [
    ('Payment ID', 36),
    ('Date', 12),
    ('Time', 8),
    ('Shop Slug', 15),
    ('Shop Name', 20),
    ('Customer Name', 25),
    ('Customer Phone', 15),
    ('Purchase Number', 15),
    ('Amount', 12),
    ('Payment Method', 15),
    ('Reference', 20),
    ('Status', 12),
    ('Recorded By', 20),
    ('Confirmed At', 12),
    ('Confirmed By', 20),
    ('Rejected At', 12),
    ('Rejection Reason', 30),
    ('Notes', 40),
]

# ?status= values of the payments export
PAYMENT_STATUS_FILTERS = {
    'all': None,
    'pending': PaymentStatus.PENDING,
    'confirmed': PaymentStatus.COMPLETED,
    'rejected': PaymentStatus.REJECTED,
}


def _day(value) -> str:
    return timezone.localtime(value).date().isoformat() if value else ""


def _person(user) -> str:
    if user is None:
        return ""
    return user.name or user.email


def _workbook_bytes(workbook: openpyxl.Workbook) -> bytes:
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_purchases_workbook(business: Business) -> openpyxl.Workbook:
    """One row per purchase; item details are joined with ``"; "``."""
    purchases = (
        Purchase.objects
        .filter(customer__shop__business=business)
        .select_related('customer__shop')
        .prefetch_related('items__product')
        .order_by('-created_at')
    )

    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "Purchases"
    write_header(sheet, PURCHASE_COLUMNS)

    for purchase in purchases:
        items = list(purchase.items.all())
        customer = purchase.customer
        sheet.append([
            purchase.purchase_number,
            customer.shop.slug,
            customer.shop.name,
            customer.full_name,
            customer.phone,
            "; ".join(item.product_name for item in items),
            "; ".join((item.product.sku if item.product and item.product.sku else "N/A") for item in items),
            "; ".join(str(item.quantity) for item in items),
            "; ".join(str(item.unit_price) for item in items),
            purchase.purchase_type,
            float(purchase.subtotal),
            float(purchase.interest_amount),
            float(purchase.total_amount),
            float(purchase.down_payment),
            float(purchase.amount_paid),
            float(purchase.outstanding_balance),
            purchase.installments,
            purchase.status,
            _day(purchase.start_date),
            _day(purchase.due_date),
            purchase.notes,
            _day(purchase.created_at),
        ])
    return workbook


def build_payments_workbook(business: Business, *, status: str = 'all') -> openpyxl.Workbook:
    """
    One row per payment, optionally narrowed to ``pending``, ``confirmed``
    or ``rejected`` payments.

    Raises:
        InvalidPaymentError: If ``status`` is not a known filter
    """
    if status not in PAYMENT_STATUS_FILTERS:
        raise InvalidPaymentError(
            f"Unknown payment status filter '{status}'. Use one of: {', '.join(PAYMENT_STATUS_FILTERS)}"
        )

    payments = (
        Payment.objects
        .filter(purchase__customer__shop__business=business)
        .select_related('purchase__customer__shop', 'collector__user', 'recorded_by', 'confirmed_by')
        .order_by('-created_at')
    )
    if PAYMENT_STATUS_FILTERS[status]:
        payments = payments.filter(status=PAYMENT_STATUS_FILTERS[status])

    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "Payments"
    write_header(sheet, PAYMENT_COLUMNS)

    for payment in payments:
        purchase = payment.purchase
        customer = purchase.customer
        recorded_by = payment.recorded_by or (payment.collector.user if payment.collector else None)
        created = timezone.localtime(payment.created_at)
        sheet.append([
            str(payment.id),
            created.date().isoformat(),
            f"{created:%H:%M}",
            customer.shop.slug,
            customer.shop.name,
            customer.full_name,
            customer.phone,
            purchase.purchase_number,
            float(payment.amount),
            payment.payment_method,
            payment.reference,
            payment.get_status_display(),
            _person(recorded_by) or "Unknown",
            _day(payment.confirmed_at),
            _person(payment.confirmed_by),
            _day(payment.rejected_at),
            payment.rejection_reason,
            payment.notes,
        ])
    return workbook


def export_purchases(business: Business) -> tuple[bytes, str]:
    """Workbook bytes and ``purchases_<business-slug>_<YYYY-MM-DD>.xlsx``."""
    today = timezone.localdate()
    return (
        _workbook_bytes(build_purchases_workbook(business)),
        f"purchases_{business.slug}_{today:%Y-%m-%d}.xlsx",
    )


def export_payments(business: Business, *, status: str = 'all') -> tuple[bytes, str]:
    """Workbook bytes and ``payments[-<status>]-<YYYY-MM-DD>.xlsx``."""
    workbook = build_payments_workbook(business, status=status)
    suffix = f"-{status}" if status != 'all' else ""
    return _workbook_bytes(workbook), f"payments{suffix}-{timezone.localdate():%Y-%m-%d}.xlsx"

