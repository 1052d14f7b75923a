from django.db import models
from django.core.validators import MaxValueValidator, MinValueValidator
from decimal import Decimal
import uuid


class InterestType(models.TextChoices):
    FLAT = 'FLAT', 'Flat'
    MONTHLY = 'MONTHLY', 'Monthly'


class PurchaseType(models.TextChoices):
    CASH = 'CASH', 'Cash'
    LAYAWAY = 'LAYAWAY', 'Layaway'
    CREDIT = 'CREDIT', 'Credit'


class PurchaseStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    ACTIVE = 'ACTIVE', 'Active'
    COMPLETED = 'COMPLETED', 'Completed'
    OVERDUE = 'OVERDUE', 'Overdue'
    DEFAULTED = 'DEFAULTED', 'Defaulted'


class PaymentMethod(models.TextChoices):
    CASH = 'CASH', 'Cash'
    MOBILE_MONEY = 'MOBILE_MONEY', 'Mobile Money'
    BANK_TRANSFER = 'BANK_TRANSFER', 'Bank Transfer'
    CARD = 'CARD', 'Card'


class PaymentStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    COMPLETED = 'COMPLETED', 'Completed'
    REJECTED = 'REJECTED', 'Rejected'


OPEN_STATUSES = [PurchaseStatus.PENDING, PurchaseStatus.ACTIVE, PurchaseStatus.OVERDUE]


class ShopPolicy(models.Model):
    """Interest and late fee terms applied to new purchases of a shop."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shop = models.OneToOneField(
        'tenants.Shop',
        on_delete=models.CASCADE,
        related_name='policy'
    )
    interest_type = models.CharField(
        max_length=10,
        choices=InterestType.choices,
        default=InterestType.FLAT
    )
    interest_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )
    grace_days = models.PositiveIntegerField(
        default=3,
        validators=[MaxValueValidator(60)]
    )
    max_tenor_days = models.PositiveIntegerField(
        default=60,
        validators=[MinValueValidator(1), MaxValueValidator(365)]
    )
    late_fee_fixed = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))]
    )
    late_fee_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))]
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shop_policies'
        verbose_name_plural = 'Shop policies'

    def __str__(self):
        return f"Policy for {self.shop.name}"


class Purchase(models.Model):
    """A hire-purchase agreement between a shop and a customer."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    purchase_number = models.CharField(max_length=20)
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.CASCADE,
        related_name='purchases'
    )
    purchase_type = models.CharField(
        max_length=10,
        choices=PurchaseType.choices,
        default=PurchaseType.CREDIT
    )
    status = models.CharField(
        max_length=10,
        choices=PurchaseStatus.choices,
        default=PurchaseStatus.PENDING,
        db_index=True
    )

    # Amounts
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    interest_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    outstanding_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    down_payment = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    # Terms
    installments = models.PositiveIntegerField(default=1)
    start_date = models.DateTimeField()
    due_date = models.DateTimeField()
    interest_type = models.CharField(
        max_length=10,
        choices=InterestType.choices,
        default=InterestType.FLAT
    )
    interest_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))

    sold_by = models.ForeignKey(
        'tenants.StaffMember',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sales'
    )
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'purchases'
        ordering = ['-created_at']
        unique_together = [['customer', 'purchase_number']]
        indexes = [
            models.Index(fields=['customer', 'status']),
            models.Index(fields=['sold_by', 'created_at']),
            models.Index(fields=['due_date']),
        ]

    def __str__(self):
        return f"{self.purchase_number} - {self.customer}"

    @property
    def shop(self):
        return self.customer.shop


class PurchaseItem(models.Model):
    """Line item of a purchase. The product name and price are snapshots."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    purchase = models.ForeignKey(
        Purchase,
        on_delete=models.CASCADE,
        related_name='items'
    )
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='purchase_items'
    )
    product_name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'purchase_items'

    def __str__(self):
        return f"{self.quantity} x {self.product_name}"


class Payment(models.Model):
    """
    Money received against a purchase.

    Admin-recorded payments are confirmed immediately. Collector payments
    stay PENDING until confirmed by a shop admin or an accountant.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    purchase = models.ForeignKey(
        Purchase,
        on_delete=models.CASCADE,
        related_name='payments'
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH
    )
    status = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True
    )

    collector = models.ForeignKey(
        'tenants.StaffMember',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='collected_payments'
    )
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_payments'
    )

    # Confirmation
    is_confirmed = models.BooleanField(default=False)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    confirmed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='confirmed_payments'
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)

    reference = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    paid_at = models.DateTimeField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payments'
        ordering = ['-paid_at']
        indexes = [
            models.Index(fields=['purchase', 'is_confirmed']),
            models.Index(fields=['collector', 'confirmed_at']),
            models.Index(fields=['status']),
        ]

    def __str__(self):
        return f"{self.amount} for {self.purchase.purchase_number}"
