from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class CommissionStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    APPROVED = 'APPROVED', 'Approved'
    PAID = 'PAID', 'Paid'


class BonusTrigger(models.TextChoices):
    COLLECTION = 'COLLECTION', 'Payment Collection'
    SALE = 'SALE', 'Sale Made'
    CUSTOMER_CREATED = 'CUSTOMER_CREATED', 'Customer Created'
    FULL_PAYMENT = 'FULL_PAYMENT', 'Full Payment'
    ON_TIME_COLLECTION = 'ON_TIME_COLLECTION', 'On-time Collection'
    RECOVERY = 'RECOVERY', 'Debt Recovery'
    TARGET_HIT = 'TARGET_HIT', 'Target Achieved'
    SHOP_PERFORMANCE = 'SHOP_PERFORMANCE', 'Shop Performance'
    ZERO_DEFAULT = 'ZERO_DEFAULT', 'Zero Default'


class CalculationType(models.TextChoices):
    FIXED = 'FIXED', 'Fixed'
    PERCENTAGE = 'PERCENTAGE', 'Percentage'


class BonusPeriod(models.TextChoices):
    DAILY = 'DAILY', 'Daily'
    WEEKLY = 'WEEKLY', 'Weekly'
    MONTHLY = 'MONTHLY', 'Monthly'
    QUARTERLY = 'QUARTERLY', 'Quarterly'
    YEARLY = 'YEARLY', 'Yearly'
    ONE_TIME = 'ONE_TIME', 'One Time'


class BonusStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    APPROVED = 'APPROVED', 'Approved'
    PAID = 'PAID', 'Paid'
    REJECTED = 'REJECTED', 'Rejected'


class Commission(models.Model):
    """Commission owed to a staff member for one period."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'tenants.Business',
        on_delete=models.CASCADE,
        related_name='commissions'
    )
    shop = models.ForeignKey(
        'tenants.Shop',
        on_delete=models.CASCADE,
        related_name='commissions'
    )
    staff_member = models.ForeignKey(
        'tenants.StaffMember',
        on_delete=models.CASCADE,
        related_name='commissions'
    )
    period_start = models.DateField()
    period_end = models.DateField()
    base_amount = models.DecimalField(max_digits=14, decimal_places=2)
    rate = models.DecimalField(max_digits=6, decimal_places=4)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(
        max_length=10,
        choices=CommissionStatus.choices,
        default=CommissionStatus.PENDING,
        db_index=True
    )

    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_commissions'
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    paid_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='paid_commissions'
    )
    payment_reference = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'commissions'
        ordering = ['-created_at']
        unique_together = [['staff_member', 'period_start', 'period_end']]

    def __str__(self):
        return f"{self.staff_member} {self.period_start}..{self.period_end}: {self.amount}"


class BonusRule(models.Model):
    """Business-defined incentive that creates BonusRecords when triggered."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'tenants.Business',
        on_delete=models.CASCADE,
        related_name='bonus_rules'
    )
    shop = models.ForeignKey(
        'tenants.Shop',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='bonus_rules',
        help_text='Leave empty to apply to every shop'
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    target_role = models.CharField(max_length=20)
    trigger_type = models.CharField(max_length=20, choices=BonusTrigger.choices)
    calculation_type = models.CharField(
        max_length=10,
        choices=CalculationType.choices,
        default=CalculationType.PERCENTAGE
    )
    value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    minimum_threshold = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    maximum_cap = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    target_amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    tiers = models.JSONField(
        null=True,
        blank=True,
        help_text='List of {"min", "max", "value"}; max 0 means open ended'
    )
    period = models.CharField(
        max_length=10,
        choices=BonusPeriod.choices,
        default=BonusPeriod.MONTHLY
    )
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bonus_rules'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['business', 'trigger_type', 'is_active']),
        ]

    def __str__(self):
        return self.name


class BonusRecord(models.Model):
    """A bonus earned by a staff member under one rule."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'tenants.Business',
        on_delete=models.CASCADE,
        related_name='bonus_records'
    )
    shop = models.ForeignKey(
        'tenants.Shop',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bonus_records'
    )
    rule = models.ForeignKey(
        BonusRule,
        on_delete=models.PROTECT,
        related_name='records'
    )
    staff_member = models.ForeignKey(
        'tenants.StaffMember',
        on_delete=models.CASCADE,
        related_name='bonus_records'
    )
    trigger_type = models.CharField(max_length=20, choices=BonusTrigger.choices)
    source_id = models.CharField(max_length=64, blank=True)
    source_ref = models.CharField(max_length=200, blank=True)
    base_amount = models.DecimalField(max_digits=14, decimal_places=2)
    rate = models.DecimalField(max_digits=8, decimal_places=4, null=True, blank=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    period_start = models.DateTimeField(null=True, blank=True)
    period_end = models.DateTimeField(null=True, blank=True)
    status = models.CharField(
        max_length=10,
        choices=BonusStatus.choices,
        default=BonusStatus.PENDING,
        db_index=True
    )

    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    paid_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    payment_reference = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'bonus_records'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['rule', 'staff_member', 'period_start', 'period_end']),
            models.Index(fields=['business', 'status']),
        ]

    def __str__(self):
        return f"{self.rule.name}: {self.amount} ({self.status})"
