from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class ExpenseCategory(models.TextChoices):
    RENT = 'RENT', 'Rent'
    UTILITIES = 'UTILITIES', 'Utilities'
    SALARIES = 'SALARIES', 'Salaries'
    INVENTORY = 'INVENTORY', 'Inventory'
    TRANSPORT = 'TRANSPORT', 'Transport'
    MARKETING = 'MARKETING', 'Marketing'
    MAINTENANCE = 'MAINTENANCE', 'Maintenance'
    OTHER = 'OTHER', 'Other'


class BudgetPeriod(models.TextChoices):
    MONTHLY = 'MONTHLY', 'Monthly'
    QUARTERLY = 'QUARTERLY', 'Quarterly'
    YEARLY = 'YEARLY', 'Yearly'


class ReportType(models.TextChoices):
    REVENUE = 'REVENUE', 'Revenue'
    AGING = 'AGING', 'Aging'
    COLLECTIONS = 'COLLECTIONS', 'Collections'
    PROFIT_MARGIN = 'PROFIT_MARGIN', 'Profit Margin'


class ReportFrequency(models.TextChoices):
    DAILY = 'DAILY', 'Daily'
    WEEKLY = 'WEEKLY', 'Weekly'
    MONTHLY = 'MONTHLY', 'Monthly'


class Expense(models.Model):
    """Money spent by a business, optionally attributed to one shop."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'tenants.Business',
        on_delete=models.CASCADE,
        related_name='expenses'
    )
    shop = models.ForeignKey(
        'tenants.Shop',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses'
    )
    category = models.CharField(max_length=20, choices=ExpenseCategory.choices)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    description = models.CharField(max_length=255, blank=True)
    expense_date = models.DateField()
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'expenses'
        ordering = ['-expense_date', '-created_at']
        indexes = [
            models.Index(fields=['business', 'expense_date']),
            models.Index(fields=['business', 'category']),
        ]

    def __str__(self):
        return f"{self.get_category_display()} {self.amount} on {self.expense_date}"


class Budget(models.Model):
    """Spending allowance for a period, optionally per category and shop."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'tenants.Business',
        on_delete=models.CASCADE,
        related_name='budgets'
    )
    shop = models.ForeignKey(
        'tenants.Shop',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='budgets'
    )
    name = models.CharField(max_length=200)
    category = models.CharField(
        max_length=20,
        choices=ExpenseCategory.choices,
        blank=True,
        help_text='Leave empty to track every category'
    )
    period = models.CharField(
        max_length=10,
        choices=BudgetPeriod.choices,
        default=BudgetPeriod.MONTHLY
    )
    start_date = models.DateField()
    end_date = models.DateField()
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
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
        db_table = 'budgets'
        ordering = ['-start_date']

    def __str__(self):
        return f"{self.name} ({self.start_date}..{self.end_date})"


class ScheduledReport(models.Model):
    """A report the business wants e-mailed on a schedule."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'tenants.Business',
        on_delete=models.CASCADE,
        related_name='scheduled_reports'
    )
    report_type = models.CharField(max_length=20, choices=ReportType.choices)
    frequency = models.CharField(max_length=10, choices=ReportFrequency.choices)
    recipients = models.TextField(help_text='Comma separated e-mail addresses')
    is_active = models.BooleanField(default=True)
    last_run_at = models.DateTimeField(null=True, blank=True)
    next_run_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'scheduled_reports'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_report_type_display()} ({self.get_frequency_display()})"

    @property
    def recipient_list(self):
        return [email.strip() for email in self.recipients.split(',') if email.strip()]
