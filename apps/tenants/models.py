from django.db import models
import uuid


class StaffRole(models.TextChoices):
    SHOP_ADMIN = 'SHOP_ADMIN', 'Shop Admin'
    SALES_STAFF = 'SALES_STAFF', 'Sales Staff'
    DEBT_COLLECTOR = 'DEBT_COLLECTOR', 'Debt Collector'
    ACCOUNTANT = 'ACCOUNTANT', 'Accountant'


class Business(models.Model):
    """Tenant. Owns shops, the product catalog, budgets and bonus rules."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)
    owner = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='owned_businesses'
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'businesses'
        verbose_name_plural = 'businesses'
        indexes = [
            models.Index(fields=['slug']),
            models.Index(fields=['is_active']),
        ]
        ordering = ['name']

    def __str__(self):
        return self.name


class Shop(models.Model):
    """A retail outlet belonging to a business."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        Business,
        on_delete=models.CASCADE,
        related_name='shops'
    )
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)
    address = models.CharField(max_length=255, blank=True)
    country = models.CharField(max_length=100, default='Ghana')
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shops'
        indexes = [
            models.Index(fields=['business', 'is_active']),
            models.Index(fields=['slug']),
        ]
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.business.name})"


class StaffMember(models.Model):
    """
    A user's membership in a shop.

    Accountants are members with role ACCOUNTANT; their reach is the whole
    business of the shop they are attached to, narrowed by the permission
    flags below.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    shop = models.ForeignKey(
        Shop,
        on_delete=models.CASCADE,
        related_name='staff'
    )
    role = models.CharField(max_length=20, choices=StaffRole.choices)
    is_active = models.BooleanField(default=True)

    # Accountant permissions
    can_confirm_payments = models.BooleanField(default=False)
    can_view_profit_margins = models.BooleanField(default=False)
    can_approve_commissions = models.BooleanField(default=False)
    can_pay_commissions = models.BooleanField(default=False)
    can_manage_budgets = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'staff_members'
        unique_together = [['user', 'shop']]
        indexes = [
            models.Index(fields=['shop', 'role', 'is_active']),
            models.Index(fields=['user', 'role']),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.user.email} - {self.get_role_display()} @ {self.shop.slug}"

    @property
    def business(self):
        return self.shop.business

    def has_permission(self, flag: str) -> bool:
        """Check an accountant permission flag such as ``can_manage_budgets``."""
        return bool(getattr(self, flag, False))


ACCOUNTANT_PERMISSION_FLAGS = (
    'can_confirm_payments',
    'can_view_profit_margins',
    'can_approve_commissions',
    'can_pay_commissions',
    'can_manage_budgets',
)
