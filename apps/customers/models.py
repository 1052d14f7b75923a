from django.db import models
import uuid


class PreferredPayment(models.TextChoices):
    ONLINE = 'ONLINE', 'Online'
    DEBT_COLLECTOR = 'DEBT_COLLECTOR', 'Debt Collector'
    BOTH = 'BOTH', 'Both'


class Customer(models.Model):
    """A hire-purchase customer of one shop."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shop = models.ForeignKey(
        'tenants.Shop',
        on_delete=models.CASCADE,
        related_name='customers'
    )

    # Identity
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=32)
    email = models.EmailField(blank=True)
    id_type = models.CharField(max_length=50, blank=True)
    id_number = models.CharField(max_length=100, blank=True)

    # Location
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    region = models.CharField(max_length=100, blank=True)

    # Collection
    preferred_payment = models.CharField(
        max_length=20,
        choices=PreferredPayment.choices,
        default=PreferredPayment.BOTH
    )
    assigned_collector = models.ForeignKey(
        'tenants.StaffMember',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_customers'
    )

    # Portal login
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='customer_profile'
    )

    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customers'
        unique_together = [['shop', 'phone']]
        indexes = [
            models.Index(fields=['shop', 'is_active']),
            models.Index(fields=['assigned_collector']),
            models.Index(fields=['last_name', 'first_name']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.full_name} ({self.phone})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()
