from django.db import models
import uuid


class NotificationType(models.TextChoices):
    PAYMENT_RECORDED = 'PAYMENT_RECORDED', 'Payment Recorded'
    PAYMENT_CONFIRMED = 'PAYMENT_CONFIRMED', 'Payment Confirmed'
    PAYMENT_REJECTED = 'PAYMENT_REJECTED', 'Payment Rejected'
    PURCHASE_CREATED = 'PURCHASE_CREATED', 'Purchase Created'
    PURCHASE_COMPLETED = 'PURCHASE_COMPLETED', 'Purchase Completed'
    GENERAL = 'GENERAL', 'General'


class Notification(models.Model):
    """In-app message shown in the customer portal."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications'
    )
    type = models.CharField(
        max_length=30,
        choices=NotificationType.choices,
        default=NotificationType.GENERAL
    )
    title = models.CharField(max_length=200)
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read']),
        ]

    def __str__(self):
        return f"{self.title} -> {self.user}"
