from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class Category(models.Model):
    """Product category, scoped to a business."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'tenants.Business',
        on_delete=models.CASCADE,
        related_name='categories'
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        unique_together = [['business', 'name']]
        ordering = ['name']

    def __str__(self):
        return self.name


class Brand(models.Model):
    """Product brand, scoped to a business."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'tenants.Business',
        on_delete=models.CASCADE,
        related_name='brands'
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'brands'
        unique_together = [['business', 'name']]
        ordering = ['name']

    def __str__(self):
        return self.name


class Product(models.Model):
    """
    A sellable item in the business catalog.

    Each product carries one price per purchase type; the purchase type
    picked at sale time decides which one is charged.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'tenants.Business',
        on_delete=models.CASCADE,
        related_name='products'
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products'
    )
    brand = models.ForeignKey(
        Brand,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products'
    )

    name = models.CharField(max_length=200)
    sku = models.CharField(max_length=64, null=True, blank=True)
    description = models.TextField(blank=True)

    # Pricing
    cost_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    cash_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    layaway_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    credit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    low_stock_threshold = models.PositiveIntegerField(default=5)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        constraints = [
            models.UniqueConstraint(
                fields=['business', 'sku'],
                name='unique_product_sku_per_business',
            ),
        ]
        indexes = [
            models.Index(fields=['business', 'is_active']),
            models.Index(fields=['business', 'name']),
        ]
        ordering = ['name']

    def __str__(self):
        return self.name

    def price_for(self, purchase_type: str) -> Decimal:
        """Return the price charged for a CASH, LAYAWAY or CREDIT sale."""
        return {
            'CASH': self.cash_price,
            'LAYAWAY': self.layaway_price,
            'CREDIT': self.credit_price,
        }.get(purchase_type, self.credit_price)


class ShopProduct(models.Model):
    """Assignment of a product to a shop, with the shop's stock level."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shop = models.ForeignKey(
        'tenants.Shop',
        on_delete=models.CASCADE,
        related_name='shop_products'
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='shop_products'
    )
    stock_quantity = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shop_products'
        unique_together = [['shop', 'product']]
        ordering = ['product__name']

    def __str__(self):
        return f"{self.product.name} @ {self.shop.slug}: {self.stock_quantity}"

    @property
    def is_low_stock(self):
        return self.stock_quantity <= self.product.low_stock_threshold
