from decimal import Decimal

from rest_framework import serializers

from apps.purchases.models import (
    InterestType,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Purchase,
    PurchaseItem,
    PurchaseStatus,
    PurchaseType,
    ShopPolicy,
)

MONEY = dict(max_digits=12, decimal_places=2)


# =============================================================================
# Input serializers
# =============================================================================

class ShopPolicyInputSerializer(serializers.Serializer):
    interest_type = serializers.ChoiceField(choices=InterestType.choices)
    interest_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal('0'), max_value=Decimal('100')
    )
    grace_days = serializers.IntegerField(min_value=0, max_value=60)
    max_tenor_days = serializers.IntegerField(min_value=1, max_value=365)
    late_fee_fixed = serializers.DecimalField(
        **MONEY, min_value=Decimal('0'), required=False, allow_null=True
    )
    late_fee_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )


class PurchaseItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(required=False, allow_null=True)
    product_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    quantity = serializers.IntegerField(min_value=1, default=1)
    unit_price = serializers.DecimalField(**MONEY, min_value=Decimal('0'), required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs.get('product_id') and not attrs.get('product_name'):
            raise serializers.ValidationError('Provide a product_id or a product_name')
        return attrs


class PurchaseCreateSerializer(serializers.Serializer):
    """
    Input for a new hire-purchase agreement.

    Fields:
        customer_id (UUID): Customer of the shop
        items (list): Line items, at least one
        purchase_type (str): CASH, LAYAWAY or CREDIT
        installments (int): Weekly installments
        down_payment (Decimal): Paid at the counter
        tenor_days (int): Optional, capped by the shop policy
        notes (str): Free text
    """
    customer_id = serializers.UUIDField()
    items = PurchaseItemInputSerializer(many=True, allow_empty=False)
    purchase_type = serializers.ChoiceField(choices=PurchaseType.choices, default=PurchaseType.CREDIT)
    installments = serializers.IntegerField(min_value=1, default=1)
    down_payment = serializers.DecimalField(**MONEY, min_value=Decimal('0'), default=Decimal('0.00'))
    tenor_days = serializers.IntegerField(min_value=1, max_value=365, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PurchaseFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PurchaseStatus.choices, required=False)
    customer = serializers.UUIDField(required=False)


class PaymentRecordSerializer(serializers.Serializer):
    """Input for admin and collector payments."""
    purchase_id = serializers.UUIDField()
    amount = serializers.DecimalField(**MONEY, min_value=Decimal('0.01'))
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    collector_id = serializers.UUIDField(required=False, allow_null=True)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PaymentRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class PaymentFilterSerializer(serializers.Serializer):
    """
    Query parameters for payment listings.

    Query Parameters:
        status (str): PENDING, COMPLETED or REJECTED
        is_confirmed (bool): Confirmation flag
        payment_method (str): Method filter
        date_from (date) / date_to (date): ``paid_at`` range
        search (str): Purchase number, customer name or phone, reference
    """
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    is_confirmed = serializers.BooleanField(required=False, allow_null=True, default=None)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({'date_to': 'End date must be after start date'})
        return attrs


# =============================================================================
# Output serializers
# =============================================================================

class ShopPolicySerializer(serializers.ModelSerializer):
    class Meta:
        model = ShopPolicy
        fields = [
            'interest_type', 'interest_rate', 'grace_days', 'max_tenor_days',
            'late_fee_fixed', 'late_fee_rate', 'updated_at',
        ]
        read_only_fields = fields


class PurchaseItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PurchaseItem
        fields = ['id', 'product', 'product_name', 'quantity', 'unit_price', 'total_price']
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    purchase_number = serializers.CharField(source='purchase.purchase_number', read_only=True)
    customer_name = serializers.CharField(source='purchase.customer.full_name', read_only=True)
    collector_name = serializers.CharField(source='collector.user.name', read_only=True, default=None)
    recorded_by_email = serializers.EmailField(source='recorded_by.email', read_only=True, default=None)

    class Meta:
        model = Payment
        fields = [
            'id', 'purchase', 'purchase_number', 'customer_name', 'amount',
            'payment_method', 'status', 'collector', 'collector_name',
            'recorded_by_email', 'is_confirmed', 'confirmed_at', 'rejected_at',
            'rejection_reason', 'reference', 'notes', 'paid_at', 'created_at',
        ]
        read_only_fields = fields


class PurchaseSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.full_name', read_only=True)
    customer_phone = serializers.CharField(source='customer.phone', read_only=True)
    sold_by_name = serializers.CharField(source='sold_by.user.name', read_only=True, default=None)
    items = PurchaseItemSerializer(many=True, read_only=True)

    class Meta:
        model = Purchase
        fields = [
            'id', 'purchase_number', 'customer', 'customer_name', 'customer_phone',
            'purchase_type', 'status', 'subtotal', 'interest_amount', 'total_amount',
            'amount_paid', 'outstanding_balance', 'down_payment', 'installments',
            'start_date', 'due_date', 'interest_type', 'interest_rate',
            'sold_by', 'sold_by_name', 'notes', 'items', 'created_at',
        ]
        read_only_fields = fields


class PurchaseDetailSerializer(PurchaseSerializer):
    payments = PaymentSerializer(many=True, read_only=True)

    class Meta(PurchaseSerializer.Meta):
        fields = PurchaseSerializer.Meta.fields + ['payments']
        read_only_fields = fields


class PurchaseSummarySerializer(serializers.Serializer):
    purchase_id = serializers.UUIDField()
    purchase_number = serializers.CharField()
    status = serializers.CharField()
    subtotal = serializers.DecimalField(**MONEY)
    interest_amount = serializers.DecimalField(**MONEY)
    total_amount = serializers.DecimalField(**MONEY)
    confirmed_paid = serializers.DecimalField(**MONEY)
    pending_amount = serializers.DecimalField(**MONEY)
    outstanding_balance = serializers.DecimalField(**MONEY)
    late_fee = serializers.DecimalField(**MONEY)
    amount_due_now = serializers.DecimalField(**MONEY)
    due_date = serializers.DateTimeField()
    is_past_grace = serializers.BooleanField()


class CollectorDashboardSerializer(serializers.Serializer):
    assigned_customers = serializers.IntegerField()
    total_outstanding = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_collected = serializers.DecimalField(max_digits=14, decimal_places=2)
    collected_today = serializers.DecimalField(max_digits=14, decimal_places=2)
    pending_count = serializers.IntegerField()
    pending_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class SalesDashboardSerializer(serializers.Serializer):
    sales_count = serializers.IntegerField()
    sales_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    sales_this_month = serializers.DecimalField(max_digits=14, decimal_places=2)
    customers_count = serializers.IntegerField()
    products_in_stock = serializers.IntegerField()
    recent_sales = PurchaseSerializer(many=True)
