from rest_framework import serializers

from apps.customers.models import Customer, PreferredPayment


# =============================================================================
# Input serializers
# =============================================================================

class CustomerInputSerializer(serializers.Serializer):
    """Input for creating or updating a customer."""
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    phone = serializers.CharField(max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True)
    id_type = serializers.CharField(max_length=50, required=False, allow_blank=True)
    id_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    region = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    preferred_payment = serializers.ChoiceField(choices=PreferredPayment.choices, required=False)
    assigned_collector_id = serializers.UUIDField(required=False, allow_null=True)


class AssignCollectorSerializer(serializers.Serializer):
    collector_id = serializers.UUIDField(allow_null=True)


class CustomerFilterSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)


# =============================================================================
# Output serializers
# =============================================================================

class CustomerSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    assigned_collector_name = serializers.CharField(
        source='assigned_collector.user.name', read_only=True, default=None
    )

    class Meta:
        model = Customer
        fields = [
            'id', 'first_name', 'last_name', 'full_name', 'phone', 'email',
            'id_type', 'id_number', 'address', 'city', 'region', 'notes',
            'preferred_payment', 'assigned_collector', 'assigned_collector_name',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class CustomerListSerializer(CustomerSerializer):
    """Customer row with purchase counters from ``customers_with_summary``."""
    total_purchases = serializers.IntegerField(read_only=True)
    active_purchases = serializers.IntegerField(read_only=True)
    total_owed = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta(CustomerSerializer.Meta):
        fields = CustomerSerializer.Meta.fields + [
            'total_purchases', 'active_purchases', 'total_owed', 'total_paid',
        ]
        read_only_fields = fields


class CustomerSummarySerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    name = serializers.CharField()
    phone = serializers.CharField()
    total_purchases = serializers.IntegerField()
    active_purchases = serializers.IntegerField()
    overdue_purchases = serializers.IntegerField()
    completed_purchases = serializers.IntegerField()
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_owed = serializers.DecimalField(max_digits=14, decimal_places=2)
    assigned_collector = serializers.CharField(allow_null=True)


class PortalDashboardSerializer(serializers.Serializer):
    customer = CustomerSerializer()
    shop_name = serializers.CharField()
    summary = CustomerSummarySerializer()
    unread_notifications = serializers.IntegerField()
    next_due_purchase = serializers.CharField(allow_null=True)
    next_due_date = serializers.DateTimeField(allow_null=True)
    next_due_balance = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
