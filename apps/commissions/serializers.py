from decimal import Decimal

from rest_framework import serializers

from apps.commissions.models import (
    BonusPeriod,
    BonusRecord,
    BonusRule,
    BonusStatus,
    BonusTrigger,
    CalculationType,
    Commission,
    CommissionStatus,
)
from apps.tenants.models import StaffRole


# =============================================================================
# Input serializers
# =============================================================================

class CommissionCalculateSerializer(serializers.Serializer):
    """
    Input for a commission run.

    Rates are fractions: 0.05 pays 5%.
    """
    period_start = serializers.DateField()
    period_end = serializers.DateField()
    sales_rate = serializers.DecimalField(
        max_digits=6, decimal_places=4, min_value=Decimal('0'), max_value=Decimal('1')
    )
    collection_rate = serializers.DecimalField(
        max_digits=6, decimal_places=4, min_value=Decimal('0'), max_value=Decimal('1')
    )
    shop_id = serializers.UUIDField(required=False, allow_null=True)

    def validate(self, attrs):
        if attrs['period_start'] > attrs['period_end']:
            raise serializers.ValidationError({'period_end': 'End date must be after start date'})
        return attrs


class CommissionPaySerializer(serializers.Serializer):
    reference = serializers.CharField(max_length=100)


class CommissionFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CommissionStatus.choices, required=False)


class BonusTierSerializer(serializers.Serializer):
    min = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0'))
    max = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0'), default=Decimal('0'))
    value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))


class BonusRuleInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    target_role = serializers.ChoiceField(choices=StaffRole.choices)
    shop_id = serializers.UUIDField(required=False, allow_null=True)
    trigger_type = serializers.ChoiceField(choices=BonusTrigger.choices)
    calculation_type = serializers.ChoiceField(choices=CalculationType.choices)
    value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    minimum_threshold = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    maximum_cap = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    target_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, allow_null=True)
    tiers = BonusTierSerializer(many=True, required=False, allow_null=True)
    period = serializers.ChoiceField(choices=BonusPeriod.choices, default=BonusPeriod.MONTHLY)
    is_active = serializers.BooleanField(required=False)

    def validate_tiers(self, value):
        if value is None:
            return None
        # Stored as JSON
        return [{key: str(amount) for key, amount in tier.items()} for tier in value]


class BonusRecordIdsSerializer(serializers.Serializer):
    record_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class BonusRecordFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BonusStatus.choices, required=False)
    staff_member = serializers.UUIDField(required=False)
    rule = serializers.UUIDField(required=False)


# =============================================================================
# Output serializers
# =============================================================================

class CommissionSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source='staff_member.user.name', read_only=True)
    staff_role = serializers.CharField(source='staff_member.role', read_only=True)
    shop_name = serializers.CharField(source='shop.name', read_only=True)

    class Meta:
        model = Commission
        fields = [
            'id', 'staff_member', 'staff_name', 'staff_role', 'shop', 'shop_name',
            'period_start', 'period_end', 'base_amount', 'rate', 'amount', 'status',
            'approved_at', 'paid_at', 'payment_reference', 'created_at',
        ]
        read_only_fields = fields


class BonusRuleSerializer(serializers.ModelSerializer):
    shop_name = serializers.CharField(source='shop.name', read_only=True, default=None)
    records_count = serializers.SerializerMethodField()

    class Meta:
        model = BonusRule
        fields = [
            'id', 'name', 'description', 'target_role', 'shop', 'shop_name',
            'trigger_type', 'calculation_type', 'value', 'minimum_threshold',
            'maximum_cap', 'target_amount', 'tiers', 'period', 'is_active',
            'records_count', 'created_at',
        ]
        read_only_fields = fields

    def get_records_count(self, obj):
        return obj.records.count()


class BonusRecordSerializer(serializers.ModelSerializer):
    rule_name = serializers.CharField(source='rule.name', read_only=True)
    staff_name = serializers.CharField(source='staff_member.user.name', read_only=True)
    staff_role = serializers.CharField(source='staff_member.role', read_only=True)
    shop_name = serializers.CharField(source='shop.name', read_only=True, default=None)

    class Meta:
        model = BonusRecord
        fields = [
            'id', 'rule', 'rule_name', 'staff_member', 'staff_name', 'staff_role',
            'shop_name', 'trigger_type', 'source_id', 'source_ref', 'base_amount',
            'rate', 'amount', 'period_start', 'period_end', 'status',
            'approved_at', 'paid_at', 'payment_reference', 'notes', 'created_at',
        ]
        read_only_fields = fields


class BonusSummarySerializer(serializers.Serializer):
    total_rules = serializers.IntegerField()
    active_rules = serializers.IntegerField()
    pending_count = serializers.IntegerField()
    pending_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    approved_count = serializers.IntegerField()
    approved_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_count = serializers.IntegerField()
    paid_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    this_month_count = serializers.IntegerField()
    this_month_amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class StaffBonusSummarySerializer(serializers.Serializer):
    active_rules = BonusRuleSerializer(many=True)
    records = BonusRecordSerializer(many=True)
    total_earned = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_pending = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_approved = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
    this_month_earned = serializers.DecimalField(max_digits=14, decimal_places=2)
    has_active_bonuses = serializers.BooleanField()
