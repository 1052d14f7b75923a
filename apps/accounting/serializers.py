from decimal import Decimal

from rest_framework import serializers

from apps.accounting.models import (
    Budget,
    BudgetPeriod,
    Expense,
    ExpenseCategory,
    ReportFrequency,
    ReportType,
    ScheduledReport,
)
from apps.accounting.services import budget_variance

MONEY = dict(max_digits=14, decimal_places=2)


# =============================================================================
# Input serializers
# =============================================================================

class DateRangeSerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    shop_id = serializers.UUIDField(required=False)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({'date_to': 'End date must be after start date'})
        return attrs


class RevenueReportQuerySerializer(DateRangeSerializer):
    """
    Query parameters for the revenue report.

    Query Parameters:
        date_from (date): First day, required
        date_to (date): Last day, required
        group_by (str): day, week or month (default day)
        shop_id (UUID): Limit to one shop
    """
    date_from = serializers.DateField()
    date_to = serializers.DateField()
    group_by = serializers.ChoiceField(choices=['day', 'week', 'month'], default='day')


class ExpenseInputSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=ExpenseCategory.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    expense_date = serializers.DateField()
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    shop_id = serializers.UUIDField(required=False, allow_null=True)


class ExpenseFilterSerializer(DateRangeSerializer):
    category = serializers.ChoiceField(choices=ExpenseCategory.choices, required=False)


class BudgetInputSerializer(serializers.Serializer):
    """
    Input for a new budget.

    ``end_date`` defaults to the end of the period containing ``start_date``.
    ``category`` left blank tracks every category.
    """
    name = serializers.CharField(max_length=200)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    period = serializers.ChoiceField(choices=BudgetPeriod.choices, default=BudgetPeriod.MONTHLY)
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)
    category = serializers.ChoiceField(choices=ExpenseCategory.choices, required=False, allow_blank=True, default='')
    shop_id = serializers.UUIDField(required=False, allow_null=True)

    def validate(self, attrs):
        end_date = attrs.get('end_date')
        if end_date and attrs['start_date'] > end_date:
            raise serializers.ValidationError({'end_date': 'End date must be after start date'})
        return attrs


class ScheduledReportInputSerializer(serializers.Serializer):
    report_type = serializers.ChoiceField(choices=ReportType.choices)
    frequency = serializers.ChoiceField(choices=ReportFrequency.choices)
    recipients = serializers.ListField(child=serializers.EmailField(), allow_empty=False)


# =============================================================================
# Output serializers
# =============================================================================

class ExpenseSerializer(serializers.ModelSerializer):
    shop_name = serializers.CharField(source='shop.name', read_only=True, default=None)

    class Meta:
        model = Expense
        fields = [
            'id', 'category', 'amount', 'description', 'expense_date',
            'shop', 'shop_name', 'created_at',
        ]
        read_only_fields = fields


class BudgetSerializer(serializers.ModelSerializer):
    """Budget with spent/variance recomputed from expenses on every read."""

    shop_name = serializers.CharField(source='shop.name', read_only=True, default=None)
    variance = serializers.SerializerMethodField()

    class Meta:
        model = Budget
        fields = [
            'id', 'name', 'category', 'period', 'start_date', 'end_date',
            'amount', 'shop', 'shop_name', 'variance', 'created_at',
        ]
        read_only_fields = fields

    def get_variance(self, obj):
        return BudgetVarianceSerializer(budget_variance(obj)).data


class BudgetVarianceSerializer(serializers.Serializer):
    allocated = serializers.DecimalField(**MONEY)
    spent = serializers.DecimalField(**MONEY)
    variance = serializers.DecimalField(**MONEY)
    percent_used = serializers.DecimalField(max_digits=10, decimal_places=2)
    is_over_budget = serializers.BooleanField()


class ScheduledReportSerializer(serializers.ModelSerializer):
    recipients = serializers.ListField(source='recipient_list', child=serializers.EmailField(), read_only=True)

    class Meta:
        model = ScheduledReport
        fields = [
            'id', 'report_type', 'frequency', 'recipients', 'is_active',
            'last_run_at', 'next_run_at', 'created_at',
        ]
        read_only_fields = fields


class AgingRowSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    customer_name = serializers.CharField()
    customer_phone = serializers.CharField()
    shop_name = serializers.CharField()
    current = serializers.DecimalField(**MONEY)
    days_31_60 = serializers.DecimalField(**MONEY)
    days_61_90 = serializers.DecimalField(**MONEY)
    over_90 = serializers.DecimalField(**MONEY)
    total_outstanding = serializers.DecimalField(**MONEY)
    oldest_due_date = serializers.DateTimeField()


class RevenueRowSerializer(serializers.Serializer):
    period = serializers.CharField()
    revenue = serializers.DecimalField(**MONEY)
    collections = serializers.DecimalField(**MONEY)
    cash_sales = serializers.IntegerField()
    credit_sales = serializers.IntegerField()
    layaway_sales = serializers.IntegerField()
    payment_count = serializers.IntegerField()


class CollectorPerformanceSerializer(serializers.Serializer):
    collector_id = serializers.UUIDField()
    name = serializers.CharField()
    email = serializers.EmailField()
    shop_name = serializers.CharField()
    total_collected = serializers.DecimalField(**MONEY)
    payment_count = serializers.IntegerField()
    cash_collected = serializers.DecimalField(**MONEY)
    mobile_money_collected = serializers.DecimalField(**MONEY)
    bank_transfer_collected = serializers.DecimalField(**MONEY)


class ProfitMarginRowSerializer(serializers.Serializer):
    shop_id = serializers.UUIDField()
    shop_name = serializers.CharField()
    revenue = serializers.DecimalField(**MONEY)
    cost = serializers.DecimalField(**MONEY)
    profit = serializers.DecimalField(**MONEY)
    margin = serializers.DecimalField(max_digits=10, decimal_places=2)
    items_sold = serializers.IntegerField()


class ShopFiguresSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    customer_count = serializers.IntegerField()
    total_collected = serializers.DecimalField(**MONEY)
    total_outstanding = serializers.DecimalField(**MONEY)


class MonthlyFiguresSerializer(serializers.Serializer):
    month = serializers.CharField()
    revenue = serializers.DecimalField(**MONEY)
    collections = serializers.DecimalField(**MONEY)
    payment_count = serializers.IntegerField()


class AccountantDashboardSerializer(serializers.Serializer):
    total_customers = serializers.IntegerField()
    active_customers = serializers.IntegerField()
    total_purchases = serializers.IntegerField()
    active_purchases = serializers.IntegerField()
    overdue_purchases = serializers.IntegerField()
    total_revenue = serializers.DecimalField(**MONEY)
    total_collected = serializers.DecimalField(**MONEY)
    total_outstanding = serializers.DecimalField(**MONEY)
    total_overdue_amount = serializers.DecimalField(**MONEY)
    today_collections = serializers.DecimalField(**MONEY)
    today_payment_count = serializers.IntegerField()
    week_collections = serializers.DecimalField(**MONEY)
    week_payment_count = serializers.IntegerField()
    month_collections = serializers.DecimalField(**MONEY)
    month_payment_count = serializers.IntegerField()
    collections_by_method = serializers.DictField(child=serializers.DecimalField(**MONEY))
    cash_sales_count = serializers.IntegerField()
    credit_sales_count = serializers.IntegerField()
    layaway_sales_count = serializers.IntegerField()
    shop_count = serializers.IntegerField()
    shops = ShopFiguresSerializer(many=True)
    monthly = MonthlyFiguresSerializer(many=True)
