from django.contrib import admin

from .models import BonusRecord, BonusRule, Commission


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = ['staff_member', 'shop', 'period_start', 'period_end', 'amount', 'status']
    list_filter = ['status', 'business']
    raw_id_fields = ['business', 'shop', 'staff_member', 'approved_by', 'paid_by']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(BonusRule)
class BonusRuleAdmin(admin.ModelAdmin):
    list_display = ['name', 'business', 'target_role', 'trigger_type', 'calculation_type', 'value', 'period', 'is_active']
    list_filter = ['trigger_type', 'calculation_type', 'period', 'is_active']
    search_fields = ['name']
    raw_id_fields = ['business', 'shop', 'created_by']


@admin.register(BonusRecord)
class BonusRecordAdmin(admin.ModelAdmin):
    list_display = ['rule', 'staff_member', 'trigger_type', 'amount', 'status', 'created_at']
    list_filter = ['status', 'trigger_type']
    raw_id_fields = ['business', 'shop', 'rule', 'staff_member', 'approved_by', 'paid_by']
