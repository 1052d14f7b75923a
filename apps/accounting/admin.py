from django.contrib import admin

from .models import Budget, Expense, ScheduledReport


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['expense_date', 'business', 'shop', 'category', 'amount']
    list_filter = ['category', 'business']
    search_fields = ['description']
    raw_id_fields = ['business', 'shop', 'recorded_by']
    date_hierarchy = 'expense_date'


@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ['name', 'business', 'shop', 'category', 'period', 'start_date', 'end_date', 'amount']
    list_filter = ['period', 'category']
    search_fields = ['name']
    raw_id_fields = ['business', 'shop', 'created_by']


@admin.register(ScheduledReport)
class ScheduledReportAdmin(admin.ModelAdmin):
    list_display = ['report_type', 'frequency', 'business', 'is_active', 'next_run_at']
    list_filter = ['report_type', 'frequency', 'is_active']
    raw_id_fields = ['business', 'created_by']
