from django.contrib import admin

from .models import Payment, Purchase, PurchaseItem, ShopPolicy


@admin.register(ShopPolicy)
class ShopPolicyAdmin(admin.ModelAdmin):
    list_display = ['shop', 'interest_type', 'interest_rate', 'grace_days', 'max_tenor_days']
    raw_id_fields = ['shop']


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    raw_id_fields = ['product']


class PaymentInline(admin.TabularInline):
    model = Payment
    fk_name = 'purchase'
    extra = 0
    fields = ['amount', 'payment_method', 'status', 'is_confirmed', 'paid_at']
    readonly_fields = fields


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = [
        'purchase_number', 'customer', 'purchase_type', 'status',
        'total_amount', 'outstanding_balance', 'due_date',
    ]
    list_filter = ['status', 'purchase_type', 'customer__shop']
    search_fields = ['purchase_number', 'customer__first_name', 'customer__last_name', 'customer__phone']
    raw_id_fields = ['customer', 'sold_by']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [PurchaseItemInline, PaymentInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['purchase', 'amount', 'payment_method', 'status', 'is_confirmed', 'paid_at']
    list_filter = ['status', 'is_confirmed', 'payment_method']
    search_fields = ['purchase__purchase_number', 'reference']
    raw_id_fields = ['purchase', 'collector', 'recorded_by', 'confirmed_by']
    readonly_fields = ['created_at']
