from django.contrib import admin

from .models import Brand, Category, Product, ShopProduct


class ShopProductInline(admin.TabularInline):
    model = ShopProduct
    extra = 0
    raw_id_fields = ['shop']


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'business', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'business__name']


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ['name', 'business', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'business__name']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'business', 'cash_price', 'credit_price', 'is_active']
    list_filter = ['is_active', 'category', 'brand']
    search_fields = ['name', 'sku', 'business__name']
    inlines = [ShopProductInline]
