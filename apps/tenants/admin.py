from django.contrib import admin

from .models import Business, Shop, StaffMember


class ShopInline(admin.TabularInline):
    model = Shop
    extra = 0
    fields = ['name', 'slug', 'country', 'is_active']


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'owner', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'slug', 'owner__email']
    prepopulated_fields = {'slug': ('name',)}
    inlines = [ShopInline]


@admin.register(Shop)
class ShopAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'business', 'country', 'is_active']
    list_filter = ['is_active', 'country']
    search_fields = ['name', 'slug', 'business__name']


@admin.register(StaffMember)
class StaffMemberAdmin(admin.ModelAdmin):
    list_display = ['user', 'shop', 'role', 'is_active', 'created_at']
    list_filter = ['role', 'is_active']
    search_fields = ['user__email', 'user__name', 'shop__name']
    raw_id_fields = ['user', 'shop']
