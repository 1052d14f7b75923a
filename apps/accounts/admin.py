from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import User, UserRole

ROLE_COLOURS = {
    UserRole.SUPER_ADMIN: '#2C1810',
    UserRole.BUSINESS_ADMIN: '#A47449',
    UserRole.SHOP_ADMIN: '#6B8E5E',
    UserRole.ACCOUNTANT: '#4A6FA5',
    UserRole.SALES_STAFF: '#8E6B9E',
    UserRole.DEBT_COLLECTOR: '#B85C5C',
    UserRole.CUSTOMER: '#999999',
}


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin for platform users.

    Email is the login; the role decides which API surface a user reaches.
    """

    list_display = ['email', 'name', 'role_badge', 'is_active', 'created_at', 'last_login']
    list_filter = ['role', 'is_active', 'is_staff', 'created_at']
    search_fields = ['email', 'name']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'name', 'role', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'name', 'role', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['created_at', 'last_login']
    filter_horizontal = ['groups', 'user_permissions']
    actions = ['activate_users', 'deactivate_users']

    def role_badge(self, obj):
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            ROLE_COLOURS.get(obj.role, '#999999'),
            obj.get_role_display(),
        )
    role_badge.short_description = 'Role'
    role_badge.admin_order_field = 'role'

    @admin.action(description='Activate selected users')
    def activate_users(self, request, queryset):
        count = queryset.update(is_active=True)
        self.message_user(request, f'Activated {count} user(s).')

    @admin.action(description='Deactivate selected users')
    def deactivate_users(self, request, queryset):
        """Deactivate selected users, never super admins."""
        safe_queryset = queryset.exclude(role=UserRole.SUPER_ADMIN)
        count = safe_queryset.update(is_active=False)
        skipped = queryset.count() - count
        msg = f'Deactivated {count} user(s).'
        if skipped:
            msg += f' Skipped {skipped} super admin(s).'
        self.message_user(request, msg)
