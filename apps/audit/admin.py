from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only view of the audit trail."""

    list_display = ['created_at', 'action', 'entity_type', 'entity_id', 'actor']
    list_filter = ['action', 'entity_type']
    search_fields = ['entity_id', 'actor__email']
    readonly_fields = ['actor', 'action', 'entity_type', 'entity_id', 'metadata', 'created_at']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
