from rest_framework import serializers

from apps.audit.models import AuditLog


class AuditLogFilterSerializer(serializers.Serializer):
    entity_type = serializers.CharField(required=False, allow_blank=True)
    action = serializers.CharField(required=False, allow_blank=True)
    actor = serializers.UUIDField(required=False)


class AuditLogSerializer(serializers.ModelSerializer):
    actor_email = serializers.EmailField(source='actor.email', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'actor', 'actor_email', 'action', 'entity_type', 'entity_id', 'metadata', 'created_at']
        read_only_fields = fields
