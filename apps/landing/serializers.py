from rest_framework import serializers

from apps.landing.models import ContactMessage


class ContactMessageInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField(max_length=255)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    subject = serializers.CharField(max_length=200)
    message = serializers.CharField()


class ContactMessageFilterSerializer(serializers.Serializer):
    is_read = serializers.BooleanField(required=False, allow_null=True, default=None)


class ContactMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactMessage
        fields = ['id', 'name', 'email', 'phone', 'subject', 'message', 'is_read', 'created_at']
        read_only_fields = fields


class PublicStatsSerializer(serializers.Serializer):
    businesses = serializers.IntegerField()
    shops = serializers.IntegerField()
    customers = serializers.IntegerField()
    total_collected = serializers.DecimalField(max_digits=14, decimal_places=2)
