from rest_framework import serializers

from .models import User
from .services.account_management import MIN_PASSWORD_LENGTH


# =============================================================================
# Input serializers
# =============================================================================

class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(help_text="Refresh token to blacklist")


class ChangePasswordSerializer(serializers.Serializer):
    """Password change for the logged-in user. New password needs 8+ characters."""

    current_password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    new_password = serializers.CharField(
        write_only=True,
        min_length=MIN_PASSWORD_LENGTH,
        style={'input_type': 'password'},
    )
    confirm_password = serializers.CharField(write_only=True, style={'input_type': 'password'})

    def validate(self, attrs):
        if attrs['new_password'] != attrs['confirm_password']:
            raise serializers.ValidationError({'confirm_password': 'Passwords do not match'})
        return attrs


class CustomerRegistrationSerializer(serializers.Serializer):
    """
    Portal sign-up for an existing shop customer.

    The customer is matched by shop slug and phone number.
    """
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        min_length=MIN_PASSWORD_LENGTH,
        style={'input_type': 'password'},
    )
    password_confirm = serializers.CharField(write_only=True, style={'input_type': 'password'})
    shop_slug = serializers.SlugField()
    phone = serializers.CharField(max_length=30)
    name = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({'password_confirm': 'Passwords do not match'})
        return attrs


# =============================================================================
# Output serializers
# =============================================================================

class UserSerializer(serializers.ModelSerializer):
    """Basic user serializer for profile display."""

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'role', 'is_active', 'created_at', 'last_login']
        read_only_fields = fields


class TokensSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    user = UserSerializer()
    tokens = TokensSerializer()
