from rest_framework import serializers

from apps.accounts.models import User
from apps.tenants.models import Business, Shop, StaffMember, StaffRole


# =============================================================================
# Input serializers
# =============================================================================

class BusinessCreateSerializer(serializers.Serializer):
    """Input for creating a business and its business admin."""
    name = serializers.CharField(max_length=200)
    slug = serializers.SlugField(max_length=100, required=False, allow_blank=True)
    owner_email = serializers.EmailField()
    owner_name = serializers.CharField(max_length=150)
    owner_password = serializers.CharField(
        min_length=8,
        required=False,
        write_only=True,
        style={'input_type': 'password'}
    )


class ShopCreateSerializer(serializers.Serializer):
    """Input for creating a shop."""
    name = serializers.CharField(max_length=200)
    slug = serializers.SlugField(max_length=100, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    country = serializers.CharField(max_length=100, required=False, default='Ghana')


class SuperAdminShopCreateSerializer(ShopCreateSerializer):
    business_id = serializers.UUIDField()


class ShopUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False)


class StaffCreateSerializer(serializers.Serializer):
    """Input for creating a staff login with a shop membership."""
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True, style={'input_type': 'password'})
    role = serializers.ChoiceField(choices=StaffRole.choices)
    shop_id = serializers.UUIDField(required=False)
    can_confirm_payments = serializers.BooleanField(required=False, default=False)
    can_view_profit_margins = serializers.BooleanField(required=False, default=False)
    can_approve_commissions = serializers.BooleanField(required=False, default=False)
    can_pay_commissions = serializers.BooleanField(required=False, default=False)
    can_manage_budgets = serializers.BooleanField(required=False, default=False)


class ShopStaffCreateSerializer(StaffCreateSerializer):
    """Shop admins may only add sales staff and debt collectors."""
    role = serializers.ChoiceField(
        choices=[StaffRole.SALES_STAFF, StaffRole.DEBT_COLLECTOR],
        default=StaffRole.DEBT_COLLECTOR,
    )


class AccountantPermissionsSerializer(serializers.Serializer):
    can_confirm_payments = serializers.BooleanField(required=False)
    can_view_profit_margins = serializers.BooleanField(required=False)
    can_approve_commissions = serializers.BooleanField(required=False)
    can_pay_commissions = serializers.BooleanField(required=False)
    can_manage_budgets = serializers.BooleanField(required=False)


class StaffFilterSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=StaffRole.choices, required=False)
    shop = serializers.SlugField(required=False)


# =============================================================================
# Output serializers
# =============================================================================

class OwnerSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'name']


class BusinessSerializer(serializers.ModelSerializer):
    owner = OwnerSerializer(read_only=True)
    shop_count = serializers.SerializerMethodField()

    class Meta:
        model = Business
        fields = ['id', 'name', 'slug', 'owner', 'is_active', 'shop_count', 'created_at']
        read_only_fields = fields

    def get_shop_count(self, obj):
        return obj.shops.count()


class ShopSerializer(serializers.ModelSerializer):
    business_slug = serializers.CharField(source='business.slug', read_only=True)
    business_name = serializers.CharField(source='business.name', read_only=True)

    class Meta:
        model = Shop
        fields = [
            'id', 'name', 'slug', 'address', 'country', 'is_active',
            'business_slug', 'business_name', 'created_at',
        ]
        read_only_fields = fields


class StaffMemberSerializer(serializers.ModelSerializer):
    user_id = serializers.UUIDField(source='user.id', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    name = serializers.CharField(source='user.name', read_only=True)
    shop_slug = serializers.CharField(source='shop.slug', read_only=True)
    shop_name = serializers.CharField(source='shop.name', read_only=True)

    class Meta:
        model = StaffMember
        fields = [
            'id', 'user_id', 'email', 'name', 'role', 'is_active',
            'shop_slug', 'shop_name',
            'can_confirm_payments', 'can_view_profit_margins',
            'can_approve_commissions', 'can_pay_commissions', 'can_manage_budgets',
            'created_at',
        ]
        read_only_fields = fields


class PlatformOverviewSerializer(serializers.Serializer):
    businesses = serializers.IntegerField()
    active_businesses = serializers.IntegerField()
    shops = serializers.IntegerField()
    active_shops = serializers.IntegerField()
    users = serializers.IntegerField()
    customers = serializers.IntegerField()
    purchases = serializers.IntegerField()
    total_collected = serializers.DecimalField(max_digits=14, decimal_places=2)


class BusinessStatsSerializer(serializers.Serializer):
    business = serializers.DictField()
    shops = serializers.IntegerField()
    active_shops = serializers.IntegerField()
    suspended_shops = serializers.IntegerField()
    products = serializers.IntegerField()
    customers = serializers.IntegerField()
    purchases = serializers.IntegerField()
    active_purchases = serializers.IntegerField()
    overdue_purchases = serializers.IntegerField()
    total_sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_collected = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_outstanding = serializers.DecimalField(max_digits=14, decimal_places=2)
