from decimal import Decimal

from rest_framework import serializers

from apps.catalog.models import Brand, Category, Product, ShopProduct


# =============================================================================
# Input serializers
# =============================================================================

class TaxonomyCreateSerializer(serializers.Serializer):
    """Input for categories and brands."""
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default='')


class ShopStockInputSerializer(serializers.Serializer):
    shop_id = serializers.UUIDField()
    stock_quantity = serializers.IntegerField(min_value=0)


class ProductInputSerializer(serializers.Serializer):
    """Input for creating or updating a product."""
    name = serializers.CharField(max_length=200)
    sku = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True)
    category_id = serializers.UUIDField(required=False, allow_null=True)
    brand_id = serializers.UUIDField(required=False, allow_null=True)
    cost_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False)
    cash_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False)
    layaway_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False)
    credit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False)
    low_stock_threshold = serializers.IntegerField(min_value=0, required=False)
    is_active = serializers.BooleanField(required=False)
    shops = ShopStockInputSerializer(many=True, required=False)


class ProductFilterSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)


class ProductImportSerializer(serializers.Serializer):
    """Multipart upload of an edited catalog workbook."""
    file = serializers.FileField()


# =============================================================================
# Output serializers
# =============================================================================

class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'is_active', 'product_count', 'created_at']
        read_only_fields = fields

    def get_product_count(self, obj):
        return obj.products.count()


class BrandSerializer(CategorySerializer):
    class Meta(CategorySerializer.Meta):
        model = Brand


class ShopStockSerializer(serializers.ModelSerializer):
    shop_id = serializers.UUIDField(source='shop.id', read_only=True)
    shop_name = serializers.CharField(source='shop.name', read_only=True)
    shop_slug = serializers.CharField(source='shop.slug', read_only=True)

    class Meta:
        model = ShopProduct
        fields = ['shop_id', 'shop_name', 'shop_slug', 'stock_quantity']
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    brand_name = serializers.CharField(source='brand.name', read_only=True, default=None)
    shops = ShopStockSerializer(source='shop_products', many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'sku', 'description',
            'category', 'category_name', 'brand', 'brand_name',
            'cost_price', 'cash_price', 'layaway_price', 'credit_price',
            'low_stock_threshold', 'is_active', 'shops',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ShopProductSerializer(serializers.ModelSerializer):
    """A product as seen from one shop, with its local stock."""
    product_id = serializers.UUIDField(source='product.id', read_only=True)
    name = serializers.CharField(source='product.name', read_only=True)
    sku = serializers.CharField(source='product.sku', read_only=True)
    category_name = serializers.CharField(source='product.category.name', read_only=True, default=None)
    brand_name = serializers.CharField(source='product.brand.name', read_only=True, default=None)
    cash_price = serializers.DecimalField(source='product.cash_price', max_digits=12, decimal_places=2, read_only=True)
    layaway_price = serializers.DecimalField(source='product.layaway_price', max_digits=12, decimal_places=2, read_only=True)
    credit_price = serializers.DecimalField(source='product.credit_price', max_digits=12, decimal_places=2, read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = ShopProduct
        fields = [
            'product_id', 'name', 'sku', 'category_name', 'brand_name',
            'cash_price', 'layaway_price', 'credit_price',
            'stock_quantity', 'is_low_stock',
        ]
        read_only_fields = fields


class ProductImportResultSerializer(serializers.Serializer):
    created = serializers.IntegerField()
    updated = serializers.IntegerField()
    deactivated = serializers.IntegerField()
    shop_assignments = serializers.IntegerField()
    shop_removals = serializers.IntegerField()
    errors = serializers.ListField(child=serializers.CharField())
    message = serializers.CharField()
