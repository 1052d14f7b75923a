from django.http import HttpResponse
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, parser_classes, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiResponse
from drf_spectacular.types import OpenApiTypes

from config.responses import action_response
from apps.tenants.permissions import IsBusinessAdmin, IsSalesStaff, IsShopAdmin

from .models import Brand, Category
from .serializers import (
    BrandSerializer,
    CategorySerializer,
    ProductFilterSerializer,
    ProductImportResultSerializer,
    ProductImportSerializer,
    ProductInputSerializer,
    ProductSerializer,
    ShopProductSerializer,
    ShopStockInputSerializer,
    TaxonomyCreateSerializer,
)
from .services import (
    CONTENT_TYPE,
    create_brand,
    create_category,
    create_product,
    delete_brand,
    delete_category,
    delete_product,
    export_products,
    get_product,
    import_products,
    list_products,
    list_products_for_shop,
    remove_from_shop,
    set_shop_stock,
    toggle_product_status,
    update_product,
)


class CatalogPagination(PageNumberPagination):
    """Custom pagination for catalog listings."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class CategoryViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Categories of the business. list / create / destroy."""

    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated, IsBusinessAdmin]

    def get_queryset(self):
        return Category.objects.filter(business=self.request.tenant.business)

    @extend_schema(request=TaxonomyCreateSerializer, responses={201: CategorySerializer})
    def create(self, request, business_slug=None):
        serializer = TaxonomyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = create_category(
            business=request.tenant.business,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, business_slug=None, pk=None):
        delete_category(business=request.tenant.business, category_id=pk, actor=request.user)
        return action_response(None)


class BrandViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Brands of the business. list / create / destroy."""

    serializer_class = BrandSerializer
    permission_classes = [IsAuthenticated, IsBusinessAdmin]

    def get_queryset(self):
        return Brand.objects.filter(business=self.request.tenant.business)

    @extend_schema(request=TaxonomyCreateSerializer, responses={201: BrandSerializer})
    def create(self, request, business_slug=None):
        serializer = TaxonomyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        brand = create_brand(
            business=request.tenant.business,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(BrandSerializer(brand).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, business_slug=None, pk=None):
        delete_brand(business=request.tenant.business, brand_id=pk, actor=request.user)
        return action_response(None)


class ProductViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Business product catalog.

    list: Filter with ``?search=`` and ``?is_active=``
    retrieve: Product with per-shop stock
    create / partial_update / destroy: Catalog maintenance
    toggle: Flip active status
    stock: Assign to a shop and set its stock
    unassign: Remove from a shop
    """

    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, IsBusinessAdmin]
    pagination_class = CatalogPagination

    def get_queryset(self):
        filter_serializer = ProductFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data
        return list_products(
            business=self.request.tenant.business,
            search=params.get('search'),
            is_active=params.get('is_active'),
        )

    def retrieve(self, request, business_slug=None, pk=None):
        product = get_product(business=request.tenant.business, product_id=pk)
        return Response(ProductSerializer(product).data)

    @extend_schema(request=ProductInputSerializer, responses={201: ProductSerializer})
    def create(self, request, business_slug=None):
        serializer = ProductInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        shops = data.pop('shops', [])

        product = create_product(
            business=request.tenant.business,
            actor=request.user,
            shop_stock={entry['shop_id']: entry['stock_quantity'] for entry in shops},
            **data,
        )
        return action_response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ProductInputSerializer, responses={200: ProductSerializer})
    def partial_update(self, request, business_slug=None, pk=None):
        serializer = ProductInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop('shops', None)

        product = update_product(
            business=request.tenant.business,
            product_id=pk,
            actor=request.user,
            **data,
        )
        return action_response(ProductSerializer(product).data)

    def destroy(self, request, business_slug=None, pk=None):
        delete_product(business=request.tenant.business, product_id=pk, actor=request.user)
        return action_response(None)

    @action(detail=True, methods=['post'])
    def toggle(self, request, business_slug=None, pk=None):
        product = toggle_product_status(
            business=request.tenant.business, product_id=pk, actor=request.user
        )
        return action_response(ProductSerializer(product).data)

    @extend_schema(request=ShopStockInputSerializer, responses={200: ProductSerializer})
    @action(detail=True, methods=['post'])
    def stock(self, request, business_slug=None, pk=None):
        serializer = ShopStockInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        business = request.tenant.business
        product = get_product(business=business, product_id=pk)
        set_shop_stock(
            business=business,
            product=product,
            shop_id=serializer.validated_data['shop_id'],
            stock_quantity=serializer.validated_data['stock_quantity'],
            actor=request.user,
        )
        return action_response(ProductSerializer(product).data)

    @action(detail=True, methods=['post'])
    def unassign(self, request, business_slug=None, pk=None):
        business = request.tenant.business
        product = get_product(business=business, product_id=pk)
        remove_from_shop(
            business=business,
            product=product,
            shop_id=request.data.get('shop_id'),
            actor=request.user,
        )
        return action_response(ProductSerializer(product).data)


@extend_schema(
    responses={(200, CONTENT_TYPE): OpenApiResponse(response=OpenApiTypes.BINARY)},
    description="Download the product catalog as an Excel workbook.",
    tags=['business-admin'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def export_products_view(request, business_slug):
    """Excel export of the catalog with per-shop stock columns."""
    content, filename = export_products(request.tenant.business)
    response = HttpResponse(content, content_type=CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


@extend_schema(
    request={'multipart/form-data': ProductImportSerializer},
    responses={200: ProductImportResultSerializer},
    description="Apply an edited catalog workbook (the export layout) to the business.",
    tags=['business-admin'],
)
@api_view(['POST'])
@parser_classes([MultiPartParser, FormParser])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def import_products_view(request, business_slug):
    serializer = ProductImportSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    results = import_products(
        business=request.tenant.business,
        file=serializer.validated_data['file'],
        actor=request.user,
    )
    return action_response(results)


class _ShopProductListViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = ShopProductSerializer
    pagination_class = CatalogPagination
    in_stock_only = False

    def get_queryset(self):
        return list_products_for_shop(shop=self.request.tenant.shop, in_stock_only=self.in_stock_only)


class ShopProductViewSet(_ShopProductListViewSet):
    """Products assigned to the shop, with local stock (shop admin)."""
    permission_classes = [IsAuthenticated, IsShopAdmin]


class SaleProductViewSet(_ShopProductListViewSet):
    """Products available for sale in the shop (sales staff)."""
    permission_classes = [IsAuthenticated, IsSalesStaff]
    in_stock_only = True
