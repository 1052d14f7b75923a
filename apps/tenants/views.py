from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from config.responses import action_response

from .models import Business, Shop, StaffRole
from .permissions import IsBusinessAdmin, IsShopAdmin, IsSuperAdmin
from .serializers import (
    AccountantPermissionsSerializer,
    BusinessCreateSerializer,
    BusinessSerializer,
    BusinessStatsSerializer,
    PlatformOverviewSerializer,
    ShopCreateSerializer,
    ShopSerializer,
    ShopStaffCreateSerializer,
    ShopUpdateSerializer,
    StaffCreateSerializer,
    StaffFilterSerializer,
    StaffMemberSerializer,
    SuperAdminShopCreateSerializer,
)
from .services import (
    BusinessNotFoundError,
    ShopNotFoundError,
    create_business,
    create_shop,
    create_staff_member,
    delete_shop,
    list_staff,
    set_business_active,
    set_shop_active,
    set_staff_active,
    update_accountant_permissions,
    update_shop,
)
from .services.statistics import get_business_stats, get_platform_overview
from .models import ACCOUNTANT_PERMISSION_FLAGS


class TenantPagination(PageNumberPagination):
    """Custom pagination for tenant listings."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _permission_flags(data):
    return {key: data[key] for key in ACCOUNTANT_PERMISSION_FLAGS if key in data}


# =============================================================================
# Super admin
# =============================================================================

class SuperAdminBusinessViewSet(mixins.ListModelMixin,
                                mixins.RetrieveModelMixin,
                                viewsets.GenericViewSet):
    """
    Businesses across the platform.

    list: All businesses
    create: Create a business with its business admin
    activate / suspend: Toggle tenant availability
    """

    queryset = Business.objects.select_related('owner').prefetch_related('shops')
    serializer_class = BusinessSerializer
    permission_classes = [IsAuthenticated, IsSuperAdmin]
    pagination_class = TenantPagination

    @extend_schema(request=BusinessCreateSerializer, responses={201: BusinessSerializer})
    def create(self, request):
        serializer = BusinessCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        business = create_business(
            name=serializer.validated_data['name'],
            slug=serializer.validated_data.get('slug') or None,
            owner_email=serializer.validated_data['owner_email'],
            owner_name=serializer.validated_data['owner_name'],
            owner_password=serializer.validated_data.get('owner_password'),
            actor=request.user,
        )
        return action_response(BusinessSerializer(business).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def activate(self, request, pk=None):
        business = set_business_active(business_id=pk, is_active=True, actor=request.user)
        return action_response(BusinessSerializer(business).data)

    @action(detail=True, methods=['post'])
    def suspend(self, request, pk=None):
        business = set_business_active(business_id=pk, is_active=False, actor=request.user)
        return action_response(BusinessSerializer(business).data)


class SuperAdminShopViewSet(mixins.ListModelMixin,
                            mixins.RetrieveModelMixin,
                            viewsets.GenericViewSet):
    """Shops across the platform, filterable by ``?business=<slug>``."""

    serializer_class = ShopSerializer
    permission_classes = [IsAuthenticated, IsSuperAdmin]
    pagination_class = TenantPagination

    def get_queryset(self):
        queryset = Shop.objects.select_related('business')
        business_slug = self.request.query_params.get('business')
        if business_slug:
            queryset = queryset.filter(business__slug=business_slug)
        return queryset

    @extend_schema(request=SuperAdminShopCreateSerializer, responses={201: ShopSerializer})
    def create(self, request):
        serializer = SuperAdminShopCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            business = Business.objects.get(id=data['business_id'])
        except Business.DoesNotExist:
            raise BusinessNotFoundError("Business not found")

        shop = create_shop(
            business=business,
            name=data['name'],
            slug=data.get('slug') or None,
            address=data.get('address', ''),
            country=data.get('country', 'Ghana'),
            actor=request.user,
        )
        return action_response(ShopSerializer(shop).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        delete_shop(shop_id=pk, actor=request.user)
        return action_response(None)

    @action(detail=True, methods=['post'])
    def activate(self, request, pk=None):
        shop = set_shop_active(shop_id=pk, is_active=True, actor=request.user)
        return action_response(ShopSerializer(shop).data)

    @action(detail=True, methods=['post'])
    def suspend(self, request, pk=None):
        shop = set_shop_active(shop_id=pk, is_active=False, actor=request.user)
        return action_response(ShopSerializer(shop).data)


@extend_schema(
    responses={200: PlatformOverviewSerializer},
    description="Platform-wide counters for the super admin dashboard.",
    tags=['super-admin'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def platform_overview(request):
    """Platform counters - thin HTTP handler."""
    return Response(PlatformOverviewSerializer(get_platform_overview()).data)


# =============================================================================
# Business admin
# =============================================================================

@extend_schema(
    responses={200: BusinessStatsSerializer},
    description="Shop, product, customer and purchase counters for one business.",
    tags=['business-admin'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def business_dashboard(request, business_slug):
    stats = get_business_stats(business=request.tenant.business)
    return Response(BusinessStatsSerializer(stats).data)


class BusinessShopViewSet(mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          viewsets.GenericViewSet):
    """Shops of the business in the URL."""

    serializer_class = ShopSerializer
    permission_classes = [IsAuthenticated, IsBusinessAdmin]
    pagination_class = TenantPagination

    def get_queryset(self):
        return Shop.objects.filter(business=self.request.tenant.business).select_related('business')

    @extend_schema(request=ShopCreateSerializer, responses={201: ShopSerializer})
    def create(self, request, business_slug=None):
        serializer = ShopCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        shop = create_shop(
            business=request.tenant.business,
            name=data['name'],
            slug=data.get('slug') or None,
            address=data.get('address', ''),
            country=data.get('country', 'Ghana'),
            actor=request.user,
        )
        return action_response(ShopSerializer(shop).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ShopUpdateSerializer, responses={200: ShopSerializer})
    def partial_update(self, request, business_slug=None, pk=None):
        serializer = ShopUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        shop = update_shop(
            shop_id=pk,
            business=request.tenant.business,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(ShopSerializer(shop).data)

    @action(detail=True, methods=['post'])
    def toggle(self, request, business_slug=None, pk=None):
        shop = self.get_object()
        shop = set_shop_active(
            shop_id=shop.id,
            is_active=not shop.is_active,
            business=request.tenant.business,
            actor=request.user,
        )
        return action_response(ShopSerializer(shop).data)


class BusinessStaffViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Staff of every shop in the business.

    list: Filter with ``?role=`` and ``?shop=<slug>``
    create: Add a staff login to one of the business's shops
    toggle: Activate/deactivate a membership
    permissions: Update accountant permission flags
    """

    serializer_class = StaffMemberSerializer
    permission_classes = [IsAuthenticated, IsBusinessAdmin]
    pagination_class = TenantPagination

    def get_queryset(self):
        filter_serializer = StaffFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        queryset = list_staff(business=self.request.tenant.business, role=params.get('role'))
        if params.get('shop'):
            queryset = queryset.filter(shop__slug=params['shop'])
        return queryset

    @extend_schema(request=StaffCreateSerializer, responses={201: StaffMemberSerializer})
    def create(self, request, business_slug=None):
        serializer = StaffCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        business = request.tenant.business
        try:
            shop = business.shops.get(id=data.get('shop_id'))
        except (Shop.DoesNotExist, ValueError):
            raise ShopNotFoundError("Shop not found in this business")

        member = create_staff_member(
            shop=shop,
            email=data['email'],
            name=data['name'],
            password=data['password'],
            role=data['role'],
            permissions=_permission_flags(data),
            actor=request.user,
        )
        return action_response(StaffMemberSerializer(member).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def toggle(self, request, business_slug=None, pk=None):
        member = self.get_object()
        member = set_staff_active(
            member_id=member.id,
            is_active=not member.is_active,
            business=request.tenant.business,
            actor=request.user,
        )
        return action_response(StaffMemberSerializer(member).data)

    @extend_schema(request=AccountantPermissionsSerializer, responses={200: StaffMemberSerializer})
    @action(detail=True, methods=['post'])
    def permissions(self, request, business_slug=None, pk=None):
        serializer = AccountantPermissionsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        member = update_accountant_permissions(
            member_id=pk,
            business=request.tenant.business,
            permissions=serializer.validated_data,
            actor=request.user,
        )
        return action_response(StaffMemberSerializer(member).data)


# =============================================================================
# Shop admin
# =============================================================================

class ShopStaffViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Sales staff and debt collectors of the shop in the URL."""

    serializer_class = StaffMemberSerializer
    permission_classes = [IsAuthenticated, IsShopAdmin]
    pagination_class = TenantPagination

    def get_queryset(self):
        role = self.request.query_params.get('role')
        queryset = list_staff(shop=self.request.tenant.shop).filter(
            role__in=[StaffRole.SALES_STAFF, StaffRole.DEBT_COLLECTOR]
        )
        if role:
            queryset = queryset.filter(role=role)
        return queryset

    @extend_schema(request=ShopStaffCreateSerializer, responses={201: StaffMemberSerializer})
    def create(self, request, shop_slug=None):
        serializer = ShopStaffCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        member = create_staff_member(
            shop=request.tenant.shop,
            email=data['email'],
            name=data['name'],
            password=data['password'],
            role=data['role'],
            actor=request.user,
        )
        return action_response(StaffMemberSerializer(member).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def toggle(self, request, shop_slug=None, pk=None):
        member = self.get_object()
        member = set_staff_active(
            member_id=member.id,
            is_active=not member.is_active,
            shop=request.tenant.shop,
            actor=request.user,
        )
        return action_response(StaffMemberSerializer(member).data)
