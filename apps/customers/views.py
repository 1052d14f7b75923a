from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from config.responses import action_response
from apps.tenants.permissions import IsCollector, IsCustomer, IsSalesStaff, IsShopAdmin

from .serializers import (
    AssignCollectorSerializer,
    CustomerFilterSerializer,
    CustomerInputSerializer,
    CustomerListSerializer,
    CustomerSerializer,
    CustomerSummarySerializer,
    PortalDashboardSerializer,
)
from .services import (
    assign_collector,
    create_customer,
    customers_with_summary,
    delete_customer,
    get_customer,
    get_customer_summary,
    get_portal_customer,
    get_portal_dashboard,
    toggle_customer_status,
    update_customer,
)


class CustomerPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class _CustomerListMixin(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = CustomerListSerializer
    pagination_class = CustomerPagination

    def _search(self):
        filter_serializer = CustomerFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return filter_serializer.validated_data.get('search')


class ShopCustomerViewSet(_CustomerListMixin):
    """
    Customers of a shop (shop admin).

    list: Customers with purchase counters, ``?search=`` on name or phone
    retrieve / create / partial_update / destroy: Customer maintenance
    toggle: Flip active status
    summary: Purchase and payment totals
    collector: Assign or unassign the debt collector
    """

    permission_classes = [IsAuthenticated, IsShopAdmin]

    def get_queryset(self):
        return customers_with_summary(shop=self.request.tenant.shop, search=self._search())

    def retrieve(self, request, shop_slug=None, pk=None):
        customer = get_customer(shop=request.tenant.shop, customer_id=pk)
        return Response(CustomerSerializer(customer).data)

    @extend_schema(request=CustomerInputSerializer, responses={201: CustomerSerializer})
    def create(self, request, shop_slug=None):
        serializer = CustomerInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        customer = create_customer(
            shop=request.tenant.shop,
            actor=request.user,
            created_by=request.tenant.membership,
            **serializer.validated_data,
        )
        return action_response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=CustomerInputSerializer, responses={200: CustomerSerializer})
    def partial_update(self, request, shop_slug=None, pk=None):
        serializer = CustomerInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        customer = update_customer(
            shop=request.tenant.shop,
            customer_id=pk,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(CustomerSerializer(customer).data)

    def destroy(self, request, shop_slug=None, pk=None):
        delete_customer(shop=request.tenant.shop, customer_id=pk, actor=request.user)
        return action_response(None)

    @action(detail=True, methods=['post'])
    def toggle(self, request, shop_slug=None, pk=None):
        customer = toggle_customer_status(
            shop=request.tenant.shop, customer_id=pk, actor=request.user
        )
        return action_response(CustomerSerializer(customer).data)

    @extend_schema(responses={200: CustomerSummarySerializer})
    @action(detail=True, methods=['get'])
    def summary(self, request, shop_slug=None, pk=None):
        customer = get_customer(shop=request.tenant.shop, customer_id=pk)
        return Response(CustomerSummarySerializer(get_customer_summary(customer=customer)).data)

    @extend_schema(request=AssignCollectorSerializer, responses={200: CustomerSerializer})
    @action(detail=True, methods=['post'])
    def collector(self, request, shop_slug=None, pk=None):
        serializer = AssignCollectorSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        customer = assign_collector(
            shop=request.tenant.shop,
            customer_id=pk,
            collector_id=serializer.validated_data['collector_id'],
            actor=request.user,
        )
        return action_response(CustomerSerializer(customer).data)


class SalesCustomerViewSet(_CustomerListMixin):
    """Customers of the shop as seen by sales staff. list / create."""

    permission_classes = [IsAuthenticated, IsSalesStaff]

    def get_queryset(self):
        return customers_with_summary(shop=self.request.tenant.shop, search=self._search())

    @extend_schema(request=CustomerInputSerializer, responses={201: CustomerSerializer})
    def create(self, request, shop_slug=None):
        serializer = CustomerInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        customer = create_customer(
            shop=request.tenant.shop,
            actor=request.user,
            created_by=request.tenant.membership,
            **serializer.validated_data,
        )
        return action_response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)


class CollectorCustomerViewSet(_CustomerListMixin):
    """Customers assigned to the calling debt collector."""

    permission_classes = [IsAuthenticated, IsCollector]

    def get_queryset(self):
        tenant = self.request.tenant
        return customers_with_summary(
            shop=tenant.shop, collector=tenant.membership, search=self._search()
        )


@extend_schema(responses={200: PortalDashboardSerializer}, tags=['customer'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsCustomer])
def portal_dashboard(request):
    """Balance overview for the logged-in customer."""
    customer = get_portal_customer(request.user)
    return Response(PortalDashboardSerializer(get_portal_dashboard(customer)).data)
