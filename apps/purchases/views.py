from django.http import HttpResponse
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiResponse
from drf_spectacular.types import OpenApiTypes

from config.responses import action_response
from apps.catalog.services import CONTENT_TYPE
from apps.customers.services import get_portal_customer
from apps.tenants.permissions import (
    IsAccountant,
    IsBusinessAdmin,
    IsCollector,
    IsCustomer,
    IsSalesStaff,
    IsShopAdmin,
)

from .serializers import (
    CollectorDashboardSerializer,
    PaymentFilterSerializer,
    PaymentRecordSerializer,
    PaymentRejectSerializer,
    PaymentSerializer,
    PurchaseCreateSerializer,
    PurchaseDetailSerializer,
    PurchaseFilterSerializer,
    PurchaseSerializer,
    PurchaseSummarySerializer,
    SalesDashboardSerializer,
    ShopPolicyInputSerializer,
    ShopPolicySerializer,
)
from .services import (
    PurchaseNotFoundError,
    confirm_payment,
    create_purchase,
    export_payments,
    export_purchases,
    get_collector_dashboard,
    get_purchase,
    get_purchase_summary,
    get_sales_dashboard,
    get_shop_policy,
    list_payments,
    list_purchases,
    record_collector_payment,
    record_payment,
    refresh_overdue_purchases,
    reject_payment,
    upsert_shop_policy,
)


class PurchasePagination(PageNumberPagination):
    """Custom pagination for purchases and payments."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _payment_filters(request):
    filter_serializer = PaymentFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)
    return filter_serializer.validated_data


def _create_purchase(request, sold_by):
    serializer = PurchaseCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    purchase = create_purchase(
        shop=request.tenant.shop,
        actor=request.user,
        sold_by=sold_by,
        items=[dict(item) for item in data.pop('items')],
        **data,
    )
    return action_response(PurchaseDetailSerializer(purchase).data, status=status.HTTP_201_CREATED)


# =============================================================================
# Shop admin
# =============================================================================

@extend_schema(
    methods=['GET'],
    responses={200: ShopPolicySerializer},
    description="Current interest and late fee policy (defaults when never saved).",
)
@extend_schema(
    methods=['PUT'],
    request=ShopPolicyInputSerializer,
    responses={200: ShopPolicySerializer},
    description="Create or replace the shop policy.",
)
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsShopAdmin])
def shop_policy(request, shop_slug):
    shop = request.tenant.shop
    if request.method == 'GET':
        return Response(ShopPolicySerializer(get_shop_policy(shop)).data)

    serializer = ShopPolicyInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    policy = upsert_shop_policy(shop=shop, actor=request.user, **serializer.validated_data)
    return action_response(ShopPolicySerializer(policy).data)


class ShopPurchaseViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Purchases of the shop.

    list: Filter with ``?status=`` and ``?customer=``
    retrieve: Purchase with items and payments
    create: New agreement
    summary: Balance, late fee and amount due now
    refresh_overdue: Flag agreements past their grace period
    """

    serializer_class = PurchaseSerializer
    permission_classes = [IsAuthenticated, IsShopAdmin]
    pagination_class = PurchasePagination

    def get_queryset(self):
        filter_serializer = PurchaseFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data
        return list_purchases(
            shop=self.request.tenant.shop,
            status=params.get('status'),
            customer_id=params.get('customer'),
        )

    def retrieve(self, request, shop_slug=None, pk=None):
        purchase = get_purchase(shop=request.tenant.shop, purchase_id=pk)
        return Response(PurchaseDetailSerializer(purchase).data)

    @extend_schema(request=PurchaseCreateSerializer, responses={201: PurchaseDetailSerializer})
    def create(self, request, shop_slug=None):
        return _create_purchase(request, sold_by=request.tenant.membership)

    @extend_schema(responses={200: PurchaseSummarySerializer})
    @action(detail=True, methods=['get'])
    def summary(self, request, shop_slug=None, pk=None):
        purchase = get_purchase(shop=request.tenant.shop, purchase_id=pk)
        return Response(PurchaseSummarySerializer(get_purchase_summary(purchase=purchase)).data)

    @action(detail=False, methods=['post'], url_path='refresh-overdue')
    def refresh_overdue(self, request, shop_slug=None):
        updated = refresh_overdue_purchases(shop=request.tenant.shop)
        return action_response({'updated': updated})


class ShopPaymentViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Payments of the shop.

    list: Filter with status, confirmation, method, dates and search
    create: Record a payment (confirmed immediately)
    confirm / reject: Settle a collector's pending payment
    """

    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsShopAdmin]
    pagination_class = PurchasePagination

    def get_queryset(self):
        return list_payments(shop=self.request.tenant.shop, **_payment_filters(self.request))

    @extend_schema(request=PaymentRecordSerializer, responses={201: PaymentSerializer})
    def create(self, request, shop_slug=None):
        serializer = PaymentRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = record_payment(
            shop=request.tenant.shop,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def confirm(self, request, shop_slug=None, pk=None):
        payment = confirm_payment(payment_id=pk, shop=request.tenant.shop, actor=request.user)
        return action_response(PaymentSerializer(payment).data)

    @extend_schema(request=PaymentRejectSerializer, responses={200: PaymentSerializer})
    @action(detail=True, methods=['post'])
    def reject(self, request, shop_slug=None, pk=None):
        serializer = PaymentRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = reject_payment(
            payment_id=pk,
            shop=request.tenant.shop,
            actor=request.user,
            reason=serializer.validated_data['reason'],
        )
        return action_response(PaymentSerializer(payment).data)


# =============================================================================
# Business admin
# =============================================================================

class BusinessPaymentViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Payments across every shop of the business. list / create."""

    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsBusinessAdmin]
    pagination_class = PurchasePagination

    def get_queryset(self):
        return list_payments(business=self.request.tenant.business, **_payment_filters(self.request))

    @extend_schema(request=PaymentRecordSerializer, responses={201: PaymentSerializer})
    def create(self, request, business_slug=None):
        serializer = PaymentRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = record_payment(
            business=request.tenant.business,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


def _xlsx_response(content: bytes, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type=CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


XLSX_RESPONSE = {(200, CONTENT_TYPE): OpenApiResponse(response=OpenApiTypes.BINARY)}
STATUS_PARAMETER = OpenApiParameter(
    'status', str, enum=['all', 'pending', 'confirmed', 'rejected'],
    description="Narrow the export to one payment state (default all).",
)


@extend_schema(responses=XLSX_RESPONSE, description="Download every purchase of the business as Excel.")
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def export_purchases_view(request, business_slug):
    return _xlsx_response(*export_purchases(request.tenant.business))


@extend_schema(responses=XLSX_RESPONSE, parameters=[STATUS_PARAMETER],
               description="Download the payments of the business as Excel.")
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def export_payments_view(request, business_slug):
    status_filter = request.query_params.get('status', 'all')
    return _xlsx_response(*export_payments(request.tenant.business, status=status_filter))


@extend_schema(responses=XLSX_RESPONSE, tags=['accountant'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAccountant])
def accountant_export_purchases(request, business_slug):
    return _xlsx_response(*export_purchases(request.tenant.business))


@extend_schema(responses=XLSX_RESPONSE, parameters=[STATUS_PARAMETER], tags=['accountant'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAccountant])
def accountant_export_payments(request, business_slug):
    status_filter = request.query_params.get('status', 'all')
    return _xlsx_response(*export_payments(request.tenant.business, status=status_filter))


# =============================================================================
# Sales staff
# =============================================================================

@extend_schema(responses={200: SalesDashboardSerializer}, tags=['sales-staff'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSalesStaff])
def sales_dashboard(request, shop_slug):
    return Response(SalesDashboardSerializer(get_sales_dashboard(request.tenant.membership)).data)


class SalesPurchaseViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Sales made by the calling staff member. list / create."""

    serializer_class = PurchaseSerializer
    permission_classes = [IsAuthenticated, IsSalesStaff]
    pagination_class = PurchasePagination

    def get_queryset(self):
        tenant = self.request.tenant
        return list_purchases(shop=tenant.shop, sold_by=tenant.membership)

    @extend_schema(request=PurchaseCreateSerializer, responses={201: PurchaseDetailSerializer})
    def create(self, request, shop_slug=None):
        return _create_purchase(request, sold_by=request.tenant.membership)


# =============================================================================
# Debt collector
# =============================================================================

@extend_schema(responses={200: CollectorDashboardSerializer}, tags=['collector'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsCollector])
def collector_dashboard(request, shop_slug):
    data = get_collector_dashboard(request.tenant.membership)
    return Response(CollectorDashboardSerializer(data).data)


class CollectorPaymentViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Payments collected by the calling collector.

    list: Payment history
    create: Record a field payment (pending confirmation)
    pending: Payments still awaiting confirmation
    """

    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsCollector]
    pagination_class = PurchasePagination

    def get_queryset(self):
        return list_payments(collector=self.request.tenant.membership, **_payment_filters(self.request))

    @extend_schema(request=PaymentRecordSerializer, responses={201: PaymentSerializer})
    def create(self, request, shop_slug=None):
        serializer = PaymentRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop('collector_id', None)
        payment = record_collector_payment(collector=request.tenant.membership, **data)
        return action_response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def pending(self, request, shop_slug=None):
        queryset = list_payments(collector=request.tenant.membership, status='PENDING')
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(PaymentSerializer(page, many=True).data)
        return Response(PaymentSerializer(queryset, many=True).data)


# =============================================================================
# Customer portal
# =============================================================================

class CustomerPurchaseViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """The logged-in customer's purchases. list / retrieve with payments."""

    serializer_class = PurchaseSerializer
    permission_classes = [IsAuthenticated, IsCustomer]
    pagination_class = PurchasePagination

    def get_queryset(self):
        customer = get_portal_customer(self.request.user)
        return list_purchases(customer_id=customer.id)

    def retrieve(self, request, pk=None):
        purchase = self.get_queryset().prefetch_related('payments').filter(id=pk).first()
        if purchase is None:
            raise PurchaseNotFoundError(f"Purchase with ID {pk} not found")
        return Response(PurchaseDetailSerializer(purchase).data)
