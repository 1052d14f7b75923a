from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import OpenApiParameter, extend_schema

from config.responses import action_response
from apps.purchases.serializers import PaymentFilterSerializer, PaymentSerializer
from apps.purchases.services import confirm_payment, list_payments
from apps.tenants.permissions import IsAccountant
from apps.tenants.services import require_permission

from .serializers import (
    AccountantDashboardSerializer,
    AgingRowSerializer,
    BudgetInputSerializer,
    BudgetSerializer,
    CollectorPerformanceSerializer,
    DateRangeSerializer,
    ExpenseFilterSerializer,
    ExpenseInputSerializer,
    ExpenseSerializer,
    ProfitMarginRowSerializer,
    RevenueReportQuerySerializer,
    RevenueRowSerializer,
    ScheduledReportInputSerializer,
    ScheduledReportSerializer,
)
from .services import (
    create_budget,
    create_scheduled_report,
    delete_budget,
    delete_scheduled_report,
    get_accountant_dashboard,
    get_aging_report,
    get_collection_performance,
    get_profit_margin_report,
    get_revenue_report,
    list_budgets,
    list_expenses,
    list_scheduled_reports,
    record_expense,
    toggle_scheduled_report,
)


class AccountingPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


def _query(serializer_class, request):
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


# =============================================================================
# Dashboard and reports
# =============================================================================

@extend_schema(responses={200: AccountantDashboardSerializer}, tags=['accountant'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAccountant])
def accountant_dashboard(request, business_slug):
    """
    Headline figures for the business.

    Totals, collections today/this week/this month, collections by payment
    method, per-shop figures and the last six months.
    """
    data = get_accountant_dashboard(business=request.tenant.business)
    return Response(AccountantDashboardSerializer(data).data)


@extend_schema(
    parameters=[OpenApiParameter('shop_id', str, description='Limit to one shop')],
    responses={200: AgingRowSerializer(many=True)},
    tags=['accountant'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAccountant])
def aging_report(request, business_slug):
    """Outstanding balances per customer in 0-30, 31-60, 61-90 and 90+ day buckets."""
    params = _query(DateRangeSerializer, request)
    rows = get_aging_report(business=request.tenant.business, shop_id=params.get('shop_id'))
    return Response(AgingRowSerializer(rows, many=True).data)


@extend_schema(
    parameters=[RevenueReportQuerySerializer],
    responses={200: RevenueRowSerializer(many=True)},
    tags=['accountant'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAccountant])
def revenue_report(request, business_slug):
    params = _query(RevenueReportQuerySerializer, request)
    rows = get_revenue_report(
        business=request.tenant.business,
        start_date=params['date_from'],
        end_date=params['date_to'],
        group_by=params['group_by'],
        shop_id=params.get('shop_id'),
    )
    return Response(RevenueRowSerializer(rows, many=True).data)


@extend_schema(
    parameters=[DateRangeSerializer],
    responses={200: CollectorPerformanceSerializer(many=True)},
    tags=['accountant'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAccountant])
def collection_performance(request, business_slug):
    params = _query(DateRangeSerializer, request)
    rows = get_collection_performance(
        business=request.tenant.business,
        start_date=params.get('date_from'),
        end_date=params.get('date_to'),
    )
    return Response(CollectorPerformanceSerializer(rows, many=True).data)


@extend_schema(
    parameters=[DateRangeSerializer],
    responses={200: ProfitMarginRowSerializer(many=True)},
    tags=['accountant'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAccountant])
def profit_margins(request, business_slug):
    """Revenue, cost and margin per shop. Requires can_view_profit_margins."""
    require_permission(
        request.tenant.membership,
        'can_view_profit_margins',
        "You do not have permission to view profit margins",
    )
    params = _query(DateRangeSerializer, request)
    rows = get_profit_margin_report(
        business=request.tenant.business,
        shop_id=params.get('shop_id'),
        date_from=params.get('date_from'),
        date_to=params.get('date_to'),
    )
    return Response(ProfitMarginRowSerializer(rows, many=True).data)


# =============================================================================
# Payments
# =============================================================================

class AccountantPaymentViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Payments across every shop of the business.

    list: Filter with status, confirmation, method, dates and ``?search=``
    confirm: Confirm a pending payment (requires can_confirm_payments)
    """

    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated, IsAccountant]
    pagination_class = AccountingPagination

    def get_queryset(self):
        params = _query(PaymentFilterSerializer, self.request)
        return list_payments(business=self.request.tenant.business, **params)

    @action(detail=True, methods=['post'])
    def confirm(self, request, business_slug=None, pk=None):
        require_permission(
            request.tenant.membership,
            'can_confirm_payments',
            "You do not have permission to confirm payments",
        )
        payment = confirm_payment(payment_id=pk, business=request.tenant.business, actor=request.user)
        return action_response(PaymentSerializer(payment).data)


# =============================================================================
# Budgets and expenses
# =============================================================================

class BudgetViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Budgets with their live variance. list / create / destroy."""

    serializer_class = BudgetSerializer
    permission_classes = [IsAuthenticated, IsAccountant]

    def get_queryset(self):
        return list_budgets(business=self.request.tenant.business)

    @extend_schema(request=BudgetInputSerializer, responses={201: BudgetSerializer})
    def create(self, request, business_slug=None):
        require_permission(
            request.tenant.membership,
            'can_manage_budgets',
            "You do not have permission to manage budgets",
        )
        serializer = BudgetInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        budget = create_budget(
            business=request.tenant.business,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(BudgetSerializer(budget).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, business_slug=None, pk=None):
        require_permission(
            request.tenant.membership,
            'can_manage_budgets',
            "You do not have permission to manage budgets",
        )
        delete_budget(business=request.tenant.business, budget_id=pk, actor=request.user)
        return action_response({'deleted': True})


class ExpenseViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Expenses of the business. list (filter by category, shop, dates) / create."""

    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated, IsAccountant]
    pagination_class = AccountingPagination

    def get_queryset(self):
        params = _query(ExpenseFilterSerializer, self.request)
        return list_expenses(business=self.request.tenant.business, **params)

    @extend_schema(request=ExpenseInputSerializer, responses={201: ExpenseSerializer})
    def create(self, request, business_slug=None):
        serializer = ExpenseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        expense = record_expense(
            business=request.tenant.business,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


# =============================================================================
# Scheduled reports
# =============================================================================

class ScheduledReportViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Report e-mail schedules. list / create / toggle / destroy."""

    serializer_class = ScheduledReportSerializer
    permission_classes = [IsAuthenticated, IsAccountant]

    def get_queryset(self):
        return list_scheduled_reports(business=self.request.tenant.business)

    @extend_schema(request=ScheduledReportInputSerializer, responses={201: ScheduledReportSerializer})
    def create(self, request, business_slug=None):
        serializer = ScheduledReportInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = create_scheduled_report(
            business=request.tenant.business,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(ScheduledReportSerializer(report).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def toggle(self, request, business_slug=None, pk=None):
        report = toggle_scheduled_report(business=request.tenant.business, report_id=pk, actor=request.user)
        return action_response(ScheduledReportSerializer(report).data)

    def destroy(self, request, business_slug=None, pk=None):
        delete_scheduled_report(business=request.tenant.business, report_id=pk, actor=request.user)
        return action_response({'deleted': True})
