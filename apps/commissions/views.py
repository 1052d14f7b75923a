from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from config.responses import action_response
from apps.tenants.permissions import IsAccountant, IsBusinessAdmin, IsCollector, IsSalesStaff
from apps.tenants.services import require_permission

from .serializers import (
    BonusRecordFilterSerializer,
    BonusRecordIdsSerializer,
    BonusRecordSerializer,
    BonusRuleInputSerializer,
    BonusRuleSerializer,
    BonusSummarySerializer,
    CommissionCalculateSerializer,
    CommissionFilterSerializer,
    CommissionPaySerializer,
    CommissionSerializer,
    StaffBonusSummarySerializer,
)
from .services import (
    approve_bonus_records,
    approve_commission,
    calculate_commissions,
    calculate_target_bonuses,
    create_bonus_rule,
    delete_bonus_rule,
    get_bonus_rule,
    get_bonus_summary,
    get_staff_bonus_summary,
    list_bonus_records,
    list_commissions,
    mark_bonus_records_paid,
    mark_commission_paid,
    reject_bonus_records,
    update_bonus_rule,
)
from .models import BonusRule


class CommissionPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


# =============================================================================
# Commissions (accountant and business admin)
# =============================================================================

class CommissionViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Commissions of the business.

    list: Filter with ``?status=``
    calculate: Create PENDING commissions for a period
    approve: PENDING -> APPROVED (accountants need can_approve_commissions)
    pay: APPROVED -> PAID (accountants need can_pay_commissions)
    """

    serializer_class = CommissionSerializer
    permission_classes = [IsAuthenticated, IsAccountant]
    pagination_class = CommissionPagination

    def get_queryset(self):
        filter_serializer = CommissionFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_commissions(
            business=self.request.tenant.business,
            status=filter_serializer.validated_data.get('status'),
        )

    @extend_schema(request=CommissionCalculateSerializer, responses={201: CommissionSerializer(many=True)})
    @action(detail=False, methods=['post'])
    def calculate(self, request, business_slug=None):
        serializer = CommissionCalculateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        commissions = calculate_commissions(
            business=request.tenant.business,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(
            CommissionSerializer(commissions, many=True).data,
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=['post'])
    def approve(self, request, business_slug=None, pk=None):
        require_permission(
            request.tenant.membership,
            'can_approve_commissions',
            "You do not have permission to approve commissions",
        )
        commission = approve_commission(
            business=request.tenant.business, commission_id=pk, actor=request.user
        )
        return action_response(CommissionSerializer(commission).data)

    @extend_schema(request=CommissionPaySerializer, responses={200: CommissionSerializer})
    @action(detail=True, methods=['post'])
    def pay(self, request, business_slug=None, pk=None):
        require_permission(
            request.tenant.membership,
            'can_pay_commissions',
            "You do not have permission to pay commissions",
        )
        serializer = CommissionPaySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        commission = mark_commission_paid(
            business=request.tenant.business,
            commission_id=pk,
            actor=request.user,
            reference=serializer.validated_data['reference'],
        )
        return action_response(CommissionSerializer(commission).data)


class BusinessCommissionViewSet(CommissionViewSet):
    permission_classes = [IsAuthenticated, IsBusinessAdmin]


# =============================================================================
# Bonus rules and records (business admin)
# =============================================================================

class BonusRuleViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Bonus rules of the business. list / retrieve / create / partial_update / destroy."""

    serializer_class = BonusRuleSerializer
    permission_classes = [IsAuthenticated, IsBusinessAdmin]

    def get_queryset(self):
        return BonusRule.objects.select_related('shop').filter(business=self.request.tenant.business)

    def retrieve(self, request, business_slug=None, pk=None):
        rule = get_bonus_rule(business=request.tenant.business, rule_id=pk)
        return Response(BonusRuleSerializer(rule).data)

    @extend_schema(request=BonusRuleInputSerializer, responses={201: BonusRuleSerializer})
    def create(self, request, business_slug=None):
        serializer = BonusRuleInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        rule = create_bonus_rule(
            business=request.tenant.business,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(BonusRuleSerializer(rule).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=BonusRuleInputSerializer, responses={200: BonusRuleSerializer})
    def partial_update(self, request, business_slug=None, pk=None):
        serializer = BonusRuleInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        rule = update_bonus_rule(
            business=request.tenant.business,
            rule_id=pk,
            actor=request.user,
            **serializer.validated_data,
        )
        return action_response(BonusRuleSerializer(rule).data)

    def destroy(self, request, business_slug=None, pk=None):
        deleted = delete_bonus_rule(business=request.tenant.business, rule_id=pk, actor=request.user)
        return action_response({'deleted': deleted, 'deactivated': not deleted})


class BonusRecordViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Bonus records of the business.

    list: Filter with ``?status=``, ``?staff_member=``, ``?rule=``
    approve / pay / reject: Bulk transitions on ``record_ids``
    calculate_targets: Evaluate TARGET_HIT and ZERO_DEFAULT rules
    """

    serializer_class = BonusRecordSerializer
    permission_classes = [IsAuthenticated, IsBusinessAdmin]
    pagination_class = CommissionPagination

    def get_queryset(self):
        filter_serializer = BonusRecordFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data
        return list_bonus_records(
            business=self.request.tenant.business,
            status=params.get('status'),
            staff_member_id=params.get('staff_member'),
            rule_id=params.get('rule'),
        )

    def _ids(self, request):
        serializer = BonusRecordIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    @extend_schema(request=BonusRecordIdsSerializer)
    @action(detail=False, methods=['post'])
    def approve(self, request, business_slug=None):
        data = self._ids(request)
        updated = approve_bonus_records(
            business=request.tenant.business, record_ids=data['record_ids'], actor=request.user
        )
        return action_response({'updated': updated})

    @extend_schema(request=BonusRecordIdsSerializer)
    @action(detail=False, methods=['post'])
    def pay(self, request, business_slug=None):
        data = self._ids(request)
        updated = mark_bonus_records_paid(
            business=request.tenant.business,
            record_ids=data['record_ids'],
            actor=request.user,
            reference=data['reference'],
        )
        return action_response({'updated': updated})

    @extend_schema(request=BonusRecordIdsSerializer)
    @action(detail=False, methods=['post'])
    def reject(self, request, business_slug=None):
        data = self._ids(request)
        updated = reject_bonus_records(
            business=request.tenant.business,
            record_ids=data['record_ids'],
            actor=request.user,
            reason=data['reason'],
        )
        return action_response({'updated': updated})

    @action(detail=False, methods=['post'], url_path='calculate-targets')
    def calculate_targets(self, request, business_slug=None):
        records = calculate_target_bonuses(business=request.tenant.business, actor=request.user)
        return action_response(
            {'created': len(records), 'records': BonusRecordSerializer(records, many=True).data}
        )


@extend_schema(responses={200: BonusSummarySerializer}, tags=['business-admin'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def bonus_summary(request, business_slug):
    return Response(BonusSummarySerializer(get_bonus_summary(business=request.tenant.business)).data)


# =============================================================================
# Staff bonus overview
# =============================================================================

@extend_schema(responses={200: StaffBonusSummarySerializer}, tags=['sales-staff'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSalesStaff])
def sales_staff_bonuses(request, shop_slug):
    summary = get_staff_bonus_summary(request.tenant.membership)
    return Response(StaffBonusSummarySerializer(summary).data)


@extend_schema(responses={200: StaffBonusSummarySerializer}, tags=['collector'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsCollector])
def collector_bonuses(request, shop_slug):
    summary = get_staff_bonus_summary(request.tenant.membership)
    return Response(StaffBonusSummarySerializer(summary).data)
