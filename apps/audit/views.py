from rest_framework import mixins, viewsets
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated

from apps.tenants.permissions import IsSuperAdmin

from .serializers import AuditLogFilterSerializer, AuditLogSerializer
from .services import list_audit_logs


class AuditLogPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


class AuditLogViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Platform audit trail, newest first.

    list: Filter with ``?entity_type=``, ``?action=`` and ``?actor=``
    """

    serializer_class = AuditLogSerializer
    permission_classes = [IsAuthenticated, IsSuperAdmin]
    pagination_class = AuditLogPagination

    def get_queryset(self):
        filter_serializer = AuditLogFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data
        return list_audit_logs(
            entity_type=params.get('entity_type'),
            action=params.get('action'),
            actor_id=params.get('actor'),
        )
