from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from config.responses import action_response
from apps.tenants.permissions import IsSuperAdmin

from .serializers import (
    ContactMessageFilterSerializer,
    ContactMessageInputSerializer,
    ContactMessageSerializer,
    PublicStatsSerializer,
)
from .services import (
    get_public_stats,
    list_contact_messages,
    mark_contact_message_read,
    submit_contact_message,
)


class ContactMessagePagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(responses={200: PublicStatsSerializer}, tags=['public'])
@api_view(['GET'])
@permission_classes([AllowAny])
def public_stats(request):
    """Counters for the landing page: businesses, shops, customers, money collected."""
    return Response(PublicStatsSerializer(get_public_stats()).data)


@extend_schema(request=ContactMessageInputSerializer, responses={201: None}, tags=['public'])
@api_view(['POST'])
@permission_classes([AllowAny])
def contact(request):
    serializer = ContactMessageInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    submit_contact_message(**serializer.validated_data)
    return action_response(status=status.HTTP_201_CREATED)


class ContactMessageViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Contact form inbox for super admins. list (``?is_read=``) / read."""

    serializer_class = ContactMessageSerializer
    permission_classes = [IsAuthenticated, IsSuperAdmin]
    pagination_class = ContactMessagePagination

    def get_queryset(self):
        filter_serializer = ContactMessageFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_contact_messages(is_read=filter_serializer.validated_data.get('is_read'))

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        message = mark_contact_message_read(message_id=pk)
        return action_response(ContactMessageSerializer(message).data)
