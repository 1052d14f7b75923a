from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated

from config.responses import action_response
from apps.tenants.permissions import IsCustomer

from .serializers import NotificationFilterSerializer, NotificationSerializer
from .services import list_notifications, mark_all_read, mark_notification_read


class NotificationPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class CustomerNotificationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Customer portal notifications.

    list: Newest first, ``?unread=true`` for unread only
    read: Mark one as read
    read_all: Mark all as read
    """

    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated, IsCustomer]
    pagination_class = NotificationPagination

    def get_queryset(self):
        filter_serializer = NotificationFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        return list_notifications(
            user=self.request.user,
            unread_only=filter_serializer.validated_data['unread'],
        )

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        notification = mark_notification_read(user=request.user, notification_id=pk)
        return action_response(NotificationSerializer(notification).data)

    @action(detail=False, methods=['post'], url_path='read-all')
    def read_all(self, request):
        return action_response({'updated': mark_all_read(user=request.user)})
