import pytest
from django.urls import reverse
from rest_framework import status

from apps.notifications.models import Notification, NotificationType
from apps.notifications.services import mark_all_read, notify, unread_count


@pytest.mark.django_db
class TestNotificationServices:

    def test_notify_defaults_to_general(self, notifications):
        assert notifications[0].type == NotificationType.GENERAL
        assert notifications[0].is_read is False

    def test_mark_all_read(self, portal_user, notifications):
        assert unread_count(portal_user) == 3
        assert mark_all_read(user=portal_user) == 3
        assert unread_count(portal_user) == 0
        assert mark_all_read(user=portal_user) == 0


@pytest.mark.django_db
class TestCustomerNotificationEndpoints:
    """Tests for /api/customer/notifications/"""

    def test_list_unread_only(self, portal_client, notifications):
        Notification.objects.filter(id=notifications[0].id).update(is_read=True)
        url = reverse('notifications:customer-notification-list')

        assert portal_client.get(url).data['count'] == 3
        assert portal_client.get(url, {'unread': 'true'}).data['count'] == 2

    def test_mark_read(self, portal_client, notifications):
        url = reverse('notifications:customer-notification-read', kwargs={'pk': notifications[1].id})
        response = portal_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['is_read'] is True
        assert response.data['data']['read_at'] is not None

    def test_cannot_read_someone_elses(self, portal_client, super_admin):
        foreign = notify(user=super_admin, title='Internal', message='Not yours')
        url = reverse('notifications:customer-notification-read', kwargs={'pk': foreign.id})

        response = portal_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_read_all(self, portal_client, portal_user, notifications):
        response = portal_client.post(reverse('notifications:customer-notification-read-all'))

        assert response.data == {'success': True, 'data': {'updated': 3}}
        assert unread_count(portal_user) == 0

    def test_staff_are_rejected(self, shop_admin_client):
        response = shop_admin_client.get(reverse('notifications:customer-notification-list'))
        assert response.status_code == status.HTTP_403_FORBIDDEN
