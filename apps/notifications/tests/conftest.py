import pytest

from apps.notifications.services import notify


@pytest.fixture
def notifications(portal_user, customer):
    """Three unread GENERAL notifications for the portal customer."""
    return [
        notify(user=portal_user, customer=customer, title=f'Notice {index}', message='Hello')
        for index in range(3)
    ]
