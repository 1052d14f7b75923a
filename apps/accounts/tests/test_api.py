import pytest
from django.urls import reverse
from rest_framework import status

from apps.accounts.models import User, UserRole
from apps.audit.models import AuditLog

PASSWORD = 'TestPass123!'


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, shop_admin):
        url = reverse('accounts:login')
        data = {'email': 'ShopAdmin@Example.com', 'password': PASSWORD}
        response = api_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert 'access' in response.data['data']['tokens']
        assert 'refresh' in response.data['data']['tokens']
        assert response.data['data']['user']['role'] == UserRole.SHOP_ADMIN

    def test_login_wrong_password(self, api_client, shop_admin):
        url = reverse('accounts:login')
        data = {'email': shop_admin.user.email, 'password': 'WrongPassword123!'}
        response = api_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error'] == 'Invalid email or password'

    def test_login_nonexistent_user(self, api_client):
        url = reverse('accounts:login')
        data = {'email': 'nobody@example.com', 'password': PASSWORD}
        response = api_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_user(self, api_client, shop_admin):
        shop_admin.user.is_active = False
        shop_admin.user.save()

        url = reverse('accounts:login')
        data = {'email': shop_admin.user.email, 'password': PASSWORD}
        response = api_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error'] == 'Account is deactivated'

    def test_login_updates_last_login(self, api_client, shop_admin):
        user = shop_admin.user
        assert user.last_login is None

        url = reverse('accounts:login')
        api_client.post(url, {'email': user.email, 'password': PASSWORD}, format='json')

        user.refresh_from_db()
        assert user.last_login is not None

    def test_login_is_audited(self, api_client, shop_admin):
        url = reverse('accounts:login')
        api_client.post(
            url,
            {'email': shop_admin.user.email, 'password': PASSWORD},
            format='json',
            HTTP_USER_AGENT='pytest',
        )

        entry = AuditLog.objects.get(action='LOGIN')
        assert entry.actor == shop_admin.user
        assert entry.metadata['user_agent'] == 'pytest'
        assert entry.metadata['role'] == UserRole.SHOP_ADMIN


# =============================================================================
# Logout Tests
# =============================================================================

@pytest.mark.django_db
class TestLogout:
    """Tests for POST /api/auth/logout/"""

    def _login(self, client, user):
        url = reverse('accounts:login')
        response = client.post(url, {'email': user.email, 'password': PASSWORD}, format='json')
        tokens = response.data['data']['tokens']
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        return tokens['refresh']

    def test_logout_blacklists_refresh_token(self, api_client, collector):
        refresh = self._login(api_client, collector.user)

        response = api_client.post(reverse('accounts:logout'), {'refresh': refresh}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'success': True, 'data': None}

        response = api_client.post(reverse('token_refresh'), {'refresh': refresh}, format='json')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_twice(self, api_client, collector):
        refresh = self._login(api_client, collector.user)
        api_client.post(reverse('accounts:logout'), {'refresh': refresh}, format='json')

        response = api_client.post(reverse('accounts:logout'), {'refresh': refresh}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Invalid token'

    def test_logout_requires_token(self, collector_client):
        response = collector_client.post(reverse('accounts:logout'), {}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_unauthenticated(self, api_client):
        response = api_client.post(reverse('accounts:logout'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Current user and password
# =============================================================================

@pytest.mark.django_db
class TestCurrentUser:
    """Tests for GET /api/auth/me/"""

    def test_get_current_user(self, owner_client, business_owner):
        response = owner_client.get(reverse('accounts:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == business_owner.email
        assert response.data['name'] == 'Business Owner'
        assert response.data['role'] == UserRole.BUSINESS_ADMIN

    def test_get_current_user_unauthenticated(self, api_client):
        response = api_client.get(reverse('accounts:current-user'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestChangePassword:
    """Tests for POST /api/auth/change-password/"""

    def test_change_password(self, owner_client, business_owner):
        data = {
            'current_password': PASSWORD,
            'new_password': 'BrandNew123!',
            'confirm_password': 'BrandNew123!',
        }
        response = owner_client.post(reverse('accounts:change-password'), data, format='json')

        assert response.status_code == status.HTTP_200_OK
        business_owner.refresh_from_db()
        assert business_owner.check_password('BrandNew123!')
        assert AuditLog.objects.filter(action='PASSWORD_CHANGED', actor=business_owner).exists()

    def test_wrong_current_password(self, owner_client):
        data = {
            'current_password': 'nope',
            'new_password': 'BrandNew123!',
            'confirm_password': 'BrandNew123!',
        }
        response = owner_client.post(reverse('accounts:change-password'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Current password is incorrect'

    def test_confirmation_mismatch(self, owner_client):
        data = {
            'current_password': PASSWORD,
            'new_password': 'BrandNew123!',
            'confirm_password': 'Different123!',
        }
        response = owner_client.post(reverse('accounts:change-password'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'confirm_password' in response.data


# =============================================================================
# Customer portal registration
# =============================================================================

@pytest.mark.django_db
class TestCustomerRegistration:
    """Tests for POST /api/auth/register/customer/"""

    def _payload(self, shop, **overrides):
        data = {
            'email': 'Ama@Example.com',
            'password': 'AmaPass123!',
            'password_confirm': 'AmaPass123!',
            'shop_slug': shop.slug,
            'phone': '024 400 0001',
        }
        data.update(overrides)
        return data

    def test_register_links_customer(self, api_client, shop, customer):
        response = api_client.post(reverse('accounts:register-customer'), self._payload(shop), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['data']['user']['name'] == 'Ama Mensah'
        assert response.data['data']['user']['role'] == UserRole.CUSTOMER
        customer.refresh_from_db()
        assert customer.user.email == 'ama@example.com'
        assert customer.email == 'ama@example.com'

    def test_unknown_phone(self, api_client, shop, customer):
        payload = self._payload(shop, phone='0200000000')
        response = api_client.post(reverse('accounts:register-customer'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'No customer with this phone number exists in that shop'
        assert not User.objects.filter(role=UserRole.CUSTOMER).exists()

    def test_already_registered(self, api_client, shop, portal_user):
        payload = self._payload(shop, email='second@example.com')
        response = api_client.post(reverse('accounts:register-customer'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'This customer already has a portal account'

    def test_email_taken(self, api_client, shop, customer, shop_admin):
        payload = self._payload(shop, email=shop_admin.user.email)
        response = api_client.post(reverse('accounts:register-customer'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        customer.refresh_from_db()
        assert customer.user is None

    def test_password_mismatch(self, api_client, shop, customer):
        payload = self._payload(shop, password_confirm='Other123!')
        response = api_client.post(reverse('accounts:register-customer'), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data


# =============================================================================
# User Model Tests
# =============================================================================

@pytest.mark.django_db
class TestUserModel:

    def test_create_user(self, db):
        user = User.objects.create_user(email='Model@Example.com', password=PASSWORD)

        assert user.email == 'model@example.com'
        assert user.check_password(PASSWORD)
        assert user.role == UserRole.CUSTOMER
        assert user.is_staff is False

    def test_create_superuser(self, db):
        user = User.objects.create_superuser(email='admin@example.com', password=PASSWORD)

        assert user.is_superuser is True
        assert user.is_super_admin is True

    def test_get_display_name(self, db):
        user = User.objects.create_user(email='kofi@example.com', password=PASSWORD)
        assert user.get_display_name() == 'kofi'
        assert str(user) == 'kofi@example.com'
