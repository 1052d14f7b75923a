import pytest
from datetime import timedelta

from apps.accounts.models import UserRole
from apps.accounts.services import EmailAlreadyRegisteredError, UserRegistrationError
from apps.tenants.models import Business, StaffMember, StaffRole
from apps.tenants.services import (
    AlreadyStaffMemberError,
    DuplicateSlugError,
    InactiveTenantError,
    InvalidStaffInputError,
    MissingPermissionError,
    TenantAccessDeniedError,
    create_business,
    create_shop,
    create_staff_member,
    require_permission,
    resolve_accountant,
    resolve_business_admin,
    resolve_shop_admin,
    resolve_shop_staff,
    update_accountant_permissions,
)


@pytest.mark.django_db
class TestCreateBusiness:

    def test_creates_owner_account(self, super_admin):
        business = create_business(
            name='Volta Traders',
            owner_email='Owner@Volta.example',
            owner_name='Kofi',
            owner_password='Secret123!',
            actor=super_admin,
        )

        assert business.slug == 'volta-traders'
        assert business.owner.email == 'owner@volta.example'
        assert business.owner.role == UserRole.BUSINESS_ADMIN

    def test_reuses_existing_business_admin(self, super_admin, business):
        second = create_business(
            name='Acme',
            owner_email=business.owner.email,
            owner_name='ignored',
            actor=super_admin,
        )

        assert second.owner == business.owner
        assert second.slug == 'acme-2'

    def test_explicit_slug_must_be_free(self, super_admin, business):
        with pytest.raises(DuplicateSlugError):
            create_business(
                name='Other', slug='acme', owner_email='x@example.com',
                owner_name='X', owner_password='Secret123!', actor=super_admin,
            )

    def test_new_owner_needs_password(self, super_admin):
        with pytest.raises(UserRegistrationError):
            create_business(name='Other', owner_email='x@example.com', owner_name='X', actor=super_admin)

    def test_email_of_other_role_is_rejected(self, super_admin, sales_staff):
        with pytest.raises(EmailAlreadyRegisteredError):
            create_business(
                name='Other', owner_email=sales_staff.user.email, owner_name='X', actor=super_admin
            )


@pytest.mark.django_db
def test_create_shop_derives_slug(business, business_owner):
    shop = create_shop(business=business, name='Acme Takoradi ', actor=business_owner)

    assert shop.name == 'Acme Takoradi'
    assert shop.slug == 'acme-takoradi'
    assert shop.country == 'Ghana'


@pytest.mark.django_db
class TestStaffMembers:

    def test_accountant_flags(self, shop, business_owner):
        member = create_staff_member(
            shop=shop,
            email='Books@Example.com',
            name='Abena',
            password='Secret123!',
            role=StaffRole.ACCOUNTANT,
            permissions={'can_confirm_payments': True},
            actor=business_owner,
        )

        assert member.user.email == 'books@example.com'
        assert member.user.role == StaffRole.ACCOUNTANT
        assert member.can_confirm_payments is True
        assert member.can_manage_budgets is False

    def test_flags_ignored_for_other_roles(self, shop, business_owner):
        member = create_staff_member(
            shop=shop, email='s@example.com', name='S', password='Secret123!',
            role=StaffRole.SALES_STAFF, permissions={'can_confirm_payments': True},
            actor=business_owner,
        )
        assert member.can_confirm_payments is False

    @pytest.mark.parametrize('overrides', [
        {'name': '  '},
        {'email': 'not-an-email'},
        {'password': 'short'},
        {'role': 'JANITOR'},
    ])
    def test_invalid_input(self, shop, business_owner, overrides):
        values = {
            'email': 'new@example.com', 'name': 'New', 'password': 'Secret123!',
            'role': StaffRole.SALES_STAFF,
        }
        values.update(overrides)
        with pytest.raises(InvalidStaffInputError):
            create_staff_member(shop=shop, actor=business_owner, **values)

    def test_already_member(self, shop, business_owner, sales_staff):
        with pytest.raises(AlreadyStaffMemberError):
            create_staff_member(
                shop=shop, email=sales_staff.user.email.upper(), name='Again',
                password='Secret123!', role=StaffRole.SALES_STAFF, actor=business_owner,
            )

    def test_update_permissions_ignores_unknown_keys(self, business, business_owner, accountant):
        member = update_accountant_permissions(
            member_id=accountant.id,
            business=business,
            permissions={'can_manage_budgets': True, 'is_superuser': True},
            actor=business_owner,
        )

        assert member.can_manage_budgets is True
        assert StaffMember.objects.get(id=accountant.id).can_manage_budgets is True


@pytest.mark.django_db
class TestAccessResolution:

    def test_business_admin(self, business, business_owner, super_admin):
        assert resolve_business_admin(business_owner, 'acme').business == business
        assert resolve_business_admin(super_admin, 'acme').membership is None

    def test_other_owner_is_denied(self, business, other_business):
        with pytest.raises(TenantAccessDeniedError):
            resolve_business_admin(other_business.owner, 'acme')

    def test_shop_admin_context(self, shop, shop_admin, business_owner):
        assert resolve_shop_admin(shop_admin.user, shop.slug).membership == shop_admin
        assert resolve_shop_admin(business_owner, shop.slug).membership is None

    def test_staff_role_must_match(self, shop, sales_staff):
        with pytest.raises(TenantAccessDeniedError, match='debt collector'):
            resolve_shop_staff(sales_staff.user, shop.slug, StaffRole.DEBT_COLLECTOR)

    def test_inactive_membership(self, shop, collector):
        collector.is_active = False
        collector.save()
        with pytest.raises(TenantAccessDeniedError):
            resolve_shop_staff(collector.user, shop.slug, StaffRole.DEBT_COLLECTOR)

    def test_suspended_business_blocks_shops(self, business, shop, shop_admin):
        Business.objects.filter(id=business.id).update(is_active=False)

        with pytest.raises(InactiveTenantError):
            resolve_shop_admin(shop_admin.user, shop.slug)

    def test_accountant_reaches_business(self, business, accountant):
        context = resolve_accountant(accountant.user, business.slug)
        assert context.shop == accountant.shop

    def test_accountant_on_several_shops_uses_earliest_membership(self, business, accountant, second_shop):
        earlier = StaffMember.objects.create(
            user=accountant.user,
            shop=second_shop,
            role=StaffRole.ACCOUNTANT,
            can_manage_budgets=True,
        )
        StaffMember.objects.filter(id=earlier.id).update(created_at=accountant.created_at - timedelta(days=1))

        for _ in range(3):
            context = resolve_accountant(accountant.user, business.slug)
            assert context.membership == earlier
            assert context.shop == second_shop

    def test_require_permission(self, accountant, trusted_accountant, shop_admin):
        require_permission(None, 'can_manage_budgets', 'nope')
        require_permission(shop_admin, 'can_manage_budgets', 'nope')
        require_permission(trusted_accountant, 'can_manage_budgets', 'nope')

        with pytest.raises(MissingPermissionError, match='nope'):
            require_permission(accountant, 'can_manage_budgets', 'nope')
