import pytest
from decimal import Decimal
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.commissions.models import BonusRecord, BonusRule, BonusStatus, CommissionStatus
from apps.commissions.services import trigger_bonus
from apps.tenants.models import StaffRole


def commission_url(name, business, **kwargs):
    return reverse(f'commissions:{name}', kwargs={'business_slug': business.slug, **kwargs})


# =============================================================================
# Commissions
# =============================================================================

@pytest.mark.django_db
class TestCommissionEndpoints:
    """Tests for /api/accountant/<business_slug>/commissions/"""

    def test_list(self, accountant_client, business, commission):
        response = accountant_client.get(commission_url('accountant-commission-list', business))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['amount'] == '50.00'

    def test_calculate(self, accountant_client, business):
        today = timezone.localdate().isoformat()
        data = {'period_start': today, 'period_end': today, 'sales_rate': '0.05', 'collection_rate': '0.02'}
        response = accountant_client.post(
            commission_url('accountant-commission-calculate', business), data, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['success'] is True
        assert response.data['data'] == []

    def test_rate_above_one_is_rejected(self, accountant_client, business):
        data = {'period_start': '2026-01-01', 'period_end': '2026-01-31', 'sales_rate': '5', 'collection_rate': '0'}
        response = accountant_client.post(
            commission_url('accountant-commission-calculate', business), data, format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_approve_requires_flag(self, accountant_client, business, commission):
        response = accountant_client.post(
            commission_url('accountant-commission-approve', business, pk=commission.id)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error'] == 'You do not have permission to approve commissions'
        commission.refresh_from_db()
        assert commission.status == CommissionStatus.PENDING

    def test_trusted_accountant_approves_and_pays(self, trusted_accountant_client, business, commission):
        approve = trusted_accountant_client.post(
            commission_url('accountant-commission-approve', business, pk=commission.id)
        )
        assert approve.status_code == status.HTTP_200_OK
        assert approve.data['data']['status'] == CommissionStatus.APPROVED

        pay = trusted_accountant_client.post(
            commission_url('accountant-commission-pay', business, pk=commission.id),
            {'reference': 'BANK-42'},
            format='json',
        )
        assert pay.status_code == status.HTTP_200_OK
        assert pay.data['data']['status'] == CommissionStatus.PAID
        assert pay.data['data']['payment_reference'] == 'BANK-42'

    def test_paying_pending_commission_fails(self, trusted_accountant_client, business, commission):
        response = trusted_accountant_client.post(
            commission_url('accountant-commission-pay', business, pk=commission.id),
            {'reference': 'BANK-42'},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_business_admin_needs_no_flags(self, owner_client, business, commission):
        response = owner_client.post(commission_url('business-commission-approve', business, pk=commission.id))
        assert response.status_code == status.HTTP_200_OK

    def test_non_accountant_is_forbidden(self, collector_client, business):
        response = collector_client.get(commission_url('accountant-commission-list', business))
        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Bonuses
# =============================================================================

@pytest.mark.django_db
class TestBonusRuleEndpoints:
    """Tests for /api/business-admin/<business_slug>/bonus-rules/"""

    def test_create_rule(self, owner_client, business, shop):
        data = {
            'name': 'Collector 1%',
            'target_role': StaffRole.DEBT_COLLECTOR,
            'shop_id': str(shop.id),
            'trigger_type': 'COLLECTION',
            'calculation_type': 'PERCENTAGE',
            'value': '1.00',
            'maximum_cap': '200.00',
            'tiers': [{'min': '0', 'max': '1000', 'value': '1'}, {'min': '1000', 'value': '2'}],
        }
        response = owner_client.post(commission_url('bonus-rule-list', business), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['data']['shop_name'] == shop.name
        rule = BonusRule.objects.get()
        assert rule.period == 'MONTHLY'
        assert len(rule.tiers) == 2

    def test_zero_value_is_rejected(self, owner_client, business):
        data = {
            'name': 'Nothing',
            'target_role': StaffRole.SALES_STAFF,
            'trigger_type': 'SALE',
            'calculation_type': 'FIXED',
            'value': '0',
        }
        response = owner_client.post(commission_url('bonus-rule-list', business), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert BonusRule.objects.count() == 0

    def test_partial_update_and_destroy(self, owner_client, business):
        rule = BonusRule.objects.create(
            business=business, name='Sale', target_role=StaffRole.SALES_STAFF,
            trigger_type='SALE', calculation_type='FIXED', value=Decimal('5'),
        )
        url = commission_url('bonus-rule-detail', business, pk=rule.id)

        response = owner_client.patch(url, {'value': '7.50'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['value'] == '7.50'

        response = owner_client.delete(url)
        assert response.data['data'] == {'deleted': True, 'deactivated': False}

    def test_rules_of_other_business_are_hidden(self, rival_client, owner_client, business, other_business):
        BonusRule.objects.create(
            business=business, name='Ours', target_role=StaffRole.SALES_STAFF,
            trigger_type='SALE', calculation_type='FIXED', value=Decimal('5'),
        )
        assert rival_client.get(commission_url('bonus-rule-list', business)).status_code == 403
        assert owner_client.get(commission_url('bonus-rule-list', other_business)).status_code == 403


@pytest.mark.django_db
class TestBonusRecordEndpoints:

    @pytest.fixture
    def records(self, business, shop, collector):
        BonusRule.objects.create(
            business=business, name='Per collection', target_role=StaffRole.DEBT_COLLECTOR,
            trigger_type='COLLECTION', calculation_type='FIXED', value=Decimal('10'),
        )
        return [
            trigger_bonus(business=business, shop=shop, trigger_type='COLLECTION', staff_member=collector, amount=1)[0]
            for _ in range(2)
        ]

    def test_bulk_approve(self, owner_client, business, records):
        response = owner_client.post(
            commission_url('bonus-record-approve', business),
            {'record_ids': [str(record.id) for record in records]},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data'] == {'updated': 2}
        assert BonusRecord.objects.filter(status=BonusStatus.APPROVED).count() == 2

    def test_empty_ids_are_rejected(self, owner_client, business, records):
        response = owner_client.post(commission_url('bonus-record-reject', business), {'record_ids': []}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_filter_by_status(self, owner_client, business, records):
        url = commission_url('bonus-record-list', business)
        assert owner_client.get(url, {'status': 'PENDING'}).data['count'] == 2
        assert owner_client.get(url, {'status': 'PAID'}).data['count'] == 0

    def test_summary(self, owner_client, business, records):
        response = owner_client.get(commission_url('bonus-summary', business))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_rules'] == 1
        assert response.data['pending_count'] == 2
        assert response.data['pending_amount'] == '20.00'

    def test_collector_sees_own_bonuses(self, collector_client, shop, records):
        response = collector_client.get(reverse('commissions:collector-bonuses', kwargs={'shop_slug': shop.slug}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_pending'] == '20.00'
        assert response.data['has_active_bonuses'] is True
        assert len(response.data['records']) == 2
