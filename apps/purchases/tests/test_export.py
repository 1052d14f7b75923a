import pytest
from decimal import Decimal
from io import BytesIO

import openpyxl
from django.urls import reverse
from rest_framework import status

from apps.purchases.services import (
    InvalidPaymentError,
    build_payments_workbook,
    build_purchases_workbook,
    export_payments,
    record_collector_payment,
    record_payment,
    reject_payment,
)


def rows(sheet):
    return [[cell.value for cell in row] for row in sheet.iter_rows(min_row=2)]


@pytest.fixture
def payments(shop, purchase, shop_admin, collector):
    """One confirmed, one pending and one rejected payment on ``purchase``."""
    confirmed = record_payment(shop=shop, purchase_id=purchase.id, amount=Decimal('200'), actor=shop_admin.user)
    pending = record_collector_payment(
        collector=collector, purchase_id=purchase.id, amount=Decimal('50'), reference='MM-77'
    )
    rejected = record_collector_payment(collector=collector, purchase_id=purchase.id, amount=Decimal('30'))
    reject_payment(payment_id=rejected.id, shop=shop, actor=shop_admin.user, reason='Duplicate slip')
    return confirmed, pending, rejected


@pytest.mark.django_db
class TestPurchasesWorkbook:

    def test_one_row_per_purchase(self, business, purchase, payments):
        sheet = build_purchases_workbook(business)['Purchases']
        headers = [cell.value for cell in sheet[1]]
        row = dict(zip(headers, rows(sheet)[0]))

        assert headers[0] == 'Purchase Number'
        assert sheet['A1'].font.bold
        assert row['Purchase Number'] == 'HP-0001'
        assert row['Shop Slug'] == 'acme-accra'
        assert row['Customer Name'] == 'Ama Mensah'
        assert row['Products'] == '32" Television'
        assert row['SKUs'] == 'TV-32'
        assert row['Total Amount'] == 1000.0
        assert row['Amount Paid'] == 200.0
        assert row['Outstanding'] == 800.0
        assert row['Status'] == 'ACTIVE'

    def test_other_business_is_excluded(self, other_business, purchase):
        assert rows(build_purchases_workbook(other_business)['Purchases']) == []


@pytest.mark.django_db
class TestPaymentsWorkbook:

    def test_all_payments_with_state_and_people(self, business, payments):
        confirmed, pending, rejected = payments
        sheet = build_payments_workbook(business)['Payments']
        headers = [cell.value for cell in sheet[1]]
        by_id = {row[0]: dict(zip(headers, row)) for row in rows(sheet)}

        assert set(by_id) == {str(confirmed.id), str(pending.id), str(rejected.id)}
        assert by_id[str(confirmed.id)]['Status'] == 'Completed'
        assert by_id[str(confirmed.id)]['Recorded By'] == 'shopadmin'
        assert by_id[str(pending.id)]['Status'] == 'Pending'
        assert by_id[str(pending.id)]['Reference'] == 'MM-77'
        assert by_id[str(rejected.id)]['Rejection Reason'] == 'Duplicate slip'
        assert by_id[str(rejected.id)]['Amount'] == 30.0

    @pytest.mark.parametrize('status_filter, expected', [
        ('pending', 'Pending'),
        ('confirmed', 'Completed'),
        ('rejected', 'Rejected'),
    ])
    def test_status_filter(self, business, payments, status_filter, expected):
        sheet = build_payments_workbook(business, status=status_filter)['Payments']
        assert [row[11] for row in rows(sheet)] == [expected]

    def test_unknown_filter(self, business):
        with pytest.raises(InvalidPaymentError):
            build_payments_workbook(business, status='refunded')

    def test_filename_carries_filter(self, business, payments):
        _, filename = export_payments(business, status='pending')
        assert filename.startswith('payments-pending-')
        assert filename.endswith('.xlsx')


@pytest.mark.django_db
class TestExportEndpoints:

    def test_owner_downloads_purchases(self, owner_client, business, purchase):
        url = reverse('purchases:purchase-export', kwargs={'business_slug': business.slug})
        response = owner_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Disposition'].startswith('attachment; filename="purchases_acme_')
        workbook = openpyxl.load_workbook(BytesIO(response.content))
        assert workbook['Purchases'].max_row == 2

    def test_owner_downloads_pending_payments(self, owner_client, business, payments):
        url = reverse('purchases:payment-export', kwargs={'business_slug': business.slug})
        response = owner_client.get(url, {'status': 'pending'})

        assert response.status_code == status.HTTP_200_OK
        workbook = openpyxl.load_workbook(BytesIO(response.content))
        assert workbook['Payments'].max_row == 2

    def test_unknown_status_is_rejected(self, owner_client, business):
        url = reverse('purchases:payment-export', kwargs={'business_slug': business.slug})
        response = owner_client.get(url, {'status': 'refunded'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['success'] is False

    def test_accountant_downloads(self, accountant_client, business, payments):
        for name in ('accountant-purchase-export', 'accountant-payment-export'):
            response = accountant_client.get(reverse(f'purchases:{name}', kwargs={'business_slug': business.slug}))
            assert response.status_code == status.HTTP_200_OK

    def test_collector_is_forbidden(self, collector_client, business):
        url = reverse('purchases:accountant-payment-export', kwargs={'business_slug': business.slug})
        assert collector_client.get(url).status_code == status.HTTP_403_FORBIDDEN
