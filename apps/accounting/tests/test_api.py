import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status

from apps.accounting.models import Budget, Expense, ScheduledReport
from apps.purchases.models import PaymentStatus


def url(name, business, **kwargs):
    return reverse(f'accounting:{name}', kwargs={'business_slug': business.slug, **kwargs})


# =============================================================================
# Dashboard and reports
# =============================================================================

@pytest.mark.django_db
class TestAccountantReports:

    def test_dashboard(self, accountant_client, business, pending_payment):
        response = accountant_client.get(url('accountant-dashboard', business))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_customers'] == 1
        assert response.data['total_purchases'] == 1
        assert response.data['total_outstanding'] == '1000.00'
        assert response.data['total_collected'] == '0.00'
        assert response.data['shop_count'] == 1
        assert len(response.data['monthly']) == 6

    def test_aging_report(self, accountant_client, business, pending_payment):
        response = accountant_client.get(url('aging-report', business))

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['current'] == '1000.00'

    def test_revenue_report_requires_dates(self, accountant_client, business):
        response = accountant_client.get(url('revenue-report', business))
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_revenue_report_rejects_inverted_range(self, accountant_client, business):
        response = accountant_client.get(
            url('revenue-report', business), {'date_from': '2026-02-01', 'date_to': '2026-01-01'}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_profit_margins_require_flag(self, accountant_client, trusted_accountant_client, business):
        denied = accountant_client.get(url('profit-margin-report', business))
        assert denied.status_code == status.HTTP_403_FORBIDDEN
        assert denied.data['error'] == 'You do not have permission to view profit margins'

        allowed = trusted_accountant_client.get(url('profit-margin-report', business))
        assert allowed.status_code == status.HTTP_200_OK

    def test_other_staff_are_forbidden(self, collector_client, shop_admin_client, business):
        assert collector_client.get(url('accountant-dashboard', business)).status_code == 403
        assert shop_admin_client.get(url('accountant-dashboard', business)).status_code == 403

    def test_accountant_of_other_business_is_forbidden(self, accountant_client, other_business):
        response = accountant_client.get(url('accountant-dashboard', other_business))
        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Payments
# =============================================================================

@pytest.mark.django_db
class TestAccountantPayments:

    def test_list_and_search(self, accountant_client, business, pending_payment):
        response = accountant_client.get(url('accountant-payment-list', business), {'search': 'Mensah'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1

    def test_confirm_requires_flag(self, accountant_client, business, pending_payment):
        response = accountant_client.post(url('accountant-payment-confirm', business, pk=pending_payment.id))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_trusted_accountant_confirms(self, trusted_accountant_client, business, pending_payment):
        response = trusted_accountant_client.post(
            url('accountant-payment-confirm', business, pk=pending_payment.id)
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['status'] == PaymentStatus.COMPLETED
        pending_payment.purchase.refresh_from_db()
        assert pending_payment.purchase.outstanding_balance == Decimal('750.00')


# =============================================================================
# Budgets and expenses
# =============================================================================

@pytest.mark.django_db
class TestBudgetsAndExpenses:

    def test_create_budget_requires_flag(self, accountant_client, business):
        data = {'name': 'Rent', 'amount': '500.00', 'start_date': '2026-01-01'}
        response = accountant_client.post(url('budget-list', business), data, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['error'] == 'You do not have permission to manage budgets'
        assert Budget.objects.count() == 0

    def test_budget_variance_in_listing(self, trusted_accountant_client, business):
        data = {'name': 'Rent', 'amount': '500.00', 'start_date': '2026-01-01', 'category': 'RENT'}
        created = trusted_accountant_client.post(url('budget-list', business), data, format='json')
        assert created.status_code == status.HTTP_201_CREATED
        assert created.data['data']['end_date'] == '2026-01-31'

        expense = {'category': 'RENT', 'amount': '125.00', 'expense_date': '2026-01-15'}
        response = trusted_accountant_client.post(url('expense-list', business), expense, format='json')
        assert response.status_code == status.HTTP_201_CREATED

        listing = trusted_accountant_client.get(url('budget-list', business))
        variance = listing.data[0]['variance']
        assert variance['spent'] == '125.00'
        assert variance['variance'] == '375.00'
        assert variance['percent_used'] == '25.00'
        assert variance['is_over_budget'] is False

    def test_delete_budget(self, trusted_accountant_client, accountant_client, business, trusted_accountant):
        budget = Budget.objects.create(
            business=business, name='Misc', amount=Decimal('10'),
            start_date='2026-01-01', end_date='2026-01-31',
        )
        denied = accountant_client.delete(url('budget-detail', business, pk=budget.id))
        assert denied.status_code == status.HTTP_403_FORBIDDEN

        response = trusted_accountant_client.delete(url('budget-detail', business, pk=budget.id))
        assert response.status_code == status.HTTP_200_OK
        assert not Budget.objects.exists()

    def test_expense_filters(self, accountant_client, business):
        accountant_client.post(
            url('expense-list', business),
            {'category': 'TRANSPORT', 'amount': '20.00', 'expense_date': '2026-03-02'},
            format='json',
        )
        accountant_client.post(
            url('expense-list', business),
            {'category': 'RENT', 'amount': '300.00', 'expense_date': '2026-03-01'},
            format='json',
        )

        assert Expense.objects.count() == 2
        response = accountant_client.get(url('expense-list', business), {'category': 'RENT'})
        assert response.data['count'] == 1
        assert response.data['results'][0]['amount'] == '300.00'

    def test_negative_expense_is_rejected(self, accountant_client, business):
        response = accountant_client.post(
            url('expense-list', business),
            {'category': 'RENT', 'amount': '-5', 'expense_date': '2026-03-01'},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Scheduled reports
# =============================================================================

@pytest.mark.django_db
class TestScheduledReportEndpoints:

    def test_create_toggle_delete(self, accountant_client, business):
        data = {'report_type': 'REVENUE', 'frequency': 'MONTHLY', 'recipients': ['Boss@Example.com']}
        created = accountant_client.post(url('scheduled-report-list', business), data, format='json')

        assert created.status_code == status.HTTP_201_CREATED
        assert created.data['data']['recipients'] == ['boss@example.com']
        report_id = created.data['data']['id']

        toggled = accountant_client.post(url('scheduled-report-toggle', business, pk=report_id))
        assert toggled.data['data']['is_active'] is False

        deleted = accountant_client.delete(url('scheduled-report-detail', business, pk=report_id))
        assert deleted.status_code == status.HTTP_200_OK
        assert ScheduledReport.objects.count() == 0

    def test_invalid_recipient(self, accountant_client, business):
        data = {'report_type': 'REVENUE', 'frequency': 'MONTHLY', 'recipients': ['nope']}
        response = accountant_client.post(url('scheduled-report-list', business), data, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
