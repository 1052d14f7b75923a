import pytest
from datetime import date, timedelta
from decimal import Decimal

from django.utils import timezone

from apps.accounting.models import Budget, BudgetPeriod, ExpenseCategory
from apps.accounting.services import (
    InvalidBudgetError,
    InvalidExpenseError,
    InvalidScheduledReportError,
    aging_bucket,
    budget_variance,
    clean_recipients,
    create_budget,
    create_scheduled_report,
    get_aging_report,
    get_collection_performance,
    get_profit_margin_report,
    get_revenue_report,
    period_end,
    record_expense,
    toggle_scheduled_report,
)
from apps.purchases.models import Purchase
from apps.purchases.services import create_purchase


# =============================================================================
# Budgets and expenses
# =============================================================================

class TestPeriodEnd:

    def test_month(self):
        assert period_end(BudgetPeriod.MONTHLY, date(2024, 2, 10)) == date(2024, 2, 29)

    def test_quarter(self):
        assert period_end(BudgetPeriod.QUARTERLY, date(2026, 5, 1)) == date(2026, 6, 30)
        assert period_end(BudgetPeriod.QUARTERLY, date(2026, 11, 15)) == date(2026, 12, 31)

    def test_year(self):
        assert period_end(BudgetPeriod.YEARLY, date(2026, 3, 3)) == date(2026, 12, 31)


@pytest.mark.django_db
class TestBudgets:

    def test_end_date_defaults_to_period_end(self, business, trusted_accountant):
        budget = create_budget(
            business=business,
            name='Q1 transport',
            amount=Decimal('1000'),
            start_date=date(2026, 1, 1),
            period=BudgetPeriod.QUARTERLY,
            category=ExpenseCategory.TRANSPORT,
            actor=trusted_accountant.user,
        )
        assert budget.end_date == date(2026, 3, 31)

    def test_variance_counts_matching_expenses_only(self, business, shop, trusted_accountant):
        actor = trusted_accountant.user
        budget = create_budget(
            business=business, name='January rent', amount=Decimal('800'),
            start_date=date(2026, 1, 1), category=ExpenseCategory.RENT, actor=actor,
        )
        record_expense(business=business, category=ExpenseCategory.RENT, amount=Decimal('500'),
                       expense_date=date(2026, 1, 5), actor=actor, shop_id=shop.id)
        record_expense(business=business, category=ExpenseCategory.RENT, amount=Decimal('100'),
                       expense_date=date(2026, 2, 1), actor=actor)
        record_expense(business=business, category=ExpenseCategory.UTILITIES, amount=Decimal('50'),
                       expense_date=date(2026, 1, 9), actor=actor)

        variance = budget_variance(budget)

        assert variance['spent'] == Decimal('500')
        assert variance['variance'] == Decimal('300')
        assert variance['percent_used'] == Decimal('62.50')
        assert variance['is_over_budget'] is False

    def test_over_budget(self, business, trusted_accountant):
        actor = trusted_accountant.user
        budget = create_budget(business=business, name='All', amount=Decimal('30'),
                               start_date=date(2026, 1, 1), actor=actor)
        record_expense(business=business, category=ExpenseCategory.OTHER, amount=Decimal('45'),
                       expense_date=date(2026, 1, 20), actor=actor)

        variance = budget_variance(budget)

        assert variance['variance'] == Decimal('-15')
        assert variance['percent_used'] == Decimal('150.00')
        assert variance['is_over_budget'] is True

    def test_zero_allocation_reports_zero_percent(self, business):
        budget = Budget(business=business, amount=Decimal('0'), start_date=date(2026, 1, 1),
                        end_date=date(2026, 1, 31))
        assert budget_variance(budget)['percent_used'] == Decimal('0.00')

    def test_validation(self, business, other_shop, trusted_accountant):
        actor = trusted_accountant.user
        with pytest.raises(InvalidBudgetError, match='name'):
            create_budget(business=business, name=' ', amount=Decimal('1'), start_date=date(2026, 1, 1), actor=actor)
        with pytest.raises(InvalidBudgetError, match='Start date'):
            create_budget(business=business, name='Bad', amount=Decimal('1'), start_date=date(2026, 2, 1),
                          end_date=date(2026, 1, 1), actor=actor)
        with pytest.raises(InvalidExpenseError, match='does not belong'):
            record_expense(business=business, category=ExpenseCategory.RENT, amount=Decimal('1'),
                           expense_date=date(2026, 1, 1), actor=actor, shop_id=other_shop.id)


# =============================================================================
# Reports
# =============================================================================

class TestAgingBucket:

    @pytest.mark.parametrize('days, bucket', [
        (-10, 'current'),
        (30, 'current'),
        (31, 'days_31_60'),
        (60, 'days_31_60'),
        (61, 'days_61_90'),
        (90, 'days_61_90'),
        (91, 'over_90'),
    ])
    def test_boundaries(self, days, bucket):
        assert aging_bucket(days) == bucket


@pytest.mark.django_db
class TestReports:

    def test_aging_report_groups_by_customer(self, business, sale, shop, customer, product, shop_admin):
        now = timezone.now()
        Purchase.objects.filter(id=sale.id).update(due_date=now - timedelta(days=45))
        late = create_purchase(shop=shop, customer_id=customer.id, items=[{'product_id': product.id}],
                               actor=shop_admin.user)
        Purchase.objects.filter(id=late.id).update(due_date=now - timedelta(days=120))

        row, = get_aging_report(business=business, as_of=now)

        assert row['customer_name'] == 'Ama Mensah'
        assert row['days_31_60'] == Decimal('2000.00')
        assert row['over_90'] == Decimal('1000.00')
        assert row['current'] == Decimal('0.00')
        assert row['total_outstanding'] == Decimal('3000.00')

    def test_aging_report_skips_settled_purchases(self, business, shop, customer, product, shop_admin):
        create_purchase(shop=shop, customer_id=customer.id, items=[{'product_id': product.id}],
                        purchase_type='CASH', down_payment=Decimal('900'), actor=shop_admin.user)
        assert get_aging_report(business=business) == []

    def test_revenue_report_by_month(self, business, collection):
        today = timezone.localdate()
        row, = get_revenue_report(business=business, start_date=today, end_date=today, group_by='month')

        assert row['period'] == today.strftime('%Y-%m')
        assert row['revenue'] == Decimal('2000.00')
        assert row['collections'] == Decimal('400.00')
        assert row['credit_sales'] == 1
        assert row['payment_count'] == 1

    def test_collection_performance(self, business, collection, collector):
        row, = get_collection_performance(business=business)

        assert row['collector_id'] == collector.id
        assert row['total_collected'] == Decimal('400.00')
        assert row['mobile_money_collected'] == Decimal('400.00')
        assert row['cash_collected'] == Decimal('0.00')

    def test_profit_margin_uses_cost_price(self, business, sale, shop):
        row, = get_profit_margin_report(business=business)

        assert row['shop_name'] == shop.name
        assert row['revenue'] == Decimal('2000.00')
        assert row['cost'] == Decimal('1200.00')
        assert row['profit'] == Decimal('800.00')
        assert row['margin'] == Decimal('40.00')
        assert row['items_sold'] == 2


# =============================================================================
# Scheduled reports
# =============================================================================

class TestCleanRecipients:

    def test_normalises_list_and_string(self):
        assert clean_recipients([' Boss@Example.com ', 'ops@example.com']) == 'boss@example.com,ops@example.com'
        assert clean_recipients('a@example.com, ,b@example.com') == 'a@example.com,b@example.com'

    def test_rejects_empty_and_invalid(self):
        with pytest.raises(InvalidScheduledReportError, match='At least one'):
            clean_recipients([])
        with pytest.raises(InvalidScheduledReportError, match='not-an-email'):
            clean_recipients(['not-an-email'])


@pytest.mark.django_db
class TestScheduledReports:

    def test_toggle_pauses_and_resumes(self, business, accountant):
        report = create_scheduled_report(
            business=business, report_type='AGING', frequency='WEEKLY',
            recipients=['boss@example.com'], actor=accountant.user,
        )
        assert report.next_run_at > timezone.now()

        report = toggle_scheduled_report(business=business, report_id=report.id, actor=accountant.user)
        assert report.is_active is False
        assert report.next_run_at is None

        report = toggle_scheduled_report(business=business, report_id=report.id, actor=accountant.user)
        assert report.is_active is True
        assert report.next_run_at is not None
