"""
Expenses and budgets.

Budget variance is derived on every read from the expenses recorded in
the budget's window; nothing is cached on the Budget row.
"""

import calendar
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet, Sum

from apps.accounts.models import User
from apps.accounting.models import Budget, BudgetPeriod, Expense, ExpenseCategory
from apps.audit.services import log_action
from apps.tenants.models import Business, Shop

from .exceptions import BudgetNotFoundError, InvalidBudgetError, InvalidExpenseError

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def _shop_in_business(business: Business, shop_id, error):
    if not shop_id:
        return None
    shop = Shop.objects.filter(business=business, id=shop_id).first()
    if shop is None:
        raise error("Shop does not belong to this business")
    return shop


# =============================================================================
# Expenses
# =============================================================================

@transaction.atomic
def record_expense(
    *,
    business: Business,
    category: str,
    amount: Decimal,
    expense_date: date,
    actor: User,
    shop_id: UUID | None = None,
    description: str = '',
) -> Expense:
    """
    Record an expense.

    Raises:
        InvalidExpenseError: Non-positive amount, unknown category or a
            shop outside the business
    """
    if Decimal(amount) <= 0:
        raise InvalidExpenseError("Expense amount must be greater than zero")
    if category not in ExpenseCategory.values:
        raise InvalidExpenseError("Invalid expense category")

    expense = Expense.objects.create(
        business=business,
        shop=_shop_in_business(business, shop_id, InvalidExpenseError),
        category=category,
        amount=amount,
        description=(description or '').strip(),
        expense_date=expense_date,
        recorded_by=actor,
    )

    log_action(
        actor=actor,
        action='EXPENSE_RECORDED',
        entity_type='Expense',
        entity_id=expense.id,
        metadata={'category': category, 'amount': amount, 'expense_date': expense_date},
    )
    logger.info("Expense %s of %s recorded for %s", expense.id, amount, business.slug)
    return expense


def list_expenses(*, business: Business, category: str | None = None, shop_id: UUID | None = None,
                  date_from: date | None = None, date_to: date | None = None) -> QuerySet:
    queryset = Expense.objects.select_related('shop').filter(business=business)
    if category:
        queryset = queryset.filter(category=category)
    if shop_id:
        queryset = queryset.filter(shop_id=shop_id)
    if date_from:
        queryset = queryset.filter(expense_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(expense_date__lte=date_to)
    return queryset


# =============================================================================
# Budgets
# =============================================================================

def period_end(period: str, start: date) -> date:
    """Last day of the month, quarter or year containing ``start``."""
    if period == BudgetPeriod.YEARLY:
        return date(start.year, 12, 31)
    if period == BudgetPeriod.QUARTERLY:
        last_month = (start.month - 1) // 3 * 3 + 3
        return date(start.year, last_month, calendar.monthrange(start.year, last_month)[1])
    return date(start.year, start.month, calendar.monthrange(start.year, start.month)[1])


def budget_spent(budget: Budget) -> Decimal:
    expenses = Expense.objects.filter(
        business_id=budget.business_id,
        expense_date__gte=budget.start_date,
        expense_date__lte=budget.end_date,
    )
    if budget.category:
        expenses = expenses.filter(category=budget.category)
    if budget.shop_id:
        expenses = expenses.filter(shop_id=budget.shop_id)
    return expenses.aggregate(total=Sum('amount'))['total'] or ZERO


def budget_variance(budget: Budget) -> dict:
    """
    Compare a budget with what was spent against it.

    Returns:
        dict with ``allocated``, ``spent``, ``variance`` (allocated - spent),
        ``percent_used`` (spent / allocated x 100, 2 dp, 0 when nothing is
        allocated) and ``is_over_budget``
    """
    allocated = Decimal(budget.amount)
    spent = budget_spent(budget)
    if allocated > 0:
        percent = (spent / allocated * 100).quantize(CENT, rounding=ROUND_HALF_UP)
    else:
        percent = ZERO
    return {
        'allocated': allocated,
        'spent': spent,
        'variance': allocated - spent,
        'percent_used': percent,
        'is_over_budget': spent > allocated,
    }


@transaction.atomic
def create_budget(
    *,
    business: Business,
    name: str,
    amount: Decimal,
    start_date: date,
    actor: User,
    period: str = BudgetPeriod.MONTHLY,
    end_date: date | None = None,
    category: str = '',
    shop_id: UUID | None = None,
) -> Budget:
    """
    Create a budget.

    When ``end_date`` is omitted it is the end of the month, quarter or
    year (per ``period``) that contains ``start_date``.

    Raises:
        InvalidBudgetError: Blank name, non-positive amount, inverted dates,
            unknown category or a shop outside the business
    """
    name = (name or '').strip()
    if not name:
        raise InvalidBudgetError("Budget name is required")
    if Decimal(amount) <= 0:
        raise InvalidBudgetError("Budget amount must be greater than zero")
    if category and category not in ExpenseCategory.values:
        raise InvalidBudgetError("Invalid expense category")

    end_date = end_date or period_end(period, start_date)
    if start_date > end_date:
        raise InvalidBudgetError("Start date must be on or before end date")

    budget = Budget.objects.create(
        business=business,
        shop=_shop_in_business(business, shop_id, InvalidBudgetError),
        name=name,
        category=category or '',
        period=period,
        start_date=start_date,
        end_date=end_date,
        amount=amount,
        created_by=actor,
    )

    log_action(
        actor=actor,
        action='BUDGET_CREATED',
        entity_type='Budget',
        entity_id=budget.id,
        metadata={
            'name': name,
            'amount': amount,
            'category': category,
            'start_date': start_date,
            'end_date': end_date,
        },
    )
    return budget


@transaction.atomic
def delete_budget(*, business: Business, budget_id: UUID, actor: User) -> None:
    try:
        budget = Budget.objects.get(business=business, id=budget_id)
    except Budget.DoesNotExist:
        raise BudgetNotFoundError(f"Budget with ID {budget_id} not found")
    name = budget.name
    budget.delete()

    log_action(
        actor=actor,
        action='BUDGET_DELETED',
        entity_type='Budget',
        entity_id=budget_id,
        metadata={'name': name},
    )


def list_budgets(*, business: Business) -> QuerySet:
    return Budget.objects.select_related('shop').filter(business=business)
