"""Accounting services: reports, budgets, expenses and scheduled reports."""

from .exceptions import (
    AccountingServiceError,
    InvalidExpenseError,
    InvalidBudgetError,
    BudgetNotFoundError,
    InvalidScheduledReportError,
    ScheduledReportNotFoundError,
)
from .budget_management import (
    record_expense,
    list_expenses,
    period_end,
    budget_spent,
    budget_variance,
    create_budget,
    delete_budget,
    list_budgets,
)
from .reports import (
    aging_bucket,
    get_aging_report,
    get_revenue_report,
    get_collection_performance,
    get_profit_margin_report,
    get_accountant_dashboard,
)
from .scheduled_reports import (
    next_run,
    clean_recipients,
    create_scheduled_report,
    toggle_scheduled_report,
    delete_scheduled_report,
    list_scheduled_reports,
)

__all__ = [
    # Exceptions
    'AccountingServiceError',
    'InvalidExpenseError',
    'InvalidBudgetError',
    'BudgetNotFoundError',
    'InvalidScheduledReportError',
    'ScheduledReportNotFoundError',

    # Expenses and budgets
    'record_expense',
    'list_expenses',
    'period_end',
    'budget_spent',
    'budget_variance',
    'create_budget',
    'delete_budget',
    'list_budgets',

    # Reports
    'aging_bucket',
    'get_aging_report',
    'get_revenue_report',
    'get_collection_performance',
    'get_profit_margin_report',
    'get_accountant_dashboard',

    # Scheduled reports
    'next_run',
    'clean_recipients',
    'create_scheduled_report',
    'toggle_scheduled_report',
    'delete_scheduled_report',
    'list_scheduled_reports',
]
