from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'accounting'

ACCOUNTANT = r'accountant/(?P<business_slug>[-\w]+)'

router = SimpleRouter()
router.register(rf'{ACCOUNTANT}/payments', views.AccountantPaymentViewSet, basename='accountant-payment')
router.register(rf'{ACCOUNTANT}/budgets', views.BudgetViewSet, basename='budget')
router.register(rf'{ACCOUNTANT}/expenses', views.ExpenseViewSet, basename='expense')
router.register(rf'{ACCOUNTANT}/scheduled-reports', views.ScheduledReportViewSet, basename='scheduled-report')

urlpatterns = [
    # GET /api/accountant/<business_slug>/dashboard/
    path('accountant/<slug:business_slug>/dashboard/', views.accountant_dashboard, name='accountant-dashboard'),

    # GET /api/accountant/<business_slug>/reports/...
    path('accountant/<slug:business_slug>/reports/aging/', views.aging_report, name='aging-report'),
    path('accountant/<slug:business_slug>/reports/revenue/', views.revenue_report, name='revenue-report'),
    path('accountant/<slug:business_slug>/reports/collections/', views.collection_performance, name='collection-report'),
    path('accountant/<slug:business_slug>/reports/profit-margins/', views.profit_margins, name='profit-margin-report'),

    path('', include(router.urls)),
]
