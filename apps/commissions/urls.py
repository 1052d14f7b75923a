from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'commissions'

BUSINESS = r'business-admin/(?P<business_slug>[-\w]+)'

router = SimpleRouter()
router.register(r'accountant/(?P<business_slug>[-\w]+)/commissions', views.CommissionViewSet, basename='accountant-commission')
router.register(rf'{BUSINESS}/commissions', views.BusinessCommissionViewSet, basename='business-commission')
router.register(rf'{BUSINESS}/bonus-rules', views.BonusRuleViewSet, basename='bonus-rule')
router.register(rf'{BUSINESS}/bonus-records', views.BonusRecordViewSet, basename='bonus-record')

urlpatterns = [
    # GET /api/business-admin/<business_slug>/bonus-summary/
    path('business-admin/<slug:business_slug>/bonus-summary/', views.bonus_summary, name='bonus-summary'),

    # GET /api/sales-staff/<shop_slug>/bonuses/ and /api/collector/<shop_slug>/bonuses/
    path('sales-staff/<slug:shop_slug>/bonuses/', views.sales_staff_bonuses, name='sales-bonuses'),
    path('collector/<slug:shop_slug>/bonuses/', views.collector_bonuses, name='collector-bonuses'),

    path('', include(router.urls)),
]
