from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'purchases'

SHOP = r'shop-admin/(?P<shop_slug>[-\w]+)'
SALES = r'sales-staff/(?P<shop_slug>[-\w]+)'
COLLECTOR = r'collector/(?P<shop_slug>[-\w]+)'

router = SimpleRouter()
router.register(rf'{SHOP}/purchases', views.ShopPurchaseViewSet, basename='shop-purchase')
router.register(rf'{SHOP}/payments', views.ShopPaymentViewSet, basename='shop-payment')
router.register(r'business-admin/(?P<business_slug>[-\w]+)/payments', views.BusinessPaymentViewSet, basename='business-payment')
router.register(rf'{SALES}/sales', views.SalesPurchaseViewSet, basename='sales-purchase')
router.register(rf'{COLLECTOR}/payments', views.CollectorPaymentViewSet, basename='collector-payment')
router.register(r'customer/purchases', views.CustomerPurchaseViewSet, basename='customer-purchase')

urlpatterns = [
    # GET /api/business-admin/<business_slug>/{purchases,payments}/export/ - Excel downloads
    path('business-admin/<slug:business_slug>/purchases/export/',
         views.export_purchases_view, name='purchase-export'),
    path('business-admin/<slug:business_slug>/payments/export/',
         views.export_payments_view, name='payment-export'),

    # GET /api/accountant/<business_slug>/exports/{purchases,payments}/
    path('accountant/<slug:business_slug>/exports/purchases/',
         views.accountant_export_purchases, name='accountant-purchase-export'),
    path('accountant/<slug:business_slug>/exports/payments/',
         views.accountant_export_payments, name='accountant-payment-export'),

    # GET/PUT /api/shop-admin/<shop_slug>/policy/
    path('shop-admin/<slug:shop_slug>/policy/', views.shop_policy, name='shop-policy'),

    # GET /api/sales-staff/<shop_slug>/dashboard/
    path('sales-staff/<slug:shop_slug>/dashboard/', views.sales_dashboard, name='sales-dashboard'),

    # GET /api/collector/<shop_slug>/dashboard/
    path('collector/<slug:shop_slug>/dashboard/', views.collector_dashboard, name='collector-dashboard'),

    path('', include(router.urls)),
]
