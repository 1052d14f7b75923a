from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'customers'

router = SimpleRouter()
router.register(r'shop-admin/(?P<shop_slug>[-\w]+)/customers', views.ShopCustomerViewSet, basename='shop-customer')
router.register(r'sales-staff/(?P<shop_slug>[-\w]+)/customers', views.SalesCustomerViewSet, basename='sales-customer')
router.register(r'collector/(?P<shop_slug>[-\w]+)/customers', views.CollectorCustomerViewSet, basename='collector-customer')

urlpatterns = [
    # GET /api/customer/dashboard/
    path('customer/dashboard/', views.portal_dashboard, name='portal-dashboard'),

    path('', include(router.urls)),
]
