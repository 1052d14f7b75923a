from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'tenants'

router = SimpleRouter()
router.register(r'super-admin/businesses', views.SuperAdminBusinessViewSet, basename='super-business')
router.register(r'super-admin/shops', views.SuperAdminShopViewSet, basename='super-shop')
router.register(
    r'business-admin/(?P<business_slug>[-\w]+)/shops',
    views.BusinessShopViewSet,
    basename='business-shop'
)
router.register(
    r'business-admin/(?P<business_slug>[-\w]+)/staff',
    views.BusinessStaffViewSet,
    basename='business-staff'
)
router.register(
    r'shop-admin/(?P<shop_slug>[-\w]+)/staff',
    views.ShopStaffViewSet,
    basename='shop-staff'
)

urlpatterns = [
    # GET  /api/super-admin/stats/
    path('super-admin/stats/', views.platform_overview, name='platform-overview'),

    # GET  /api/business-admin/<business_slug>/dashboard/
    path(
        'business-admin/<slug:business_slug>/dashboard/',
        views.business_dashboard,
        name='business-dashboard'
    ),

    path('', include(router.urls)),
]
