"""
URL configuration for High Purchase.

Each app's urls.py carries its routes for every role surface it serves
(``super-admin/``, ``business-admin/<business_slug>/``,
``shop-admin/<shop_slug>/``, ``sales-staff/<shop_slug>/``,
``collector/<shop_slug>/``, ``accountant/<business_slug>/``, ``customer/``,
``public/``), so they are all mounted under ``/api/``.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenRefreshView

from config.views import health_check

urlpatterns = [
    # Health check (for Render)
    path('api/health/', health_check, name='health-check'),

    # Admin
    path('admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='api-schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='api-schema'), name='api-docs'),

    # Authentication
    path('api/auth/', include('apps.accounts.urls')),
    path('api/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Role surfaces
    path('api/', include('apps.tenants.urls')),
    path('api/', include('apps.audit.urls')),
    path('api/', include('apps.catalog.urls')),
    path('api/', include('apps.customers.urls')),
    path('api/', include('apps.purchases.urls')),
    path('api/', include('apps.commissions.urls')),
    path('api/', include('apps.accounting.urls')),
    path('api/', include('apps.notifications.urls')),
    path('api/', include('apps.landing.urls')),
]


# Custom error handlers
handler404 = 'config.views.error_404'
handler500 = 'config.views.error_500'
