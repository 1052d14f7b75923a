from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'audit'

router = SimpleRouter()
router.register(r'super-admin/audit-logs', views.AuditLogViewSet, basename='audit-log')

urlpatterns = [
    path('', include(router.urls)),
]
