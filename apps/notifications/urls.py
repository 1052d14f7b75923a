from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'notifications'

router = SimpleRouter()
router.register(r'customer/notifications', views.CustomerNotificationViewSet, basename='customer-notification')

urlpatterns = [
    path('', include(router.urls)),
]
