from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'landing'

router = SimpleRouter()
router.register(r'super-admin/contact-messages', views.ContactMessageViewSet, basename='contact-message')

urlpatterns = [
    # GET /api/public/stats/
    path('public/stats/', views.public_stats, name='public-stats'),

    # POST /api/public/contact/
    path('public/contact/', views.contact, name='contact'),

    path('', include(router.urls)),
]
