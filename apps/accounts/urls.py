from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # Authentication
    path('login/', views.login, name='login'),
    path('logout/', views.logout, name='logout'),

    # Current user
    path('me/', views.get_current_user, name='current-user'),
    path('change-password/', views.change_password_view, name='change-password'),

    # Customer portal sign-up
    path('register/customer/', views.register_customer, name='register-customer'),
]
