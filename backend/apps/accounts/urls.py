# FILE: /backend/apps/accounts/urls.py
from django.urls import path

from .views import (
    CurrentUserView,
    CustomTokenRefreshView,
    UserLoginView,
    UserRegistrationView,
)

urlpatterns = [
    path('auth/register/', UserRegistrationView.as_view(), name='register'),
    path('auth/token/', UserLoginView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('users/me/', CurrentUserView.as_view(), name='user-me'),
]
