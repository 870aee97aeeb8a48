"""
Licenses URLs, mounted under /api/licenses/.
"""
from django.urls import path

from . import views

urlpatterns = [
    path('', views.LicenseKeyListCreateView.as_view(), name='license-list'),
    path('unused/', views.UnusedLicenseKeysView.as_view(), name='license-unused'),
    path('<uuid:pk>/', views.LicenseKeyDetailView.as_view(), name='license-detail'),
]
