"""
Support URLs, mounted under /api/resets/.
"""
from django.urls import path

from . import views

urlpatterns = [
    path('', views.ResetRequestCreateView.as_view(), name='reset-create'),
    path('my-requests/', views.MyResetRequestsView.as_view(), name='reset-my-requests'),
    path('admin/all/', views.AdminResetRequestsView.as_view(), name='reset-admin-all'),
    path('<uuid:pk>/', views.ResetRequestStatusView.as_view(), name='reset-status'),
]
