"""
Orders URLs, mounted under /api/orders/.
"""
from django.urls import path

from . import views

urlpatterns = [
    path('', views.ManualOrderCreateView.as_view(), name='order-create'),
    path('wallet/', views.WalletPurchaseView.as_view(), name='order-wallet'),
    path('claim-trial/', views.TrialClaimView.as_view(), name='order-claim-trial'),
    path('my-orders/', views.MyOrdersView.as_view(), name='order-my-orders'),
    path('admin/all/', views.AdminOrdersView.as_view(), name='order-admin-all'),
    path('<uuid:pk>/status/', views.OrderStatusView.as_view(), name='order-status'),
]
