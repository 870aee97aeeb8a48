"""
Payments URLs, mounted under /api/.
"""
from django.urls import include, path
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r'promos', views.PromoCodeViewSet, basename='promo')

urlpatterns = [
    # Must precede the router so "validate" is not taken for a promo id.
    path('promos/validate/', views.PromoValidateView.as_view(), name='promo-validate'),
    path('', include(router.urls)),

    path('balance/', views.TopUpRequestCreateView.as_view(), name='balance-request'),
    path('balance/my-requests/', views.MyTopUpRequestsView.as_view(), name='balance-my-requests'),
    path('balance/admin/all/', views.AdminTopUpRequestsView.as_view(), name='balance-admin-all'),
    path('balance/<uuid:pk>/approve/', views.TopUpApproveView.as_view(), name='balance-approve'),
    path('balance/<uuid:pk>/reject/', views.TopUpRejectView.as_view(), name='balance-reject'),
]
