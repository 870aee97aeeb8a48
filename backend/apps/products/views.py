# FILE: /backend/apps/products/views.py
"""
Product catalogue views: public listing, admin writes and price quotes.
"""
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import filters, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated

from backend.apps.accounts.permissions import IsAdmin
from backend.core.responses import EnvelopeMixin, success

from .filters import ProductFilter
from .models import Product
from .pricing import PriceResolver
from .serializers import PriceQuoteSerializer, ProductSerializer, QuoteRequestSerializer
from .services import delete_product, save_product


# ----------------------------------------------------------------------
# Permission & queryset mixins
# ----------------------------------------------------------------------
class AdminWritePermissionMixin:
    """
    Mixin that grants write permissions only to admin users,
    and read permissions to anyone.
    """
    def get_permissions(self):
        if self.action in ['create', 'update', 'partial_update', 'destroy']:
            permission_classes = [IsAdmin]
        elif self.action == 'quote':
            permission_classes = [IsAuthenticated]
        else:
            permission_classes = [AllowAny]
        return [permission() for permission in permission_classes]


class ActiveOnlyMixin:
    """
    Mixin that filters queryset to active objects for non-admin users.
    """
    def get_queryset(self):
        queryset = super().get_queryset()
        user = self.request.user
        if not (user and user.is_authenticated and getattr(user, 'is_admin', False)):
            queryset = queryset.filter(is_active=True)
        return queryset


# ----------------------------------------------------------------------
# Product ViewSet
# ----------------------------------------------------------------------
class ProductViewSet(EnvelopeMixin, AdminWritePermissionMixin, ActiveOnlyMixin, viewsets.ModelViewSet):
    """
    ViewSet for products. Newest first.
    """
    queryset = Product.objects.all().order_by('-created_at')
    serializer_class = ProductSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = ProductFilter
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price_1_day', 'price_lifetime', 'created_at']
    ordering = ['-created_at']

    def perform_create(self, serializer):
        save_product(serializer=serializer, actor=self.request.user)

    def perform_update(self, serializer):
        save_product(serializer=serializer, actor=self.request.user)

    def destroy(self, request, *args, **kwargs):
        delete_product(self.get_object(), actor=request.user)
        return success(message='Product deleted successfully')

    @extend_schema(
        parameters=[
            OpenApiParameter('plan', str, required=True),
            OpenApiParameter('currency', str),
            OpenApiParameter('promo_code', str),
        ],
        responses={200: PriceQuoteSerializer},
    )
    @action(detail=True, methods=['get'])
    def quote(self, request, pk=None):
        """Preview the charge for a plan; a promo code is checked but not used up."""
        product = self.get_object()
        params = QuoteRequestSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data

        quote = PriceResolver().quote(
            product,
            data['plan'],
            currency=data.get('currency') or request.user.currency,
            promo_code=data.get('promo_code') or None,
        )
        return success(PriceQuoteSerializer(quote.as_dict()).data)
