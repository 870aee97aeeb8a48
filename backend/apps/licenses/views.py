"""
License inventory views. Admin only.
"""
import uuid

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import filters, generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.views import APIView

from backend.apps.accounts.permissions import IsAdmin
from backend.core.responses import EnvelopeMixin, success

from .filters import LicenseKeyFilter
from .models import LicenseKey
from .serializers import BulkAddSerializer, LicenseKeySerializer
from .services import LicensePool


class LicenseKeyListCreateView(EnvelopeMixin, generics.ListAPIView):
    """
    GET: every key with product name and assignee.
    POST: bulk import keys for a product/plan.
    """
    queryset = LicenseKey.objects.select_related('product', 'assigned_to').order_by('-created_at')
    serializer_class = LicenseKeySerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = LicenseKeyFilter
    search_fields = ['key', 'product__name', 'assigned_to__email']
    ordering_fields = ['created_at', 'assigned_at', 'plan', 'status']

    @extend_schema(request=BulkAddSerializer, responses={201: LicenseKeySerializer(many=True)})
    def post(self, request):
        serializer = BulkAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = LicensePool().bulk_add(data['product_id'], data['plan'], data['keys'])
        message = f"{result.created_count} license keys added."
        if result.duplicates:
            message += f" {len(result.duplicates)} duplicates skipped."
        return success(
            {
                'created': LicenseKeySerializer(result.created, many=True).data,
                'created_count': result.created_count,
                'duplicates': result.duplicates,
            },
            message=message,
            status=status.HTTP_201_CREATED,
        )


class UnusedLicenseKeysView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(parameters=[OpenApiParameter('productId', str)], responses={200: None})
    def delete(self, request):
        product_id = request.query_params.get('productId') or request.query_params.get('product_id')
        if product_id:
            try:
                product_id = uuid.UUID(str(product_id))
            except ValueError:
                raise ValidationError({'productId': 'Must be a valid UUID.'})
        deleted = LicensePool().delete_unused(product_id)
        return success({'count': deleted}, message=f"Deleted {deleted} unused licenses.")


class LicenseKeyDetailView(APIView):
    permission_classes = [IsAdmin]

    def delete(self, request, pk):
        LicensePool().delete_one(pk)
        return success(message='License deleted')
