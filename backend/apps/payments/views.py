"""
Payments views: wallet top-up requests and promo codes.
"""
import logging

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import filters, generics, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.apps.accounts.permissions import IsAdmin
from backend.core.responses import EnvelopeMixin, success

from .models import PromoCode, TopUpRequest
from .promotions import PromoUsageTracker
from .serializers import (
    AdminTopUpRequestSerializer,
    PromoCodeSerializer,
    PromoPreviewSerializer,
    PromoValidateSerializer,
    TopUpRequestCreateSerializer,
    TopUpRequestSerializer,
    TopUpReviewSerializer,
)
from .services import TopUpService

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# TOP-UP REQUESTS
# ----------------------------------------------------------------------

class TopUpRequestCreateView(APIView):
    """Submit a balance top-up with an optional payment screenshot."""
    permission_classes = [IsAuthenticated]

    @extend_schema(request=TopUpRequestCreateSerializer, responses={201: TopUpRequestSerializer})
    def post(self, request):
        serializer = TopUpRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        topup = TopUpService().create_request(
            user=request.user,
            amount=data['amount'],
            currency=data['currency'],
            payment_method=data['payment_method'],
            transaction_id=data['transaction_id'],
            proof=data.get('payment_screenshot'),
        )
        return success(
            TopUpRequestSerializer(topup).data,
            message='Balance request submitted successfully',
            status=status.HTTP_201_CREATED,
        )


class MyTopUpRequestsView(EnvelopeMixin, generics.ListAPIView):
    serializer_class = TopUpRequestSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return TopUpRequest.objects.none()
        return TopUpService().user_requests(self.request.user)


class AdminTopUpRequestsView(EnvelopeMixin, generics.ListAPIView):
    serializer_class = AdminTopUpRequestSerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):
        return TopUpService().all_requests(status=self.request.query_params.get('status'))


class TopUpApproveView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(request=TopUpReviewSerializer, responses={200: AdminTopUpRequestSerializer})
    def patch(self, request, pk):
        serializer = TopUpReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        topup = TopUpService().approve(pk, reviewer=request.user, notes=serializer.validated_data['notes'])
        return success(AdminTopUpRequestSerializer(topup).data, message='Request approved')


class TopUpRejectView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(request=TopUpReviewSerializer, responses={200: AdminTopUpRequestSerializer})
    def patch(self, request, pk):
        serializer = TopUpReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        topup = TopUpService().reject(pk, reviewer=request.user, notes=serializer.validated_data['notes'])
        return success(AdminTopUpRequestSerializer(topup).data, message='Request rejected')


# ----------------------------------------------------------------------
# PROMO CODES
# ----------------------------------------------------------------------

class PromoCodeViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    """
    CRUD for promo codes. Admin only.
    """
    queryset = PromoCode.objects.all().order_by('-created_at')
    serializer_class = PromoCodeSerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_active', 'discount_type']
    search_fields = ['code']
    ordering_fields = ['created_at', 'expires_at', 'uses_count']

    def perform_create(self, serializer):
        promo = serializer.save()
        logger.info("Promo code %s created by %s", promo.code, self.request.user.email)

    def destroy(self, request, *args, **kwargs):
        promo = self.get_object()
        code = promo.code
        promo.delete()
        logger.info("Promo code %s deleted by %s", code, request.user.email)
        return success(message='Promo deleted')


class PromoValidateView(APIView):
    """Preview a promo discount for a cart total; does not consume a use."""
    permission_classes = [IsAuthenticated]

    @extend_schema(request=PromoValidateSerializer, responses={200: PromoPreviewSerializer})
    def post(self, request):
        serializer = PromoValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        preview = PromoUsageTracker().validate(
            serializer.validated_data['code'],
            serializer.validated_data['cart_total'],
        )
        data = PromoPreviewSerializer(preview).data
        data['is_valid'] = True
        return success(data)
