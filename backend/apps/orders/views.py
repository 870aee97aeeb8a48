"""
Order views: manual, wallet and trial purchases, plus admin review.
"""
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.apps.accounts.permissions import IsAdmin
from backend.core.responses import EnvelopeMixin, success

from .models import Order
from .serializers import (
    AdminOrderSerializer,
    ManualOrderSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    TrialClaimSerializer,
    WalletPurchaseSerializer,
)
from .services import OrderService


class ManualOrderCreateView(APIView):
    """Place an order paid outside the store; an admin completes it later."""
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    @extend_schema(request=ManualOrderSerializer, responses={201: OrderSerializer})
    def post(self, request):
        serializer = ManualOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = OrderService().create_manual_order(
            user=request.user,
            product_id=data['product_id'],
            plan=data['plan'],
            payment_channel=data['payment_method'],
            transaction_id=data['transaction_id'],
            promo_code=data.get('promo_code') or None,
            proof=data.get('payment_screenshot'),
        )
        return success(OrderSerializer(order).data, message='Order placed', status=status.HTTP_201_CREATED)


class WalletPurchaseView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=WalletPurchaseSerializer, responses={200: OrderSerializer})
    def post(self, request):
        serializer = WalletPurchaseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = OrderService().purchase_with_wallet(
            user=request.user,
            product_id=data['product_id'],
            plan=data['plan'],
            promo_code=data.get('promo_code') or None,
        )
        return success(OrderSerializer(order).data, message='Purchase successful')


class TrialClaimView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=TrialClaimSerializer, responses={200: OrderSerializer})
    def post(self, request):
        serializer = TrialClaimSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService().claim_trial(request.user, serializer.validated_data['product_id'])
        return success(OrderSerializer(order).data, message='Free trial claimed')


class MyOrdersView(EnvelopeMixin, generics.ListAPIView):
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Order.objects.none()
        return OrderService().orders_for_user(self.request.user)


class AdminOrdersView(EnvelopeMixin, generics.ListAPIView):
    serializer_class = AdminOrderSerializer
    permission_classes = [IsAdmin]

    @extend_schema(parameters=[OpenApiParameter('status', str, enum=Order.Status.values)])
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        return OrderService().all_orders(status=self.request.query_params.get('status'))


class OrderStatusView(APIView):
    permission_classes = [IsAdmin]

    @extend_schema(request=OrderStatusSerializer, responses={200: AdminOrderSerializer})
    def patch(self, request, pk):
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService().update_status(pk, serializer.validated_data['status'], actor=request.user)
        return success(AdminOrderSerializer(order).data, message=f'Order {order.status}')
