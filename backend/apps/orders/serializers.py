from rest_framework import serializers

from backend.apps.products.models import Plan
from backend.core.serializers import CamelCaseInputMixin

from .models import Order


# ----------------------------------------------------------------------
# Input
# ----------------------------------------------------------------------
class ManualOrderSerializer(CamelCaseInputMixin, serializers.Serializer):
    product_id = serializers.UUIDField()
    plan = serializers.ChoiceField(choices=Plan.paid(), error_messages={'invalid_choice': 'Invalid Plan'})
    payment_method = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    transaction_id = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    promo_code = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    payment_screenshot = serializers.FileField(required=False, allow_null=True)


class WalletPurchaseSerializer(CamelCaseInputMixin, serializers.Serializer):
    product_id = serializers.UUIDField()
    plan = serializers.ChoiceField(choices=Plan.paid(), error_messages={'invalid_choice': 'Invalid Plan'})
    promo_code = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)


class TrialClaimSerializer(CamelCaseInputMixin, serializers.Serializer):
    product_id = serializers.UUIDField()


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[Order.Status.COMPLETED, Order.Status.REJECTED])


# ----------------------------------------------------------------------
# Output
# ----------------------------------------------------------------------
class OrderProductSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    image_url = serializers.URLField()
    download_link = serializers.URLField()
    tutorial_video_link = serializers.URLField()
    activation_process = serializers.CharField()


class OrderSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    product = OrderProductSerializer(read_only=True)
    license_key = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'product_id', 'product', 'plan',
            'currency', 'base_price', 'discount_amount', 'price', 'promo_code',
            'payment_method', 'payment_channel', 'transaction_id', 'payment_proof_url',
            'status', 'license_key', 'completed_at', 'created_at',
        ]
        read_only_fields = fields

    def get_license_key(self, obj):
        if obj.status != Order.Status.COMPLETED or obj.license_key is None:
            return None
        return obj.license_key.key


class AdminOrderSerializer(OrderSerializer):
    user_id = serializers.UUIDField(read_only=True)
    user_email = serializers.EmailField(source='user.email', read_only=True)
    user_name = serializers.CharField(source='user.full_name', read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ['user_id', 'user_email', 'user_name']
        read_only_fields = fields
