from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from backend.core.serializers import CamelCaseInputMixin

from .models import PromoCode, TopUpRequest
from .promotions import normalize_code


def validate_currency_code(value):
    code = (value or "USD").strip().upper()
    if code not in settings.SUPPORTED_CURRENCIES:
        raise serializers.ValidationError(f"Unsupported currency: {code}")
    return code


# ----------------------------------------------------------------------
# Top-up requests
# ----------------------------------------------------------------------
class TopUpRequestCreateSerializer(CamelCaseInputMixin, serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    currency = serializers.CharField(max_length=3, required=False, default="USD")
    payment_method = serializers.CharField(max_length=50)
    transaction_id = serializers.CharField(max_length=255)
    payment_screenshot = serializers.FileField(required=False, allow_null=True)

    def validate_currency(self, value):
        return validate_currency_code(value)


class TopUpRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = TopUpRequest
        fields = [
            'id', 'amount', 'currency', 'payment_method', 'transaction_id',
            'proof_url', 'status', 'credited_amount', 'review_notes',
            'processed_at', 'created_at',
        ]
        read_only_fields = fields


class AdminTopUpRequestSerializer(TopUpRequestSerializer):
    user_id = serializers.UUIDField(read_only=True)
    user_name = serializers.CharField(source='user.full_name', read_only=True)
    user_email = serializers.EmailField(source='user.email', read_only=True)

    class Meta(TopUpRequestSerializer.Meta):
        fields = TopUpRequestSerializer.Meta.fields + ['user_id', 'user_name', 'user_email']
        read_only_fields = fields


class TopUpReviewSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, default="")


# ----------------------------------------------------------------------
# Promo codes
# ----------------------------------------------------------------------
class PromoCodeSerializer(CamelCaseInputMixin, serializers.ModelSerializer):
    class Meta:
        model = PromoCode
        fields = [
            'id', 'code', 'discount_type', 'value', 'max_uses', 'uses_count',
            'expires_at', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'uses_count', 'created_at', 'updated_at']

    def to_internal_value(self, data):
        # Admin clients send the discount type as `type`.
        if 'type' in data and 'discount_type' not in data and 'discountType' not in data:
            data = data.copy()
            data['discount_type'] = data['type']
        return super().to_internal_value(data)

    def validate_code(self, value):
        code = normalize_code(value)
        if not code:
            raise serializers.ValidationError("Code is required.")
        clash = PromoCode.objects.filter(code=code)
        if self.instance is not None:
            clash = clash.exclude(pk=self.instance.pk)
        if clash.exists():
            raise serializers.ValidationError("A promo code with this code already exists.")
        return code

    def validate(self, attrs):
        discount_type = attrs.get('discount_type', getattr(self.instance, 'discount_type', PromoCode.DiscountType.PERCENT))
        value = attrs.get('value', getattr(self.instance, 'value', None))
        if value is not None:
            if value <= 0:
                raise serializers.ValidationError({'value': "Discount value must be positive."})
            if discount_type == PromoCode.DiscountType.PERCENT and value > 100:
                raise serializers.ValidationError({'value': "Percent discounts cannot exceed 100."})

        max_uses = attrs.get('max_uses', getattr(self.instance, 'max_uses', None))
        uses_count = getattr(self.instance, 'uses_count', 0)
        if max_uses is not None and max_uses < uses_count:
            raise serializers.ValidationError({'max_uses': f"Code has already been used {uses_count} times."})
        return attrs


class PromoValidateSerializer(CamelCaseInputMixin, serializers.Serializer):
    code = serializers.CharField(max_length=50)
    cart_total = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.00"))


class PromoPreviewSerializer(serializers.Serializer):
    code = serializers.CharField()
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    final_price = serializers.DecimalField(max_digits=12, decimal_places=2)
