# FILE: /backend/apps/products/serializers.py
"""
Serializers for the product catalogue and price quotes.
"""
from decimal import Decimal, InvalidOperation

from django.conf import settings
from rest_framework import serializers

from backend.core.serializers import CamelCaseInputMixin

from .models import Plan, Product


class ProductSerializer(CamelCaseInputMixin, serializers.ModelSerializer):
    """
    Multipart friendly: ``image`` is an optional upload whose public URL ends
    up in ``image_url``; ``currency_prices`` may arrive as a JSON string.
    """
    image = serializers.FileField(write_only=True, required=False, allow_null=True)
    trial_plan = serializers.CharField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'description', 'image', 'image_url',
            'download_link', 'tutorial_video_link', 'activation_process',
            'price_1_day', 'price_7_days', 'price_30_days', 'price_lifetime',
            'currency_prices', 'trial_enabled', 'trial_days', 'trial_plan',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'image_url', 'created_at', 'updated_at']

    def validate(self, attrs):
        if self.instance is None:
            price = attrs.get('price_1_day')
            if not attrs.get('name') or price is None or price <= 0:
                raise serializers.ValidationError(
                    "Product Name and at least 1 Day Price are required."
                )
        for field in ('price_1_day', 'price_7_days', 'price_30_days', 'price_lifetime'):
            if attrs.get(field) is not None and attrs[field] < 0:
                raise serializers.ValidationError({field: "Prices cannot be negative."})
        return attrs

    def validate_currency_prices(self, value):
        if value in (None, ''):
            return {}
        if not isinstance(value, dict):
            raise serializers.ValidationError("Expected an object of currency -> plan -> price.")

        cleaned = {}
        for currency, table in value.items():
            code = str(currency).strip().upper()
            if code not in settings.SUPPORTED_CURRENCIES:
                raise serializers.ValidationError(f"Unsupported currency: {code}")
            if not isinstance(table, dict):
                raise serializers.ValidationError(f"Prices for {code} must be an object keyed by plan.")
            cleaned[code] = {}
            for plan, price in table.items():
                if plan not in Plan.paid():
                    raise serializers.ValidationError(f"Invalid plan for {code}: {plan}")
                try:
                    amount = Decimal(str(price))
                except InvalidOperation:
                    raise serializers.ValidationError(f"Invalid price for {code}/{plan}: {price}")
                if not amount.is_finite() or amount < 0:
                    raise serializers.ValidationError(f"Invalid price for {code}/{plan}: {price}")
                cleaned[code][plan] = str(amount)
        return cleaned


class QuoteRequestSerializer(CamelCaseInputMixin, serializers.Serializer):
    plan = serializers.ChoiceField(choices=Plan.paid())
    currency = serializers.CharField(max_length=3, required=False)
    promo_code = serializers.CharField(max_length=50, required=False, allow_blank=True)

    def validate_currency(self, value):
        code = value.strip().upper()
        if code not in settings.SUPPORTED_CURRENCIES:
            raise serializers.ValidationError(f"Unsupported currency: {code}")
        return code


class PriceQuoteSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    plan = serializers.CharField()
    currency = serializers.CharField()
    base_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    final_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    promo_code = serializers.CharField(allow_null=True)
