from rest_framework import serializers

from backend.apps.products.models import Plan
from backend.core.serializers import CamelCaseInputMixin

from .models import LicenseKey


class LicenseKeySerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    assigned_to_email = serializers.EmailField(source='assigned_to.email', read_only=True, default=None)

    class Meta:
        model = LicenseKey
        fields = [
            'id', 'product_id', 'product_name', 'plan', 'key', 'status',
            'assigned_to', 'assigned_to_email', 'assigned_at', 'created_at',
        ]
        read_only_fields = fields


class BulkAddSerializer(CamelCaseInputMixin, serializers.Serializer):
    product_id = serializers.UUIDField()
    plan = serializers.ChoiceField(choices=Plan.choices, default=Plan.LIFETIME)
    keys = serializers.ListField(
        child=serializers.CharField(max_length=255, allow_blank=True, trim_whitespace=True),
        allow_empty=False,
    )
