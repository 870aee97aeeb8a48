from rest_framework import serializers

from backend.core.serializers import CamelCaseInputMixin

from .models import CredentialResetRequest


class ResetRequestCreateSerializer(CamelCaseInputMixin, serializers.Serializer):
    product_id = serializers.UUIDField()
    order_id = serializers.UUIDField()
    username = serializers.CharField(max_length=255)
    password = serializers.CharField(max_length=255, write_only=True, trim_whitespace=False)


class ResetStatusSerializer(CamelCaseInputMixin, serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[CredentialResetRequest.Status.APPROVED, CredentialResetRequest.Status.REJECTED]
    )
    admin_response = serializers.CharField(required=False, allow_blank=True, default="")


class ResetRequestSerializer(serializers.ModelSerializer):
    """Customer view; the stored password is never returned."""
    product_id = serializers.UUIDField(read_only=True)
    order_id = serializers.UUIDField(read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = CredentialResetRequest
        fields = [
            'id', 'product_id', 'product_name', 'order_id', 'username',
            'status', 'admin_response', 'processed_at', 'created_at',
        ]
        read_only_fields = fields


class AdminResetRequestSerializer(ResetRequestSerializer):
    user_id = serializers.UUIDField(read_only=True)
    user_email = serializers.EmailField(source='user.email', read_only=True)
    user_name = serializers.CharField(source='user.full_name', read_only=True)
    password = serializers.SerializerMethodField()

    class Meta(ResetRequestSerializer.Meta):
        fields = ResetRequestSerializer.Meta.fields + ['user_id', 'user_email', 'user_name', 'password']
        read_only_fields = fields

    def get_password(self, obj):
        return obj.get_password()
