from django.conf import settings
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User


class UserRegistrationSerializer(serializers.ModelSerializer):
    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )

    class Meta:
        model = User
        fields = ['id', 'email', 'password', 'full_name']
        read_only_fields = ['id']
        extra_kwargs = {
            'email': {'required': True},
        }

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data['email'],
            password=validated_data['password'],
            full_name=validated_data.get('full_name', ''),
        )


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Issue tokens that also carry the caller's email and role."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['role'] = user.role
        return token


class UserProfileSerializer(serializers.ModelSerializer):
    """The caller's own profile, including the raw USD wallet balance."""

    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'role', 'balance', 'currency', 'date_joined']
        read_only_fields = ['id', 'email', 'role', 'balance', 'date_joined']

    def validate_currency(self, value):
        value = value.upper()
        if value not in settings.SUPPORTED_CURRENCIES:
            raise serializers.ValidationError(
                f"Unsupported currency. Choose one of: {', '.join(settings.SUPPORTED_CURRENCIES)}."
            )
        return value
