from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from src.shared.serializers import StrictFieldsMixin

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    isAdmin = serializers.BooleanField(source="has_admin_rights", read_only=True)
    createdAt = serializers.DateTimeField(source="date_joined", read_only=True)

    class Meta:
        model = User
        fields = ("id", "username", "email", "phone", "isAdmin", "createdAt")
        read_only_fields = fields


class RegisterSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)

    class Meta:
        model = User
        fields = ("username", "email", "password", "phone")

    def validate_email(self, value):
        value = User.objects.normalize_email(value).lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        return User.objects.create_user(
            username=validated_data["username"],
            email=validated_data["email"],
            password=validated_data["password"],
            phone=validated_data.get("phone", ""),
        )


class RoleUpdateSerializer(StrictFieldsMixin, serializers.Serializer):
    isAdmin = serializers.BooleanField(
        error_messages={"invalid": "isAdmin must be a boolean value", "required": "isAdmin is required"}
    )
