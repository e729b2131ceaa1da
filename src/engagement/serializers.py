from rest_framework import serializers

from src.shared.serializers import StrictFieldsMixin


class InquiryCreateSerializer(StrictFieldsMixin, serializers.Serializer):
    type = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=16)
    message = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=5000)
