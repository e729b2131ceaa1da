from rest_framework import serializers

from src.shared.serializers import StrictFieldsMixin

from .models import Listing


class ListingSerializer(StrictFieldsMixin, serializers.ModelSerializer):
    regularPrice = serializers.DecimalField(source="regular_price", max_digits=14, decimal_places=2, min_value=0)
    discountPrice = serializers.DecimalField(
        source="discount_price", max_digits=14, decimal_places=2, min_value=0, required=False
    )
    imageUrls = serializers.ListField(
        source="image_urls",
        child=serializers.CharField(max_length=2000),
        allow_empty=False,
        error_messages={"empty": "At least one image is required"},
    )
    bedrooms = serializers.IntegerField(min_value=1)
    bathrooms = serializers.IntegerField(min_value=1)
    userRef = serializers.CharField(source="user_ref_id", read_only=True)
    rejectionReason = serializers.CharField(source="rejection_reason", read_only=True, allow_null=True)
    approvedAt = serializers.DateTimeField(source="approved_at", read_only=True, allow_null=True)
    approvedBy = serializers.CharField(source="approved_by_id", read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Listing
        fields = (
            "id",
            "name",
            "description",
            "address",
            "type",
            "regularPrice",
            "discountPrice",
            "currency",
            "bedrooms",
            "bathrooms",
            "furnished",
            "parking",
            "offer",
            "imageUrls",
            "userRef",
            "approved",
            "rejectionReason",
            "approvedAt",
            "approvedBy",
            "views",
            "likes",
            "saves",
            "inquiries",
            "createdAt",
            "updatedAt",
        )
        read_only_fields = (
            "approved",
            "views",
            "likes",
            "saves",
            "inquiries",
        )

    def validate(self, attrs):
        instance = self.instance
        offer = attrs.get("offer", getattr(instance, "offer", False))
        regular = attrs.get("regular_price", getattr(instance, "regular_price", None))
        discount = attrs.get("discount_price", getattr(instance, "discount_price", None))
        if offer and regular is not None and discount is not None and discount > regular:
            raise serializers.ValidationError(
                {"discountPrice": ["Discount price must be lower than or equal to the regular price."]}
            )
        return attrs


class ListingUpdateSerializer(ListingSerializer):
    """Edits by owner or admin; ``approved`` is writable here but honoured for admins only."""

    approved = serializers.BooleanField(required=False)

    class Meta(ListingSerializer.Meta):
        read_only_fields = ("views", "likes", "saves", "inquiries")


class ListingDetailSerializer(ListingSerializer):
    userInteractions = serializers.SerializerMethodField()

    class Meta(ListingSerializer.Meta):
        fields = ListingSerializer.Meta.fields + ("userInteractions",)

    def get_userInteractions(self, obj):
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if not getattr(user, "is_authenticated", False):
            return {"liked": False, "saved": False}
        return {
            "liked": obj.liked_by.filter(user=user).exists(),
            "saved": obj.saved_by.filter(user=user).exists(),
        }


class ListingSummarySerializer(serializers.ModelSerializer):
    imageUrls = serializers.ListField(source="image_urls", child=serializers.CharField(), read_only=True)

    class Meta:
        model = Listing
        fields = ("id", "name", "imageUrls")
        read_only_fields = fields


class RejectListingSerializer(StrictFieldsMixin, serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)


class OwnerContactSerializer(serializers.Serializer):
    email = serializers.EmailField(read_only=True)
    phone = serializers.SerializerMethodField()
    name = serializers.CharField(source="username", read_only=True)

    def get_phone(self, obj):
        return obj.phone or None
