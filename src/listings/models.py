from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from src.shared.enums import Currency, ListingType


def validate_image_urls(value):
    if not isinstance(value, list) or not value:
        raise ValidationError("At least one image is required")
    if not all(isinstance(url, str) and url.strip() for url in value):
        raise ValidationError("Image URLs must be non-empty strings")


class ListingQuerySet(models.QuerySet):
    def approved(self):
        return self.filter(approved=True)

    def pending(self):
        return self.filter(approved=False)


class Listing(models.Model):
    user_ref = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listings",
    )
    name = models.CharField(max_length=200)
    description = models.TextField()
    address = models.CharField(max_length=300)
    type = models.CharField(max_length=8, choices=ListingType.choices)
    regular_price = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(0)])
    discount_price = models.DecimalField(
        max_digits=14, decimal_places=2, default=0, validators=[MinValueValidator(0)]
    )
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.UGX)
    bedrooms = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    bathrooms = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    furnished = models.BooleanField(default=False)
    parking = models.BooleanField(default=False)
    offer = models.BooleanField(default=False)
    image_urls = models.JSONField(default=list, validators=[validate_image_urls])

    approved = models.BooleanField(default=False)
    rejection_reason = models.CharField(max_length=500, blank=True, null=True)
    approved_at = models.DateTimeField(blank=True, null=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_listings",
    )

    views = models.PositiveIntegerField(default=0)
    likes = models.PositiveIntegerField(default=0)
    saves = models.PositiveIntegerField(default=0)
    inquiries = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ListingQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=["approved"], name="listing_approved_idx"),
            models.Index(fields=["type"], name="listing_type_idx"),
            models.Index(fields=["created_at"], name="listing_created_idx"),
            models.Index(fields=["regular_price"], name="listing_price_idx"),
        ]
        ordering = ["-created_at"]

    def __str__(self):
        state = "approved" if self.approved else "pending"
        return f"{self.name} [{state}]"
