from django.conf import settings
from django.db import models
from django.utils import timezone

from src.shared.enums import InquiryType


class ListingView(models.Model):
    """One row per authenticated user per local calendar day."""

    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.CASCADE,
        related_name="viewed_by",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listing_views",
    )
    view_date = models.DateField()
    ip = models.CharField(max_length=64, blank=True, default="Unknown")
    user_agent = models.CharField(max_length=500, blank=True, default="Unknown")
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["listing", "user", "view_date"],
                name="unique_listing_view_per_user_per_day",
            ),
        ]
        indexes = [
            models.Index(fields=["timestamp"], name="listingview_ts_idx"),
        ]
        ordering = ["-timestamp"]

    def __str__(self):
        return f"View of {self.listing_id} by {self.user_id} on {self.view_date}"


class AnonymousView(models.Model):
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.CASCADE,
        related_name="anonymous_views",
    )
    session_id = models.CharField(max_length=600)
    ip = models.CharField(max_length=64, blank=True, default="Unknown")
    user_agent = models.CharField(max_length=500, blank=True, default="Unknown")
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["listing", "session_id"], name="anonview_session_idx"),
            models.Index(fields=["timestamp"], name="anonview_ts_idx"),
        ]
        ordering = ["-timestamp"]

    def __str__(self):
        return f"Anonymous view of {self.listing_id} ({self.session_id[:24]})"


class ListingLike(models.Model):
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.CASCADE,
        related_name="liked_by",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listing_likes",
    )
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["listing", "user"], name="unique_like_per_user_per_listing"),
        ]
        ordering = ["-timestamp"]

    def __str__(self):
        return f"Like #{self.pk} {self.user_id} -> {self.listing_id}"


class ListingSave(models.Model):
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.CASCADE,
        related_name="saved_by",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listing_saves",
    )
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["listing", "user"], name="unique_save_per_user_per_listing"),
        ]
        ordering = ["-timestamp"]

    def __str__(self):
        return f"Save #{self.pk} {self.user_id} -> {self.listing_id}"


class Inquiry(models.Model):
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.CASCADE,
        related_name="inquiries_data",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listing_inquiries",
    )
    type = models.CharField(max_length=16, choices=InquiryType.choices, default=InquiryType.GENERAL)
    message = models.TextField(blank=True, default="")
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["timestamp"], name="inquiry_ts_idx"),
            models.Index(fields=["type"], name="inquiry_type_idx"),
        ]
        ordering = ["-timestamp"]

    def __str__(self):
        return f"Inquiry #{self.pk} {self.type}"
