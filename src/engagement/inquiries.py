import logging

from django.db import transaction
from rest_framework.exceptions import ValidationError

from src.listings.models import Listing
from src.shared.enums import InquiryType
from src.shared.exceptions import ListingNotFound

from .models import Inquiry

logger = logging.getLogger(__name__)

DEFAULT_INQUIRY_MESSAGE = "General inquiry"


def normalize_type(value) -> str:
    """Empty values become ``general``; anything else must be a known type."""
    if not value:
        return InquiryType.GENERAL
    value = str(value).strip().lower()
    if value not in InquiryType.values:
        allowed = ", ".join(InquiryType.values)
        raise ValidationError({"type": [f"Inquiry type must be one of: {allowed}."]})
    return value


def record_inquiry(listing_id: int, user, inquiry_type=None, message=None):
    """Append an inquiry event; every call is a new event. Returns (inquiry, total)."""
    inquiry_type = normalize_type(inquiry_type)
    message = (message or "").strip() or DEFAULT_INQUIRY_MESSAGE
    with transaction.atomic():
        listing = Listing.objects.select_for_update().filter(pk=listing_id).first()
        if listing is None:
            raise ListingNotFound()
        inquiry = Inquiry.objects.create(
            listing=listing,
            user=user,
            type=inquiry_type,
            message=message,
        )
        total = Inquiry.objects.filter(listing=listing).count()
        Listing.objects.filter(pk=listing.pk).update(inquiries=total)

    logger.info("Inquiry (%s) received for listing %s from user %s", inquiry_type, listing.pk, user.pk)
    return inquiry, total
