import logging
from dataclasses import dataclass

from django.db import transaction

from src.listings.models import Listing
from src.shared.exceptions import ListingNotFound

from .models import ListingLike, ListingSave

logger = logging.getLogger(__name__)


@dataclass
class ToggleResult:
    active: bool
    count: int


def _toggle(listing_id: int, user, model, counter: str, label: str) -> ToggleResult:
    with transaction.atomic():
        listing = Listing.objects.select_for_update().filter(pk=listing_id).first()
        if listing is None:
            raise ListingNotFound()
        removed, _ = model.objects.filter(listing=listing, user=user).delete()
        if not removed:
            model.objects.create(listing=listing, user=user)
        # The counter always mirrors the backing set.
        count = model.objects.filter(listing=listing).count()
        Listing.objects.filter(pk=listing.pk).update(**{counter: count})

    active = not removed
    logger.info(
        "Listing %s %s %s by user %s (%s=%s)",
        listing.pk,
        label,
        "added" if active else "removed",
        user.pk,
        counter,
        count,
    )
    return ToggleResult(active=active, count=count)


def toggle_like(listing_id: int, user) -> ToggleResult:
    return _toggle(listing_id, user, ListingLike, "likes", "like")


def toggle_save(listing_id: int, user) -> ToggleResult:
    return _toggle(listing_id, user, ListingSave, "saves", "save")


def interactions_for(user):
    """Listings the user currently likes and saves."""
    liked = Listing.objects.filter(liked_by__user=user).order_by("-created_at")
    saved = Listing.objects.filter(saved_by__user=user).order_by("-created_at")
    return liked, saved
