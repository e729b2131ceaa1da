"""Admin approval workflow for listings.

A listing is either pending (``approved=False``, optionally carrying a
rejection reason) or approved (``approved=True`` with no rejection reason).
Every transition is admin-only and valid from any state.
"""
import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from src.accounts.permissions import is_admin_user
from src.shared.exceptions import ListingNotFound

from .models import Listing

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "Rejected by administrator"


def _require_admin(actor, action: str):
    if not is_admin_user(actor):
        raise PermissionDenied(f"Only administrators can {action} listings")


def approval_fields(actor, now=None) -> dict:
    return {
        "approved": True,
        "approved_at": now or timezone.now(),
        "approved_by": actor,
        "rejection_reason": None,
    }


def rejection_fields(reason=None) -> dict:
    return {
        "approved": False,
        "rejection_reason": (reason or "").strip() or DEFAULT_REJECTION_REASON,
        "approved_at": None,
        "approved_by": None,
    }


def _apply(listing_id: int, fields: dict) -> Listing:
    with transaction.atomic():
        listing = Listing.objects.select_for_update().filter(pk=listing_id).first()
        if listing is None:
            raise ListingNotFound()
        for name, value in fields.items():
            setattr(listing, name, value)
        listing.save(update_fields=[*fields.keys(), "updated_at"])
    return listing


def approve(listing_id: int, actor) -> Listing:
    _require_admin(actor, "approve")
    listing = _apply(listing_id, approval_fields(actor))
    logger.info("Listing %s approved by admin %s", listing.pk, actor.pk)
    return listing


def reject(listing_id: int, actor, reason=None) -> Listing:
    _require_admin(actor, "reject")
    listing = _apply(listing_id, rejection_fields(reason))
    logger.info("Listing %s rejected by admin %s: %s", listing.pk, actor.pk, listing.rejection_reason)
    return listing


def bulk_approve(actor) -> int:
    """Approve every pending listing in one UPDATE; returns the number changed."""
    _require_admin(actor, "bulk approve")
    now = timezone.now()
    modified = Listing.objects.exclude(approved=True).update(
        updated_at=now, **approval_fields(actor, now=now)
    )
    logger.info("Bulk approved %s listings by admin %s", modified, actor.pk)
    return modified


def initial_moderation_state(creator) -> dict:
    """Admins publish immediately; everyone else starts pending."""
    if is_admin_user(creator):
        return approval_fields(creator)
    return {"approved": False, "approved_at": None, "approved_by": None, "rejection_reason": None}
