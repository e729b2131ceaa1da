"""View attribution.

Authenticated visitors count once per user per local calendar day.
Anonymous visitors count once per session id inside a rolling window;
each newly recorded anonymous view also prunes that listing's anonymous
views older than the retention period.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from src.listings.models import Listing
from src.shared.exceptions import ListingNotFound
from src.shared.utils import get_client_ip, get_user_agent, query_flag

from .models import AnonymousView, ListingView

logger = logging.getLogger(__name__)

SESSION_HEADER = "HTTP_X_SESSION_ID"


@dataclass
class Visitor:
    user: Optional[object]
    ip: str = "Unknown"
    user_agent: str = "Unknown"
    session_token: str = ""

    @property
    def is_member(self) -> bool:
        return bool(self.user is not None and getattr(self.user, "is_authenticated", False))

    @property
    def session_id(self) -> str:
        return self.session_token or f"{self.ip}-{self.user_agent}"

    @classmethod
    def from_request(cls, request):
        user = request.user if getattr(request.user, "is_authenticated", False) else None
        return cls(
            user=user,
            ip=get_client_ip(request)[:64],
            user_agent=get_user_agent(request)[:500],
            session_token=(request.META.get(SESSION_HEADER) or "").strip()[:600],
        )


@dataclass
class ViewResult:
    tracked: bool
    views: int


def should_track(request) -> bool:
    # Admin panel previews pass ?admin=true and never count as views.
    return not query_flag(request, "admin")


def _record_member_view(listing, visitor, now) -> bool:
    view_date = timezone.localdate(now)
    if ListingView.objects.filter(listing=listing, user=visitor.user, view_date=view_date).exists():
        return False
    ListingView.objects.create(
        listing=listing,
        user=visitor.user,
        view_date=view_date,
        ip=visitor.ip,
        user_agent=visitor.user_agent,
        timestamp=now,
    )
    return True


def _record_anonymous_view(listing, visitor, now) -> bool:
    session_id = visitor.session_id
    window_start = now - timedelta(hours=settings.VIEW_DEDUP_WINDOW_HOURS)
    recent = AnonymousView.objects.filter(
        listing=listing,
        session_id=session_id,
        timestamp__gt=window_start,
    )
    if recent.exists():
        return False
    cutoff = now - timedelta(days=settings.ANONYMOUS_VIEW_RETENTION_DAYS)
    AnonymousView.objects.filter(listing=listing, timestamp__lte=cutoff).delete()
    AnonymousView.objects.create(
        listing=listing,
        session_id=session_id,
        ip=visitor.ip,
        user_agent=visitor.user_agent,
        timestamp=now,
    )
    return True


def record_view(listing_id: int, visitor: Visitor, now=None) -> ViewResult:
    now = now or timezone.now()
    with transaction.atomic():
        listing = Listing.objects.select_for_update().filter(pk=listing_id).first()
        if listing is None:
            raise ListingNotFound()
        if visitor.is_member:
            tracked = _record_member_view(listing, visitor, now)
        else:
            tracked = _record_anonymous_view(listing, visitor, now)
        if tracked:
            Listing.objects.filter(pk=listing.pk).update(views=F("views") + 1)
            listing.refresh_from_db(fields=["views"])

    if tracked:
        logger.info(
            "View tracked for listing %s (%s). Total views: %s",
            listing.pk,
            f"user {visitor.user.pk}" if visitor.is_member else "anonymous",
            listing.views,
        )
    return ViewResult(tracked=tracked, views=listing.views)


def prune_anonymous_views(now=None, listing_id=None) -> int:
    """Apply the anonymous-view retention policy outside the write path."""
    now = now or timezone.now()
    cutoff = now - timedelta(days=settings.ANONYMOUS_VIEW_RETENTION_DAYS)
    qs = AnonymousView.objects.filter(timestamp__lte=cutoff)
    if listing_id is not None:
        qs = qs.filter(listing_id=listing_id)
    deleted, _ = qs.delete()
    return deleted
