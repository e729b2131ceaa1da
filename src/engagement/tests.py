from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APITestCase

from src.listings.models import Listing
from src.shared.exceptions import ListingNotFound

from .inquiries import DEFAULT_INQUIRY_MESSAGE, record_inquiry
from .models import AnonymousView, Inquiry, ListingLike, ListingSave, ListingView
from .reactions import interactions_for, toggle_like, toggle_save
from .tracking import Visitor, prune_anonymous_views, record_view

User = get_user_model()

# 10:00 UTC is 13:00 in Kampala.
BASE_TIME = datetime(2024, 5, 1, 10, 0, tzinfo=dt_timezone.utc)


def make_user(name, **extra):
    return User.objects.create_user(
        username=name, email=f"{name}@example.com", password="testpass123", **extra
    )


def make_listing(owner, **extra):
    data = {
        "user_ref": owner,
        "name": "Kololo apartment",
        "description": "Two bedroom apartment",
        "address": "Plot 4, Kololo",
        "type": "rent",
        "regular_price": Decimal("1500.00"),
        "bedrooms": 2,
        "bathrooms": 1,
        "image_urls": ["https://img.example.com/1.jpg"],
        "approved": True,
    }
    data.update(extra)
    return Listing.objects.create(**data)


class MemberViewTrackingTests(TestCase):
    """Authenticated visitors count once per local calendar day"""

    def setUp(self):
        self.owner = make_user("owner")
        self.viewer = make_user("viewer")
        self.listing = make_listing(self.owner)
        self.visitor = Visitor(user=self.viewer, ip="10.0.0.1", user_agent="pytest")

    def test_first_view_is_tracked(self):
        result = record_view(self.listing.pk, self.visitor, now=BASE_TIME)
        self.assertTrue(result.tracked)
        self.assertEqual(result.views, 1)
        row = ListingView.objects.get()
        self.assertEqual(row.user, self.viewer)
        self.assertEqual(row.view_date.isoformat(), "2024-05-01")

    def test_second_view_same_day_is_not_counted(self):
        record_view(self.listing.pk, self.visitor, now=BASE_TIME)
        result = record_view(self.listing.pk, self.visitor, now=BASE_TIME + timedelta(hours=5))
        self.assertFalse(result.tracked)
        self.assertEqual(result.views, 1)
        self.listing.refresh_from_db()
        self.assertEqual(self.listing.views, 1)
        self.assertEqual(ListingView.objects.count(), 1)

    def test_next_day_counts_again(self):
        record_view(self.listing.pk, self.visitor, now=BASE_TIME)
        result = record_view(self.listing.pk, self.visitor, now=BASE_TIME + timedelta(days=1))
        self.assertTrue(result.tracked)
        self.assertEqual(result.views, 2)

    def test_day_boundary_follows_local_time(self):
        """20:00 UTC and 22:00 UTC fall on different Kampala days"""
        evening = datetime(2024, 5, 1, 20, 0, tzinfo=dt_timezone.utc)
        record_view(self.listing.pk, self.visitor, now=evening)
        result = record_view(self.listing.pk, self.visitor, now=evening + timedelta(hours=2))
        self.assertTrue(result.tracked)
        self.assertEqual(
            sorted(d.isoformat() for d in ListingView.objects.values_list("view_date", flat=True)),
            ["2024-05-01", "2024-05-02"],
        )

    def test_unknown_listing_raises(self):
        with self.assertRaises(ListingNotFound):
            record_view(999999, self.visitor, now=BASE_TIME)


class AnonymousViewTrackingTests(TestCase):
    """Anonymous visitors count once per session inside a rolling window"""

    def setUp(self):
        self.owner = make_user("owner")
        self.listing = make_listing(self.owner)
        self.visitor = Visitor(user=None, ip="41.210.1.1", user_agent="Mozilla/5.0")

    def test_session_id_defaults_to_ip_and_agent(self):
        self.assertEqual(self.visitor.session_id, "41.210.1.1-Mozilla/5.0")
        token_visitor = Visitor(user=None, ip="41.210.1.1", user_agent="x", session_token="abc123")
        self.assertEqual(token_visitor.session_id, "abc123")

    def test_repeat_inside_window_is_not_counted(self):
        self.assertTrue(record_view(self.listing.pk, self.visitor, now=BASE_TIME).tracked)
        result = record_view(self.listing.pk, self.visitor, now=BASE_TIME + timedelta(hours=23))
        self.assertFalse(result.tracked)
        self.assertEqual(result.views, 1)

    def test_repeat_after_window_is_counted(self):
        record_view(self.listing.pk, self.visitor, now=BASE_TIME)
        result = record_view(self.listing.pk, self.visitor, now=BASE_TIME + timedelta(hours=25))
        self.assertTrue(result.tracked)
        self.assertEqual(result.views, 2)
        self.assertEqual(AnonymousView.objects.count(), 2)

    def test_different_sessions_count_separately(self):
        other = Visitor(user=None, ip="41.210.1.2", user_agent="Mozilla/5.0")
        record_view(self.listing.pk, self.visitor, now=BASE_TIME)
        result = record_view(self.listing.pk, other, now=BASE_TIME)
        self.assertTrue(result.tracked)
        self.assertEqual(result.views, 2)

    def test_new_view_prunes_expired_rows(self):
        old = AnonymousView.objects.create(
            listing=self.listing, session_id="old", timestamp=BASE_TIME - timedelta(days=31)
        )
        recent = AnonymousView.objects.create(
            listing=self.listing, session_id="recent", timestamp=BASE_TIME - timedelta(days=29)
        )
        record_view(self.listing.pk, self.visitor, now=BASE_TIME)
        ids = set(AnonymousView.objects.values_list("id", flat=True))
        self.assertNotIn(old.id, ids)
        self.assertIn(recent.id, ids)

    def test_prune_anonymous_views(self):
        other_listing = make_listing(self.owner, name="Ntinda house")
        AnonymousView.objects.create(listing=self.listing, session_id="a", timestamp=BASE_TIME - timedelta(days=40))
        AnonymousView.objects.create(listing=other_listing, session_id="b", timestamp=BASE_TIME - timedelta(days=40))
        AnonymousView.objects.create(listing=self.listing, session_id="c", timestamp=BASE_TIME)

        self.assertEqual(prune_anonymous_views(now=BASE_TIME, listing_id=self.listing.pk), 1)
        self.assertEqual(prune_anonymous_views(now=BASE_TIME), 1)
        self.assertEqual(AnonymousView.objects.count(), 1)


class ReactionToggleTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.alice = make_user("alice")
        self.bob = make_user("bob")
        self.listing = make_listing(self.owner)

    def test_like_toggles_on_and_off(self):
        first = toggle_like(self.listing.pk, self.alice)
        self.assertTrue(first.active)
        self.assertEqual(first.count, 1)

        second = toggle_like(self.listing.pk, self.alice)
        self.assertFalse(second.active)
        self.assertEqual(second.count, 0)
        self.assertFalse(ListingLike.objects.exists())

    def test_counters_match_rows(self):
        toggle_like(self.listing.pk, self.alice)
        toggle_like(self.listing.pk, self.bob)
        toggle_save(self.listing.pk, self.bob)
        toggle_like(self.listing.pk, self.alice)

        self.listing.refresh_from_db()
        self.assertEqual(self.listing.likes, ListingLike.objects.filter(listing=self.listing).count())
        self.assertEqual(self.listing.likes, 1)
        self.assertEqual(self.listing.saves, ListingSave.objects.filter(listing=self.listing).count())
        self.assertEqual(self.listing.saves, 1)

    def test_stale_counter_is_repaired_on_toggle(self):
        Listing.objects.filter(pk=self.listing.pk).update(likes=7)
        result = toggle_like(self.listing.pk, self.alice)
        self.assertEqual(result.count, 1)

    def test_interactions_for(self):
        second = make_listing(self.owner, name="Muyenga villa")
        toggle_like(self.listing.pk, self.alice)
        toggle_save(second.pk, self.alice)
        liked, saved = interactions_for(self.alice)
        self.assertEqual(list(liked), [self.listing])
        self.assertEqual(list(saved), [second])

    def test_unknown_listing_raises(self):
        with self.assertRaises(ListingNotFound):
            toggle_save(424242, self.alice)


class InquiryRecorderTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.buyer = make_user("buyer")
        self.listing = make_listing(self.owner)

    def test_defaults_are_applied(self):
        inquiry, total = record_inquiry(self.listing.pk, self.buyer)
        self.assertEqual(inquiry.type, "general")
        self.assertEqual(inquiry.message, DEFAULT_INQUIRY_MESSAGE)
        self.assertEqual(total, 1)

    def test_every_call_is_a_new_event(self):
        record_inquiry(self.listing.pk, self.buyer, "call", "Is it available?")
        _, total = record_inquiry(self.listing.pk, self.buyer, "call", "Is it available?")
        self.assertEqual(total, 2)
        self.listing.refresh_from_db()
        self.assertEqual(self.listing.inquiries, 2)

    def test_invalid_type_is_rejected(self):
        with self.assertRaises(ValidationError):
            record_inquiry(self.listing.pk, self.buyer, "fax")
        self.assertFalse(Inquiry.objects.exists())


class EngagementApiTests(APITestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.user = make_user("member")
        self.listing = make_listing(self.owner)

    def test_like_requires_authentication(self):
        response = self.client.post(reverse("listing-like", args=[self.listing.pk]))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["statusCode"], 401)

    def test_like_and_save_endpoints(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(reverse("listing-like", args=[self.listing.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"liked": True, "likes": 1})

        response = self.client.post(reverse("listing-save", args=[self.listing.pk]))
        self.assertEqual(response.data, {"saved": True, "saves": 1})

        response = self.client.post(reverse("listing-like", args=[self.listing.pk]))
        self.assertEqual(response.data, {"liked": False, "likes": 0})

    def test_invalid_id_returns_400(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(reverse("listing-like", args=["not-an-id"]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Invalid listing ID format")

    def test_missing_listing_returns_404(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(reverse("listing-save", args=[987654]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Listing not found")

    def test_view_endpoint_dedups_anonymous_session(self):
        url = reverse("listing-view", args=[self.listing.pk])
        first = self.client.post(url, HTTP_X_SESSION_ID="session-1")
        self.assertEqual(first.data, {"views": 1, "tracked": True, "message": "View tracked successfully"})
        second = self.client.post(url, HTTP_X_SESSION_ID="session-1")
        self.assertEqual(
            second.data, {"views": 1, "tracked": False, "message": "View already counted recently"}
        )

    def test_view_endpoint_skips_admin_preview(self):
        url = reverse("listing-view", args=[self.listing.pk])
        response = self.client.post(f"{url}?admin=true")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["views"], 0)
        self.assertFalse(response.data["tracked"])
        self.listing.refresh_from_db()
        self.assertEqual(self.listing.views, 0)
        self.assertFalse(AnonymousView.objects.exists())

        response = self.client.post(reverse("listing-view", args=[987654]) + "?admin=true")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_view_endpoint_treats_stale_token_as_anonymous(self):
        url = reverse("listing-view", args=[self.listing.pk])
        response = self.client.post(url, HTTP_AUTHORIZATION="Bearer garbage")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["tracked"])
        self.assertEqual(AnonymousView.objects.count(), 1)
        self.assertFalse(ListingView.objects.exists())

    def test_inquire_endpoint(self):
        self.client.force_authenticate(user=self.user)
        url = reverse("listing-inquire", args=[self.listing.pk])
        response = self.client.post(url, {"type": "email", "message": "Still available?"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data, {"success": True, "message": "Inquiry sent successfully", "inquiries": 1}
        )

        response = self.client.post(url, {"type": "fax"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("type", response.data["errors"])

    def test_inquire_rejects_unknown_fields(self):
        self.client.force_authenticate(user=self.user)
        url = reverse("listing-inquire", args=[self.listing.pk])
        response = self.client.post(url, {"message": "hi", "priority": "high"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("priority", response.data["errors"])
        self.assertFalse(Inquiry.objects.exists())

    def test_user_interactions(self):
        self.client.force_authenticate(user=self.user)
        self.client.post(reverse("listing-like", args=[self.listing.pk]))
        response = self.client.get(reverse("listing-user-interactions"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data["likedListings"],
            [{"id": self.listing.pk, "name": self.listing.name, "imageUrls": self.listing.image_urls}],
        )
        self.assertEqual(response.data["savedListings"], [])


class EngagementCommandTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.fan = make_user("fan")
        self.listing = make_listing(self.owner)
        ListingLike.objects.create(listing=self.listing, user=self.fan)
        Listing.objects.filter(pk=self.listing.pk).update(likes=5, saves=3)

    def test_recount_dry_run_changes_nothing(self):
        out = StringIO()
        call_command("recount_engagement", "--dry-run", stdout=out)
        self.assertIn("[DRY] Would update: 1", out.getvalue())
        self.listing.refresh_from_db()
        self.assertEqual(self.listing.likes, 5)

    def test_recount_repairs_counters(self):
        out = StringIO()
        call_command("recount_engagement", stdout=out)
        self.assertIn("Updated listings: 1", out.getvalue())
        self.listing.refresh_from_db()
        self.assertEqual(self.listing.likes, 1)
        self.assertEqual(self.listing.saves, 0)

    def test_prune_command(self):
        AnonymousView.objects.create(
            listing=self.listing, session_id="stale", timestamp=datetime(2000, 1, 1, tzinfo=dt_timezone.utc)
        )
        out = StringIO()
        call_command("prune_anonymous_views", stdout=out)
        self.assertIn("Deleted 1 anonymous views", out.getvalue())
