from decimal import Decimal
from io import StringIO
import json

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.test import APITestCase

from src.engagement.models import AnonymousView, ListingLike, ListingView

from . import moderation
from .models import Listing
from .queries import listing_stats

User = get_user_model()


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
    }
    data.update(extra)
    return Listing.objects.create(**data)


def listing_payload(**extra):
    data = {
        "name": "Bugolobi flat",
        "description": "Quiet flat near the market",
        "address": "Bugolobi, Kampala",
        "type": "rent",
        "regularPrice": "800.00",
        "discountPrice": "0",
        "currency": "USD",
        "bedrooms": 2,
        "bathrooms": 1,
        "furnished": True,
        "parking": False,
        "offer": False,
        "imageUrls": ["https://img.example.com/bugolobi.jpg"],
    }
    data.update(extra)
    return data


class ModerationTests(TestCase):
    """Admin approval workflow"""

    def setUp(self):
        self.admin = make_user("admin", is_admin=True)
        self.owner = make_user("owner")
        self.listing = make_listing(self.owner)

    def test_new_listing_is_pending(self):
        self.assertFalse(self.listing.approved)
        self.assertIsNone(self.listing.approved_at)

    def test_approve_sets_audit_fields(self):
        listing = moderation.approve(self.listing.pk, self.admin)
        self.assertTrue(listing.approved)
        self.assertEqual(listing.approved_by, self.admin)
        self.assertIsNotNone(listing.approved_at)
        self.assertIsNone(listing.rejection_reason)

    def test_approve_is_idempotent(self):
        moderation.approve(self.listing.pk, self.admin)
        listing = moderation.approve(self.listing.pk, self.admin)
        self.assertTrue(listing.approved)
        self.assertEqual(listing.approved_by, self.admin)

    def test_reject_uses_default_reason_and_clears_approval(self):
        moderation.approve(self.listing.pk, self.admin)
        listing = moderation.reject(self.listing.pk, self.admin, "   ")
        self.assertFalse(listing.approved)
        self.assertEqual(listing.rejection_reason, moderation.DEFAULT_REJECTION_REASON)
        self.assertIsNone(listing.approved_at)
        self.assertIsNone(listing.approved_by)

    def test_approve_after_reject_clears_reason(self):
        moderation.reject(self.listing.pk, self.admin, "Blurry photos")
        listing = moderation.approve(self.listing.pk, self.admin)
        self.assertTrue(listing.approved)
        self.assertIsNone(listing.rejection_reason)

    def test_non_admin_cannot_moderate(self):
        with self.assertRaises(PermissionDenied):
            moderation.approve(self.listing.pk, self.owner)
        with self.assertRaises(PermissionDenied):
            moderation.bulk_approve(self.owner)

    def test_superuser_counts_as_admin(self):
        root = User.objects.create_superuser(username="root", email="root@example.com", password="testpass123")
        self.assertTrue(moderation.approve(self.listing.pk, root).approved)

    def test_bulk_approve_counts_only_pending(self):
        make_listing(self.owner, name="Second")
        make_listing(self.owner, name="Third", approved=True)
        self.assertEqual(moderation.bulk_approve(self.admin), 2)
        self.assertEqual(moderation.bulk_approve(self.admin), 0)
        self.assertFalse(Listing.objects.pending().exists())
        self.assertEqual(Listing.objects.filter(approved_by=self.admin).count(), 2)


class ListingStatsTests(TestCase):
    def test_stats(self):
        owner = make_user("owner")
        make_listing(owner, approved=True, type="rent", regular_price=Decimal("100"))
        make_listing(owner, approved=True, type="sale", regular_price=Decimal("200"))
        make_listing(owner, approved=False, type="sale", regular_price=Decimal("999"))

        self.assertEqual(
            listing_stats(),
            {
                "total": 3,
                "active": 2,
                "pendingApproval": 1,
                "forRent": 1,
                "forSale": 1,
                "revenue": Decimal("300"),
            },
        )

    def test_stats_on_empty_store(self):
        stats = listing_stats()
        self.assertEqual(stats["total"], 0)
        self.assertEqual(stats["revenue"], Decimal("0"))


class ListingQueryApiTests(APITestCase):
    """Visibility rule, filters, sort and paging on GET /api/listing/get"""

    def setUp(self):
        self.admin = make_user("admin", is_admin=True)
        self.owner = make_user("owner")
        self.other = make_user("other")
        self.approved_rent = make_listing(
            self.owner, name="Rent Kololo", approved=True, offer=True, regular_price=Decimal("500")
        )
        self.approved_sale = make_listing(
            self.other, name="Sale Muyenga", type="sale", approved=True, parking=True, regular_price=Decimal("90000")
        )
        self.pending = make_listing(self.owner, name="Pending Naguru", approved=False)
        self.url = reverse("listing-list")

    def names(self, response):
        return [row["name"] for row in response.data["results"]]

    def test_public_sees_only_approved(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)
        self.assertNotIn("Pending Naguru", self.names(response))

    def test_non_admin_never_sees_pending_whatever_the_filters(self):
        response = self.client.get(self.url, {"approved": "false"})
        self.assertEqual(set(self.names(response)), {"Rent Kololo", "Sale Muyenga"})

        self.client.force_authenticate(user=self.other)
        for params in ({"approved": "false"}, {"approved": "false", "userRef": self.owner.pk}):
            response = self.client.get(self.url, params)
            self.assertNotIn("Pending Naguru", self.names(response))
            self.assertEqual(response.data["count"], 2)

    def test_stale_token_browses_as_anonymous(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer garbage")
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)
        self.assertEqual(self.client.get(reverse("listing-recent")).status_code, status.HTTP_200_OK)

    def test_stale_token_still_rejected_on_protected_routes(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer garbage")
        response = self.client.post(reverse("listing-create"), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_owner_sees_own_pending_with_user_ref(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(self.url, {"userRef": self.owner.pk})
        self.assertEqual(set(self.names(response)), {"Rent Kololo", "Pending Naguru"})

    def test_user_ref_of_someone_else_falls_back_to_public(self):
        self.client.force_authenticate(user=self.other)
        response = self.client.get(self.url, {"userRef": self.owner.pk})
        self.assertEqual(set(self.names(response)), {"Rent Kololo", "Sale Muyenga"})

    def test_admin_sees_everything_or_filters_by_approved(self):
        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.get(self.url).data["count"], 3)
        response = self.client.get(self.url, {"approved": "false"})
        self.assertEqual(self.names(response), ["Pending Naguru"])
        response = self.client.get(self.url, {"approved": ""})
        self.assertEqual(self.names(response), ["Pending Naguru"])
        response = self.client.get(self.url, {"approved": "true"})
        self.assertEqual(response.data["count"], 2)

    def test_filters(self):
        self.assertEqual(self.names(self.client.get(self.url, {"offer": "true"})), ["Rent Kololo"])
        self.assertEqual(self.names(self.client.get(self.url, {"parking": "true"})), ["Sale Muyenga"])
        self.assertEqual(self.names(self.client.get(self.url, {"type": "sale"})), ["Sale Muyenga"])
        self.assertEqual(self.client.get(self.url, {"type": "all"}).data["count"], 2)
        self.assertEqual(self.client.get(self.url, {"offer": "false"}).data["count"], 2)
        self.assertEqual(self.names(self.client.get(self.url, {"searchTerm": "kololo"})), ["Rent Kololo"])

    def test_sort_and_order(self):
        response = self.client.get(self.url, {"sort": "regularPrice", "order": "asc"})
        self.assertEqual(self.names(response), ["Rent Kololo", "Sale Muyenga"])
        response = self.client.get(self.url, {"sort": "regularPrice"})
        self.assertEqual(self.names(response), ["Sale Muyenga", "Rent Kololo"])

    def test_unknown_sort_falls_back_to_created_at(self):
        response = self.client.get(self.url, {"sort": "password"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.names(response), ["Sale Muyenga", "Rent Kololo"])

    def test_pagination(self):
        for i in range(12):
            make_listing(self.owner, name=f"Extra {i}", approved=True)
        response = self.client.get(self.url)
        self.assertEqual(response.data["count"], 14)
        self.assertEqual(len(response.data["results"]), 9)

        response = self.client.get(self.url, {"limit": 5, "startIndex": 10})
        self.assertEqual(len(response.data["results"]), 4)

        response = self.client.get(self.url, {"limit": "abc"})
        self.assertEqual(len(response.data["results"]), 9)

    def test_recent(self):
        response = self.client.get(reverse("listing-recent"))
        self.assertEqual(len(response.data), 2)


class ListingDetailApiTests(APITestCase):
    def setUp(self):
        self.owner = make_user("owner", phone="+256700000001")
        self.viewer = make_user("viewer")
        self.listing = make_listing(self.owner, approved=True)

    def test_detail_tracks_view_and_reports_interactions(self):
        ListingLike.objects.create(listing=self.listing, user=self.viewer)
        self.client.force_authenticate(user=self.viewer)
        response = self.client.get(reverse("listing-detail", args=[self.listing.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["views"], 1)
        self.assertEqual(response.data["userInteractions"], {"liked": True, "saved": False})
        self.assertEqual(ListingView.objects.count(), 1)

        response = self.client.get(reverse("listing-detail", args=[self.listing.pk]))
        self.assertEqual(response.data["views"], 1)

    def test_admin_preview_does_not_track(self):
        response = self.client.get(reverse("listing-detail", args=[self.listing.pk]), {"admin": "true"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["views"], 0)
        self.assertFalse(AnonymousView.objects.exists())

    def test_invalid_and_missing_ids(self):
        response = self.client.get(reverse("listing-detail", args=["abc"]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data,
            {"success": False, "statusCode": 400, "message": "Invalid listing ID format"},
        )
        response = self.client.get(reverse("listing-detail", args=[123456]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["message"], "Listing not found")

    def test_owner_contact(self):
        response = self.client.get(reverse("listing-contact", args=[self.listing.pk]))
        self.assertEqual(
            response.data,
            {"email": "owner@example.com", "phone": "+256700000001", "name": "owner"},
        )

    def test_owner_contact_without_phone(self):
        other = make_listing(self.viewer, approved=True)
        response = self.client.get(reverse("listing-contact", args=[other.pk]))
        self.assertIsNone(response.data["phone"])


class ListingWriteApiTests(APITestCase):
    def setUp(self):
        self.admin = make_user("admin", is_admin=True)
        self.owner = make_user("owner")
        self.stranger = make_user("stranger")

    def test_create_requires_authentication(self):
        response = self.client.post(reverse("listing-create"), listing_payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_member_create_is_pending(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(reverse("listing-create"), listing_payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["message"], "Listing created successfully")
        listing = Listing.objects.get(pk=response.data["listing"]["id"])
        self.assertEqual(listing.user_ref, self.owner)
        self.assertFalse(listing.approved)
        self.assertEqual(listing.views, 0)

    def test_admin_create_is_approved(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse("listing-create"), listing_payload(), format="json")
        body = response.data["listing"]
        self.assertTrue(body["approved"])
        self.assertEqual(body["approvedBy"], str(self.admin.pk))

    def test_create_ignores_counters_and_approval_from_client(self):
        self.client.force_authenticate(user=self.owner)
        payload = listing_payload(approved=True, views=500, likes=20)
        response = self.client.post(reverse("listing-create"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        listing = Listing.objects.get()
        self.assertFalse(listing.approved)
        self.assertEqual((listing.views, listing.likes), (0, 0))

    def test_create_validation(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(reverse("listing-create"), listing_payload(imageUrls=[]), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("imageUrls", response.data["errors"])

        payload = listing_payload(offer=True, regularPrice="100", discountPrice="150")
        response = self.client.post(reverse("listing-create"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("discountPrice", response.data["errors"])

        response = self.client.post(reverse("listing-create"), listing_payload(garden=True), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("garden", response.data["errors"])

    def test_update_by_owner_drops_approved_flag(self):
        listing = make_listing(self.owner)
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(
            reverse("listing-update", args=[listing.pk]), {"name": "Renamed", "approved": True}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        listing.refresh_from_db()
        self.assertEqual(listing.name, "Renamed")
        self.assertFalse(listing.approved)

    def test_update_by_admin_can_approve_and_unapprove(self):
        listing = make_listing(self.owner)
        self.client.force_authenticate(user=self.admin)
        url = reverse("listing-update", args=[listing.pk])

        self.client.post(url, {"approved": True}, format="json")
        listing.refresh_from_db()
        self.assertTrue(listing.approved)
        self.assertEqual(listing.approved_by, self.admin)

        self.client.post(url, {"approved": False}, format="json")
        listing.refresh_from_db()
        self.assertFalse(listing.approved)
        self.assertIsNone(listing.approved_at)

    def test_update_and_delete_by_stranger_are_forbidden(self):
        listing = make_listing(self.owner)
        self.client.force_authenticate(user=self.stranger)
        response = self.client.post(reverse("listing-update", args=[listing.pk]), {"name": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.delete(reverse("listing-delete", args=[listing.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Listing.objects.filter(pk=listing.pk).exists())

    def test_delete_by_owner(self):
        listing = make_listing(self.owner)
        self.client.force_authenticate(user=self.owner)
        response = self.client.delete(reverse("listing-delete", args=[listing.pk]))
        self.assertEqual(response.data, {"success": True, "message": "Listing has been deleted"})
        self.assertFalse(Listing.objects.exists())

    def test_approval_scenario(self):
        """A member listing stays hidden until an admin approves it"""
        self.client.force_authenticate(user=self.owner)
        created = self.client.post(reverse("listing-create"), listing_payload(), format="json")
        listing_id = created.data["listing"]["id"]

        self.client.force_authenticate(user=None)
        self.assertEqual(self.client.get(reverse("listing-list")).data["count"], 0)

        self.client.force_authenticate(user=self.owner)
        response = self.client.post(reverse("listing-approve", args=[listing_id]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse("listing-reject", args=[listing_id]), {"reason": "Blurry"}, format="json")
        self.assertEqual(response.data["rejectionReason"], "Blurry")
        response = self.client.post(reverse("listing-approve", args=[listing_id]))
        self.assertTrue(response.data["approved"])
        self.assertIsNone(response.data["rejectionReason"])

        self.client.force_authenticate(user=None)
        self.assertEqual(self.client.get(reverse("listing-list")).data["count"], 1)

    def test_bulk_approve_endpoint(self):
        make_listing(self.owner)
        make_listing(self.owner)
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse("listing-bulk-approve"))
        self.assertEqual(response.data, {"message": "Successfully approved 2 listings", "modifiedCount": 2})

    def test_stats_endpoint(self):
        make_listing(self.owner, approved=True, regular_price=Decimal("250"))
        response = self.client.get(reverse("listing-stats"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["active"], 1)
        self.assertEqual(response.data["revenue"], Decimal("250"))


class ListingCommandTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin", is_admin=True)
        self.owner = make_user("owner")
        make_listing(self.owner, approved=True, currency="USD")
        make_listing(self.owner)

    def test_stats_json(self):
        out = StringIO()
        call_command("stats_listings", "--json", stdout=out)
        data = json.loads(out.getvalue())
        self.assertEqual(data["total"], 2)
        self.assertEqual(data["pendingApproval"], 1)
        self.assertEqual(data["byCurrency"], {"UGX": 1, "USD": 1})

    def test_bulk_approve_command(self):
        out = StringIO()
        call_command("bulk_approve_listings", "--admin", "admin@example.com", stdout=out)
        self.assertIn("Successfully approved 1 listings", out.getvalue())

    def test_bulk_approve_command_rejects_non_admin(self):
        with self.assertRaises(CommandError):
            call_command("bulk_approve_listings", "--admin", "owner@example.com")
