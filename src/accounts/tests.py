from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from src.listings.models import Listing

User = get_user_model()


def make_user(name, **extra):
    return User.objects.create_user(
        username=name, email=f"{name}@example.com", password="testpass123", **extra
    )


class UserModelTests(TestCase):
    def test_admin_rights(self):
        self.assertFalse(make_user("plain").has_admin_rights)
        self.assertTrue(make_user("boss", is_admin=True).has_admin_rights)

    def test_display_name_masks_email_like_usernames(self):
        user = make_user("someone")
        user.username = "someone@example.com"
        self.assertEqual(user.get_display_name(), "s***e")
        user.first_name = "Amina"
        self.assertEqual(user.get_display_name(), "Amina")


class RegistrationAndTokenTests(APITestCase):
    def test_register_then_obtain_token(self):
        payload = {"username": "amina", "email": "Amina@Example.com", "password": "s3cret-pass", "phone": "+256701"}
        response = self.client.post(reverse("register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["user"]["email"], "amina@example.com")
        self.assertFalse(response.data["user"]["isAdmin"])

        response = self.client.post(
            reverse("token_obtain_pair"), {"email": "amina@example.com", "password": "s3cret-pass"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        response = self.client.get(reverse("me"))
        self.assertEqual(response.data["username"], "amina")

    def test_duplicate_email_is_rejected(self):
        make_user("amina")
        payload = {"username": "amina2", "email": "amina@example.com", "password": "s3cret-pass"}
        response = self.client.post(reverse("register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.data["errors"])

    def test_register_rejects_role_escalation(self):
        payload = {"username": "sneaky", "email": "sneaky@example.com", "password": "s3cret-pass", "isAdmin": True}
        response = self.client.post(reverse("register"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(email="sneaky@example.com").exists())


class RoleManagementTests(APITestCase):
    def setUp(self):
        self.admin = make_user("admin", is_admin=True)
        self.member = make_user("member")

    def test_count_and_list_are_admin_only(self):
        self.client.force_authenticate(user=self.member)
        self.assertEqual(self.client.get(reverse("user-count")).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get(reverse("user-all")).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.get(reverse("user-count")).data, {"count": 2})
        self.assertEqual(len(self.client.get(reverse("user-all")).data), 2)

    def test_promote_and_demote(self):
        self.client.force_authenticate(user=self.admin)
        url = reverse("user-role", args=[self.member.pk])
        response = self.client.post(url, {"isAdmin": True}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["isAdmin"])
        self.member.refresh_from_db()
        self.assertTrue(self.member.is_admin)

        self.client.post(url, {"isAdmin": False}, format="json")
        self.member.refresh_from_db()
        self.assertFalse(self.member.is_admin)

    def test_role_requires_boolean(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse("user-role", args=[self.member.pk]), {"isAdmin": "maybe"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("isAdmin must be a boolean value", response.data["message"])

    def test_role_for_unknown_user(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse("user-role", args=[99999]), {"isAdmin": True}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.post(reverse("user-role", args=["xyz"]), {"isAdmin": True}, format="json")
        self.assertEqual(response.data["message"], "Invalid user ID format")

    def test_check_admin(self):
        self.client.force_authenticate(user=self.member)
        self.assertEqual(self.client.get(reverse("user-check-admin", args=[self.admin.pk])).data, {"isAdmin": True})
        self.assertEqual(self.client.get(reverse("user-check-admin", args=[self.member.pk])).data, {"isAdmin": False})


class UserListingsTests(APITestCase):
    def setUp(self):
        self.admin = make_user("admin", is_admin=True)
        self.owner = make_user("owner")
        self.other = make_user("other")
        Listing.objects.create(
            user_ref=self.owner,
            name="Pending flat",
            description="d",
            address="a",
            type="rent",
            regular_price=Decimal("10"),
            bedrooms=1,
            bathrooms=1,
            image_urls=["https://img.example.com/x.jpg"],
        )

    def test_owner_sees_own_pending_listings(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(reverse("user-listings", args=[self.owner.pk]))
        self.assertEqual([row["name"] for row in response.data], ["Pending flat"])

    def test_other_user_is_forbidden(self):
        self.client.force_authenticate(user=self.other)
        response = self.client.get(reverse("user-listings", args=[self.owner.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["message"], "You can only view your own account data")

    def test_admin_can_read_any_user(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse("user-listings", args=[self.owner.pk]))
        self.assertEqual(len(response.data), 1)


class PromoteAdminCommandTests(TestCase):
    def test_promote_and_revoke(self):
        user = make_user("ops")
        out = StringIO()
        call_command("promote_admin", "ops@example.com", stdout=out)
        user.refresh_from_db()
        self.assertTrue(user.is_admin)
        self.assertIn("admin=True", out.getvalue())

        call_command("promote_admin", "OPS@example.com", "--revoke", stdout=StringIO())
        user.refresh_from_db()
        self.assertFalse(user.is_admin)

    def test_unknown_email(self):
        with self.assertRaises(CommandError):
            call_command("promote_admin", "ghost@example.com")
