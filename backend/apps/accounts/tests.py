from decimal import Decimal
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status
from apps.accounts.models import User
from apps.accounts.services.identity_service import IdentityService
from apps.ledger.models import VolumeEntry
from common.exceptions import UserNotFound, ValidationError


class TestUsersAPI(APITestCase):

    def setUp(self):

        self.resolve_url = reverse("accounts:resolve")

        self.user_data = {
            "external_id": "1001",
            "username": "alice"
        }

    # ======================================================
    # RESOLVE TESTS
    # ======================================================

    def test_resolve_creates_user(self):

        response = self.client.post(self.resolve_url, self.user_data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["external_id"], "1001")
        self.assertEqual(response.data["completed_deals"], 0)
        self.assertTrue(User.objects.filter(external_id="1001").exists())

    def test_resolve_existing_user_keeps_name(self):

        self.client.post(self.resolve_url, self.user_data, format="json")

        response = self.client.post(self.resolve_url, {
            "external_id": "1001",
            "username": "renamed"
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["username"], "alice")
        self.assertEqual(User.objects.count(), 1)

    def test_resolve_missing_external_id(self):

        response = self.client.post(self.resolve_url, {"username": "alice"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["kind"], "validation_error")
        self.assertIn("external_id", response.data["fields"])

    # ======================================================
    # PROFILE TESTS
    # ======================================================

    def test_profile_with_volumes(self):

        user = User.objects.create_user(external_id="1001", username="alice")
        VolumeEntry.objects.create(user=user, currency="USD", amount=Decimal("10.5"))
        VolumeEntry.objects.create(user=user, currency="USD", amount=Decimal("4.5"))
        VolumeEntry.objects.create(user=user, currency="TON", amount=Decimal("3"))

        response = self.client.get(reverse("accounts:profile", args=["1001"]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["volumes"]["USD"]), Decimal("15"))
        self.assertEqual(Decimal(response.data["volumes"]["TON"]), Decimal("3"))

    def test_profile_without_deals(self):

        User.objects.create_user(external_id="1001", username="alice")

        response = self.client.get(reverse("accounts:profile", args=["1001"]))

        self.assertEqual(response.data["volumes"], {})

    def test_profile_unknown_user(self):

        response = self.client.get(reverse("accounts:profile", args=["ghost"]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "user_not_found")

    # ======================================================
    # REQUISITES TESTS
    # ======================================================

    def test_update_requisites_partial(self):

        User.objects.create_user(external_id="1001", username="alice", wallet="UQold")

        response = self.client.put(reverse("accounts:requisites", args=["1001"]), {
            "card_number": "4111111111111111",
            "card_bank": "Tinkoff",
            "card_currency": "RUB"
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])

        user = User.objects.get(external_id="1001")
        self.assertEqual(user.card_currency, "RUB")
        self.assertEqual(user.wallet, "UQold")

    def test_update_requisites_rejects_crypto_card_currency(self):

        User.objects.create_user(external_id="1001", username="alice")

        response = self.client.put(reverse("accounts:requisites", args=["1001"]), {
            "card_currency": "TON"
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_requisites_empty_payload(self):

        User.objects.create_user(external_id="1001", username="alice")

        response = self.client.put(reverse("accounts:requisites", args=["1001"]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_requisites_unknown_user(self):

        response = self.client.put(reverse("accounts:requisites", args=["ghost"]), {
            "wallet": "UQnew"
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class TestIdentityService(APITestCase):

    def test_resolve_or_create_is_idempotent(self):

        user, created = IdentityService.resolve_or_create("42", "alice")
        again, created_again = IdentityService.resolve_or_create(42, "bob")

        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(user.pk, again.pk)
        self.assertFalse(user.has_usable_password())

    def test_get_by_external_id_missing(self):

        with self.assertRaises(UserNotFound):
            IdentityService.get_by_external_id("missing")

    def test_update_requisites_rejects_unknown_fields(self):

        User.objects.create_user(external_id="1001", username="alice")

        with self.assertRaises(ValidationError):
            IdentityService.update_requisites("1001", completed_deals=99)

        self.assertEqual(User.objects.get(external_id="1001").completed_deals, 0)
