import os
from io import StringIO
from datetime import timedelta
from unittest.mock import patch

from django.core import mail
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from apps.accounts.models import User, PhoneOTP

PASSWORD = "Pepper@123"


class UserAuthTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="farmer@example.com", password=PASSWORD, name="Farmer")

    def test_register_new_user(self):
        response = self.client.post("/api/v1/accounts/register/", {
            "name": "Anu", "email": "Anu@Example.com", "password": PASSWORD,
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(User.objects.filter(email="anu@example.com").exists())

    def test_register_duplicate_email(self):
        response = self.client.post("/api/v1/accounts/register/", {
            "name": "Again", "email": "FARMER@example.com", "password": PASSWORD,
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Email already registered")

    def test_register_weak_password(self):
        response = self.client.post("/api/v1/accounts/register/", {
            "name": "Weak", "email": "weak@example.com", "password": "password",
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", response.data)

    def test_login_returns_tokens(self):
        response = self.client.post("/api/v1/accounts/login/", {
            "email": "farmer@example.com", "password": PASSWORD,
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Login successfull")
        self.assertFalse(response.data["user"]["is_admin"])
        self.assertIn("access", response.data["user"]["token"])

        # the access token works on an authenticated endpoint
        token = response.data["user"]["token"]["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        me = self.client.get("/api/v1/accounts/me/")
        self.assertEqual(me.data["email"], "farmer@example.com")

    def test_login_wrong_password(self):
        response = self.client.post("/api/v1/accounts/login/", {
            "email": "farmer@example.com", "password": "Wrong@1234",
        })
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["error"], "Invalid credentials")

    def test_admin_cannot_use_customer_login(self):
        User.objects.create_admin(email="admin@example.com", password=PASSWORD)
        response = self.client.post("/api/v1/accounts/login/", {
            "email": "admin@example.com", "password": PASSWORD,
        })
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class PasswordRecoveryTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="farmer@example.com", password=PASSWORD)

    def test_send_otp_emails_code(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post("/api/v1/accounts/send-otp/", {"email": "farmer@example.com"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(len(self.user.otp), 6)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "OTP for Password Recovery")
        self.assertIn(self.user.otp, mail.outbox[0].alternatives[0][0])

    def test_send_otp_unknown_email(self):
        response = self.client.post("/api/v1/accounts/send-otp/", {"email": "ghost@example.com"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "User not found")

    def test_full_reset_flow(self):
        self.user.otp = "123456"
        self.user.otp_expires_at = timezone.now() + timedelta(minutes=5)
        self.user.save()

        verify = self.client.post("/api/v1/accounts/verify-otp/", {"email": "farmer@example.com", "otp": "123456"})
        self.assertEqual(verify.status_code, status.HTTP_200_OK)

        # the code is single use
        again = self.client.post("/api/v1/accounts/verify-otp/", {"email": "farmer@example.com", "otp": "123456"})
        self.assertEqual(again.data["error"], "OTP not generated")

        reset = self.client.post("/api/v1/accounts/reset-password/", {
            "email": "farmer@example.com", "password": "Vine@2025x",
        })
        self.assertEqual(reset.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("Vine@2025x"))
        self.assertIsNone(self.user.otp_verified_at)

    def test_wrong_otp(self):
        self.user.otp = "123456"
        self.user.otp_expires_at = timezone.now() + timedelta(minutes=5)
        self.user.save()

        response = self.client.post("/api/v1/accounts/verify-otp/", {"email": "farmer@example.com", "otp": "654321"})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["error"], "Invalid OTP")

    def test_expired_otp(self):
        self.user.otp = "123456"
        self.user.otp_expires_at = timezone.now() - timedelta(seconds=1)
        self.user.save()

        response = self.client.post("/api/v1/accounts/verify-otp/", {"email": "farmer@example.com", "otp": "123456"})
        self.assertEqual(response.data["error"], "OTP expired")

    def test_reset_requires_verified_otp(self):
        response = self.client.post("/api/v1/accounts/reset-password/", {
            "email": "farmer@example.com", "password": "Vine@2025x",
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "OTP not verified")

    def test_reset_rejects_same_password(self):
        self.user.otp_verified_at = timezone.now()
        self.user.save()
        response = self.client.post("/api/v1/accounts/reset-password/", {
            "email": "farmer@example.com", "password": PASSWORD,
        })
        self.assertEqual(response.data["error"], "New password must be different from old password")


class PhoneOTPTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.phone = "+919876543210"
        User.objects.create_user(email="farmer@example.com", password=PASSWORD, phone=self.phone)

    @patch('apps.accounts.services.send_sms_task.delay')
    def test_request_otp(self, mock_send_sms):
        response = self.client.post("/api/v1/accounts/phone/send-otp/", {"phone": self.phone})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(PhoneOTP.objects.filter(phone=self.phone, is_used=False).count(), 1)
        mock_send_sms.assert_called_once()

    @patch('apps.accounts.services.send_sms_task.delay')
    def test_new_code_replaces_old(self, mock_send_sms):
        self.client.post("/api/v1/accounts/phone/send-otp/", {"phone": self.phone})
        self.client.post("/api/v1/accounts/phone/send-otp/", {"phone": self.phone})
        self.assertEqual(PhoneOTP.objects.filter(phone=self.phone, is_used=False).count(), 1)

    def test_verify_marks_phone(self):
        PhoneOTP.issue(self.phone, "123456", 5)
        response = self.client.post("/api/v1/accounts/phone/verify-otp/", {"phone": self.phone, "otp": "123456"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(User.objects.get(phone=self.phone).phone_verified)

    def test_code_burns_after_max_attempts(self):
        PhoneOTP.issue(self.phone, "123456", 5)
        for _ in range(PhoneOTP.MAX_ATTEMPTS):
            self.client.post("/api/v1/accounts/phone/verify-otp/", {"phone": self.phone, "otp": "000000"})

        response = self.client.post("/api/v1/accounts/phone/verify-otp/", {"phone": self.phone, "otp": "123456"})
        self.assertEqual(response.data["error"], "OTP not generated")


class GoogleLoginTests(TestCase):

    def setUp(self):
        self.client = APIClient()

    @patch('apps.accounts.services.id_token.verify_oauth2_token')
    def test_creates_account(self, mock_verify):
        mock_verify.return_value = {
            "email": "grower@gmail.com", "email_verified": True, "name": "Grower", "sub": "g-1",
        }
        response = self.client.post("/api/v1/accounts/google/", {"token": "google-id-token"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user = User.objects.get(email="grower@gmail.com")
        self.assertEqual(user.provider, "google")
        self.assertFalse(user.has_usable_password())

    @patch('apps.accounts.services.id_token.verify_oauth2_token')
    def test_links_existing_password_account(self, mock_verify):
        User.objects.create_user(email="grower@gmail.com", password=PASSWORD)
        mock_verify.return_value = {"email": "grower@gmail.com", "email_verified": True, "sub": "g-2"}

        self.client.post("/api/v1/accounts/google/", {"token": "google-id-token"})
        self.assertEqual(User.objects.filter(email="grower@gmail.com").count(), 1)
        self.assertEqual(User.objects.get(email="grower@gmail.com").provider_id, "g-2")

    @patch('apps.accounts.services.id_token.verify_oauth2_token', side_effect=ValueError("bad token"))
    def test_rejects_invalid_token(self, mock_verify):
        response = self.client.post("/api/v1/accounts/google/", {"token": "forged"})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["error"], "Invalid Google token")


class AdminAccountTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_admin(email="admin@example.com", password=PASSWORD, name="Admin")

    def test_admin_login_flags_token(self):
        response = self.client.post("/api/v1/accounts/admin/login/", {
            "email": "admin@example.com", "password": PASSWORD,
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["user"]["is_admin"])

    def test_admin_login_wrong_password(self):
        response = self.client.post("/api/v1/accounts/admin/login/", {
            "email": "admin@example.com", "password": "Wrong@1234",
        })
        self.assertEqual(response.data["error"], "Enter a valid password")

    def test_customer_blocked_from_admin_api(self):
        customer = User.objects.create_user(email="farmer@example.com", password=PASSWORD)
        self.client.force_authenticate(user=customer)
        response = self.client.get("/api/v1/accounts/admin/users/page/1/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_user_list_paginates_customers_only(self):
        for i in range(7):
            User.objects.create_user(email=f"user{i}@example.com", password=PASSWORD, name=f"User {i}")

        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/accounts/admin/users/page/2/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        page = response.data["users"]
        self.assertEqual(page["total_count"], 7)
        self.assertEqual(page["total_pages"], 2)
        self.assertEqual(len(page["users"]), 2)

    def test_user_list_search(self):
        User.objects.create_user(email="pepper@example.com", name="Pepper Grower")
        User.objects.create_user(email="other@example.com", name="Someone")
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/v1/accounts/admin/users/page/1/", {"search": "pepper"})
        self.assertEqual(response.data["users"]["total_count"], 1)

    def test_user_list_date_range(self):
        old = User.objects.create_user(email="old@example.com", name="Old Grower")
        User.objects.create_user(email="new@example.com", name="New Grower")
        User.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=10))
        self.client.force_authenticate(user=self.admin)

        today = timezone.localdate().isoformat()
        response = self.client.get("/api/v1/accounts/admin/users/page/1/", {"from_date": today, "to_date": today})
        self.assertEqual(response.data["users"]["total_count"], 1)
        self.assertEqual(response.data["users"]["users"][0]["email"], "new@example.com")

    def test_user_list_bad_date(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/accounts/admin/users/page/1/", {"from_date": "03-01-2025"})
        self.assertEqual(response.data["error"], "Invalid date format provided")

    def test_delete_user(self):
        user = User.objects.create_user(email="gone@example.com")
        self.client.force_authenticate(user=self.admin)

        response = self.client.delete(f"/api/v1/accounts/admin/users/{user.pk}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(pk=user.pk).exists())

        missing = self.client.delete(f"/api/v1/accounts/admin/users/{user.pk}/")
        self.assertEqual(missing.data["error"], "No user with the id")

    def test_edit_profile(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.put("/api/v1/accounts/admin/profile/", {
            "name": "Head Admin", "email": "head@example.com", "password": "Nursery@2025",
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.admin.refresh_from_db()
        self.assertEqual(self.admin.email, "head@example.com")
        self.assertTrue(self.admin.check_password("Nursery@2025"))

    def test_export_lists_all_customers(self):
        User.objects.create_user(email="a@example.com", name="A")
        User.objects.create_user(email="b@example.com", name="B")
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/v1/accounts/admin/users/export/")
        emails = {u["email"] for u in response.data["users"]}
        self.assertEqual(emails, {"a@example.com", "b@example.com"})


class AccountCommandTests(TestCase):

    def test_cleanup_auth_data(self):
        PhoneOTP.objects.create(phone="+919876543210", code="123456", expires_at=timezone.now())
        PhoneOTP.objects.filter().update(created_at=timezone.now() - timedelta(hours=3))
        fresh = PhoneOTP.objects.create(phone="+919876543211", code="654321", expires_at=timezone.now())
        user = User.objects.create_user(email="farmer@example.com")
        User.objects.filter(pk=user.pk).update(otp="111111", otp_expires_at=timezone.now() - timedelta(minutes=1))

        out = StringIO()
        call_command("cleanup_auth_data", stdout=out)

        self.assertEqual(list(PhoneOTP.objects.values_list("pk", flat=True)), [fresh.pk])
        user.refresh_from_db()
        self.assertIsNone(user.otp)
        self.assertIn("Deleted 1 phone OTPs", out.getvalue())

    @patch.dict(os.environ, {
        "ALLOW_CREATE_ADMIN_IN_PROD": "True",
        "ADMIN_EMAIL": "Owner@Example.com",
        "ADMIN_PASSWORD": PASSWORD,
    })
    def test_create_admin(self):
        call_command("create_admin", stdout=StringIO())
        admin = User.objects.get(email="owner@example.com")
        self.assertTrue(admin.is_staff)
        self.assertFalse(admin.is_superuser)
        self.assertTrue(admin.check_password(PASSWORD))

        out = StringIO()
        call_command("create_admin", "--superuser", stdout=out)
        self.assertIn("Updated admin", out.getvalue())
        self.assertTrue(User.objects.get(email="owner@example.com").is_superuser)
