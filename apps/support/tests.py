from django.contrib.auth import get_user_model
from django.core import mail
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from .models import ContactForm, CallBack

User = get_user_model()


class ContactFormTests(APITestCase):

    @override_settings(ADMIN_EMAIL="owner@example.com")
    def test_submit_sends_two_emails(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post("/api/v1/support/contact/", {
                "name": "Anu", "email": "anu@example.com", "phone": "+919876543210",
                "message": "Do you deliver to Idukki?",
            }, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "Contact details submitted successfully")
        self.assertEqual(ContactForm.objects.count(), 1)

        sent = {m.to[0]: m.subject for m in mail.outbox}
        self.assertEqual(sent["owner@example.com"], "New Contact Form Submission")
        self.assertEqual(sent["anu@example.com"], "Thank You for Contacting Kumbukkal Pepper Nursery")

    def test_validation_messages(self):
        response = self.client.post("/api/v1/support/contact/", {
            "name": "", "email": "nope", "message": "",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["name"], ["Name is required"])
        self.assertEqual(response.data["email"], ["Invalid email format"])
        self.assertFalse(ContactForm.objects.exists())

    def test_bad_phone(self):
        response = self.client.post("/api/v1/support/contact/", {
            "name": "Anu", "email": "anu@example.com", "phone": "12", "message": "Hi",
        }, format="json")
        self.assertIn("phone", response.data)


class CallBackTests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(email="anu@example.com", name="Anu", phone="+919876543210")

    def test_request_snapshots_user(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post("/api/v1/support/callback/")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "New callback saved successfully!")
        self.assertEqual(response.data["call_back"]["phone"], "+919876543210")

        # later profile edits leave the request as it was
        self.user.phone = "+919000000000"
        self.user.save()
        self.assertEqual(CallBack.objects.get().phone, "+919876543210")

    def test_anonymous_rejected(self):
        response = self.client.post("/api/v1/support/callback/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_deleting_user_keeps_callback(self):
        CallBack.objects.create(user=self.user, name="Anu", email="anu@example.com")
        self.user.delete()
        self.assertIsNone(CallBack.objects.get().user)


class AdminCallBackTests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_admin(email="admin@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.admin)
        ContactForm.objects.create(name="Anu", email="anu@example.com", message="Idukki delivery?")
        ContactForm.objects.create(name="Biju", email="biju@example.com", message="Bulk price?")
        self.callback = CallBack.objects.create(name="Chinnu", email="chinnu@example.com", phone="+919111111111")

    def test_lists_contacts_by_default(self):
        response = self.client.get("/api/v1/support/admin/callbacks/page/1/")
        self.assertEqual(response.data["callbacks"]["total_count"], 2)

        response = self.client.get("/api/v1/support/admin/callbacks/page/1/", {"search": "bulk"})
        self.assertEqual(response.data["callbacks"]["callbacks"][0]["name"], "Biju")

    def test_lists_callbacks(self):
        response = self.client.get("/api/v1/support/admin/callbacks/page/1/", {"kind": "callback"})
        self.assertEqual(response.data["callbacks"]["total_count"], 1)
        self.assertEqual(response.data["callbacks"]["callbacks"][0]["name"], "Chinnu")

    def test_bad_dates(self):
        response = self.client.get("/api/v1/support/admin/callbacks/page/1/", {"to_date": "yesterday"})
        self.assertEqual(response.data["error"], "Invalid date format provided")

    def test_delete(self):
        response = self.client.delete(f"/api/v1/support/admin/callbacks/{self.callback.pk}/?kind=callback")
        self.assertEqual(response.data["message"], "Callback deleted successfully")
        self.assertFalse(CallBack.objects.exists())

        response = self.client.delete(f"/api/v1/support/admin/callbacks/{self.callback.pk}/?kind=callback")
        self.assertEqual(response.data["error"], "No callback with the id")
