# apps/notifications/tests.py
from datetime import date
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from apps.orders.models import Order, OrderStatus
from apps.payments.models import Payment, PaymentStatus
from .models import EmailNotification, EmailStatus, NotificationSettings, ValidSettings
from .services import notify_admin, send_email, send_summary_report, summary, summary_window
from .tasks import send_email_task


User = get_user_model()


def _order(order_id, status, amount=45500):
    return Order.objects.create(
        order_id=order_id,
        delivery_date=date(2026, 6, 1),
        quantity=10,
        price_per_unit="45.50",
        total_amount_in_paise=amount,
        full_name="Anu Thomas",
        email="anu@example.com",
        phone="+919876543210",
        delivery_address="Kumbukkal estate road",
        state="Kerala",
        district="Kozhikode",
        pincode="673001",
        area_name="Kunnamangalam",
        status=status,
    )


class EmailOutboxTests(TestCase):

    def test_send_email_waits_for_commit(self):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            email = send_email("password_otp", "anu@example.com", "OTP for Password Recovery",
                               "emails/password_otp.html", {"name": "Anu", "otp": "123456", "expiry_minutes": 5})

        self.assertEqual(email.status, EmailStatus.PENDING)
        self.assertEqual(len(callbacks), 1)
        self.assertEqual(len(mail.outbox), 0)

    def test_task_renders_and_marks_sent(self):
        email = EmailNotification.objects.create(
            event_key="password_otp",
            recipient="anu@example.com",
            subject="OTP for Password Recovery",
            template="emails/password_otp.html",
            context={"name": "Anu", "otp": "123456", "expiry_minutes": 5},
        )
        send_email_task(email.id)

        email.refresh_from_db()
        self.assertEqual(email.status, EmailStatus.SENT)
        self.assertIsNotNone(email.sent_at)
        self.assertIn("123456", mail.outbox[0].body)
        self.assertEqual(mail.outbox[0].alternatives[0][1], "text/html")

    def test_task_skips_already_sent(self):
        email = EmailNotification.objects.create(
            event_key="x", recipient="anu@example.com", subject="s",
            template="emails/password_otp.html", status=EmailStatus.SENT,
        )
        send_email_task(email.id)
        self.assertEqual(len(mail.outbox), 0)

    def test_no_recipient(self):
        self.assertIsNone(send_email("x", "", "s", "emails/password_otp.html"))
        self.assertFalse(EmailNotification.objects.exists())

    def test_admin_toggle_gates_email(self):
        row = NotificationSettings.load()
        row.new_bookings = False
        row.save()

        self.assertIsNone(notify_admin(ValidSettings.NEW_BOOKINGS, "admin_new_order", "s",
                                       "emails/admin_new_order.html", {}))
        self.assertFalse(EmailNotification.objects.exists())


class SummaryTests(TestCase):

    def test_windows(self):
        start, end = summary_window("weekly", today=date(2025, 3, 7))
        self.assertEqual(start.date(), date(2025, 3, 1))
        self.assertEqual(end.date(), date(2025, 3, 7))

        start, _ = summary_window("monthly", today=date(2025, 3, 17))
        self.assertEqual(start.date(), date(2025, 3, 1))

    def test_invalid_range(self):
        from apps.utils.exceptions import BusinessLogicException
        with self.assertRaises(BusinessLogicException):
            summary_window("yearly")

    def test_daily_numbers(self):
        User.objects.create_user(email="grower@example.com")
        User.objects.create_admin(email="admin@example.com")
        paid = _order("KP2025-0001", OrderStatus.PAID)
        _order("KP2025-0002", OrderStatus.PENDING, amount=9000)
        Payment.objects.create(order=paid, razorpay_order_id="order_rzp_1",
                               amount_in_paise=45500, status=PaymentStatus.CAPTURED)

        data = summary("daily")
        self.assertEqual(data["visitors"], 1)
        self.assertEqual(data["orders"], 1)
        self.assertEqual(data["total_revenue"], 45500)
        self.assertEqual(data["total_pending_revenue"], 9000)

    def test_summary_email_respects_toggle(self):
        self.assertIsNone(send_summary_report("daily"))

        row = NotificationSettings.load()
        row.daily_summary = True
        row.save()

        with self.captureOnCommitCallbacks(execute=True):
            send_summary_report("daily")

        self.assertEqual(len(mail.outbox), 1)
        self.assertTrue(mail.outbox[0].subject.startswith("Kumbukkal Pepper Nursery - Daily Summary Report ("))

    @patch("apps.notifications.services.send_summary_report")
    def test_beat_task_delegates(self, mock_report):
        from .tasks import send_summary_report_task
        send_summary_report_task("weekly")
        mock_report.assert_called_once_with("weekly")


class NotificationApiTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_admin(email="admin@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.admin)

    def test_get_defaults(self):
        response = self.client.get("/api/v1/notifications/settings/")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["settings"]["new_bookings"])
        self.assertFalse(response.data["settings"]["daily_summary"])

    def test_toggle(self):
        response = self.client.patch("/api/v1/notifications/settings/", {"field": "daily_summary"}, format="json")
        self.assertEqual(response.data["message"], "Setting updated successfully")
        self.assertTrue(NotificationSettings.load().daily_summary)

        self.client.patch("/api/v1/notifications/settings/", {"field": "daily_summary"}, format="json")
        self.assertFalse(NotificationSettings.load().daily_summary)

    def test_toggle_invalid_field(self):
        response = self.client.patch("/api/v1/notifications/settings/", {"field": "sms_alerts"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"], "Invalid field name")

    def test_toggle_missing_row(self):
        NotificationSettings.objects.all().delete()
        response = self.client.patch("/api/v1/notifications/settings/", {"field": "daily_summary"}, format="json")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"], "Settings record not found")

    def test_summary_endpoint(self):
        response = self.client.get("/api/v1/notifications/summary/monthly/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("period", response.data["dashboard_data"])

        response = self.client.get("/api/v1/notifications/summary/yearly/")
        self.assertEqual(response.data["error"], "Invalid summary range")

    @override_settings(ADMIN_EMAIL="owner@example.com")
    def test_email_log(self):
        EmailNotification.objects.create(event_key="a", recipient="owner@example.com", subject="s",
                                         template="t", status=EmailStatus.FAILED)
        EmailNotification.objects.create(event_key="b", recipient="owner@example.com", subject="s", template="t")

        response = self.client.get("/api/v1/notifications/emails/", {"status": "failed"})
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["event_key"], "a")
