import hashlib
import hmac
import json
from datetime import date, timedelta
from unittest.mock import patch

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import mail
from django.test import override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.orders.models import Order, OrderStatus, OrderRefundStatus, ProgressTracker, StageType
from apps.payments.models import Payment, PaymentStatus, Refund, RefundStatus, WebhookLog
from apps.utils.exceptions import BusinessLogicException
from apps.utils.utils import add_months, start_of_day

User = get_user_model()

WEBHOOK_SECRET = "whsec_test"


def make_paid_flow_order(user=None, order_id="KP2025-0001", status=OrderStatus.PENDING,
                         payment_status=PaymentStatus.CREATED, rzp_order="order_rzp_1", **extra):
    order = Order.objects.create(
        order_id=order_id,
        user=user,
        delivery_date=date(2026, 6, 1),
        quantity=10,
        price_per_unit="45.50",
        total_amount_in_paise=45500,
        full_name="Anu Thomas",
        email="anu@example.com",
        phone="+919876543210",
        delivery_address="Kumbukkal estate road",
        state="Kerala",
        district="Kozhikode",
        pincode="673001",
        area_name="Kunnamangalam",
        status=status,
        terms_accepted=True,
        **extra,
    )
    ProgressTracker.objects.create(order=order)
    Payment.objects.create(
        order=order,
        razorpay_order_id=rzp_order,
        razorpay_payment_id="pay_1" if payment_status == PaymentStatus.CAPTURED else None,
        amount_in_paise=45500,
        status=payment_status,
    )
    return order


def checkout_signature(rzp_order, rzp_payment):
    return hmac.new(
        settings.RAZORPAY_KEY_SECRET.encode(),
        f"{rzp_order}|{rzp_payment}".encode(),
        hashlib.sha256,
    ).hexdigest()


class VerifyPaymentTests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(email="anu@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.user)
        self.order = make_paid_flow_order(self.user)
        self.url = "/api/v1/payments/verify/"

    def _payload(self, signature=None):
        return {
            "order_id": self.order.pk,
            "razorpay_order_id": "order_rzp_1",
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": signature or checkout_signature("order_rzp_1", "pay_1"),
        }

    def test_verify_confirms_order_and_sends_emails(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Payment verified successfully")

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PAID)
        self.assertEqual(self.order.payment.status, PaymentStatus.CAPTURED)
        self.assertEqual(self.order.progress_tracker.current_stage, StageType.NURSERY_ALLOCATION)

        subjects = sorted(m.subject for m in mail.outbox)
        self.assertEqual(subjects, ["Payment Received - KP2025-0001", "🌱 Thank You for Your Order - KP2025-0001"])

    def test_repeat_verification_is_quiet(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.client.post(self.url, self._payload(), format="json")
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 2)

    def test_bad_signature(self):
        response = self.client.post(self.url, self._payload(signature="forged"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Invalid payment signature")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)

    def test_other_users_order(self):
        stranger = User.objects.create_user(email="stranger@example.com")
        self.client.force_authenticate(user=stranger)
        response = self.client.post(self.url, self._payload(), format="json")
        self.assertEqual(response.data["error"], "No order found with the id")


@override_settings(RAZORPAY_WEBHOOK_SECRET=WEBHOOK_SECRET)
class PaymentWebhookTests(APITestCase):

    def setUp(self):
        self.url = "/api/v1/payments/webhook/"
        self.order = make_paid_flow_order()

    def _post(self, payload, signature=None):
        body = json.dumps(payload)
        if signature is None:
            signature = hmac.new(WEBHOOK_SECRET.encode(), body.encode(), hashlib.sha256).hexdigest()
        return self.client.post(
            self.url, data=body, content_type="application/json", HTTP_X_RAZORPAY_SIGNATURE=signature,
        )

    def _captured_event(self):
        return {
            "event": "payment.captured",
            "payload": {"payment": {"entity": {"id": "pay_1", "order_id": "order_rzp_1"}}},
        }

    def test_captured_confirms_order(self):
        response = self._post(self._captured_event())

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "processed")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PAID)
        self.assertEqual(self.order.payment.razorpay_payment_id, "pay_1")

    def test_replay_is_ignored(self):
        self._post(self._captured_event())
        response = self._post(self._captured_event())

        self.assertEqual(response.data["status"], "duplicate")
        self.assertEqual(WebhookLog.objects.count(), 1)

    def test_invalid_signature(self):
        response = self._post(self._captured_event(), signature="bad")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "invalid_signature")
        self.assertFalse(WebhookLog.objects.exists())

    def test_missing_secret_rejects_everything(self):
        with override_settings(RAZORPAY_WEBHOOK_SECRET=""):
            response = self._post(self._captured_event())
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unhandled_event(self):
        response = self._post({"event": "order.paid", "payload": {}})
        self.assertEqual(response.data["status"], "ignored")

    def test_unknown_gateway_order_still_acknowledged(self):
        event = self._captured_event()
        event["payload"]["payment"]["entity"]["order_id"] = "order_missing"
        response = self._post(event)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(WebhookLog.objects.get().is_processed)

    def test_payment_failed(self):
        self._post({
            "event": "payment.failed",
            "payload": {"payment": {"entity": {"id": "pay_2", "order_id": "order_rzp_1"}}},
        })
        self.assertEqual(Payment.objects.get().status, PaymentStatus.FAILED)

    def test_refund_processed(self):
        Refund.objects.create(order=self.order, refund_id="rfnd_1", amount_in_paise=45500,
                              status=RefundStatus.PROCESSING)
        self._post({
            "event": "refund.processed",
            "payload": {"refund": {"entity": {"id": "rfnd_1", "amount": 45500}}},
        })

        refund = Refund.objects.get()
        self.assertEqual(refund.status, RefundStatus.SUCCESS)
        self.assertIsNotNone(refund.processed_at)
        self.assertEqual(Payment.objects.get().status, PaymentStatus.REFUNDED)

    def test_refund_failed(self):
        Refund.objects.create(order=self.order, refund_id="rfnd_1", amount_in_paise=45500,
                              status=RefundStatus.PROCESSING)
        self._post({
            "event": "refund.failed",
            "payload": {"refund": {"entity": {"id": "rfnd_1", "failure_reason": "Account closed"}}},
        })

        refund = Refund.objects.get()
        self.assertEqual(refund.status, RefundStatus.FAILED)
        self.assertEqual(refund.failure_reason, "Account closed")

    def test_non_utf8_body_is_rejected(self):
        response = self.client.post(
            self.url, data=b"\xff\xfe{}", content_type="application/json", HTTP_X_RAZORPAY_SIGNATURE="abc",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Invalid signature")
        self.assertEqual(response.data["code"], "invalid_signature")

    def test_refund_processed_before_approval_saved_gateway_id(self):
        Payment.objects.filter(order=self.order).update(status=PaymentStatus.CAPTURED, razorpay_payment_id="pay_1")
        Refund.objects.create(order=self.order, amount_in_paise=45500, status=RefundStatus.INITIATED)

        response = self._post({
            "event": "refund.processed",
            "payload": {"refund": {"entity": {"id": "rfnd_1", "payment_id": "pay_1", "amount": 45500}}},
        })

        self.assertEqual(response.data["status"], "processed")
        refund = Refund.objects.get()
        self.assertEqual(refund.refund_id, "rfnd_1")
        self.assertEqual(refund.status, RefundStatus.SUCCESS)


class AdminRefundTests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_admin(email="admin@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.admin)
        self.order = make_paid_flow_order(
            status=OrderStatus.REFUNDED,
            payment_status=PaymentStatus.CAPTURED,
            refund_status=OrderRefundStatus.PENDING,
        )

    @patch('apps.payments.gateway.RazorpayGateway.refund', return_value={"id": "rfnd_1", "amount": 45500})
    def test_approve(self, mock_refund):
        response = self.client.post(f"/api/v1/payments/admin/refunds/{self.order.pk}/approve/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Refund accepted successfully!")
        mock_refund.assert_called_once_with("pay_1", 45500, "Full refund requested")

        refund = Refund.objects.get()
        self.assertEqual(refund.status, RefundStatus.PROCESSING)
        self.order.refresh_from_db()
        self.assertEqual(self.order.refund_status, OrderRefundStatus.APPROVED)

    @patch('apps.payments.gateway.RazorpayGateway.refund', return_value={"id": "rfnd_1", "amount": 45500})
    def test_approve_twice(self, mock_refund):
        self.client.post(f"/api/v1/payments/admin/refunds/{self.order.pk}/approve/")
        response = self.client.post(f"/api/v1/payments/admin/refunds/{self.order.pk}/approve/")

        self.assertEqual(response.data["error"], "Refund already processed for this order")
        self.assertEqual(mock_refund.call_count, 1)

    @patch('apps.payments.gateway.RazorpayGateway.refund')
    def test_approve_requires_capture(self, mock_refund):
        Payment.objects.filter(order=self.order).update(status=PaymentStatus.CREATED)
        response = self.client.post(f"/api/v1/payments/admin/refunds/{self.order.pk}/approve/")

        self.assertEqual(response.data["error"], "Payment not captured, cannot refund")
        mock_refund.assert_not_called()

    @patch('apps.payments.gateway.RazorpayGateway.refund')
    def test_approve_without_refund_request(self, mock_refund):
        paid = make_paid_flow_order(
            order_id="KP2025-0002", rzp_order="order_rzp_2",
            status=OrderStatus.PAID, payment_status=PaymentStatus.CAPTURED,
        )
        response = self.client.post(f"/api/v1/payments/admin/refunds/{paid.pk}/approve/")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "No pending refund request for this order")
        self.assertEqual(response.data["code"], "refund_not_requested")
        mock_refund.assert_not_called()
        self.assertFalse(Refund.objects.exists())

    @patch('apps.payments.gateway.RazorpayGateway.refund')
    def test_approve_after_cancel(self, mock_refund):
        self.client.post(f"/api/v1/payments/admin/refunds/{self.order.pk}/cancel/")
        response = self.client.post(f"/api/v1/payments/admin/refunds/{self.order.pk}/approve/")

        self.assertEqual(response.data["error"], "No pending refund request for this order")
        mock_refund.assert_not_called()
        self.order.refresh_from_db()
        self.assertEqual(self.order.refund_status, OrderRefundStatus.CANCELLED)

    def test_cancel_without_refund_request(self):
        paid = make_paid_flow_order(
            order_id="KP2025-0002", rzp_order="order_rzp_2",
            status=OrderStatus.PAID, payment_status=PaymentStatus.CAPTURED,
        )
        response = self.client.post(f"/api/v1/payments/admin/refunds/{paid.pk}/cancel/")

        self.assertEqual(response.data["error"], "No pending refund request for this order")
        paid.refresh_from_db()
        self.assertIsNone(paid.refund_status)

    @patch('apps.payments.gateway.RazorpayGateway.refund',
           side_effect=BusinessLogicException("Refund failed: timeout", code="refund_failed"))
    def test_gateway_failure_releases_reservation(self, mock_refund):
        response = self.client.post(f"/api/v1/payments/admin/refunds/{self.order.pk}/approve/")

        self.assertEqual(response.data["error"], "Refund failed: timeout")
        self.assertFalse(Refund.objects.exists())
        self.order.refresh_from_db()
        self.assertEqual(self.order.refund_status, OrderRefundStatus.PENDING)

    def test_approve_keeps_outcome_of_early_webhook(self):
        def settle_first(payment_id, amount, reason):
            refund = Refund.objects.get(order=self.order)
            self.assertIsNone(refund.refund_id)
            refund.refund_id = "rfnd_1"
            refund.status = RefundStatus.SUCCESS
            refund.save()
            return {"id": "rfnd_1", "amount": amount}

        with patch('apps.payments.gateway.RazorpayGateway.refund', side_effect=settle_first):
            response = self.client.post(f"/api/v1/payments/admin/refunds/{self.order.pk}/approve/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Refund.objects.get().status, RefundStatus.SUCCESS)

    def test_cancel_and_list(self):
        response = self.client.post(f"/api/v1/payments/admin/refunds/{self.order.pk}/cancel/")
        self.assertEqual(response.data["message"], "Refund request cancelled successfully!")

        cancelled = self.client.get("/api/v1/payments/admin/refunds/cancelled/page/1/")
        self.assertEqual(cancelled.data["refunds"]["total_count"], 1)

    def test_request_list_filters(self):
        make_paid_flow_order(
            order_id="KP2025-0002", rzp_order="order_rzp_2", status=OrderStatus.REFUNDED,
            refund_status=OrderRefundStatus.CANCELLED, full_name="Biju",
        )

        response = self.client.get("/api/v1/payments/admin/refunds/page/1/")
        self.assertEqual(response.data["refunds"]["total_count"], 2)

        response = self.client.get("/api/v1/payments/admin/refunds/page/1/", {"status": "PENDING"})
        self.assertEqual(response.data["refunds"]["total_count"], 1)

        response = self.client.get("/api/v1/payments/admin/refunds/page/1/", {"status": "LOST"})
        self.assertEqual(response.data["error"], "Enter a valid status value")

        response = self.client.get("/api/v1/payments/admin/refunds/page/1/", {"search": "biju"})
        self.assertEqual(response.data["refunds"]["total_count"], 1)
        self.assertEqual(response.data["refunds"]["orders"][0]["order_id"], "KP2025-0002")

    def test_refund_cards(self):
        response = self.client.get("/api/v1/payments/admin/refunds/cards/")
        cards = {c["title"]: c["value"] for c in response.data["cards"]}
        self.assertEqual(cards["Total Requests"], 1)
        self.assertEqual(cards["Pending"], 1)
        self.assertEqual(cards["Approved"], 0)


class PaymentReportTests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_admin(email="admin@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.admin)

    def test_cards(self):
        paid = make_paid_flow_order(status=OrderStatus.PAID, payment_status=PaymentStatus.CAPTURED)
        make_paid_flow_order(order_id="KP2025-0002", rzp_order="order_rzp_2")
        Refund.objects.create(order=paid, refund_id="rfnd_1", amount_in_paise=1000, status=RefundStatus.SUCCESS)

        response = self.client.get("/api/v1/payments/admin/cards/")
        cards = {c["title"]: c["amount"] for c in response.data["cards"]}

        self.assertEqual(cards["Total Revenue"], 45500)
        self.assertEqual(cards["Successful Payments"], 1)
        self.assertEqual(cards["Pending Payments"], 1)
        self.assertEqual(cards["Total Refunded"], 1000)

    def test_transactions(self):
        make_paid_flow_order(status=OrderStatus.PAID, payment_status=PaymentStatus.CAPTURED)
        make_paid_flow_order(order_id="KP2025-0002", rzp_order="order_rzp_2")

        response = self.client.get("/api/v1/payments/admin/transactions/page/1/", {"status": "paid"})
        rows = response.data["transactions"]["transactions"]
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["payment"]["status"], PaymentStatus.CAPTURED)

        response = self.client.get("/api/v1/payments/admin/transactions/page/1/", {"status": "lost"})
        self.assertEqual(response.data["error"], "Please enter a valid status option")

    def test_cards_default_to_the_last_month(self):
        window_start = start_of_day(add_months(timezone.localdate(), -1))
        inside = make_paid_flow_order(status=OrderStatus.PAID, payment_status=PaymentStatus.CAPTURED)
        outside = make_paid_flow_order(
            order_id="KP2025-0002", rzp_order="order_rzp_2",
            status=OrderStatus.PAID, payment_status=PaymentStatus.CAPTURED,
        )
        Order.objects.filter(pk=inside.pk).update(created_at=window_start + timedelta(minutes=1))
        Order.objects.filter(pk=outside.pk).update(created_at=window_start - timedelta(minutes=1))

        response = self.client.get("/api/v1/payments/admin/cards/")
        cards = {c["title"]: c["amount"] for c in response.data["cards"]}
        self.assertEqual(cards["Successful Payments"], 1)
        self.assertEqual(cards["Total Revenue"], 45500)

    def test_transaction_search_and_dates(self):
        make_paid_flow_order(status=OrderStatus.PAID, payment_status=PaymentStatus.CAPTURED)
        make_paid_flow_order(order_id="KP2025-0002", rzp_order="order_rzp_2", full_name="Biju Varghese")

        response = self.client.get("/api/v1/payments/admin/transactions/page/1/", {"search": "KP2025-0002"})
        self.assertEqual(response.data["transactions"]["total_count"], 1)

        today = timezone.localdate().isoformat()
        response = self.client.get("/api/v1/payments/admin/transactions/page/1/", {"from_date": today})
        self.assertEqual(response.data["transactions"]["total_count"], 2)

        response = self.client.get("/api/v1/payments/admin/transactions/page/1/", {"from_date": "2025-13-01"})
        self.assertEqual(response.data["error"], "Invalid date format provided")
        self.assertEqual(response.data["code"], "invalid_date")
