import shutil
import tempfile
from datetime import date
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import IntegrityError
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from apps.orders.models import Order, OrderStatus, OrderRefundStatus, ProgressTracker, StageType, StageStatus
from apps.orders.serializers import BulkOrderSerializer
from apps.orders.services import MAX_ORDER_ID_ATTEMPTS, OrderIdGenerator, OrderService, compute_total_in_paise
from apps.payments.models import Payment, PaymentStatus

User = get_user_model()

ORDER_PAYLOAD = {
    "product_name": "Panniyur-1 rooted cuttings",
    "delivery_date": "2026-06-01",
    "delivery_location": "Kozhikode hub",
    "quantity": 10,
    "price_per_unit": "45.50",
    "full_name": "Anu Thomas",
    "email": "anu@example.com",
    "phone": "+919876543210",
    "delivery_address": "Kumbukkal estate road",
    "state": "Kerala",
    "district": "Kozhikode",
    "pincode": "673001",
    "area_name": "Kunnamangalam",
    "terms_accepted": True,
}


def make_order(user=None, order_id="KP2025-0001", status=OrderStatus.PAID, **extra):
    fields = {
        "order_id": order_id,
        "user": user,
        "delivery_date": date(2026, 6, 1),
        "quantity": 10,
        "price_per_unit": "45.50",
        "total_amount_in_paise": 45500,
        "full_name": "Anu Thomas",
        "email": "anu@example.com",
        "phone": "+919876543210",
        "delivery_address": "Kumbukkal estate road",
        "state": "Kerala",
        "district": "Kozhikode",
        "pincode": "673001",
        "area_name": "Kunnamangalam",
        "status": status,
        "terms_accepted": True,
    }
    fields.update(extra)
    order = Order.objects.create(**fields)
    ProgressTracker.objects.create(order=order)
    return order


class OrderIdTests(TestCase):
    def test_sequence_within_year(self):
        self.assertEqual(OrderIdGenerator.next_after("KP2025-0041", 2025), "KP2025-0042")

    def test_sequence_restarts_each_year(self):
        self.assertEqual(OrderIdGenerator.next_after("KP2024-0099", 2025), "KP2025-0001")

    def test_first_order(self):
        self.assertEqual(OrderIdGenerator.next_after(None, 2025), "KP2025-0001")
        self.assertEqual(OrderIdGenerator.next_after("legacy-7", 2025), "KP2025-0001")

    def test_total_in_paise(self):
        self.assertEqual(compute_total_in_paise("45.50", 10), 45500)
        self.assertEqual(compute_total_in_paise("0.333", 3), 99)


@patch('apps.payments.gateway.RazorpayGateway.create_order', return_value={"id": "order_rzp_1"})
class CreateOrderTests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(email="anu@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.user)

    def test_create_order(self, mock_gateway):
        response = self.client.post("/api/v1/orders/", ORDER_PAYLOAD, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["razorpay_order_id"], "order_rzp_1")
        self.assertEqual(response.data["amount"], 45500)

        order = Order.objects.get()
        self.assertEqual(order.order_id, f"KP{timezone.localdate().year}-0001")
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertEqual(order.payment.status, PaymentStatus.CREATED)
        self.assertIsNone(order.progress_tracker.current_stage)
        self.assertEqual(mock_gateway.call_args.kwargs["amount_in_paise"], 45500)

    def test_create_order_emails_admin(self, mock_gateway):
        with self.captureOnCommitCallbacks(execute=True):
            self.client.post("/api/v1/orders/", ORDER_PAYLOAD, format="json")

        order = Order.objects.get()
        self.assertEqual([m.subject for m in mail.outbox], [f"🛒 New Order Received - {order.order_id}"])

    def test_sequential_ids(self, mock_gateway):
        mock_gateway.side_effect = [{"id": "order_rzp_1"}, {"id": "order_rzp_2"}]
        self.client.post("/api/v1/orders/", ORDER_PAYLOAD, format="json")
        self.client.post("/api/v1/orders/", ORDER_PAYLOAD, format="json")

        year = timezone.localdate().year
        self.assertEqual(
            sorted(Order.objects.values_list("order_id", flat=True)),
            [f"KP{year}-0001", f"KP{year}-0002"],
        )

    def test_terms_must_be_accepted(self, mock_gateway):
        response = self.client.post("/api/v1/orders/", {**ORDER_PAYLOAD, "terms_accepted": False}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        mock_gateway.assert_not_called()

    def test_gateway_failure_stores_nothing(self, mock_gateway):
        from apps.utils.exceptions import BusinessLogicException
        mock_gateway.side_effect = BusinessLogicException("Payment gateway error", status_code=502)

        response = self.client.post("/api/v1/orders/", ORDER_PAYLOAD, format="json")
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertFalse(Order.objects.exists())

    def test_anonymous_rejected(self, mock_gateway):
        self.client.force_authenticate(user=None)
        response = self.client.post("/api/v1/orders/", ORDER_PAYLOAD, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class CustomerOrderTests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(email="anu@example.com", password="Pepper@123")
        self.other = User.objects.create_user(email="other@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.user)

    def test_list_shows_only_paid_orders_of_user(self):
        make_order(self.user, "KP2025-0001")
        make_order(self.user, "KP2025-0002", status=OrderStatus.PENDING)
        make_order(self.other, "KP2025-0003")

        response = self.client.get("/api/v1/orders/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([o["order_id"] for o in response.data["orders"]], ["KP2025-0001"])

    def test_retrieve_other_users_order(self):
        order = make_order(self.other)
        response = self.client.get(f"/api/v1/orders/{order.pk}/")
        self.assertEqual(response.data["error"], "No order found with the id")

    def test_invoice(self):
        order = make_order(self.user)
        response = self.client.get(f"/api/v1/orders/{order.pk}/invoice/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertContains(response, "KP2025-0001")
        # 18% tax on ₹455.00
        self.assertContains(response, "₹81.90")
        self.assertContains(response, "₹536.90")


class RefundRequestTests(APITestCase):

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        self.user = User.objects.create_user(email="anu@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.user)
        self.order = make_order(self.user)

    def test_refund_request_notifies_admin(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                f"/api/v1/orders/{self.order.pk}/refund-request/",
                {"reason": "Plants arrived damaged"},
                format="json",
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.REFUNDED)
        self.assertEqual(self.order.refund_status, OrderRefundStatus.PENDING)
        self.assertEqual(self.order.metadata["refund_request"]["reason"], "Plants arrived damaged")

        subjects = [m.subject for m in mail.outbox]
        self.assertIn("Refund Request Raised - Order KP2025-0001", subjects)

    def test_duplicate_images_stored_once(self):
        first = SimpleUploadedFile("leaf.jpg", b"same-bytes", content_type="image/jpeg")
        second = SimpleUploadedFile("leaf-copy.jpg", b"same-bytes", content_type="image/jpeg")

        with override_settings(MEDIA_ROOT=self.media_root):
            response = self.client.post(
                f"/api/v1/orders/{self.order.pk}/refund-request/",
                {"reason": "Wilted", "files": [first, second]},
                format="multipart",
            )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        images = Order.objects.get(pk=self.order.pk).metadata["refund_request"]["images"]
        self.assertEqual(len(images), 2)
        self.assertEqual(images[0]["url"], images[1]["url"])

    def test_only_paid_orders(self):
        pending = make_order(self.user, "KP2025-0002", status=OrderStatus.PENDING)
        response = self.client.post(
            f"/api/v1/orders/{pending.pk}/refund-request/", {"reason": "Changed mind"}, format="json",
        )
        self.assertEqual(response.data["error"], "Refund can only be requested for paid orders")

    def test_cannot_request_twice(self):
        url = f"/api/v1/orders/{self.order.pk}/refund-request/"
        self.client.post(url, {"reason": "Wilted"}, format="json")
        response = self.client.post(url, {"reason": "Wilted again"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PaymentConfirmationTests(TestCase):

    def test_confirm_moves_tracker_to_allocation(self):
        order = make_order(status=OrderStatus.PENDING)
        self.assertTrue(OrderService.confirm_payment(order))

        tracker = ProgressTracker.objects.get(order=order)
        self.assertEqual(tracker.current_stage, StageType.NURSERY_ALLOCATION)
        self.assertEqual(tracker.progress_percentage, 20)
        self.assertEqual(tracker.order_confirmed_status, StageStatus.COMPLETED)
        self.assertEqual(tracker.nursery_allocation_status, StageStatus.IN_PROGRESS)

    def test_confirm_is_idempotent(self):
        order = make_order(status=OrderStatus.PENDING)
        OrderService.confirm_payment(order)
        self.assertFalse(OrderService.confirm_payment(order))


class AdminOrderTests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_admin(email="admin@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.admin)

    def _paid_order(self, order_id="KP2025-0001", **extra):
        order = make_order(order_id=order_id, status=OrderStatus.PENDING, **extra)
        OrderService.confirm_payment(order)
        return order

    def test_list_and_search(self):
        self._paid_order("KP2025-0001", full_name="Anu Thomas")
        self._paid_order("KP2025-0002", full_name="Biju Varghese")
        make_order(order_id="KP2025-0003", status=OrderStatus.PENDING)

        response = self.client.get("/api/v1/orders/admin/page/1/")
        self.assertEqual(response.data["orders"]["total_count"], 2)

        response = self.client.get("/api/v1/orders/admin/page/1/", {"search": "biju"})
        self.assertEqual(response.data["orders"]["total_count"], 1)

    def test_filter_by_stage(self):
        order = self._paid_order()
        self._paid_order("KP2025-0002")
        self.client.patch(f"/api/v1/orders/admin/{order.pk}/status/", {"status": "GROWTH_PHASE"}, format="json")

        response = self.client.get("/api/v1/orders/admin/page/1/", {"status": "GROWTH_PHASE"})
        self.assertEqual(response.data["orders"]["total_count"], 1)

        response = self.client.get("/api/v1/orders/admin/page/1/", {"status": "SHIPPED"})
        self.assertEqual(response.data["error"], "Invalid status value")

    def test_stage_moves_forward_only(self):
        order = self._paid_order()
        url = f"/api/v1/orders/admin/{order.pk}/status/"

        response = self.client.patch(url, {"status": "GROWTH_PHASE"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["progress_tracker"]["progress_percentage"], 40)

        response = self.client.patch(url, {"status": "GROWTH_PHASE"}, format="json")
        self.assertEqual(response.data["error"], "Order is already at GROWTH_PHASE")

        response = self.client.patch(url, {"status": "DELIVERED"}, format="json")
        tracker = ProgressTracker.objects.get(order=order)
        self.assertEqual(tracker.progress_percentage, 100)
        self.assertEqual(tracker.delivered_status, StageStatus.COMPLETED)
        self.assertEqual(tracker.ready_for_dispatch_status, StageStatus.COMPLETED)
        self.assertEqual(tracker.growth_phase_status, StageStatus.COMPLETED)
        self.assertIsNotNone(tracker.growth_phase_end)

    def test_skipping_stages_completes_the_ones_in_between(self):
        order = self._paid_order()
        response = self.client.patch(f"/api/v1/orders/admin/{order.pk}/status/", {"status": "DELIVERED"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        tracker = ProgressTracker.objects.get(order=order)
        for stage in (StageType.NURSERY_ALLOCATION, StageType.GROWTH_PHASE, StageType.READY_FOR_DISPATCH,
                      StageType.DELIVERED):
            self.assertEqual(tracker.stage_status(stage), StageStatus.COMPLETED)
        self.assertEqual(tracker.current_stage, StageType.DELIVERED)

    def test_list_filters_by_state_and_delivery_date(self):
        self._paid_order("KP2025-0001", state="Kerala", delivery_date=date(2026, 6, 1))
        self._paid_order("KP2025-0002", state="Karnataka", delivery_date=date(2026, 7, 1))

        response = self.client.get("/api/v1/orders/admin/page/1/", {"state": "karna"})
        self.assertEqual(response.data["orders"]["total_count"], 1)

        response = self.client.get("/api/v1/orders/admin/page/1/", {"from_date": "2026-06-15"})
        self.assertEqual(response.data["orders"]["orders"][0]["order_id"], "KP2025-0002")
        self.assertEqual(response.data["orders"]["total_count"], 1)

        response = self.client.get("/api/v1/orders/admin/page/1/", {"to_date": "01/06/2026"})
        self.assertEqual(response.data["error"], "Invalid date format provided")
        self.assertEqual(response.data["code"], "invalid_date")

    def test_pages_past_the_end_are_empty(self):
        self._paid_order()
        response = self.client.get("/api/v1/orders/admin/page/3/")
        page = response.data["orders"]
        self.assertEqual(page["orders"], [])
        self.assertEqual(page["total_count"], 1)
        self.assertEqual(page["current_page"], 3)
        self.assertEqual(page["total_pages"], 1)

    def test_export_search(self):
        self._paid_order("KP2025-0001", full_name="Anu Thomas")
        self._paid_order("KP2025-0002", full_name="Biju Varghese")
        response = self.client.get("/api/v1/orders/admin/export/", {"search": "anu"})
        self.assertEqual(len(response.data["orders"]), 1)

    def test_status_rejects_unknown_stage(self):
        order = self._paid_order()
        response = self.client.patch(f"/api/v1/orders/admin/{order.pk}/status/", {"status": "SHIPPED"}, format="json")
        self.assertIn("Invalid status value", response.data["error"])

    def test_status_requires_paid_order(self):
        order = make_order(status=OrderStatus.PENDING)
        response = self.client.patch(
            f"/api/v1/orders/admin/{order.pk}/status/", {"status": "GROWTH_PHASE"}, format="json",
        )
        self.assertEqual(response.data["error"], "Only paid orders can move through fulfilment")

    def test_bulk_order(self):
        payload = {k: v for k, v in ORDER_PAYLOAD.items() if k != "terms_accepted"}
        response = self.client.post("/api/v1/orders/admin/bulk/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        order = Order.objects.get()
        self.assertTrue(order.is_bulk_upload)
        self.assertEqual(order.status, OrderStatus.PAID)
        self.assertFalse(Payment.objects.filter(order=order).exists())
        self.assertEqual(order.progress_tracker.current_stage, StageType.NURSERY_ALLOCATION)

    @patch("apps.orders.services.OrderIdGenerator.generate", side_effect=["KP2025-0900", "KP2025-0901"])
    def test_order_id_collision_is_retried(self, mock_generate):
        make_order(order_id="KP2025-0900")
        payload = {k: v for k, v in ORDER_PAYLOAD.items() if k != "terms_accepted"}
        response = self.client.post("/api/v1/orders/admin/bulk/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["order"]["order_id"], "KP2025-0901")
        self.assertEqual(mock_generate.call_count, 2)
        self.assertEqual(Order.objects.count(), 2)

    @patch("apps.orders.services.OrderIdGenerator.generate", return_value="KP2025-0900")
    def test_order_id_collision_gives_up(self, mock_generate):
        make_order(order_id="KP2025-0900")
        serializer = BulkOrderSerializer(data={k: v for k, v in ORDER_PAYLOAD.items() if k != "terms_accepted"})
        serializer.is_valid(raise_exception=True)

        with self.assertRaises(IntegrityError):
            OrderService.bulk_order(serializer.validated_data)
        self.assertEqual(mock_generate.call_count, MAX_ORDER_ID_ATTEMPTS)
        self.assertEqual(Order.objects.count(), 1)

    def test_delete(self):
        order = self._paid_order()
        response = self.client.delete(f"/api/v1/orders/admin/{order.pk}/")
        self.assertEqual(response.data["message"], "Order deleted successfully")
        self.assertFalse(Order.objects.exists())

    def test_enum_values(self):
        response = self.client.get("/api/v1/orders/admin/enums/")
        self.assertIn("GROWTH_PHASE", response.data["enum_values"]["stage_types"])

    def test_customer_forbidden(self):
        customer = User.objects.create_user(email="anu@example.com", password="Pepper@123")
        client = APIClient()
        client.force_authenticate(user=customer)
        response = client.get("/api/v1/orders/admin/page/1/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
