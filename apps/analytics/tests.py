from datetime import date, datetime, timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from apps.orders.models import Order, OrderStatus
from apps.payments.models import Payment, PaymentStatus
from apps.utils.exceptions import BusinessLogicException
from apps.utils.utils import add_months, month_start
from .services import DashboardService, percent_change

User = get_user_model()


def _paid_order(order_id, amount=45500):
    order = Order.objects.create(
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
        status=OrderStatus.PAID,
    )
    Payment.objects.create(order=order, razorpay_order_id=f"rzp_{order_id}",
                           amount_in_paise=amount, status=PaymentStatus.CAPTURED)
    return order


class DashboardMathTests(TestCase):

    def test_percent_change(self):
        self.assertEqual(percent_change(150, 100), 50)
        self.assertEqual(percent_change(50, 100), -50)
        self.assertEqual(percent_change(10, 0), 0)

    def test_period_months(self):
        today = timezone.make_aware(datetime(2025, 3, 17, 10, 0))
        windows = DashboardService.months("last3months", today=today)
        self.assertEqual([w[0].month for w in windows], [1, 2, 3])
        self.assertEqual(windows[-1][1].month, 4)

    def test_period_crosses_year(self):
        today = timezone.make_aware(datetime(2025, 2, 1, 10, 0))
        windows = DashboardService.months("last6months", today=today)
        self.assertEqual([(w[0].year, w[0].month) for w in windows][0], (2024, 9))
        self.assertEqual(len(windows), 6)

    def test_custom_range(self):
        windows = DashboardService.months(start_date="2025-01-15", end_date="2025-03-02")
        self.assertEqual([w[0].month for w in windows], [1, 2, 3])

    def test_invalid_inputs(self):
        with self.assertRaises(BusinessLogicException):
            DashboardService.months("last2years")
        with self.assertRaises(BusinessLogicException):
            DashboardService.months(start_date="15-01-2025", end_date="2025-03-02")
        with self.assertRaises(BusinessLogicException):
            DashboardService.months(start_date="2025-01-15")
        with self.assertRaises(BusinessLogicException):
            DashboardService.months(start_date="2025-03-01", end_date="2025-01-01")


class OverviewTests(TestCase):

    def test_visitor_card_compares_with_last_month(self):
        User.objects.create_user(email="a@example.com")
        User.objects.create_user(email="b@example.com")
        old = User.objects.create_user(email="c@example.com")
        User.objects.create_admin(email="admin@example.com")

        last_month = add_months(month_start(timezone.localtime(timezone.now())), -1) + timedelta(days=1)
        User.objects.filter(pk=old.pk).update(created_at=last_month)

        card = DashboardService.overview()["total_visitors"]
        self.assertEqual(card["count"], 2)
        self.assertEqual(card["change"], "+100%")
        self.assertEqual(card["label"], "Total Visitors")

    def test_revenue_card_in_rupees(self):
        _paid_order("KP2025-0001", amount=12345600)
        card = DashboardService.overview()["total_revenue"]
        self.assertEqual(card["count"], 123456)
        self.assertEqual(card["formatted"], "₹1,23,456")


class DashboardApiTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_admin(email="admin@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.admin)

    def test_revenue_graph(self):
        _paid_order("KP2025-0001")
        response = self.client.get("/api/v1/analytics/dashboard/revenue/", {"period": "last3months"})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["success"])
        data = response.data["data"]
        self.assertEqual(len(data["revenue_trend"]), 3)
        self.assertEqual(data["revenue_trend"][-1]["revenue"], 455)
        self.assertEqual(data["summary"]["trend"], "upward")
        self.assertEqual(data["summary"]["peak_revenue_formatted"], "₹455")

    def test_visitors_chart(self):
        User.objects.create_user(email="grower@example.com")
        response = self.client.get("/api/v1/analytics/dashboard/visitors/")

        data = response.data["data"]
        self.assertEqual(data["period"], "last6months")
        self.assertEqual(len(data["chart_data"]), 6)
        self.assertEqual(data["total"], 1)

    def test_full_dashboard_custom_range(self):
        response = self.client.get("/api/v1/analytics/dashboard/", {
            "start_date": "2025-01-01", "end_date": "2025-02-28",
        })
        data = response.data["data"]
        self.assertEqual(data["filter_type"], "custom-date-range")
        self.assertEqual(len(data["monthly_visitors"]["monthly_visitors"]), 2)
        self.assertIn("overview", data)

    def test_invalid_period(self):
        response = self.client.get("/api/v1/analytics/dashboard/visitors/", {"period": "forever"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.data["error"],
            "Invalid period parameter. Use last3months, last6months or last12months",
        )

    def test_customer_forbidden(self):
        customer = User.objects.create_user(email="grower@example.com")
        self.client.force_authenticate(user=customer)
        response = self.client.get("/api/v1/analytics/dashboard/overview/")
        self.assertEqual(response.status_code, 403)
