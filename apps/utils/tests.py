from datetime import date, datetime
from unittest.mock import MagicMock

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIClient

from .exceptions import BusinessLogicException
from .resilience import CircuitBreaker
from .utils import (
    add_months, date_range, format_long_date, format_paise, format_rupees, parse_date,
)
from .validators import validate_month, validate_phone, validate_strong_password


class ValidatorTests(TestCase):
    def test_phone_validator(self):
        self.assertEqual(validate_phone("+919876543210"), "+919876543210")
        with self.assertRaises(ValidationError):
            validate_phone("123")  # Invalid

    def test_strong_password(self):
        self.assertEqual(validate_strong_password("Pepper@123"), "Pepper@123")
        for weak in ["Sh1@", "alllowercase1@", "NoDigits@@", "NoSpecial123"]:
            with self.assertRaises(ValidationError):
                validate_strong_password(weak)

    def test_month_format(self):
        self.assertEqual(validate_month("2025-03"), "2025-03")
        for bad in ["2025-13", "2025-3", "03-2025", "march"]:
            with self.assertRaises(ValidationError):
                validate_month(bad)


class DateHelperTests(TestCase):
    def test_parse_date(self):
        self.assertEqual(parse_date("2025-03-01"), date(2025, 3, 1))
        self.assertIsNone(parse_date(""))
        self.assertIsNone(parse_date(None))

    def test_parse_date_rejects_garbage(self):
        with self.assertRaises(BusinessLogicException) as ctx:
            parse_date("01/03/2025")
        self.assertEqual(ctx.exception.message, "Invalid date format provided")

    def test_date_range_covers_whole_to_day(self):
        start, end = date_range("2025-03-01", "2025-03-07")
        self.assertEqual(timezone.localtime(start).hour, 0)
        self.assertEqual(timezone.localtime(end).date(), date(2025, 3, 7))
        self.assertEqual(timezone.localtime(end).hour, 23)

    def test_add_months_crosses_year(self):
        jan = datetime(2025, 1, 1)
        self.assertEqual(add_months(jan, -1), datetime(2024, 12, 1))
        self.assertEqual(add_months(jan, 11), datetime(2025, 12, 1))
        self.assertEqual(add_months(jan, 12), datetime(2026, 1, 1))

    def test_add_months_clamps_day(self):
        self.assertEqual(add_months(date(2025, 3, 31), -1), date(2025, 2, 28))
        self.assertEqual(add_months(date(2024, 3, 31), -1), date(2024, 2, 29))
        self.assertEqual(add_months(date(2025, 1, 15), -1), date(2024, 12, 15))

    def test_long_date(self):
        self.assertEqual(format_long_date(date(2025, 3, 12)), "12 March 2025")


class MoneyHelperTests(TestCase):
    def test_indian_grouping(self):
        self.assertEqual(format_rupees(123456.7), "₹1,23,457")
        self.assertEqual(format_rupees(999), "₹999")
        self.assertEqual(format_rupees(12345678), "₹1,23,45,678")

    def test_paise(self):
        self.assertEqual(format_paise(123450), "₹1,234.50")
        self.assertEqual(format_paise(5), "₹0.05")


class CircuitBreakerTests(TestCase):
    def setUp(self):
        cache.clear()
        self.breaker = CircuitBreaker("Gateway", failure_threshold=2, recovery_timeout=60)

    def test_opens_after_threshold(self):
        upstream = MagicMock(side_effect=ConnectionError("down"))
        wrapped = self.breaker(upstream)

        for _ in range(2):
            with self.assertRaises(ConnectionError):
                wrapped()

        with self.assertRaises(BusinessLogicException) as ctx:
            wrapped()
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(upstream.call_count, 2)

    def test_domain_errors_do_not_count(self):
        upstream = MagicMock(side_effect=BusinessLogicException("Refund already processed"))
        wrapped = self.breaker(upstream)

        for _ in range(3):
            with self.assertRaises(BusinessLogicException):
                wrapped()
        self.assertEqual(upstream.call_count, 3)
        self.assertIsNone(cache.get(self.breaker.cache_key_open))


class HealthTests(TestCase):
    def test_health_endpoint(self):
        response = APIClient().get("/api/v1/utils/health/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["components"]["db"], "ok")

    def test_global_config(self):
        response = APIClient().get("/api/v1/utils/config/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["currency"], "INR")
