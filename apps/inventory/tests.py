from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from apps.utils.exceptions import BusinessLogicException
from .models import MonthlyInventory, InventoryStatusLog
from .services import InventoryService

User = get_user_model()


class InventoryServiceTests(TestCase):

    def test_create_rejects_duplicate_month(self):
        InventoryService.create("2025-06", 1000)
        with self.assertRaises(BusinessLogicException) as ctx:
            InventoryService.create("2025-06", 500)
        self.assertEqual(ctx.exception.message, "Inventory already exists for this month")

    def test_current_cannot_exceed_max(self):
        with self.assertRaises(BusinessLogicException):
            InventoryService.create("2025-06", 100, current_quantity=101)

        inventory = InventoryService.create("2025-07", 100, current_quantity=40)
        with self.assertRaises(BusinessLogicException):
            InventoryService.update("2025-07", {"max_quantity": 30})
        inventory.refresh_from_db()
        self.assertEqual(inventory.max_quantity, 100)

    def test_available_months(self):
        InventoryService.create("2025-06", 100)
        InventoryService.create("2025-07", 100, current_quantity=100)
        closed = InventoryService.create("2025-08", 100)
        InventoryService.toggle_status(closed.pk, "Monsoon")

        months = list(InventoryService.available_months().values_list("month", flat=True))
        self.assertEqual(months, ["2025-06"])

    def test_toggle_writes_history(self):
        admin = User.objects.create_admin(email="admin@example.com")
        inventory = InventoryService.create("2025-06", 100)

        InventoryService.toggle_status(inventory.pk, "Nursery maintenance", user=admin)
        InventoryService.toggle_status(inventory.pk, user=admin)

        inventory.refresh_from_db()
        self.assertTrue(inventory.active)
        self.assertIsNone(inventory.reason)
        logs = list(InventoryStatusLog.objects.filter(inventory=inventory).order_by("created_at", "pk"))
        self.assertEqual([log.active for log in logs], [False, True])
        self.assertEqual(logs[0].reason, "Nursery maintenance")
        self.assertEqual(logs[0].created_by, admin)


class InventoryApiTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_admin(email="admin@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.admin)

    def test_create_and_fetch(self):
        response = self.client.post("/api/v1/inventory/admin/", {"month": "2025-06", "max_quantity": 1000}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["inventory"]["remaining_quantity"], 1000)

        response = self.client.get("/api/v1/inventory/admin/month/2025-06/")
        self.assertEqual(response.data["inventory"]["max_quantity"], 1000)

        response = self.client.get("/api/v1/inventory/admin/month/2030-01/")
        self.assertEqual(response.data["error"], "No inventory found for the month")

    def test_bad_month_format(self):
        response = self.client.post("/api/v1/inventory/admin/", {"month": "June", "max_quantity": 10}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("month", response.data)

    def test_partial_update_keeps_other_fields(self):
        InventoryService.create("2025-06", 100, active=False, reason="Closed")
        response = self.client.put("/api/v1/inventory/admin/month/2025-06/", {"max_quantity": 200}, format="json")

        self.assertEqual(response.data["message"], "Inventory updated successfully")
        inventory = MonthlyInventory.objects.get(month="2025-06")
        self.assertEqual(inventory.max_quantity, 200)
        self.assertFalse(inventory.active)

    def test_rename_month_clash(self):
        InventoryService.create("2025-06", 100)
        InventoryService.create("2025-07", 100)
        response = self.client.put("/api/v1/inventory/admin/month/2025-07/", {"month": "2025-06"}, format="json")
        self.assertEqual(response.data["error"], "Inventory already exists for this month")

    def test_toggle_returns_history(self):
        inventory = InventoryService.create("2025-06", 100)
        response = self.client.put(f"/api/v1/inventory/admin/{inventory.pk}/toggle/", {"reason": "Full"}, format="json")

        self.assertEqual(response.data["message"], "Inventory status updated successfully")
        self.assertFalse(response.data["inventory"]["active"])
        self.assertEqual(response.data["history"][0]["created_by"], "admin@example.com")

    def test_delete(self):
        inventory = InventoryService.create("2025-06", 100)
        response = self.client.delete(f"/api/v1/inventory/admin/{inventory.pk}/")
        self.assertEqual(response.data["message"], "Inventory deleted successfully")

        response = self.client.delete(f"/api/v1/inventory/admin/{inventory.pk}/")
        self.assertEqual(response.data["error"], "No inventory with the id")

    def test_available_is_public(self):
        InventoryService.create("2025-06", 100)
        response = APIClient().get("/api/v1/inventory/available/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["months"][0]["month"], "2025-06")

    def test_admin_endpoints_need_admin(self):
        customer = User.objects.create_user(email="grower@example.com")
        client = APIClient()
        client.force_authenticate(user=customer)
        response = client.get("/api/v1/inventory/admin/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
