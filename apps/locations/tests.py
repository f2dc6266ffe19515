import os
import tempfile
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from .models import Location, Pincode
from .services import LocationService

User = get_user_model()

LOCATION = {
    "state": "Kerala",
    "district": "Kozhikode",
    "pin_code": "673001",
    "min_quantity": 10,
    "max_quantity": 500,
    "price_per_unit": "45.00",
}


class AdminLocationTests(APITestCase):

    def setUp(self):
        self.admin = User.objects.create_admin(email="admin@example.com", password="Pepper@123")
        self.client.force_authenticate(user=self.admin)

    def test_create(self):
        response = self.client.post("/api/v1/locations/admin/", LOCATION, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "New location added successfully!")
        self.assertTrue(Location.objects.get().is_active)

    def test_duplicate_is_case_insensitive(self):
        self.client.post("/api/v1/locations/admin/", LOCATION, format="json")
        response = self.client.post(
            "/api/v1/locations/admin/", {**LOCATION, "state": "KERALA", "district": "kozhikode"}, format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "Location already exists")

    def test_max_below_min(self):
        response = self.client.post(
            "/api/v1/locations/admin/", {**LOCATION, "min_quantity": 50, "max_quantity": 5}, format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("max_quantity", response.data)

    def test_partial_edit_keeps_quantity_rule(self):
        location = LocationService.create({**LOCATION})
        response = self.client.put(f"/api/v1/locations/admin/{location.pk}/", {"max_quantity": 5}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put(f"/api/v1/locations/admin/{location.pk}/", {"price_per_unit": "50.00"}, format="json")
        self.assertEqual(response.data["message"], "Location updated successfully")
        self.assertEqual(response.data["location"]["price_per_unit"], "50.00")

    def test_edit_clash(self):
        LocationService.create({**LOCATION})
        other = LocationService.create({**LOCATION, "district": "Wayanad"})
        response = self.client.put(f"/api/v1/locations/admin/{other.pk}/", {"district": "Kozhikode"}, format="json")
        self.assertEqual(response.data["error"], "Location already exists")

    def test_toggle_and_delete(self):
        location = LocationService.create({**LOCATION})

        response = self.client.put(f"/api/v1/locations/admin/{location.pk}/toggle/")
        self.assertEqual(response.data["message"], "Location deactivated successfully")
        response = self.client.put(f"/api/v1/locations/admin/{location.pk}/toggle/")
        self.assertEqual(response.data["message"], "Location activated successfully")

        response = self.client.delete(f"/api/v1/locations/admin/{location.pk}/")
        self.assertEqual(response.data["message"], "Location deleted successfully")
        response = self.client.delete(f"/api/v1/locations/admin/{location.pk}/")
        self.assertEqual(response.data["error"], "No location with the id")

    def test_list_filters(self):
        LocationService.create({**LOCATION})
        inactive = LocationService.create({**LOCATION, "district": "Wayanad"})
        LocationService.toggle_status(inactive.pk)
        LocationService.create({**LOCATION, "state": "Karnataka", "district": "Kodagu"})

        response = self.client.get("/api/v1/locations/admin/page/1/", {"state": "kerala"})
        self.assertEqual(response.data["locations"]["total_count"], 2)

        response = self.client.get("/api/v1/locations/admin/page/1/", {"status": "false"})
        self.assertEqual(response.data["locations"]["total_count"], 1)

        response = self.client.get("/api/v1/locations/admin/page/1/", {"search": "kodagu"})
        self.assertEqual(response.data["locations"]["total_count"], 1)

        response = self.client.get("/api/v1/locations/admin/page/1/", {"status": "Active"})
        self.assertEqual(response.data["locations"]["total_count"], 2)

        response = self.client.get("/api/v1/locations/admin/page/1/", {"status": "maybe"})
        self.assertEqual(response.data["error"], "Enter a valid status value")
        self.assertEqual(response.data["code"], "invalid_status")

    def test_csv_download(self):
        LocationService.create({**LOCATION})
        response = self.client.get("/api/v1/locations/admin/download/", {"format_type": "csv"})

        self.assertEqual(response["Content-Type"], "text/csv")
        lines = response.content.decode().strip().splitlines()
        self.assertEqual(lines[0].split(",")[0], "State")
        self.assertTrue(lines[1].startswith("Kerala,Kozhikode,673001"))

    def test_admin_states_include_inactive(self):
        location = LocationService.create({**LOCATION})
        LocationService.toggle_status(location.pk)
        response = self.client.get("/api/v1/locations/admin/states/")
        self.assertEqual(response.data["states"], ["Kerala"])


class PublicLocationTests(APITestCase):

    def setUp(self):
        LocationService.create({**LOCATION})
        LocationService.create({**LOCATION, "district": "Alappuzha"})
        closed = LocationService.create({**LOCATION, "state": "Goa", "district": "North Goa"})
        LocationService.toggle_status(closed.pk)

    def test_states_only_active(self):
        response = self.client.get("/api/v1/locations/states/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["states"], ["Kerala"])

    def test_districts_sorted(self):
        response = self.client.get("/api/v1/locations/states/kerala/districts/")
        self.assertEqual([d["district"] for d in response.data["data"]], ["Alappuzha", "Kozhikode"])

    def test_create_requires_admin(self):
        response = self.client.post("/api/v1/locations/admin/", LOCATION, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class PincodeTests(APITestCase):

    def test_lookup(self):
        Pincode.objects.create(pincode="673001", office_name="Kozhikode HO", district="Kozhikode", state="Kerala")
        Pincode.objects.create(pincode="670001", office_name="Kannur HO", district="Kannur", state="Kerala")

        response = self.client.get("/api/v1/locations/pincodes/", {"state": "Kerala", "district": "kozhikode"})
        self.assertEqual(response.data["result"], [
            {"pincode": "673001", "office_name": "Kozhikode HO", "district": "Kozhikode", "state": "Kerala"},
        ])

    def test_missing_params(self):
        response = self.client.get("/api/v1/locations/pincodes/", {"state": "Kerala"})
        self.assertEqual(response.data["error"], "State and district are required")


class LoadPincodesCommandTests(TestCase):

    def _csv(self, text):
        handle = tempfile.NamedTemporaryFile("w", suffix=".csv", delete=False, encoding="utf-8")
        handle.write(text)
        handle.close()
        self.addCleanup(os.unlink, handle.name)
        return handle.name

    def test_loads_and_upserts(self):
        path = self._csv(
            "OfficeName,Pincode,DistrictName,StateName\n"
            "Kozhikode HO,673001,Kozhikode,Kerala\n"
            "Kannur HO,670001,Kannur,Kerala\n"
            ",,,\n"
        )
        out = StringIO()
        call_command("load_pincodes", path, stdout=out)
        call_command("load_pincodes", path, stdout=out)

        self.assertEqual(Pincode.objects.count(), 2)
        self.assertIn("Loaded 2 pincode rows", out.getvalue())

    def test_missing_column(self):
        path = self._csv("Pincode,State\n673001,Kerala\n")
        with self.assertRaises(CommandError):
            call_command("load_pincodes", path)

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command("load_pincodes", "/nonexistent/pincodes.csv")
