from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from apps.governance.models import SystemEvent
from apps.inventory.models import Batch, Medicine
from apps.inventory.tests.helpers import make_tablet
from apps.procurement.models import OrderItem, WholesalerOrder
from core.stores import MEDICINES, DjangoStore


class OrderAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = get_user_model().objects.create_user(username="clerk", password="x")
        self.client.force_authenticate(self.user)
        DjangoStore().save(MEDICINES, make_tablet())
        self.url = "/api/v1/procurement/orders/"

    def create_order(self):
        resp = self.client.post(
            self.url,
            {
                "wholesalerName": "City Pharma",
                "items": [
                    {"name": "Paracetamol", "category": "Tablet", "quantity": "5 box", "unitsPerPack": 10},
                    {"name": "Zincovit", "category": "Tablet", "quantity": "3 strip"},
                    {"name": "ORS Sachet", "category": "Other", "quantity": "20"},
                ],
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.data)
        return resp.data

    def item_id(self, order, name):
        return next(i["id"] for i in order["items"] if i["name"] == name)

    def test_create_order(self):
        order = self.create_order()
        self.assertEqual(order["status"], "Pending")
        self.assertEqual(order["items"][0]["displayQuantity"], "5 box (10 strips/pack)")
        self.assertEqual(OrderItem.objects.filter(order_id=order["id"]).count(), 3)

    def test_missing_pack_size_is_reported(self):
        resp = self.client.post(
            self.url,
            {"wholesalerName": "City Pharma", "items": [{"name": "Dolo", "category": "Tablet", "quantity": "2 box"}]},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "pack_size_required")
        self.assertEqual(resp.data["unitName"], "strips")
        self.assertFalse(WholesalerOrder.objects.exists())

    def test_reconcile_then_receive_new(self):
        order = self.create_order()
        para_item = self.item_id(order, "Paracetamol")
        zinc_item = self.item_id(order, "Zincovit")
        resp = self.client.post(
            f"{self.url}{order['id']}/reconcile/", {"itemIds": [para_item, zinc_item]}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual(resp.data["order"]["status"], "PartiallyReceived")
        self.assertEqual([o["action"] for o in resp.data["outcomes"]], ["merge", "create_new"])
        self.assertEqual(resp.data["outcomes"][0]["stockAdded"], 500)
        self.assertEqual(Batch.objects.get(id="b-para-1").stock, 1000)
        self.assertEqual(OrderItem.objects.get(id=zinc_item).status, "Pending")
        self.assertTrue(SystemEvent.objects.filter(code="ORDER_RECONCILED").exists())

        new_medicine = {
            "name": "Zincovit",
            "category": "Tablet",
            "tabletsPerStrip": 15,
            "batches": [
                {"batchNumber": "ZN-1", "mfg": "2025-06-01", "expiry": "2027-06-01", "price": "105.00", "stock": {"tablets": 45}}
            ],
        }
        resp = self.client.post(
            f"{self.url}{order['id']}/items/{zinc_item}/receive-new/", new_medicine, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual(resp.data["medicine"]["totalStock"], 45)
        self.assertTrue(Medicine.objects.filter(name="Zincovit").exists())
        self.assertEqual(OrderItem.objects.get(id=zinc_item).status, "Received")
        self.assertEqual(WholesalerOrder.objects.get(id=order["id"]).status, "PartiallyReceived")

    def test_receive_new_never_overwrites_existing_medicine(self):
        order = self.create_order()
        zinc_item = self.item_id(order, "Zincovit")
        new_medicine = {
            "id": "m-para",
            "name": "Zincovit",
            "category": "Tablet",
            "tabletsPerStrip": 15,
            "batches": [
                {"batchNumber": "ZN-1", "mfg": "2025-06-01", "expiry": "2027-06-01", "price": "105.00", "stock": {"tablets": 45}}
            ],
        }
        resp = self.client.post(
            f"{self.url}{order['id']}/items/{zinc_item}/receive-new/", new_medicine, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertNotEqual(resp.data["medicine"]["id"], "m-para")
        self.assertEqual(Medicine.objects.get(id="m-para").name, "Paracetamol")
        self.assertEqual(Batch.objects.get(id="b-para-1").stock, 500)
        self.assertEqual(Medicine.objects.count(), 2)

    def test_cancel_blocks_reconcile(self):
        order = self.create_order()
        resp = self.client.post(f"{self.url}{order['id']}/cancel/")
        self.assertEqual(resp.data["status"], "Cancelled")
        resp = self.client.post(
            f"{self.url}{order['id']}/reconcile/",
            {"itemIds": [self.item_id(order, "Paracetamol")]},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Batch.objects.get(id="b-para-1").stock, 500)

    def test_scan_intake(self):
        resp = self.client.post(
            f"{self.url}scan-intake/",
            {"wholesalerName": " City Pharma ", "items": [{"name": "ors sachet", "quantity": "20", "category": "Other"}]},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        self.assertEqual(resp.data["items"][0]["name"], "Ors Sachet")

        resp = self.client.post(
            "/api/v1/procurement/batches/scan-intake/",
            {"category": "Tablet", "batchNumber": "PCM-001", "mfgDate": "2025-01-01", "expiryDate": "2027-01-01", "price": "20"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["field"], "batchNumber")

    def test_list_and_detail(self):
        order = self.create_order()
        resp = self.client.get(self.url, {"status": "Pending"})
        self.assertEqual([o["id"] for o in resp.data], [order["id"]])
        resp = self.client.get(f"{self.url}{order['id']}/")
        self.assertEqual(resp.data["wholesalerName"], "City Pharma")
