from datetime import date

from django.test import SimpleTestCase

from apps.inventory.tests.helpers import make_tablet
from apps.procurement.domain import OrderStatus
from apps.procurement.services import (
    batch_from_scan,
    build_order_item,
    cancel_order,
    clear_orders,
    create_order,
    order_items_from_scan,
    title_case,
)
from core.exceptions import ParseError, ValidationError
from core.stores import ORDERS, MemoryStore


class OrderItemTests(SimpleTestCase):
    def test_names_are_title_cased(self):
        item = build_order_item({"name": "  dolo  650 ", "category": "Tablet", "quantity": "10 strip"})
        self.assertEqual(item.name, "Dolo 650")
        self.assertEqual(title_case("cough SYRUP"), "Cough Syrup")

    def test_tablet_box_needs_pack_size(self):
        with self.assertRaises(ValidationError) as ctx:
            build_order_item({"name": "Dolo", "category": "Tablet", "quantity": "2 box"})
        self.assertEqual(ctx.exception.code, "pack_size_required")
        self.assertEqual(ctx.exception.extra["unitName"], "strips")

    def test_pack_size_sets_default_unit_name(self):
        item = build_order_item({"name": "Dolo", "category": "Tablet", "quantity": "2 box", "unitsPerPack": 10})
        self.assertEqual((item.units_per_pack, item.unit_name), (10, "strips"))

    def test_quantity_must_start_with_positive_number(self):
        with self.assertRaises(ParseError):
            build_order_item({"name": "Dolo", "category": "Tablet", "quantity": "some strips"})
        with self.assertRaises(ValidationError):
            build_order_item({"name": "Dolo", "category": "Tablet", "quantity": "0 strip"})

    def test_fractions_below_one_unit_are_rejected(self):
        for quantity in ("0.04 strip", "0.3 bottle"):
            with self.assertRaises(ValidationError) as ctx:
                build_order_item({"name": "Dolo", "category": "Tablet", "quantity": quantity})
            self.assertEqual(ctx.exception.field, "quantity")
        item = build_order_item({"name": "Dolo", "category": "Tablet", "quantity": "0.5 box", "unitsPerPack": 10})
        self.assertEqual(item.quantity, "0.5 box")
        with self.assertRaises(ValidationError):
            create_order("City Pharma", [
                {"name": "Dolo", "category": "Tablet", "quantity": "2 strip"},
                {"name": "Crocin", "category": "Tablet", "quantity": "0.04 strip"},
            ])

    def test_scanned_lines_are_validated(self):
        items = order_items_from_scan([{"name": "ors", "category": "Other", "quantity": "20"}])
        self.assertEqual(items[0].name, "Ors")
        with self.assertRaises(ValidationError):
            order_items_from_scan([{"name": "", "category": "Other", "quantity": "20"}])


class OrderTests(SimpleTestCase):
    def test_create_requires_wholesaler_and_items(self):
        with self.assertRaises(ValidationError):
            create_order(" ", [{"name": "Dolo", "category": "Tablet", "quantity": "1 strip"}])
        with self.assertRaises(ValidationError):
            create_order("City Pharma", [])

    def test_cancel(self):
        order = create_order("City Pharma", [{"name": "Dolo", "category": "Tablet", "quantity": "1 strip"}])
        self.assertTrue(order.id.startswith("ORD-"))
        self.assertEqual(cancel_order(order).status, OrderStatus.CANCELLED)

    def test_clear_orders(self):
        store = MemoryStore()
        store.save(ORDERS, create_order("City Pharma", [{"name": "Dolo", "category": "Tablet", "quantity": "1 strip"}], order_id="ORD-1"))
        store.save(ORDERS, create_order("Metro Meds", [{"name": "Ors", "category": "Other", "quantity": "20"}], order_id="ORD-2"))
        self.assertEqual(clear_orders(store), 2)
        self.assertEqual(store.load(ORDERS), [])
        self.assertEqual(clear_orders(store), 0)


class BatchScanTests(SimpleTestCase):
    def test_scanned_batch_is_checked_against_inventory(self):
        inventory = [make_tablet()]
        batch = batch_from_scan(
            {"batchNumber": "NEW-9", "mfgDate": "2025-01-01", "expiryDate": "2027-01-01", "price": "30"},
            inventory,
            category="Tablet",
        )
        self.assertEqual(batch.expiry, date(2027, 1, 1))
        with self.assertRaises(ValidationError):
            batch_from_scan(
                {"batchNumber": "pcm-001", "mfgDate": "2025-01-01", "expiryDate": "2027-01-01", "price": "30"},
                inventory,
                category="Tablet",
            )
        with self.assertRaises(ValidationError):
            batch_from_scan(
                {"batchNumber": "NEW-9", "mfgDate": "2027-01-01", "expiryDate": "2025-01-01", "price": "30"},
                inventory,
                category="Tablet",
            )
