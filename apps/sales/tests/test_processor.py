from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal

from django.test import SimpleTestCase

from apps.inventory.domain import StockUnit
from apps.inventory.ledger import AllocationPolicy, total_stock
from apps.inventory.tests.helpers import make_batch, make_generic, make_tablet
from apps.sales.domain import PaymentMode, next_bill_number
from apps.sales.processor import CartLine, complete_sale, settle_payment, unit_price
from core.exceptions import InsufficientStockError, NotFoundError, ValidationError

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class CompleteSaleTests(SimpleTestCase):
    def setUp(self):
        self.para = make_tablet(batches=[make_batch("b-para-1", "PCM-001", 500, price="25.00", purchase_price="18.00")])
        self.syrup = make_generic()
        self.inventory = (self.para, self.syrup)

    def sell(self, cart, **kwargs):
        kwargs.setdefault("now", NOW)
        kwargs.setdefault("policy", AllocationPolicy.FEFO)
        return complete_sale(cart, "Asha", self.inventory, **kwargs)

    def test_twenty_tablets_from_five_hundred(self):
        result = self.sell([CartLine("m-para", 20)])
        medicine = result.updated_medicines[0]
        self.assertEqual(total_stock(medicine), 480)
        item = result.sale_record.items[0]
        self.assertEqual(item.price_per_unit, Decimal("2.5000"))
        self.assertEqual(item.total, 20 * item.price_per_unit)
        self.assertEqual(item.purchase_price_per_unit, Decimal("1.8000"))
        self.assertEqual(result.sale_record.total_amount, Decimal("50.0000"))

    def test_overdraw_fails_and_leaves_inventory_alone(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            self.sell([CartLine("m-para", 600)])
        self.assertEqual(ctx.exception.shortages, [
            {"medicineId": "m-para", "name": "Paracetamol", "requested": 600, "available": 500},
        ])
        self.assertEqual(total_stock(self.inventory[0]), 500)

    def test_every_short_line_is_reported(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            self.sell([CartLine("m-para", 600), CartLine("m-syrup", 21)])
        self.assertEqual([s["medicineId"] for s in ctx.exception.shortages], ["m-para", "m-syrup"])

    def test_generic_price_is_per_unit(self):
        result = self.sell([CartLine("m-syrup", 2)])
        self.assertEqual(result.sale_record.items[0].price_per_unit, Decimal("95.0000"))
        self.assertEqual(result.sale_record.total_amount, Decimal("190.0000"))
        self.assertEqual(total_stock(result.updated_medicines[1]), 18)

    def test_discount_applies_to_subtotal(self):
        result = self.sell(
            [{"medicine_id": "m-para", "quantity": 20}, {"medicine_id": "m-syrup", "quantity": 1}],
            discount_percentage="10",
        )
        record = result.sale_record
        self.assertEqual(record.subtotal, Decimal("145.0000"))
        self.assertEqual(record.total_amount, Decimal("130.5000"))

    def test_price_follows_allocated_batch(self):
        para = make_tablet(
            batches=[
                make_batch("b-late", "LATE", 100, expiry=date(2031, 1, 1), price="30.00"),
                make_batch("b-early", "EARLY", 100, expiry=date(2030, 1, 1), price="20.00"),
            ]
        )
        result = complete_sale([CartLine("m-para", 5)], "Asha", [para], now=NOW, policy=AllocationPolicy.FEFO)
        self.assertEqual(result.sale_record.items[0].price_per_unit, Decimal("2.0000"))
        self.assertEqual([(a.batch_id, a.amount) for a in result.plan], [("b-early", 5)])

    def test_validation(self):
        with self.assertRaises(ValidationError):
            complete_sale([CartLine("m-para", 1)], "  ", self.inventory, now=NOW)
        with self.assertRaises(ValidationError):
            self.sell([])
        with self.assertRaises(ValidationError):
            self.sell([CartLine("m-para", 0)])
        with self.assertRaises(ValidationError):
            self.sell([CartLine("m-para", 1), CartLine("m-para", 2)])
        with self.assertRaises(ValidationError):
            self.sell([CartLine("m-para", 1)], discount_percentage="101")
        with self.assertRaises(ValidationError):
            self.sell([CartLine("m-para", 1)], payment_mode="Cheque")
        with self.assertRaises(NotFoundError):
            self.sell([CartLine("m-missing", 1)])

    def test_cart_lines_as_dicts(self):
        result = self.sell([{"medicineId": "m-para", "quantity": 20}, {"medicine_id": "m-syrup", "quantity": 1}])
        self.assertEqual([i.medicine_id for i in result.sale_record.items], ["m-para", "m-syrup"])
        with self.assertRaises(ValidationError) as ctx:
            self.sell([{"id": "m-para", "qty": 20}])
        self.assertEqual(ctx.exception.field, "cart")
        with self.assertRaises(ValidationError):
            self.sell(["m-para"])

    def test_sale_record_fields(self):
        result = self.sell(
            [CartLine("m-para", 10)],
            sale_id="VM-00007",
            payment_mode=PaymentMode.PENDING,
            doctor_name=" Dr. Rao ",
        )
        record = result.sale_record
        self.assertEqual(record.id, "VM-00007")
        self.assertEqual(record.sale_date, NOW)
        self.assertEqual(record.doctor_name, "Dr. Rao")
        self.assertEqual(record.payment_mode, PaymentMode.PENDING)


class BillNumberTests(SimpleTestCase):
    def test_first_and_next_numbers(self):
        self.assertEqual(next_bill_number([]), "VM-00001")
        sales = [type("S", (), {"id": i}) for i in ("VM-00003", "VM-00012", "legacy-id")]
        self.assertEqual(next_bill_number(sales), "VM-00013")


class SettlePaymentTests(SimpleTestCase):
    def setUp(self):
        result = complete_sale(
            [CartLine("m-para", 10)], "Asha", [make_tablet()], payment_mode=PaymentMode.PENDING, now=NOW
        )
        self.pending = result.sale_record

    def test_pending_sale_settles(self):
        settled = settle_payment(self.pending, "Online")
        self.assertEqual(settled.payment_mode, PaymentMode.ONLINE)
        self.assertEqual(settled.total_amount, self.pending.total_amount)

    def test_only_pending_sales_settle(self):
        with self.assertRaises(ValidationError):
            settle_payment(replace(self.pending, payment_mode=PaymentMode.CASH), "Card")
        with self.assertRaises(ValidationError):
            settle_payment(self.pending, PaymentMode.PENDING)


class UnitPriceTests(SimpleTestCase):
    def test_strip_price_split_per_tablet(self):
        medicine = make_tablet(tablets_per_strip=15)
        self.assertEqual(unit_price(medicine, Decimal("10.00")), Decimal("0.6667"))
        self.assertIsNone(unit_price(medicine, None))
        generic = make_generic(batches=[make_batch("b", "N", 1, unit=StockUnit.UNITS)])
        self.assertEqual(unit_price(generic, Decimal("12.5")), Decimal("12.5000"))
