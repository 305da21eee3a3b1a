from dataclasses import replace
from datetime import date, datetime, timezone

from django.test import SimpleTestCase, override_settings

from apps.inventory.domain import StockUnit
from apps.inventory.ledger import (
    AllocationPolicy,
    add_batch,
    days_until_expiry,
    decrement_stock,
    increment_stock,
    is_low_stock,
    is_out_of_stock,
    plan_decrement,
    pricing_batch,
    sellable_stock,
    soonest_expiry,
    total_stock,
    validate_batch,
)
from core.exceptions import InsufficientStockError, NotFoundError, ValidationError

from .helpers import make_batch, make_generic, make_tablet


def two_batch_tablet():
    return make_tablet(
        batches=[
            make_batch("b-late", "LATE-1", 30, expiry=date(2031, 6, 1)),
            make_batch("b-early", "EARLY-1", 30, expiry=date(2030, 6, 1)),
        ]
    )


class DecrementTests(SimpleTestCase):
    def test_sale_of_twenty_tablets(self):
        medicine = decrement_stock(make_tablet(), 20)
        self.assertEqual(total_stock(medicine), 480)

    def test_fefo_takes_earliest_expiry_first(self):
        medicine = decrement_stock(two_batch_tablet(), 40, policy=AllocationPolicy.FEFO)
        self.assertEqual(medicine.get_batch("b-early").stock.amount, 0)
        self.assertEqual(medicine.get_batch("b-late").stock.amount, 20)

    def test_fifo_takes_batches_in_arrival_order(self):
        medicine = decrement_stock(two_batch_tablet(), 40, policy=AllocationPolicy.FIFO)
        self.assertEqual(medicine.get_batch("b-late").stock.amount, 0)
        self.assertEqual(medicine.get_batch("b-early").stock.amount, 20)

    @override_settings(PHARMACY_STOCK_ALLOCATION="FIFO")
    def test_policy_comes_from_settings(self):
        plan = plan_decrement(two_batch_tablet(), 10)
        self.assertEqual([(a.batch_id, a.amount) for a in plan], [("b-late", 10)])

    def test_plan_spans_batches(self):
        plan = plan_decrement(two_batch_tablet(), 45, policy=AllocationPolicy.FEFO)
        self.assertEqual([(a.batch_id, a.amount) for a in plan], [("b-early", 30), ("b-late", 15)])

    def test_overdraw_raises_and_reports_shortage(self):
        original = make_tablet()
        with self.assertRaises(InsufficientStockError) as ctx:
            decrement_stock(original, 600)
        self.assertEqual(ctx.exception.shortages[0]["requested"], 600)
        self.assertEqual(ctx.exception.shortages[0]["available"], 500)
        self.assertEqual(total_stock(original), 500)

    def test_expired_batches_are_not_sellable(self):
        medicine = make_tablet(
            batches=[
                make_batch("b-old", "OLD-1", 100, expiry=date(2025, 1, 1)),
                make_batch("b-new", "NEW-1", 10, expiry=date(2030, 1, 1)),
            ]
        )
        as_of = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(sellable_stock(medicine, as_of), 10)
        with self.assertRaises(InsufficientStockError):
            plan_decrement(medicine, 20, as_of=as_of)
        self.assertEqual(pricing_batch(medicine, AllocationPolicy.FEFO, as_of).id, "b-new")

    def test_quantity_must_be_positive_integer(self):
        for amount in (0, -3, 1.5, True):
            with self.assertRaises(ValidationError):
                plan_decrement(make_tablet(), amount)


class IncrementTests(SimpleTestCase):
    def test_receipt_lands_on_latest_expiry_batch(self):
        medicine = increment_stock(two_batch_tablet(), 100)
        self.assertEqual(medicine.get_batch("b-late").stock.amount, 130)
        self.assertEqual(medicine.get_batch("b-early").stock.amount, 30)

    def test_receipt_into_named_batch(self):
        medicine = increment_stock(two_batch_tablet(), 5, target_batch_id="b-early")
        self.assertEqual(medicine.get_batch("b-early").stock.amount, 35)
        with self.assertRaises(NotFoundError):
            increment_stock(two_batch_tablet(), 5, target_batch_id="missing")

    def test_receipt_as_new_batch(self):
        fresh = make_batch("b-fresh", "FRESH-1", 0, expiry=date(2032, 1, 1))
        medicine = increment_stock(make_tablet(), 70, new_batch=fresh)
        self.assertEqual(medicine.get_batch("b-fresh").stock.amount, 70)
        self.assertEqual(total_stock(medicine), 570)

    def test_medicine_without_batches_cannot_receive(self):
        with self.assertRaises(ValidationError):
            increment_stock(make_tablet(batches=[]), 10)

    def test_amount_must_be_positive(self):
        with self.assertRaises(ValidationError):
            increment_stock(make_tablet(), 0)


class BatchRulesTests(SimpleTestCase):
    def test_expiry_must_follow_mfg(self):
        batch = make_batch("b-x", "X-1", 5, mfg=date(2025, 1, 1), expiry=date(2025, 1, 1))
        with self.assertRaises(ValidationError) as ctx:
            validate_batch(make_tablet(batches=[]), batch)
        self.assertEqual(ctx.exception.field, "expiry")

    def test_stock_unit_must_match_kind(self):
        batch = make_batch("b-x", "X-1", 5, unit=StockUnit.UNITS)
        with self.assertRaises(ValidationError) as ctx:
            add_batch(make_tablet(batches=[]), batch)
        self.assertEqual(ctx.exception.field, "stock")

    def test_price_must_be_positive(self):
        batch = make_batch("b-x", "X-1", 5, price="0")
        with self.assertRaises(ValidationError):
            add_batch(make_tablet(batches=[]), batch)

    def test_duplicate_batch_id_rejected(self):
        medicine = make_tablet()
        with self.assertRaises(ValidationError):
            add_batch(medicine, replace(medicine.batches[0], batch_number="OTHER"))


class StockStatusTests(SimpleTestCase):
    def test_tablet_thresholds(self):
        self.assertTrue(is_low_stock(make_tablet(batches=[make_batch("b", "N", 49)])))
        self.assertFalse(is_low_stock(make_tablet(batches=[make_batch("b", "N", 50)])))
        self.assertFalse(is_low_stock(make_tablet(batches=[make_batch("b", "N", 0)])))

    def test_generic_thresholds(self):
        low = make_generic(batches=[make_batch("b", "N", 9, unit=StockUnit.UNITS)])
        fine = make_generic(batches=[make_batch("b", "N", 10, unit=StockUnit.UNITS)])
        self.assertTrue(is_low_stock(low))
        self.assertFalse(is_low_stock(fine))

    def test_out_of_stock(self):
        self.assertTrue(is_out_of_stock(make_tablet(batches=[make_batch("b", "N", 0)])))
        self.assertTrue(is_out_of_stock(make_tablet(batches=[])))
        self.assertFalse(is_out_of_stock(make_tablet()))

    def test_expiry_helpers(self):
        medicine = two_batch_tablet()
        self.assertEqual(soonest_expiry(medicine), date(2030, 6, 1))
        self.assertIsNone(soonest_expiry(make_tablet(batches=[])))
        batch = medicine.get_batch("b-early")
        self.assertEqual(days_until_expiry(batch, datetime(2030, 5, 31, 23, 0, tzinfo=timezone.utc)), 1)
        self.assertEqual(days_until_expiry(batch, date(2030, 6, 2)), -1)
