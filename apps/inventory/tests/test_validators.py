from django.test import SimpleTestCase

from apps.inventory.validators import find_duplicate_batch, find_repeated_batch_number, validate_new_batches
from core.exceptions import ValidationError

from .helpers import make_batch, make_tablet


class DuplicateBatchTests(SimpleTestCase):
    def setUp(self):
        self.para = make_tablet(batches=[make_batch("b-1", "AB123", 100)])
        self.ibu = make_tablet(medicine_id="m-ibu", name="Ibuprofen", batches=[make_batch("b-2", "IB-9", 100)])
        self.inventory = [self.para, self.ibu]

    def test_batch_numbers_compare_case_insensitively(self):
        conflict = find_duplicate_batch("ab123", self.inventory)
        self.assertEqual(conflict.id, "m-para")

    def test_surrounding_whitespace_is_ignored(self):
        self.assertIsNotNone(find_duplicate_batch("  Ab123 ", self.inventory))

    def test_batch_being_edited_does_not_collide_with_itself(self):
        self.assertIsNone(find_duplicate_batch("AB123", self.inventory, "m-para", "b-1"))
        # same medicine, different batch id still collides
        self.assertIsNotNone(find_duplicate_batch("AB123", self.inventory, "m-para", "b-other"))

    def test_repeated_lookups_agree_and_leave_inventory_alone(self):
        before = list(self.inventory)
        first = find_duplicate_batch("AB123", self.inventory, "m-ibu", "b-2")
        second = find_duplicate_batch("AB123", self.inventory, "m-ibu", "b-2")
        self.assertIs(first, second)
        self.assertEqual(first, self.para)
        self.assertEqual(self.inventory, before)
        self.assertEqual(
            find_duplicate_batch("IB-404", self.inventory), find_duplicate_batch("IB-404", self.inventory)
        )

    def test_blank_and_unknown_numbers(self):
        self.assertIsNone(find_duplicate_batch("", self.inventory))
        self.assertIsNone(find_duplicate_batch("NEW-1", self.inventory))

    def test_repeats_within_one_form(self):
        self.assertEqual(find_repeated_batch_number(["X1", "y2", "x1"]), "x1")
        self.assertIsNone(find_repeated_batch_number(["X1", "", "", "Y2"]))

    def test_validate_new_batches_reports_conflict(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_new_batches([make_batch("b-9", "ab123", 5)], self.inventory, "m-new")
        payload = ctx.exception.as_payload()
        self.assertEqual(payload["field"], "batchNumber")
        self.assertEqual(payload["conflict"], {"medicineId": "m-para", "name": "Paracetamol"})

    def test_validate_new_batches_rejects_repeats(self):
        with self.assertRaises(ValidationError):
            validate_new_batches([make_batch("b-8", "Q-1", 5), make_batch("b-9", "q-1", 5)], [])

    def test_validate_new_batches_requires_number(self):
        with self.assertRaises(ValidationError):
            validate_new_batches([make_batch("b-8", "  ", 5)], [])
