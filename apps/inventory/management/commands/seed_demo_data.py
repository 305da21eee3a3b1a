from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.inventory.domain import medicine_from_dict
from apps.inventory.services import DuplicateAction, ImportMode, import_medicines
from apps.settingsx.models import SettingKV
from apps.settingsx.services import DEFAULT_EXPIRY_WARNING_DAYS, EXPIRY_WARNING_DAYS_KEY
from core.stores import MEDICINES, get_store


DEMO_MEDICINES = [
    # name, category, location, tablets per strip, [(batch, months to expiry, price, stock)]
    ("Paracetamol 500mg", "Tablet", "A1", 10, [("PCM-2401", 18, "25.00", 400), ("PCM-2312", 4, "24.00", 60)]),
    ("Amoxicillin 250mg", "Capsule", "A2", 6, [("AMX-2402", 12, "48.00", 120)]),
    ("Cetirizine 10mg", "Tablet", "A1", 10, [("CTZ-2310", 1, "18.00", 30)]),
    ("Cough Syrup 100ml", "Syrup", "B1", None, [("CS-2405", 20, "95.00", 24)]),
    ("Betadine Ointment 15g", "Ointment", "B2", None, [("BTD-2403", 9, "72.50", 8)]),
]


class Command(BaseCommand):
    help = "Seed default alert settings and a small demo inventory"

    def add_arguments(self, parser):
        parser.add_argument("--replace", action="store_true", help="Replace the current inventory instead of merging")

    def handle(self, *args, **options):
        SettingKV.objects.get_or_create(
            key=EXPIRY_WARNING_DAYS_KEY,
            defaults=dict(value=str(DEFAULT_EXPIRY_WARNING_DAYS), description="Days ahead to flag expiring batches"),
        )

        today = timezone.now().date()
        demo = []
        for index, (name, category, location, per_strip, batches) in enumerate(DEMO_MEDICINES, start=1):
            unit = "tablets" if per_strip else "quantity"
            demo.append(
                medicine_from_dict(
                    {
                        "id": f"demo-{index}",
                        "name": name,
                        "category": category,
                        "location": location,
                        "tabletsPerStrip": per_strip,
                        "batches": [
                            {
                                "id": f"demo-{index}-{n}",
                                "batchNumber": number,
                                "mfg": (today - timedelta(days=180)).isoformat(),
                                "expiry": (today + timedelta(days=30 * months)).isoformat(),
                                "price": price,
                                "stock": {unit: stock},
                            }
                            for n, (number, months, price, stock) in enumerate(batches, start=1)
                        ],
                    }
                )
            )

        store = get_store()
        with transaction.atomic():
            result = import_medicines(
                demo,
                store.load(MEDICINES),
                mode=ImportMode.REPLACE if options["replace"] else ImportMode.MERGE,
                on_duplicate=DuplicateAction.SKIP,
            )
            store.save_all(MEDICINES, result.inventory)

        self.stdout.write(
            self.style.SUCCESS(
                f"Demo data loaded: {result.added} added, {result.updated} updated, {result.skipped} skipped"
            )
        )
