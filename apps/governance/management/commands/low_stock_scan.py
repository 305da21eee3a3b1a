from django.core.management.base import BaseCommand
from apps.governance.services import run_low_stock_scan


class Command(BaseCommand):
    help = "List low-stock medicines and emit a LOW_STOCK_SCAN event"

    def handle(self, *args, **options):
        result = run_low_stock_scan()
        for row in result:
            self.stdout.write(f"{row['name']} ({row['category']}): {row['totalStock']} {row['stockUnit']}")
        self.stdout.write(self.style.SUCCESS(f"Low stock scan done: {len(result)} items"))
