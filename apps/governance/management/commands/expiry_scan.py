from django.core.management.base import BaseCommand
from apps.governance.services import run_expiry_scan


class Command(BaseCommand):
    help = "Count expired and soon-to-expire batches and emit an EXPIRY_SCAN event"

    def handle(self, *args, **options):
        result = run_expiry_scan()
        self.stdout.write(
            self.style.SUCCESS(
                f"Expiry scan done: {result['expired']} expired, "
                f"{result['expiring']} within {result['warning_days']} days"
            )
        )
