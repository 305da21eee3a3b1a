from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.governance.models import AuditLog, SystemEvent


class Command(BaseCommand):
    help = "Delete audit log entries and system events older than --days"

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, default=365)

    def handle(self, *args, **options):
        if options["days"] <= 0:
            self.stdout.write(self.style.WARNING("Nothing purged: --days must be positive"))
            return
        cutoff = timezone.now() - timedelta(days=options["days"])
        audits, _ = AuditLog.objects.filter(created_at__lt=cutoff).delete()
        events, _ = SystemEvent.objects.filter(created_at__lt=cutoff).delete()
        self.stdout.write(self.style.SUCCESS(f"Purged rows: {audits + events}"))
