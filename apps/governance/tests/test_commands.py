from datetime import date, timedelta
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from apps.governance.models import AuditLog, SystemEvent
from apps.governance.services import run_expiry_scan
from apps.inventory.models import Medicine
from apps.inventory.tests.helpers import make_batch, make_tablet
from apps.settingsx.services import EXPIRY_WARNING_DAYS_KEY, set_setting
from core.stores import MEDICINES, DjangoStore


class CommandTests(TestCase):
    def test_expiry_scan(self):
        today = timezone.now().date()
        DjangoStore().save(
            MEDICINES,
            make_tablet(
                batches=[
                    make_batch("b1", "OLD-1", 10, mfg=date(2020, 1, 1), expiry=today - timedelta(days=1)),
                    make_batch("b2", "SOON-1", 10, mfg=date(2020, 1, 1), expiry=today + timedelta(days=45)),
                ]
            ),
        )
        result = run_expiry_scan()
        self.assertEqual((result["expired"], result["expiring"]), (1, 0))

        set_setting(EXPIRY_WARNING_DAYS_KEY, "60")
        out = StringIO()
        call_command('expiry_scan', stdout=out)
        self.assertIn("1 expired, 1 within 60 days", out.getvalue())
        self.assertEqual(SystemEvent.objects.filter(code="EXPIRY_SCAN").count(), 2)

    def test_low_stock_scan(self):
        DjangoStore().save(MEDICINES, make_tablet(batches=[make_batch("b1", "L-1", 12)]))
        call_command('low_stock_scan', stdout=StringIO())
        event = SystemEvent.objects.get(code="LOW_STOCK_SCAN")
        self.assertEqual(event.payload["count"], 1)

    def test_purge_logs(self):
        old = AuditLog.objects.create(action="CREATE", table_name="inventory_medicine", record_id="m1")
        AuditLog.objects.filter(id=old.id).update(created_at=timezone.now() - timedelta(days=120))
        AuditLog.objects.create(action="CREATE", table_name="inventory_medicine", record_id="m2")
        call_command('purge_logs', '--days', '90', stdout=StringIO())
        self.assertEqual(list(AuditLog.objects.values_list("record_id", flat=True)), ["m2"])

    def test_seed_demo_data(self):
        call_command('seed_demo_data', stdout=StringIO())
        self.assertEqual(Medicine.objects.count(), 5)
        call_command('seed_demo_data', stdout=StringIO())
        self.assertEqual(Medicine.objects.count(), 5)
