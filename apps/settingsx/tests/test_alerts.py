from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from apps.governance.models import AuditLog
from apps.settingsx import services


class AlertSettingsTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = get_user_model().objects.create_user(username="clerk", password="x")
        self.admin = get_user_model().objects.create_user(username="owner", password="x", is_superuser=True)
        self.url = "/api/v1/settings/alerts/"

    def test_default_and_update(self):
        self.client.force_authenticate(self.user)
        resp = self.client.get(self.url)
        self.assertEqual(resp.data, {"expiryWarningDays": 30})

        resp = self.client.put(self.url, {"expiryWarningDays": 60}, format="json")
        self.assertEqual(resp.status_code, 403)

        self.client.force_authenticate(self.admin)
        resp = self.client.put(self.url, {"expiryWarningDays": 60}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(services.expiry_warning_days(), 60)
        self.assertTrue(AuditLog.objects.filter(table_name="settings_kv", record_id=services.EXPIRY_WARNING_DAYS_KEY).exists())

    def test_rejects_out_of_range(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.put(self.url, {"expiryWarningDays": 0}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_bad_stored_value_falls_back(self):
        services.set_setting(services.EXPIRY_WARNING_DAYS_KEY, "soon")
        self.assertEqual(services.expiry_warning_days(), services.DEFAULT_EXPIRY_WARNING_DAYS)
