from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from apps.inventory.tests.helpers import make_batch, make_tablet
from core.stores import MEDICINES, DjangoStore


class GovernanceEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = get_user_model().objects.create_user(username="user", password="x")
        self.admin = get_user_model().objects.create_user(username="admin", password="x", is_superuser=True)

    def test_run_endpoints_require_admin(self):
        r = self.client.post("/api/v1/governance/run/expiry-scan")
        assert r.status_code in (401, 403)
        self.client.force_authenticate(self.user)
        r = self.client.post("/api/v1/governance/run/expiry-scan")
        assert r.status_code == 403
        self.client.force_authenticate(self.admin)
        r = self.client.post("/api/v1/governance/run/expiry-scan")
        assert r.status_code == 200
        assert r.data["expired"] == 0

    def test_low_stock_scan_lists_items(self):
        DjangoStore().save(MEDICINES, make_tablet(batches=[make_batch("b1", "L-1", 12)]))
        self.client.force_authenticate(self.admin)
        r = self.client.post("/api/v1/governance/run/low-stock-scan")
        assert r.status_code == 200
        assert r.data["count"] == 1
        assert r.data["items"][0]["medicineId"] == "m-para"

    def test_mutations_are_audited(self):
        self.client.force_authenticate(self.admin)
        self.client.post(
            "/api/v1/procurement/orders/",
            {"wholesalerName": "City Pharma", "items": [{"name": "Dolo", "category": "Tablet", "quantity": "1 strip"}]},
            format="json",
            HTTP_X_REQUEST_ID="req-123",
        )
        r = self.client.get("/api/v1/governance/audit-logs/", {"table": "procurement_order"})
        assert r.status_code == 200
        assert [row["action"] for row in r.data] == ["CREATE"]
        assert r.data[0]["actor_user_id"] == self.admin.id

        r = self.client.get("/api/v1/governance/events/")
        assert r.status_code == 200

        self.client.force_authenticate(self.user)
        r = self.client.get("/api/v1/governance/audit-logs/")
        assert r.status_code == 403
