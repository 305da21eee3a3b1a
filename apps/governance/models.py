from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    """One mutation of a medicine, sale, order or setting, as seen through the API."""

    actor_user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    table_name = models.CharField(max_length=120)
    # snapshot ids are strings; "*" marks a bulk action
    record_id = models.CharField(max_length=64)
    before_json = models.JSONField(null=True, blank=True)
    after_json = models.JSONField(null=True, blank=True)
    ip = models.CharField(max_length=64, blank=True)
    user_agent = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["table_name", "action", "created_at"], name="idx_audit_table_action_dt"),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.table_name}:{self.record_id}"


class SystemEvent(models.Model):
    """Domain milestone such as SALE_COMPLETED or ORDER_RECONCILED."""

    code = models.CharField(max_length=120)
    payload = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["code", "created_at"], name="idx_event_code_dt"),
        ]

    def __str__(self) -> str:
        return self.code
