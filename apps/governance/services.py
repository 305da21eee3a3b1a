from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from .models import AuditLog, SystemEvent
from .middleware import get_request_id

logger = logging.getLogger(__name__)


def request_meta(request) -> dict:
    if request is None:
        return {}
    return {
        "ip": request.META.get("REMOTE_ADDR", ""),
        "user_agent": request.META.get("HTTP_USER_AGENT", ""),
    }


@transaction.atomic
def audit(
    actor,
    table: str,
    row_id: str,
    action: str,
    before: dict | None = None,
    after: dict | None = None,
    meta: dict | None = None,
) -> None:
    rid = get_request_id("")
    AuditLog.objects.create(
        actor_user=actor if getattr(actor, "id", None) else None,
        action=action,
        table_name=table,
        record_id=str(row_id),
        before_json=before,
        after_json=after,
        ip=(meta or {}).get("ip", ""),
        user_agent=((meta or {}).get("user_agent", "") + (f" req_id={rid}" if rid else "")).strip(),
    )


def emit_event(code: str, payload: dict) -> None:
    SystemEvent.objects.create(code=code, payload=payload or {})
    logger.info("Event %s %s", code, payload)


def run_expiry_scan(as_of=None) -> dict:
    from apps.reports.services import expiry_report
    from apps.settingsx.services import expiry_warning_days
    from core.stores import MEDICINES, get_store

    as_of = as_of or timezone.now()
    warn_days = expiry_warning_days()
    medicines = get_store().load(MEDICINES)
    expired = expiry_report(medicines, "expired", as_of)
    # 90 is the widest report window; narrow it to the configured warning days
    expiring = [
        row for row in expiry_report(medicines, "90", as_of) if row["daysUntilExpiry"] <= warn_days
    ]
    result = {
        "warning_days": warn_days,
        "expired": len(expired),
        "expiring": len(expiring),
        "ts": as_of.date().isoformat(),
    }
    emit_event("EXPIRY_SCAN", result)
    return result


def run_low_stock_scan() -> list[dict]:
    from apps.reports.services import low_stock_report, out_of_stock_report
    from core.stores import MEDICINES, get_store

    medicines = get_store().load(MEDICINES)
    results = low_stock_report(medicines)
    out = out_of_stock_report(medicines)
    emit_event("LOW_STOCK_SCAN", {"count": len(results), "out_of_stock": len(out)})
    return results
