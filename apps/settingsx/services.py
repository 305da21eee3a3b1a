from __future__ import annotations

import logging

from django.db import transaction

from .models import SettingKV

logger = logging.getLogger(__name__)

EXPIRY_WARNING_DAYS_KEY = "ALERT_EXPIRY_WARNING_DAYS"
DEFAULT_EXPIRY_WARNING_DAYS = 30


def get_setting(key: str, default: str | None = None) -> str | None:
    row = SettingKV.objects.filter(pk=key).values_list("value", flat=True).first()
    if row is None:
        return default
    return row


@transaction.atomic
def set_setting(key: str, value: str, description: str = "") -> None:
    defaults = {"value": value}
    if description:
        defaults["description"] = description
    SettingKV.objects.update_or_create(key=key, defaults=defaults)


def get_int_setting(key: str, default: int) -> int:
    value = get_setting(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Setting %s=%r is not an integer; using %s", key, value, default)
        return default


def expiry_warning_days() -> int:
    return get_int_setting(EXPIRY_WARNING_DAYS_KEY, DEFAULT_EXPIRY_WARNING_DAYS)
