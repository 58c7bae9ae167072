"""
conf.py
-------
Reads scheduling settings. A configmgr.SystemSetting row wins over
settings.BOOKING, which wins over the built-in defaults.
"""

import logging

from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULTS = {
    "SLOT_INTERVAL_MINUTES": 15,
    "CANCELLATION_CUTOFF_MINUTES": 120,
    "MAX_AVAILABLE_DAYS_RANGE": 62,
}


def get_booking_setting(key: str) -> int:
    if key not in DEFAULTS:
        raise KeyError(f"Unknown booking setting: {key}")

    from configmgr.models import SystemSetting

    row = SystemSetting.objects.filter(key=key).first()
    if row is not None:
        try:
            return int(row.value)
        except ValueError:
            logger.warning("Ignoring non-integer SystemSetting %s=%r", key, row.value)

    return int(getattr(settings, "BOOKING", {}).get(key, DEFAULTS[key]))
