# clinic_core/common/conf.py
from __future__ import annotations

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "SCHEMA_INTROSPECTOR": "django",
    "DELETION_MAX_ATTEMPTS": 3,
    "ASSIGNMENT_MAX_ATTEMPTS": 3,
}


def access_setting(name: str) -> Any:
    """
    Read one ACCESS_CONTROL knob, falling back to DEFAULTS.
    Read on every call so override_settings works in tests.
    """
    if name not in DEFAULTS:
        raise KeyError(f"Unknown ACCESS_CONTROL setting: {name}")
    configured = getattr(settings, "ACCESS_CONTROL", None) or {}
    return configured.get(name, DEFAULTS[name])
