"""Admin-editable site settings (a single in-memory record)."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Any

from app.core.errors import ValidationError
from app.models.site_settings import SiteSettings

logger = logging.getLogger(__name__)

_FIELDS = frozenset(SiteSettings.__dataclass_fields__)

_lock = threading.Lock()
_current = SiteSettings()


def get_settings() -> SiteSettings:
    with _lock:
        return _current


def update_settings(**changes: Any) -> SiteSettings:
    global _current
    unknown = set(changes) - _FIELDS
    if unknown:
        raise ValidationError(f"unknown settings: {sorted(unknown)}")
    with _lock:
        _current = replace(_current, **changes)
        logger.info("Site settings updated fields=%s", sorted(changes))
        return _current


def reset_settings() -> None:
    global _current
    with _lock:
        _current = SiteSettings()
