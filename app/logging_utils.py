"""
app/logging_utils.py

One-line JSON log events for import, cleanup and planning workflows.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any


def json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    *,
    exc_info: bool = False,
    **fields: Any,
) -> None:
    """
    Log ``{"event": event, **fields}`` as compact JSON with sorted keys.

    Fields whose value is None are dropped.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event}
    payload.update((name, value) for name, value in fields.items() if value is not None)
    logger.log(
        level,
        json.dumps(payload, default=json_default, sort_keys=True, ensure_ascii=False),
        exc_info=exc_info,
    )
