"""Structured log sink for funnel events."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

ANALYTICS_LOGGER = logging.getLogger("career_matcher.analytics")


def build_funnel_record(event: Mapping[str, Any]) -> Dict[str, Any]:
    """Flatten a client event into the record we log."""
    record: Dict[str, Any] = {"type": "funnel_event"}
    record.update((key, value) for key, value in event.items() if key != "type")
    record["timestamp"] = event.get("timestamp") or datetime.now(timezone.utc).isoformat()
    for key in ("event", "funnel_step", "step"):
        record.setdefault(key, None)
    record.setdefault("session_id", event.get("sessionId"))
    return record


def log_funnel_event(event: Mapping[str, Any]) -> Dict[str, Any]:
    record = build_funnel_record(event)
    ANALYTICS_LOGGER.info(json.dumps(record, default=str))
    return record
