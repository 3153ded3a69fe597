"""Audit trail writes and reads."""

from __future__ import annotations

import logging
from typing import Any

from django.db.models import QuerySet  # type: ignore

from .models import AuditLog

logger = logging.getLogger(__name__)


def record(
    action: str,
    *,
    entity_type: str,
    entity_id: Any = None,
    actor_id: int | None = None,
    payload: dict[str, Any] | None = None,
) -> AuditLog:
    """Persist one audit entry and return it."""

    entry = AuditLog.objects.create(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=None if entity_id is None else str(entity_id),
        payload=payload,
    )
    logger.debug(f"Audit entry {entry.pk}: {action} {entity_type}:{entity_id}")
    return entry


def get_audit_logs() -> QuerySet[AuditLog]:
    """Audit entries newest first; the API narrows them with ``AuditLogFilterSet``."""

    return AuditLog.objects.select_related("actor").order_by("-created_at", "-id")
