"""Audit trail writer and reader."""

import logging
from decimal import Decimal
from uuid import UUID

from django.core.serializers.json import DjangoJSONEncoder
from django.db.models import QuerySet

from apps.audit.models import AuditLog

logger = logging.getLogger(__name__)


def _json_safe(value):
    """Coerce Decimals, UUIDs and dates so they fit in a JSONField."""
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return DjangoJSONEncoder().default(value)


def log_action(*, actor, action: str, entity_type: str, entity_id=None, metadata=None) -> AuditLog:
    """
    Record an audit entry.

    Called inside the caller's transaction so the entry commits or rolls
    back with the change it describes.

    Args:
        actor: User performing the action (None for system actions)
        action: Upper-case verb such as ``PAYMENT_CONFIRMED``
        entity_type: Model name of the affected record
        entity_id: Primary key of the affected record
        metadata: Extra JSON-serialisable context (previous/new values...)
    """
    entry = AuditLog.objects.create(
        actor=actor if actor is not None and actor.is_authenticated else None,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else '',
        metadata=_json_safe(metadata or {}),
    )
    logger.debug("Audit %s on %s %s", action, entity_type, entity_id)
    return entry


def list_audit_logs(*, entity_type: str | None = None, action: str | None = None,
                    actor_id=None) -> QuerySet:
    queryset = AuditLog.objects.select_related('actor')
    if entity_type:
        queryset = queryset.filter(entity_type=entity_type)
    if action:
        queryset = queryset.filter(action=action)
    if actor_id:
        queryset = queryset.filter(actor_id=actor_id)
    return queryset
