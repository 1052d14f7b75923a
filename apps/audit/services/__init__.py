"""Audit trail services."""

from .audit_logging import log_action, list_audit_logs

__all__ = [
    'log_action',
    'list_audit_logs',
]
