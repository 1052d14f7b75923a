"""Scheduled report definitions."""

import logging
from datetime import timedelta
from uuid import UUID

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.accounting.models import ReportFrequency, ReportType, ScheduledReport
from apps.audit.services import log_action
from apps.tenants.models import Business

from .exceptions import InvalidScheduledReportError, ScheduledReportNotFoundError

logger = logging.getLogger(__name__)

FREQUENCY_STEP = {
    ReportFrequency.DAILY: timedelta(days=1),
    ReportFrequency.WEEKLY: timedelta(weeks=1),
    ReportFrequency.MONTHLY: timedelta(days=30),
}


def next_run(frequency: str, after=None):
    return (after or timezone.now()) + FREQUENCY_STEP[frequency]


def clean_recipients(recipients) -> str:
    """
    Normalise a list or comma separated string of e-mails.

    Raises:
        InvalidScheduledReportError: If empty or any address is invalid
    """
    if isinstance(recipients, str):
        recipients = recipients.split(',')
    emails = [email.strip().lower() for email in recipients if email and email.strip()]
    if not emails:
        raise InvalidScheduledReportError("At least one recipient is required")
    for email in emails:
        try:
            validate_email(email)
        except ValidationError:
            raise InvalidScheduledReportError(f"Invalid recipient e-mail: {email}")
    return ','.join(emails)


@transaction.atomic
def create_scheduled_report(*, business: Business, report_type: str, frequency: str,
                            recipients, actor: User) -> ScheduledReport:
    if report_type not in ReportType.values:
        raise InvalidScheduledReportError("Invalid report type")
    if frequency not in ReportFrequency.values:
        raise InvalidScheduledReportError("Invalid frequency")

    report = ScheduledReport.objects.create(
        business=business,
        report_type=report_type,
        frequency=frequency,
        recipients=clean_recipients(recipients),
        next_run_at=next_run(frequency),
        created_by=actor,
    )
    log_action(
        actor=actor,
        action='SCHEDULED_REPORT_CREATED',
        entity_type='ScheduledReport',
        entity_id=report.id,
        metadata={'report_type': report_type, 'frequency': frequency},
    )
    return report


def _get_report(business: Business, report_id: UUID) -> ScheduledReport:
    try:
        return ScheduledReport.objects.get(business=business, id=report_id)
    except ScheduledReport.DoesNotExist:
        raise ScheduledReportNotFoundError(f"Scheduled report with ID {report_id} not found")


@transaction.atomic
def toggle_scheduled_report(*, business: Business, report_id: UUID, actor: User) -> ScheduledReport:
    """Pause or resume a report. Resuming schedules the next run from now."""
    report = _get_report(business, report_id)
    report.is_active = not report.is_active
    report.next_run_at = next_run(report.frequency) if report.is_active else None
    report.save(update_fields=['is_active', 'next_run_at'])

    log_action(
        actor=actor,
        action='SCHEDULED_REPORT_RESUMED' if report.is_active else 'SCHEDULED_REPORT_PAUSED',
        entity_type='ScheduledReport',
        entity_id=report.id,
    )
    return report


@transaction.atomic
def delete_scheduled_report(*, business: Business, report_id: UUID, actor: User) -> None:
    report = _get_report(business, report_id)
    report.delete()
    log_action(
        actor=actor,
        action='SCHEDULED_REPORT_DELETED',
        entity_type='ScheduledReport',
        entity_id=report_id,
    )


def list_scheduled_reports(*, business: Business) -> QuerySet:
    return ScheduledReport.objects.filter(business=business)
