"""
Service for moderation report triage.
"""

from typing import Any

from sqlalchemy.orm import Session

from helpers.time_utils import format_iso8601, utc_now
from models.config import Settings
from models.exceptions import ReportNotFoundException
from models.results import ActionResult
from models.schemas import AssignReportCommand, Caller, ResolveReportCommand
from repositories.db_models import Report, ReportStatus, UserRole
from repositories.report_repository import ReportRepository
from services.audit_service import AuditAction, AuditService
from services.authority_service import AuthorityService

# Statuses that close a report and stamp who closed it
TERMINAL_STATUSES = {ReportStatus.RESOLVED, ReportStatus.REJECTED}


def normalize_report_status(value: Any) -> ReportStatus:
    """Map a requested status to a ReportStatus; anything unknown resolves."""
    if isinstance(value, ReportStatus):
        return value
    try:
        return ReportStatus(value)
    except ValueError:
        return ReportStatus.RESOLVED


class ReportService:
    """Service for report operations."""

    @staticmethod
    def _get_report_or_raise(db: Session, report_id: str) -> Report:
        report = ReportRepository(db).get_by_id(report_id)
        if report is None:
            raise ReportNotFoundException(report_id)
        return report

    @staticmethod
    def assign_report(
        db: Session,
        caller: Caller,
        command: AssignReportCommand,
        settings: Settings,
    ) -> ActionResult:
        """
        Assign a report to a moderator and move it to review.

        Args:
            db: Database session
            caller: Acting moderator
            command: Report and optional assignee (defaults to the caller)
            settings: Application settings

        Returns:
            ActionResult with the assignee

        Raises:
            PermissionDeniedException: Caller is not a moderator
            ReportNotFoundException: Report does not exist
        """
        AuthorityService.require_role(db, caller, UserRole.MODERATOR, settings)
        report = ReportService._get_report_or_raise(db, command.report_id)

        assignee = command.moderator_id or caller.uid
        report.assigned_to = assignee
        report.status = ReportStatus.IN_REVIEW
        report.updated_at = utc_now()
        db.commit()

        result = ActionResult(
            action=AuditAction.ASSIGN_REPORT,
            data={
                "reportId": report.id,
                "assignedTo": assignee,
                "status": ReportStatus.IN_REVIEW.value,
            },
        )
        failure = AuditService.record(
            db, caller, result.action, "report", report.id, {"assignedTo": assignee}
        )
        if failure:
            result.side_effect_failures.append(failure)
        return result

    @staticmethod
    def resolve_report(
        db: Session,
        caller: Caller,
        command: ResolveReportCommand,
        settings: Settings,
    ) -> ActionResult:
        """
        Move a report to a new status, recording notes and follow-up actions.

        Resolved and rejected reports are stamped with who closed them and
        when; reopening clears that stamp.

        Raises:
            PermissionDeniedException: Caller is not a moderator
            ReportNotFoundException: Report does not exist
        """
        AuthorityService.require_role(db, caller, UserRole.MODERATOR, settings)
        report = ReportService._get_report_or_raise(db, command.report_id)

        status = normalize_report_status(command.status)
        now = utc_now()
        report.status = status
        if command.notes is not None:
            report.resolution_notes = command.notes
        if command.actions:
            report.resolution_actions = list(command.actions)
        if status in TERMINAL_STATUSES:
            report.resolved_by = caller.uid
            report.resolved_at = now
        else:
            report.resolved_by = None
            report.resolved_at = None
        report.updated_at = now
        db.commit()

        result = ActionResult(
            action=AuditAction.RESOLVE_REPORT,
            data={
                "reportId": report.id,
                "status": status.value,
                "resolvedAt": format_iso8601(report.resolved_at),
            },
        )
        failure = AuditService.record(
            db,
            caller,
            result.action,
            "report",
            report.id,
            {"status": status.value, "notes": command.notes, "actions": list(command.actions)},
        )
        if failure:
            result.side_effect_failures.append(failure)
        return result
