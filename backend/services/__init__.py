"""
Services layer for business logic.

Notification delivery (triggers, recipients, tokens, dispatch) and
moderation (authority, sanctions, rooms, reports, announcements, audit)
live here, separate from the API routes.
"""

from .announcement_service import AnnouncementService
from .audit_service import AuditAction, AuditService
from .authority_service import AuthorityService
from .backfill_service import BackfillService
from .notification_service import NotificationService
from .recipient_service import RecipientService
from .report_service import ReportService
from .room_service import RoomService
from .sanction_service import SanctionService
from .token_service import TokenService
from .trigger_service import TriggerService

__all__ = [
    "AnnouncementService",
    "AuditAction",
    "AuditService",
    "AuthorityService",
    "BackfillService",
    "NotificationService",
    "RecipientService",
    "ReportService",
    "RoomService",
    "SanctionService",
    "TokenService",
    "TriggerService",
]
