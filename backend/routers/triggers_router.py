"""
Router for document-created triggers.

The document store (or whatever relays its change feed) posts one event per
created document. Delivery problems never fail the request; they are
reported in the summary instead.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from models.config import Settings, get_settings
from repositories.database import get_db
from services.push_gateway import PushGateway, get_push_gateway
from services.trigger_service import TriggerService

router = APIRouter(
    prefix="/triggers",
    tags=["triggers"],
    dependencies=[Depends(auth.verify_trigger_secret)],
)


def get_gateway(settings: Settings = Depends(get_settings)) -> PushGateway:
    """Push gateway for this request (overridable in tests)."""
    return get_push_gateway(settings)


@router.post("/events")
async def handle_event(
    envelope: schemas.TriggerEnvelope,
    db: Session = Depends(get_db),
    gateway: PushGateway = Depends(get_gateway),
) -> dict:
    """
    Notify the recipients of a newly created document.

    Always answers 200 with a delivery summary.
    """
    event = envelope.event
    result = await TriggerService.handle(db, gateway, event)
    return {"success": True, "kind": event.kind, **result.summary()}
