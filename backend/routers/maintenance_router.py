"""
Router for internal maintenance jobs, guarded by the trigger secret.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from helpers.rate_limiter import limiter
from models.config import Settings, get_settings
from repositories.database import get_db
from services.backfill_service import BackfillService

router = APIRouter(
    prefix="/maintenance",
    tags=["maintenance"],
    dependencies=[Depends(auth.verify_trigger_secret)],
)


@router.post("/backfill-last-seen", response_model=schemas.BackfillResponse)
@limiter.limit("5/minute")
def backfill_last_seen(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> schemas.BackfillResponse:
    """
    Fill ``last_seen`` for users missing it.

    Safe to call repeatedly; later calls update nothing.
    """
    result = BackfillService.backfill_last_seen(db, settings.BACKFILL_BATCH_SIZE)
    return schemas.BackfillResponse(
        success=True,
        message=result.message,
        updated=result.updated,
        timestamp=result.timestamp,
    )
