#!/usr/bin/env python3
"""
Backfill task for the ``last_seen`` user field.

Older user records predate presence tracking and have no ``last_seen``.
This fills it with the current time for every such user, in batches.
Users that already have a value are left alone, so the task can be re-run
safely.

This script can be run:
- Manually: python -m tasks.backfill_last_seen
- Over HTTP: POST /api/maintenance/backfill-last-seen
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

# Add backend to path for imports
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from loguru import logger  # noqa: E402

from core.correlation import bind_correlation_id  # noqa: E402
from core.logging_config import configure_logging  # noqa: E402
from models.config import get_settings  # noqa: E402
from repositories.database import SessionLocal  # noqa: E402
from services.backfill_service import BackfillService  # noqa: E402

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def backfill_last_seen(
    db: "Session | None" = None,
    batch_size: int | None = None,
) -> dict[str, object]:
    """
    Run the ``last_seen`` backfill.

    Args:
        db: Optional database session. If not provided, creates a new session.
        batch_size: Users per batch (defaults to BACKFILL_BATCH_SIZE)

    Returns:
        Dictionary with the number of users updated and the timestamp written
    """
    should_close = db is None
    if db is None:
        db = SessionLocal()

    try:
        logger.info("Starting lastSeen backfill task")
        result = BackfillService.backfill_last_seen(
            db, batch_size or get_settings().BACKFILL_BATCH_SIZE
        )
        return {
            "updated": result.updated,
            "timestamp": result.timestamp.isoformat(),
        }

    except Exception as e:
        logger.error(f"lastSeen backfill failed: {e}")
        raise
    finally:
        if should_close:
            db.close()


if __name__ == "__main__":
    configure_logging(get_settings().ENVIRONMENT, log_dir=None)
    bind_correlation_id()

    try:
        result = backfill_last_seen()
        print(f"Backfill completed: {result}")
        sys.exit(0)
    except Exception as e:
        print(f"Backfill failed: {e}", file=sys.stderr)
        sys.exit(1)
