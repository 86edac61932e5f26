"""Initialize the database schema and seed the first admin account."""

import os

from loguru import logger

from repositories.database import Base, SessionLocal, engine
from repositories.db_models import User, UserRole


def create_tables() -> None:
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)


def seed_admin(db, uid: str, email: str | None = None, name: str | None = None) -> User:
    """
    Make sure ``uid`` exists with the admin role and matching claims.

    Existing users are promoted; nothing else about them changes.
    """
    user = db.get(User, uid)
    if user is None:
        user = User(id=uid, email=email, display_name=name)
        db.add(user)
    user.role = UserRole.ADMIN
    user.custom_claims = {
        **(user.custom_claims or {}),
        "role": UserRole.ADMIN.value,
        "admin": True,
        "moderator": False,
    }
    db.commit()
    db.refresh(user)
    return user


def init_db() -> None:
    """Initialize the database with default data."""
    create_tables()

    admin_uid = os.getenv("ADMIN_UID")
    if not admin_uid:
        logger.info("ADMIN_UID not set; skipping admin seed")
        return

    db = SessionLocal()
    try:
        user = seed_admin(
            db,
            admin_uid,
            email=os.getenv("ADMIN_EMAIL"),
            name=os.getenv("ADMIN_NAME"),
        )
        logger.info(f"Admin account ready: {user.id}")
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
