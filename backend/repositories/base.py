"""
Base repository class providing the document-store primitives every
collection repository relies on: point reads, merge-upserts and commits.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    Base repository providing common document operations.

    Type parameter T should be a SQLAlchemy model class.
    """

    def __init__(self, model: type[T], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def get_by_id(self, id: str | int) -> T | None:
        """
        Point-read an entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity if found, None otherwise
        """
        return self.db.get(self.model, id)

    def upsert(self, id: str, fields: dict[str, Any]) -> tuple[T, bool]:
        """
        Merge-upsert: set only the given fields, creating the entity if absent.

        Fields not named in ``fields`` keep their stored values.

        Args:
            id: Entity ID
            fields: Attribute values to write

        Returns:
            Tuple of (entity, created)
        """
        entity = self.get_by_id(id)
        created = entity is None
        if entity is None:
            entity = self.model(id=id)
            self.db.add(entity)
        for name, value in fields.items():
            setattr(entity, name, value)
        return entity, created

    def add(self, entity: T) -> None:
        """
        Add entity to session without committing.

        Args:
            entity: Entity to add
        """
        self.db.add(entity)

    def delete(self, entity: T) -> None:
        """
        Mark entity for deletion without committing.

        Args:
            entity: Entity to delete
        """
        self.db.delete(entity)

    def commit(self) -> None:
        """Commit the current transaction."""
        self.db.commit()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        self.db.rollback()

    def refresh(self, entity: T) -> None:
        """
        Refresh entity from database.

        Args:
            entity: Entity to refresh
        """
        self.db.refresh(entity)
