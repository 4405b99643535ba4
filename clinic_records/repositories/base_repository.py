"""
Base repository providing the shared SQLAlchemy plumbing.

Concrete repositories only map between ORM rows and domain entities; commit,
rollback, error classification and the creation-ordered page query live
here so every entity behaves the same way.
"""

import logging
from typing import Any, Generic, List, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_records.core.exceptions import (
    ClinicRecordsError,
    DuplicateError,
    NotFoundError,
    StorageError,
)

logger = logging.getLogger(__name__)

M = TypeVar("M")


def is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig).lower()
    return "unique" in text or "duplicate key" in text


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    return "foreign key" in str(exc.orig).lower()


class BaseRepository(Generic[M]):
    """
    Generic base repository for one ORM model.

    Args:
        db_session: SQLAlchemy async session
        model: SQLAlchemy model class
    """

    entity_name = "Record"

    def __init__(self, db_session: AsyncSession, model: Type[M]):
        self.db = db_session
        self.model = model

    def _integrity_error(self, operation: str, exc: IntegrityError) -> ClinicRecordsError:
        """Map a constraint violation onto the domain error taxonomy."""
        if is_unique_violation(exc):
            return DuplicateError(
                self.entity_name,
                f"{self.entity_name} with the same identity already exists: {exc.orig}",
            )
        if is_foreign_key_violation(exc):
            return NotFoundError(
                self.entity_name,
                message=f"{self.entity_name} references a record that does not exist",
            )
        return StorageError(operation, str(exc.orig))

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                f"Integrity error during {operation}",
                extra={"context": {"entity": self.entity_name, "error": str(e.orig)}},
            )
            raise self._integrity_error(operation, e) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Error during {operation}",
                extra={"context": {"entity": self.entity_name, "error": str(e)}},
                exc_info=True,
            )
            raise StorageError(operation, str(e)) from e

    async def _add(self, obj: M, operation: str = "create") -> M:
        """Insert one ORM object and return it refreshed from the database."""
        self.db.add(obj)
        await self._commit(operation)
        try:
            await self.db.refresh(obj)
        except SQLAlchemyError as e:
            raise StorageError(operation, str(e)) from e
        return obj

    async def _execute(self, statement: Any, operation: str):
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Error during {operation}",
                extra={"context": {"entity": self.entity_name, "error": str(e)}},
                exc_info=True,
            )
            raise StorageError(operation, str(e)) from e

    async def _get_model(self, entity_id: UUID) -> M:
        result = await self._execute(
            select(self.model).where(self.model.id == entity_id), "get_by_id"
        )
        obj = result.scalars().first()
        if obj is None:
            raise NotFoundError(self.entity_name, entity_id)
        return obj

    async def _list_models(self, limit: int, offset: int) -> List[M]:
        """One page of rows ordered by creation time ascending."""
        statement = (
            select(self.model)
            .order_by(self.model.created_at.asc(), self.model.id.asc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._execute(statement, "list")
        return list(result.scalars().all())
