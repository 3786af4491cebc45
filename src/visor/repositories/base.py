"""Base repository: one ORM table, DB failures surfaced as PersistenceError."""

import logging
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy.engine import Result
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from visor.db.base import Base
from visor.errors.exceptions import PersistenceError

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT", bound=Base)


class BaseRepository(Generic[RowT]):
    model_class: ClassVar[type[Base]]

    def __init__(self, session: AsyncSession):
        self.session = session

    def _failure(self, action: str, exc: SQLAlchemyError) -> PersistenceError:
        table = self.model_class.__tablename__
        logger.error("Could not %s (%s): %s", action, table, exc)
        return PersistenceError(f"Could not {action}", {"table": table})

    async def _execute(self, stmt: Executable, action: str) -> Result:
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise self._failure(action, exc) from exc

    async def _flush(self, action: str) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            raise self._failure(action, exc) from exc

    async def add(self, action: str, **values: Any) -> RowT:
        row = self.model_class(**values)
        self.session.add(row)
        await self._flush(action)
        return row

    async def change(self, row: RowT, action: str, **values: Any) -> RowT:
        for key, value in values.items():
            setattr(row, key, value)
        await self._flush(action)
        return row

    async def drop(self, row: RowT, action: str) -> None:
        await self.session.delete(row)
        await self._flush(action)
