"""
Document store adapter.

A small key-addressed document store on top of SQLAlchemy's asyncio engine.
Services talk to collections by name and get plain dicts back, so the
backing database can be swapped without touching them.
"""
import logging
import operator
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, inspect, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.errors import ConflictError, InternalError
from app.db.base import Base
from app.db.models import Document, Share
from app.db.session import build_sessionmaker

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "documents": Document,
    "shares": Share,
}

Filter = Tuple[str, str, Any]

_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _as_utc(value):
    # SQLite hands back naive datetimes; everything is stored as UTC
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DocumentStore:
    """Async CRUD over named collections."""

    def __init__(self, engine: AsyncEngine, collections: Dict[str, type] = None):
        self.engine = engine
        self.collections = collections or COLLECTIONS
        self._sessionmaker = build_sessionmaker(engine)

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Store ping failed: {e}")
            return False

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _model(self, collection: str):
        try:
            return self.collections[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}")

    @staticmethod
    def _key_column(model):
        return inspect(model).primary_key[0]

    @staticmethod
    def _column(model, field: str):
        columns = inspect(model).columns
        if field not in columns:
            raise ValueError(f"Unknown field '{field}' for {model.__tablename__}")
        return columns[field]

    def _where(self, model, filters: Iterable[Filter]) -> list:
        clauses = []
        for field, op, value in filters:
            if op not in _OPERATORS:
                raise ValueError(f"Unsupported filter operator: {op}")
            clauses.append(_OPERATORS[op](self._column(model, field), value))
        return clauses

    @staticmethod
    def _to_dict(row) -> Dict[str, Any]:
        return {
            column.key: _as_utc(getattr(row, column.key))
            for column in inspect(row).mapper.column_attrs
        }

    def _fail(self, operation: str, collection: str, key: Optional[str], error: Exception):
        logger.error(
            f"Store {operation} failed: collection={collection}, key={key}, error={error}",
            exc_info=True,
        )
        return InternalError("Database operation failed")

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        model = self._model(collection)
        try:
            async with self._sessionmaker() as session:
                row = await session.get(model, key)
                return self._to_dict(row) if row is not None else None
        except SQLAlchemyError as e:
            raise self._fail("get", collection, key, e) from e

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        model = self._model(collection)
        stmt = select(model).where(*self._where(model, filters))
        if order_by:
            column = self._column(model, order_by)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            async with self._sessionmaker() as session:
                result = await session.execute(stmt)
                return [self._to_dict(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._fail("query", collection, None, e) from e

    async def count(self, collection: str, filters: Sequence[Filter] = ()) -> int:
        model = self._model(collection)
        key_column = self._key_column(model)
        stmt = select(func.count(key_column)).where(*self._where(model, filters))
        try:
            async with self._sessionmaker() as session:
                result = await session.execute(stmt)
                return int(result.scalar_one())
        except SQLAlchemyError as e:
            raise self._fail("count", collection, None, e) from e

    async def create(self, collection: str, values: Dict[str, Any], key: Optional[str] = None) -> Dict[str, Any]:
        model = self._model(collection)
        data = dict(values)
        if key is not None:
            data[self._key_column(model).key] = key
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    row = model(**data)
                    session.add(row)
                await session.refresh(row)
                return self._to_dict(row)
        except SQLAlchemyError as e:
            raise self._fail("create", collection, key, e) from e

    async def update(
        self,
        collection: str,
        key: str,
        values: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Apply ``values`` to the record at ``key``.

        Returns the updated record, or None when the key does not exist.
        When ``expected`` is given every listed field must currently hold the
        given value, otherwise ConflictError is raised and nothing is written.
        """
        model = self._model(collection)
        for field in values:
            self._column(model, field)
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    row = await session.get(model, key, with_for_update=True)
                    if row is None:
                        return None
                    for field, value in (expected or {}).items():
                        if getattr(row, field) != value:
                            raise ConflictError(f"{collection}/{key}: '{field}' changed")
                    for field, value in values.items():
                        setattr(row, field, value)
                return self._to_dict(row)
        except SQLAlchemyError as e:
            raise self._fail("update", collection, key, e) from e

    async def delete(self, collection: str, key: str) -> bool:
        model = self._model(collection)
        stmt = delete(model).where(self._key_column(model) == key)
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise self._fail("delete", collection, key, e) from e

    async def delete_where(self, collection: str, filters: Sequence[Filter]) -> int:
        model = self._model(collection)
        stmt = delete(model).where(*self._where(model, filters))
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                return result.rowcount
        except SQLAlchemyError as e:
            raise self._fail("delete_where", collection, None, e) from e
