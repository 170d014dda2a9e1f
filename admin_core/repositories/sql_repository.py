# File: admin_core/repositories/sql_repository.py

"""
Relational backend on SQLAlchemy's asyncio extension.

Every operation runs in its own short-lived session and commits before
returning. Reads of grouped entities always eager-load the owning language
through ``selectinload`` so the canonical row carries its language summary.
"""

import logging
from abc import abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from admin_core.core.exceptions import ValidationException
from admin_core.repositories.base_repository import (
    BaseRepository,
    Filter,
    T,
    handle_backend_errors,
)
from admin_core.schemas.common import FindOptions

logger = logging.getLogger(__name__)


def row_to_dict(row: Any, renames: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Copy the column values of an ORM row, renaming storage columns to canonical names."""
    renames = renames or {}
    return {
        renames.get(column.key, column.key): getattr(row, column.key)
        for column in row.__table__.columns
    }


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SqlRepository(BaseRepository[T]):
    """
    Base class for relational repositories.

    Attributes:
        model: ORM model class
        field_map: Canonical field name to column attribute name, where they differ
        populate_language: Eager-load the ``language`` relationship on reads
    """

    model: Type[Any] = None
    field_map: Dict[str, str] = {}
    populate_language: bool = False

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @abstractmethod
    def to_entity(self, row: Any) -> T:
        """Map an ORM row to the canonical model."""

    # Translation helpers

    def _column(self, field: str):
        name = self.field_map.get(field, field)
        column = getattr(self.model, name, None)
        if column is None:
            raise ValidationException(
                f"Unknown field '{field}' for {self.entity_type}", field=field, value=None
            )
        return column

    def _conditions(self, filter: Optional[Filter]) -> List[Any]:
        conditions = []
        for field, value in (filter or {}).items():
            column = self._column(field)
            if isinstance(value, (list, tuple, set, frozenset)):
                conditions.append(column.in_(list(value)))
            elif value is None:
                conditions.append(column.is_(None))
            else:
                conditions.append(column == value)
        return conditions

    def _values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        values = {}
        for field, value in data.items():
            name = self.field_map.get(field, field)
            if not hasattr(self.model, name):
                raise ValidationException(
                    f"Unknown field '{field}' for {self.entity_type}", field=field, value=value
                )
            values[name] = value
        return values

    def _select(self):
        stmt = select(self.model)
        if self.populate_language:
            stmt = stmt.options(selectinload(self.model.language))
        return stmt

    def _apply_options(self, stmt, options: Optional[FindOptions]):
        if options is None:
            return stmt
        for field, direction in options.sort.items():
            column = self._column(field)
            stmt = stmt.order_by(column.asc() if direction == 1 else column.desc())
        if options.skip:
            stmt = stmt.offset(options.skip)
        if options.limit:
            stmt = stmt.limit(options.limit)
        return stmt

    def _search_condition(self, term: str, search_fields: Sequence[str]):
        pattern = _like_pattern(term)
        return or_(*[self._column(field).ilike(pattern, escape="\\") for field in search_fields])

    async def _fetch(self, *conditions, options: Optional[FindOptions] = None) -> List[T]:
        stmt = self._apply_options(self._select().where(*conditions), options)
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [self.to_entity(row) for row in result.scalars().all()]

    async def _count(self, *conditions) -> int:
        stmt = select(func.count()).select_from(self.model).where(*conditions)
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    # Contract

    @handle_backend_errors("insert")
    async def insert(self, data: Dict[str, Any]) -> T:
        async with self.session_factory() as session:
            row = self.model(**self._values(data))
            session.add(row)
            await session.commit()
            row_id = row.id
        logger.debug(f"Inserted {self.entity_type} {row_id}")
        entities = await self._fetch(self.model.id == row_id)
        return entities[0]

    @handle_backend_errors("insert batch")
    async def insert_many(self, rows: List[Dict[str, Any]]) -> List[T]:
        async with self.session_factory() as session:
            models = [self.model(**self._values(data)) for data in rows]
            session.add_all(models)
            # One commit: a unique violation rolls back the whole batch
            await session.commit()
            ids = [model.id for model in models]

        by_id = {entity.id: entity for entity in await self._fetch(self.model.id.in_(ids))}
        return [by_id[row_id] for row_id in ids]

    @handle_backend_errors("get")
    async def get_detail(self, filter: Filter) -> Optional[T]:
        entities = await self._fetch(*self._conditions(filter), options=FindOptions(limit=1))
        return entities[0] if entities else None

    @handle_backend_errors("update")
    async def update_by_id(self, id: str, data: Dict[str, Any]) -> Optional[T]:
        stmt = update(self.model).where(self.model.id == id).values(**self._values(data))
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            if result.rowcount == 0:
                return None
        entities = await self._fetch(self.model.id == id)
        return entities[0] if entities else None

    @handle_backend_errors("delete")
    async def delete_by_id(self, id: str) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(delete(self.model).where(self.model.id == id))
            await session.commit()
            return result.rowcount > 0

    @handle_backend_errors("list")
    async def find_many(
        self, filter: Optional[Filter] = None, options: Optional[FindOptions] = None
    ) -> List[T]:
        return await self._fetch(*self._conditions(filter), options=options)

    @handle_backend_errors("count")
    async def count(self, filter: Optional[Filter] = None) -> int:
        return await self._count(*self._conditions(filter))

    @handle_backend_errors("update many")
    async def update_many(self, filter: Filter, data: Dict[str, Any]) -> int:
        stmt = update(self.model).where(*self._conditions(filter)).values(**self._values(data))
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    @handle_backend_errors("delete many")
    async def delete_many(self, filter: Filter) -> int:
        stmt = delete(self.model).where(*self._conditions(filter))
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    @handle_backend_errors("increment")
    async def increment(self, id: str, field: str, amount: int = 1) -> bool:
        column = self._column(field)
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values({column.key: column + amount})
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0

    @handle_backend_errors("search")
    async def _search(
        self,
        term: str,
        search_fields: Sequence[str],
        filter: Optional[Filter],
        options: FindOptions,
    ) -> List[T]:
        conditions = self._conditions(filter) + [self._search_condition(term, search_fields)]
        return await self._fetch(*conditions, options=options)

    @handle_backend_errors("search count")
    async def _search_count(
        self, term: str, search_fields: Sequence[str], filter: Optional[Filter]
    ) -> int:
        conditions = self._conditions(filter) + [self._search_condition(term, search_fields)]
        return await self._count(*conditions)
