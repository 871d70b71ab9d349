from functools import wraps
from typing import Any, Awaitable, Callable, Optional, TypeVar
from uuid import UUID

import asyncpg

from src.common.logger import log_error
from src.infra.database import CONNECTION_ERRORS, DatabaseManager
from src.services.taxi_service.errors import TaxiStoreError, TaxiValidationError
from src.shared.models.taxi_dto import COLUMN_BY_ALIAS, TAXI_COLUMNS, TaxiFilter, TaxiQuery

T = TypeVar("T")

TABLE = "taxis_schema.taxis"
SELECT_COLUMNS = ", ".join(TAXI_COLUMNS)
WRITABLE_COLUMNS = tuple(c for c in TAXI_COLUMNS if c != "id")
FILTER_COLUMNS = ("id_driver", "maker", "model", "year", "color")


def store_operation(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Переводит ошибки драйвера и соединения в TaxiStoreError."""
    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except (asyncpg.PostgresError, *CONNECTION_ERRORS) as e:
            await log_error(f"Ошибка хранилища в {func.__name__}: {e}")
            raise TaxiStoreError(f"Store failure in {func.__name__}: {e}") from e

    return wrapper


class TaxiRepository:
    """Адаптер хранилища записей такси (PostgreSQL)."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    @store_operation
    async def get(self, taxi_id: UUID) -> Optional[dict]:
        """Retrieves a taxi by ID."""
        query = f"SELECT {SELECT_COLUMNS} FROM {TABLE} WHERE id = $1"
        row = await self.db.fetchrow(query, taxi_id)
        return dict(row) if row else None

    @store_operation
    async def find(self, query: TaxiQuery) -> list[dict]:
        """Returns taxis matching the filter, in store order unless sorted."""
        where, args = self._where(query)
        sql = f"SELECT {SELECT_COLUMNS} FROM {TABLE}{where} ORDER BY {self._order_by(query.sort)}"

        if query.limit is not None:
            args.append(query.limit)
            sql += f" LIMIT ${len(args)}"
        if query.offset:
            args.append(query.offset)
            sql += f" OFFSET ${len(args)}"

        rows = await self.db.fetch(sql, *args)
        return [dict(row) for row in rows]

    @store_operation
    async def count(self, flt: Optional[TaxiFilter] = None) -> int:
        """Returns number of taxis matching the filter."""
        where, args = self._where(flt or TaxiFilter())
        return await self.db.fetchval(f"SELECT COUNT(*) FROM {TABLE}{where}", *args)

    @store_operation
    async def insert(self, data: dict[str, Any]) -> dict:
        """Inserts a taxi and returns the stored record."""
        columns, values = self._columns_and_values(data)
        row = await self.db.fetchrow_once(self._insert_sql(columns), *values)
        return dict(row)

    @store_operation
    async def insert_many(self, records: list[dict[str, Any]]) -> list[dict]:
        """Inserts several taxis in one transaction."""
        created = []
        async with self.db.transaction() as conn:
            for data in records:
                columns, values = self._columns_and_values(data)
                row = await conn.fetchrow(self._insert_sql(columns), *values)
                created.append(dict(row))
        return created

    @store_operation
    async def update_by_id(self, taxi_id: UUID, fields: dict[str, Any]) -> Optional[dict]:
        """
        Updates given columns of a taxi in a single statement.
        Returns the updated record or None when the id is unknown.
        """
        unknown = set(fields) - set(WRITABLE_COLUMNS)
        if unknown:
            raise TaxiValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
        if not fields:
            return await self.get(taxi_id)

        columns = list(fields)
        assignments = ", ".join(f"{col} = ${i + 2}" for i, col in enumerate(columns))
        query = f"""
            UPDATE {TABLE}
            SET {assignments}
            WHERE id = $1
            RETURNING {SELECT_COLUMNS}
        """
        row = await self.db.fetchrow_once(query, taxi_id, *(fields[c] for c in columns))
        return dict(row) if row else None

    @store_operation
    async def remove_by_id(self, taxi_id: UUID) -> Optional[dict]:
        """Deletes a taxi and returns the removed record."""
        query = f"DELETE FROM {TABLE} WHERE id = $1 RETURNING {SELECT_COLUMNS}"
        row = await self.db.fetchrow_once(query, taxi_id)
        return dict(row) if row else None

    # --- SQL helpers ---

    @staticmethod
    def _insert_sql(columns: list[str]) -> str:
        if not columns:
            return f"INSERT INTO {TABLE} DEFAULT VALUES RETURNING {SELECT_COLUMNS}"
        placeholders = ", ".join(f"${i + 1}" for i in range(len(columns)))
        return (
            f"INSERT INTO {TABLE} ({', '.join(columns)}) "
            f"VALUES ({placeholders}) RETURNING {SELECT_COLUMNS}"
        )

    @staticmethod
    def _columns_and_values(data: dict[str, Any]) -> tuple[list[str], list[Any]]:
        # None не передаём, чтобы сработали значения по умолчанию в схеме
        columns = [c for c in WRITABLE_COLUMNS if data.get(c) is not None]
        return columns, [data[c] for c in columns]

    @staticmethod
    def _where(flt: TaxiFilter) -> tuple[str, list[Any]]:
        conditions: list[str] = []
        args: list[Any] = []

        for column in FILTER_COLUMNS:
            value = getattr(flt, column)
            if value is not None:
                args.append(value)
                conditions.append(f"{column} = ${len(args)}")

        if flt.has_position is True:
            conditions.append(
                "last_pos_update_date IS NOT NULL AND last_lat IS NOT NULL AND last_lon IS NOT NULL"
            )
        elif flt.has_position is False:
            conditions.append("last_pos_update_date IS NULL")

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        return where, args

    @staticmethod
    def _order_by(sort: Optional[str]) -> str:
        """Пример: -registerDate,maker -> register_date DESC, maker ASC, seq ASC."""
        parts: list[str] = []
        for item in (sort or "").split(","):
            item = item.strip()
            if not item:
                continue
            direction = "DESC" if item.startswith("-") else "ASC"
            name = item.lstrip("-+")
            column = COLUMN_BY_ALIAS.get(name) or (name if name in TAXI_COLUMNS else None)
            if column is None:
                raise TaxiValidationError(f"Unknown sort field: {name}")
            parts.append(f"{column} {direction}")
        parts.append("seq ASC")
        return ", ".join(parts)
