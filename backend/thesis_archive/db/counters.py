"""Atomic per-day counter increments."""

from typing import Any, Type

from sqlalchemy import inspect
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_insert(db: AsyncSession, model: Type[Any]):
    """INSERT construct with ON CONFLICT support for the session's backend."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)


async def increment_daily_counter(db: AsyncSession, model: Type[Any], **key: Any) -> int:
    """Add one to the counter row identified by ``key``, creating it at 1.

    ``key`` maps attribute names to values and must cover exactly the
    columns of the model's unique constraint. The increment is a single
    ``INSERT ... ON CONFLICT DO UPDATE ... RETURNING`` statement, so
    concurrent visits to the same row all count.

    Returns:
        The counter value after the increment (not yet committed)
    """
    columns = inspect(model).columns
    count_column = columns["visit_count"]
    values = {columns[name]: value for name, value in key.items()}
    values[count_column] = 1

    stmt = (
        dialect_insert(db, model)
        .values(values)
        .on_conflict_do_update(
            index_elements=[columns[name] for name in key],
            set_={count_column: count_column + 1},
        )
        .returning(count_column)
    )
    result = await db.execute(stmt)
    return int(result.scalar_one())
