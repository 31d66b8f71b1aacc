"""SQLAlchemy implementation of SeriesCounterRepository

Allocates sequence numbers with a single atomic UPDATE ... RETURNING on
the series row. The row stays write-locked until the surrounding
transaction ends, so concurrent allocators for the same series are
serialised by the database.
"""

from datetime import datetime
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.series_counter_repository import SeriesCounterRepository
from src.domain.series_counter import SeriesCounter


class SqlAlchemySeriesCounterRepository(SeriesCounterRepository):
    """
    SQLAlchemy implementation of SeriesCounterRepository

    Features:
    - Atomic increment (UPDATE ... RETURNING), no read-modify-write
    - First use of a series creates its row inside a savepoint
    - Works with PostgreSQL and SQLite >= 3.35
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def next_sequence(self, series: str) -> int:
        allocated = await self._increment(series)
        if allocated is not None:
            return allocated

        try:
            async with self.session.begin_nested():
                self.session.add(SeriesCounter(series=series, last_value=1))
            return 1
        except IntegrityError:
            # Another writer created the series row first
            allocated = await self._increment(series)
            if allocated is None:
                raise
            return allocated

    async def current_value(self, series: str) -> int:
        statement = select(SeriesCounter.last_value).where(SeriesCounter.series == series)
        result = await self.session.execute(statement)
        value = result.scalar_one_or_none()
        return value or 0

    async def _increment(self, series: str):
        statement = (
            update(SeriesCounter)
            .where(SeriesCounter.series == series)
            .values(
                last_value=SeriesCounter.last_value + 1,
                updated_at=datetime.utcnow(),
            )
            .returning(SeriesCounter.last_value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()
