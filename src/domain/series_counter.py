"""Series Counter Domain Entity

Single source of truth for the next internal sequence number of a series.
"""

from datetime import datetime
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, CheckConstraint, String
from src.domain.base import BaseModel


class SeriesCounter(BaseModel, table=True):
    """
    Series Counter - last sequence number handed out for a series

    Domain Rules:
    - One row per series (series is the primary key)
    - last_value only ever increases, by exactly one per allocation
    - Allocated numbers are never reclaimed, even if unused
    """

    __tablename__ = "series_counters"
    __table_args__ = (
        CheckConstraint('last_value >= 0', name='last_value_non_negative'),
    )

    series: str = Field(
        sa_column=Column(String(10), primary_key=True),
        description="Series code (e.g., 'A')"
    )

    last_value: int = Field(
        default=0,
        sa_column=Column(BigInteger, nullable=False, default=0),
        description="Last allocated sequence number (0 = none yet)"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last allocation timestamp"
    )
