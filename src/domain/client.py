"""Client Domain Entity

Read-only view of the client directory used to fill draft documents.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, BigIntegerId


class Client(BaseModel, table=True):
    """
    Client - directory entry referenced by documents

    The fiscal engine never writes to this table; documents keep a
    snapshot of name, tax id and address taken when the client is set.
    """

    __tablename__ = "clients"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Client identifier"
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Display name (company or person)"
    )

    tax_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(20), nullable=True),
        description="Tax id (NIF)"
    )

    address: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True),
        description="Postal address"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )
