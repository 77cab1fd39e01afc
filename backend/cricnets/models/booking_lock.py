from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class BookingLock(SQLModel, table=True):
    """Durable named mutex row. One row per resource key, created lazily and never deleted."""

    __tablename__ = "booking_locks"

    resource_id: str = Field(primary_key=True, max_length=64)
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime(timezone=False))
