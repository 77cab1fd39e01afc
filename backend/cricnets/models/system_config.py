from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class SystemConfig(SQLModel, table=True):
    __tablename__ = "system_configs"

    config_key: str = Field(primary_key=True, max_length=64)
    config_value: str
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_type=DateTime(timezone=False),
        sa_column_kwargs={"onupdate": datetime.utcnow},
    )
