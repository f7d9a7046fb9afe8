"""
Base table model with id and timestamps.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field

from brigade.core.time_utils import utc_now


class BaseModel(SQLModel):
    """Primary key plus creation/update timestamps shared by all tables."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column_kwargs={"nullable": False},
        sa_type=DateTime(timezone=True),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column_kwargs={"nullable": False, "onupdate": utc_now},
        sa_type=DateTime(timezone=True),
    )
