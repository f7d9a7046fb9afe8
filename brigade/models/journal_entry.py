"""
Journal entry model.
"""
import uuid
from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlmodel import Field, Index, CheckConstraint

from brigade.core.config import DEFAULT_ENTRIES_TABLE
from .base import BaseModel


class JournalEntry(BaseModel, table=True):
    """
    Dated reflection written by a member.

    More than one entry per calendar day is allowed; ``created_at`` is set
    once at creation and never rewritten by edits.
    """
    __tablename__ = DEFAULT_ENTRIES_TABLE

    user_id: uuid.UUID = Field(
        sa_column=Column(
            ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
            index=True
        )
    )
    content: str = Field(sa_column=Column(Text, nullable=False))
    mood: Optional[int] = Field(default=None, sa_column=Column(Integer, nullable=True))
    prompt_id: Optional[int] = Field(default=None)
    is_private: bool = Field(default=False)

    __table_args__ = (
        Index('idx_journal_entries_user_created', 'user_id', 'created_at'),
        CheckConstraint('mood IS NULL OR (mood >= 1 AND mood <= 5)', name='check_mood_range'),
    )
