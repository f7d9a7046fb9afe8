# Import all models for easy access
from .base import BaseModel
from .enums import MembershipTier, RecordSource
from .journal_entry import JournalEntry
from .user import User

__all__ = [
    "BaseModel",
    "MembershipTier",
    "RecordSource",
    "JournalEntry",
    "User",
]
