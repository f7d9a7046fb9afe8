"""
Enum definitions.
"""
from enum import Enum


class MembershipTier(str, Enum):
    """Membership levels, lowest to highest."""
    FREE = "free"
    BRIGADE = "brigade"
    FRATERNITY = "fraternity"
    GUILD = "guild"


class RecordSource(str, Enum):
    """Which tier of the journal repository served a result."""
    REMOTE = "remote"
    LOCAL = "local"
