"""
User model.
"""
from sqlalchemy import Column, String, text
from sqlmodel import Field

from .base import BaseModel
from .enums import MembershipTier


class User(BaseModel, table=True):
    """
    Member account mirrored from the auth provider.

    ``tier`` is kept as a plain string: values outside the known hierarchy
    are tolerated and simply fail every access check.
    """
    __tablename__ = "user"

    email: str = Field(sa_column=Column(String(255), unique=True, nullable=False))
    name: str = Field(default="", max_length=100)
    tier: str = Field(
        default=MembershipTier.FREE.value,
        sa_column=Column(String(32), nullable=False, server_default=text("'free'")),
    )
    is_active: bool = Field(default=True)
