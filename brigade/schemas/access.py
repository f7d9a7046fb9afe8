"""
Access check schemas.
"""
from pydantic import BaseModel


class AccessCheckResponse(BaseModel):
    has_access: bool
    user_tier: str
    required_tier: str
