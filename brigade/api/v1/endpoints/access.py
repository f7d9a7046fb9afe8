"""
Membership tier access endpoints.
"""
from typing import Dict

from fastapi import APIRouter, Query

from brigade.api.dependencies import CurrentUser
from brigade.core.tiers import DEFAULT_TIER, feature_access_map, has_access
from brigade.schemas.access import AccessCheckResponse

router = APIRouter(prefix="/access", tags=["access"])


@router.get(
    "/check",
    response_model=AccessCheckResponse,
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Account inactive"},
    }
)
async def check_access(
    current_user: CurrentUser,
    required_tier: str = Query(..., min_length=1),
):
    """Whether the caller's tier meets ``required_tier``. Unknown tiers never grant access."""
    return AccessCheckResponse(
        has_access=has_access(current_user.tier, required_tier),
        user_tier=current_user.tier or DEFAULT_TIER,
        required_tier=required_tier,
    )


@router.get("/features", response_model=Dict[str, bool])
async def list_feature_access(current_user: CurrentUser):
    """Access flag for every gated feature."""
    return feature_access_map(current_user.tier)
