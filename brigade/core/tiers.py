"""
Membership tier hierarchy and access checks.

Every gated feature (journal, courses, coaching sessions) compares the
caller's tier against a required tier through ``has_access``.
"""
from typing import Dict, Optional

TIER_HIERARCHY = ("free", "brigade", "fraternity", "guild")
DEFAULT_TIER = "free"

# Tier needed for each named feature; anything missing requires the top tier.
FEATURE_REQUIREMENTS: Dict[str, str] = {
    "journal": "free",
    "courses_basic": "free",
    "courses_advanced": "brigade",
    "live_sessions": "brigade",
    "group_coaching": "brigade",
    "qa_sessions": "fraternity",
    "deep_dives": "fraternity",
    "private_calls": "guild",
    "masterminds": "guild",
    "text_support": "guild",
}


def tier_index(tier: Optional[str]) -> int:
    """Position of ``tier`` in the hierarchy, or -1 when unrecognised."""
    try:
        return TIER_HIERARCHY.index(tier)
    except ValueError:
        return -1


def has_access(user_tier: Optional[str], required_tier: str) -> bool:
    """
    Whether ``user_tier`` meets ``required_tier``.

    A missing user tier counts as ``free``. Unknown tier strings map to -1,
    so an unknown user tier only passes an equally unknown requirement.
    """
    if user_tier is None:
        user_tier = DEFAULT_TIER
    return tier_index(user_tier) >= tier_index(required_tier)


def can_access_feature(user_tier: Optional[str], feature: str) -> bool:
    return has_access(user_tier, FEATURE_REQUIREMENTS.get(feature, TIER_HIERARCHY[-1]))


def can_access_course(user_tier: Optional[str], tier_required: Optional[str]) -> bool:
    return has_access(user_tier, tier_required or DEFAULT_TIER)


def feature_access_map(user_tier: Optional[str]) -> Dict[str, bool]:
    """Access flag for every known feature."""
    return {feature: can_access_feature(user_tier, feature) for feature in FEATURE_REQUIREMENTS}
