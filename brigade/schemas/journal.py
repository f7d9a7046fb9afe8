"""
Journal schemas.
"""
import uuid
from datetime import date, datetime
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from brigade.core.time_utils import ensure_utc, parse_iso_datetime
from brigade.models.enums import RecordSource

MIN_MOOD = 1
MAX_MOOD = 5


def _clean_content(v: str) -> str:
    stripped = v.strip()
    if not stripped:
        raise ValueError("Entry content must not be empty")
    return stripped


EntryContent = Annotated[str, AfterValidator(_clean_content)]


class JournalEntryRead(BaseModel):
    """
    Canonical entry shape shared by the API, both stores and the analytics.
    """
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    content: str
    mood: Optional[int] = Field(default=None, ge=MIN_MOOD, le=MAX_MOOD)
    prompt_id: Optional[int] = None
    is_private: bool = False
    created_at: datetime

    @field_validator("created_at", mode="before")
    @classmethod
    def normalize_created_at(cls, v):
        if isinstance(v, str):
            return parse_iso_datetime(v)
        if isinstance(v, datetime):
            return ensure_utc(v)
        return v


class JournalEntryCreate(BaseModel):
    """Entry creation schema."""
    content: EntryContent
    mood: Optional[int] = Field(default=None, ge=MIN_MOOD, le=MAX_MOOD)
    is_private: bool = False
    prompt_id: Optional[int] = None


class JournalEntryUpdate(BaseModel):
    """Entry update schema; only fields present in the request are applied."""
    content: Optional[EntryContent] = None
    mood: Optional[int] = Field(default=None, ge=MIN_MOOD, le=MAX_MOOD)
    is_private: Optional[bool] = None


class StreakSummary(BaseModel):
    current: int = 0
    longest: int = 0
    this_month: int = 0


class MoodAnalysis(BaseModel):
    """Mood histogram over entries that carry a mood."""
    counts: Dict[int, int] = Field(default_factory=dict)
    average: Optional[float] = None
    total: int = 0


class DailyPrompt(BaseModel):
    id: int
    text: str
    date: date


class StoreStatus(BaseModel):
    """Which repository tier answered and why, when it was the fallback."""
    source: RecordSource
    degraded: bool = False
    error: Optional[str] = None


class JournalStateResponse(BaseModel):
    entries: List[JournalEntryRead]
    streak: StreakSummary
    mood: Optional[MoodAnalysis] = None
    store: StoreStatus


class JournalEntryMutationResponse(BaseModel):
    entry: JournalEntryRead
    state: JournalStateResponse


class TodayResponse(BaseModel):
    entry: Optional[JournalEntryRead] = None
    prompt: DailyPrompt
    store: StoreStatus


class JournalInsightsResponse(BaseModel):
    insights: List[str]
    streak: StreakSummary
    mood: Optional[MoodAnalysis] = None
    mood_percentages: Dict[int, float] = Field(default_factory=dict)


class TodayWrite(BaseModel):
    """Body for writing today's entry in place."""
    content: EntryContent
    mood: Optional[int] = Field(default=None, ge=MIN_MOOD, le=MAX_MOOD)
    is_private: bool = False


class TodayWriteResponse(JournalEntryMutationResponse):
    created: bool


class JournalRangeResponse(BaseModel):
    entries: List[JournalEntryRead]
    store: StoreStatus
