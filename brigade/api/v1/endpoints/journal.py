"""
Journal endpoints.
"""
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Query, status

from brigade.api.dependencies import JournalServiceDep, JournalUser
from brigade.core.logging_config import log_user_action
from brigade.schemas.journal import (
    DailyPrompt,
    JournalEntryCreate,
    JournalEntryMutationResponse,
    JournalEntryUpdate,
    JournalInsightsResponse,
    JournalRangeResponse,
    JournalStateResponse,
    MoodAnalysis,
    StreakSummary,
    TodayResponse,
    TodayWrite,
    TodayWriteResponse,
)

router = APIRouter(prefix="/journal", tags=["journal"])

AS_OF_DESCRIPTION = (
    "Reference date for streaks and 'today'; entries dated after it do not count "
    "towards streaks. Defaults to the current UTC date"
)

JOURNAL_RESPONSES = {
    401: {"description": "Not authenticated"},
    403: {"description": "Account inactive or membership tier too low"},
}


@router.get("/entries", response_model=JournalStateResponse, responses=JOURNAL_RESPONSES)
async def list_entries(
    current_user: JournalUser,
    journal_service: JournalServiceDep,
    as_of: Optional[date] = Query(None, description=AS_OF_DESCRIPTION),
):
    """
    All of the caller's entries, newest first, with streak and mood state.

    ``store.degraded`` is true when the remote store failed and the entries
    come from the local cache.
    """
    return journal_service.load(current_user.id, as_of).to_response()


@router.post(
    "/entries",
    response_model=JournalEntryMutationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**JOURNAL_RESPONSES, 422: {"description": "Blank content or mood out of range"}},
)
async def create_entry(
    entry_data: JournalEntryCreate,
    current_user: JournalUser,
    journal_service: JournalServiceDep,
    as_of: Optional[date] = Query(None, description=AS_OF_DESCRIPTION),
):
    entry, state = journal_service.save_entry(
        current_user.id,
        entry_data.content,
        mood=entry_data.mood,
        is_private=entry_data.is_private,
        prompt_id=entry_data.prompt_id,
        as_of=as_of,
    )
    log_user_action(str(current_user.id), "created journal entry", entry_id=str(entry.id))
    return JournalEntryMutationResponse(entry=entry, state=state.to_response())


@router.get("/entries/range", response_model=JournalRangeResponse, responses=JOURNAL_RESPONSES)
async def list_entries_in_range(
    current_user: JournalUser,
    journal_service: JournalServiceDep,
    start: date = Query(...),
    end: date = Query(...),
):
    """Entries written between ``start`` and ``end``, both inclusive."""
    entries, store = journal_service.entries_between(current_user.id, start, end)
    return JournalRangeResponse(entries=entries, store=store)


@router.patch(
    "/entries/{entry_id}",
    response_model=JournalEntryMutationResponse,
    responses={**JOURNAL_RESPONSES, 404: {"description": "Entry not found"}},
)
async def update_entry(
    entry_id: uuid.UUID,
    entry_data: JournalEntryUpdate,
    current_user: JournalUser,
    journal_service: JournalServiceDep,
    as_of: Optional[date] = Query(None, description=AS_OF_DESCRIPTION),
):
    """Edit content, mood or privacy. ``created_at`` never changes."""
    entry, state = journal_service.update_entry(
        current_user.id, entry_id, entry_data.model_dump(exclude_unset=True), as_of=as_of
    )
    log_user_action(str(current_user.id), "updated journal entry", entry_id=str(entry_id))
    return JournalEntryMutationResponse(entry=entry, state=state.to_response())


@router.delete("/entries/{entry_id}", response_model=JournalStateResponse, responses=JOURNAL_RESPONSES)
async def delete_entry(
    entry_id: uuid.UUID,
    current_user: JournalUser,
    journal_service: JournalServiceDep,
    as_of: Optional[date] = Query(None, description=AS_OF_DESCRIPTION),
):
    """Delete an entry. Deleting an unknown id succeeds and changes nothing."""
    state = journal_service.delete_entry(current_user.id, entry_id, as_of=as_of)
    log_user_action(str(current_user.id), "deleted journal entry", entry_id=str(entry_id))
    return state.to_response()


@router.get("/today", response_model=TodayResponse, responses=JOURNAL_RESPONSES)
async def get_today(
    current_user: JournalUser,
    journal_service: JournalServiceDep,
    as_of: Optional[date] = Query(None, description=AS_OF_DESCRIPTION),
):
    """Today's entry, if one was written, and today's prompt."""
    entry, store = journal_service.todays_entry(current_user.id, as_of)
    return TodayResponse(entry=entry, prompt=journal_service.todays_prompt(as_of), store=store)


@router.put(
    "/today",
    response_model=TodayWriteResponse,
    responses={**JOURNAL_RESPONSES, 422: {"description": "Blank content, mood out of range or as_of not today"}},
)
async def write_today(
    entry_data: TodayWrite,
    current_user: JournalUser,
    journal_service: JournalServiceDep,
    as_of: Optional[date] = Query(None, description=AS_OF_DESCRIPTION),
):
    """Edit today's entry in place, or create it when there is none yet. Past days cannot be written."""
    entry, state, created = journal_service.write_today(
        current_user.id,
        entry_data.content,
        mood=entry_data.mood,
        is_private=entry_data.is_private,
        as_of=as_of,
    )
    return TodayWriteResponse(entry=entry, state=state.to_response(), created=created)


@router.get("/streak", response_model=StreakSummary, responses=JOURNAL_RESPONSES)
async def get_streak(
    current_user: JournalUser,
    journal_service: JournalServiceDep,
    as_of: Optional[date] = Query(None, description=AS_OF_DESCRIPTION),
):
    return journal_service.load(current_user.id, as_of).streak


@router.get("/mood", response_model=Optional[MoodAnalysis], responses=JOURNAL_RESPONSES)
async def get_mood(current_user: JournalUser, journal_service: JournalServiceDep):
    """Mood histogram and average; null when the caller has no entries."""
    return journal_service.load(current_user.id).mood


@router.get("/insights", response_model=JournalInsightsResponse, responses=JOURNAL_RESPONSES)
async def get_insights(
    current_user: JournalUser,
    journal_service: JournalServiceDep,
    as_of: Optional[date] = Query(None, description=AS_OF_DESCRIPTION),
):
    return journal_service.insights(current_user.id, as_of)


@router.get("/prompt", response_model=DailyPrompt, responses=JOURNAL_RESPONSES)
async def get_prompt(
    current_user: JournalUser,
    journal_service: JournalServiceDep,
    on: Optional[date] = Query(None, description="Calendar date; defaults to the current UTC date"),
):
    """The reflection prompt for a day."""
    return journal_service.todays_prompt(on)
