"""
Journal service: entry mutations plus the derived streak and mood state.
"""
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from brigade.core.exceptions import EntryNotFoundError, ValidationError
from brigade.core.logging_config import log_debug, log_info
from brigade.core.time_utils import calendar_date, utc_now, utc_today
from brigade.schemas.journal import (
    MAX_MOOD,
    MIN_MOOD,
    DailyPrompt,
    JournalEntryRead,
    JournalInsightsResponse,
    JournalStateResponse,
    MoodAnalysis,
    StoreStatus,
    StreakSummary,
)
from brigade.services.analytics_service import (
    analyze_mood,
    compute_streak,
    journal_insights,
    mood_percentages,
)
from brigade.services.entry_store import EDITABLE_FIELDS, JournalRepository, StoreResult
from brigade.services.prompt_service import DAILY_PROMPTS, select_prompt


@dataclass
class JournalState:
    """Entries plus everything derived from them, recomputed after each change."""
    entries: List[JournalEntryRead]
    streak: StreakSummary
    mood: Optional[MoodAnalysis]
    store: StoreStatus

    def to_response(self) -> JournalStateResponse:
        return JournalStateResponse(
            entries=self.entries, streak=self.streak, mood=self.mood, store=self.store
        )


def _find_entry(entries: Sequence[JournalEntryRead], entry_id: uuid.UUID) -> Optional[JournalEntryRead]:
    return next((entry for entry in entries if entry.id == entry_id), None)


def _validate_mood(mood: Optional[int]) -> None:
    if mood is not None and not MIN_MOOD <= mood <= MAX_MOOD:
        raise ValidationError(f"Mood must be between {MIN_MOOD} and {MAX_MOOD}")


def _clean_content(content: Optional[str]) -> str:
    stripped = (content or "").strip()
    if not stripped:
        raise ValidationError("Entry content must not be empty")
    return stripped


class JournalService:
    """Service class for journal operations."""

    def __init__(self, repository: JournalRepository, prompts: Sequence[str] = DAILY_PROMPTS):
        self.repository = repository
        self.prompts = prompts

    def _build_state(self, result: StoreResult, entries: List[JournalEntryRead], as_of: Optional[date]) -> JournalState:
        reference = as_of or utc_today()
        # Streaks are reported as of the reference date; later entries do not count.
        written_by = [entry for entry in entries if calendar_date(entry.created_at) <= reference]
        return JournalState(
            entries=entries,
            streak=compute_streak(written_by, reference),
            mood=analyze_mood(entries),
            store=result.status(),
        )

    def _state_after(self, user_id: uuid.UUID, mutation: StoreResult, as_of: Optional[date]) -> JournalState:
        # Once a write has fallen back, stay on the mirror instead of retrying the remote.
        if mutation.degraded:
            return self._build_state(mutation, self.repository.cached_entries(user_id), as_of)
        listing = self.repository.list_entries(user_id)
        return self._build_state(listing, listing.value, as_of)

    def load(self, user_id: uuid.UUID, as_of: Optional[date] = None) -> JournalState:
        """Load all entries and derive streak and mood state."""
        listing = self.repository.list_entries(user_id)
        return self._build_state(listing, listing.value, as_of)

    def save_entry(
        self,
        user_id: uuid.UUID,
        content: str,
        mood: Optional[int] = None,
        is_private: bool = False,
        prompt_id: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> Tuple[JournalEntryRead, JournalState]:
        """
        Create a new entry stamped with the current time.

        When ``prompt_id`` is omitted the entry records the prompt shown on
        the day it was written.
        """
        content = _clean_content(content)
        _validate_mood(mood)

        created_at = utc_now()
        if prompt_id is None:
            prompt_id = select_prompt(created_at, self.prompts).id

        entry = JournalEntryRead(
            id=uuid.uuid4(),
            user_id=user_id,
            content=content,
            mood=mood,
            prompt_id=prompt_id,
            is_private=is_private,
            created_at=created_at,
        )
        result = self.repository.insert_entry(entry)
        log_info(
            f"Journal entry created for user {user_id}: {entry.id}",
            source=result.source.value
        )
        return result.value, self._state_after(user_id, result, as_of)

    def update_entry(
        self,
        user_id: uuid.UUID,
        entry_id: uuid.UUID,
        patch: Dict[str, Any],
        as_of: Optional[date] = None,
    ) -> Tuple[JournalEntryRead, JournalState]:
        """
        Apply a partial edit to one of the user's entries.

        Raises:
            EntryNotFoundError: the user has no entry with that id
            ValidationError: the edited content is blank or the mood is out of range
        """
        changes = {field: value for field, value in patch.items() if field in EDITABLE_FIELDS}
        if "content" in changes:
            changes["content"] = _clean_content(changes["content"])
        if "mood" in changes:
            _validate_mood(changes["mood"])
        if "is_private" in changes and changes["is_private"] is None:
            del changes["is_private"]

        listing = self.repository.list_entries(user_id)
        current = _find_entry(listing.value, entry_id)
        if current is None:
            raise EntryNotFoundError("Entry not found")
        if not changes:
            return current, self._build_state(listing, listing.value, as_of)

        result = self.repository.update_entry(user_id, entry_id, changes)
        state = self._state_after(user_id, result, as_of)
        updated = _find_entry(state.entries, entry_id) or current.model_copy(update=changes)
        log_info(f"Journal entry updated for user {user_id}: {entry_id}", source=result.source.value)
        return updated, state

    def delete_entry(self, user_id: uuid.UUID, entry_id: uuid.UUID, as_of: Optional[date] = None) -> JournalState:
        """
        Delete an entry. Deleting an id the user does not own is a no-op.

        While the remote store is unreachable the mirror may not hold every
        entry, so the delete is queued regardless and ownership is checked
        when it replays.
        """
        listing = self.repository.list_entries(user_id)
        if not listing.degraded and _find_entry(listing.value, entry_id) is None:
            log_debug(f"Delete skipped, entry {entry_id} not found for user {user_id}")
            return self._build_state(listing, listing.value, as_of)

        result = self.repository.delete_entry(user_id, entry_id)
        log_info(f"Journal entry deleted for user {user_id}: {entry_id}", source=result.source.value)
        return self._state_after(user_id, result, as_of)

    def entries_between(self, user_id: uuid.UUID, start: date, end: date) -> Tuple[List[JournalEntryRead], StoreStatus]:
        """Entries whose UTC calendar date falls within ``start``..``end`` inclusive."""
        if start > end:
            raise ValidationError("Start date must not be after end date")
        listing = self.repository.list_entries(user_id)
        entries = [
            entry for entry in listing.value
            if start <= calendar_date(entry.created_at) <= end
        ]
        return entries, listing.status()

    def todays_entry(self, user_id: uuid.UUID, as_of: Optional[date] = None) -> Tuple[Optional[JournalEntryRead], StoreStatus]:
        """The most recent entry written on ``as_of`` (default today), if any."""
        today = as_of or utc_today()
        listing = self.repository.list_entries(user_id)
        entry = next(
            (entry for entry in listing.value if calendar_date(entry.created_at) == today),
            None,
        )
        return entry, listing.status()

    def write_today(
        self,
        user_id: uuid.UUID,
        content: str,
        mood: Optional[int] = None,
        is_private: bool = False,
        as_of: Optional[date] = None,
    ) -> Tuple[JournalEntryRead, JournalState, bool]:
        """
        Create today's entry, or overwrite it when one already exists.

        Returns the entry, the refreshed state and whether a new entry was created.

        Raises:
            ValidationError: ``as_of`` names a day other than today
        """
        if as_of is not None and as_of != utc_today():
            raise ValidationError("Only today's entry can be written")
        existing, _ = self.todays_entry(user_id, as_of)
        if existing is None:
            entry, state = self.save_entry(user_id, content, mood=mood, is_private=is_private, as_of=as_of)
            return entry, state, True

        entry, state = self.update_entry(
            user_id,
            existing.id,
            {"content": content, "mood": mood, "is_private": is_private},
            as_of=as_of,
        )
        return entry, state, False

    def todays_prompt(self, as_of: Optional[date] = None) -> DailyPrompt:
        return select_prompt(as_of or utc_today(), self.prompts)

    def insights(self, user_id: uuid.UUID, as_of: Optional[date] = None) -> JournalInsightsResponse:
        state = self.load(user_id, as_of)
        return JournalInsightsResponse(
            insights=journal_insights(state.mood, state.streak),
            streak=state.streak,
            mood=state.mood,
            mood_percentages=mood_percentages(state.mood),
        )
