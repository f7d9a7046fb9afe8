"""
Streak and mood analytics derived from a member's journal entries.

Everything here is recomputed from the full entry list on demand; nothing
is cached or updated incrementally.
"""
import math
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from brigade.core.time_utils import calendar_date
from brigade.schemas.journal import JournalEntryRead, MoodAnalysis, StreakSummary

MOOD_LABELS: Dict[int, str] = {
    1: "Struggling",
    2: "Challenging",
    3: "Good",
    4: "Strong",
    5: "Excellent",
}

STRONG_MOOD_THRESHOLD = 4
LOW_MOOD_THRESHOLD = 3
CONSISTENCY_STREAK_DAYS = 7


def _round_half_up(value: float, digits: int = 1) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def compute_streak(entries: Sequence[JournalEntryRead], as_of: date) -> StreakSummary:
    """
    Compute current streak, longest streak and this month's entry count.

    Streaks count distinct calendar days; ``this_month`` counts entries, so
    two entries on one day add one day to a streak but two to the month.

    The current streak is anchored on ``as_of`` when there is an entry that
    day, otherwise on the day before; if the newest entry is older than
    that, the current streak is 0.
    """
    if not entries:
        return StreakSummary()

    entry_dates = [calendar_date(entry.created_at) for entry in entries]

    this_month = sum(
        1 for d in entry_dates
        if d.year == as_of.year and d.month == as_of.month
    )

    unique_dates: List[date] = sorted(set(entry_dates), reverse=True)

    yesterday = as_of - timedelta(days=1)
    if unique_dates[0] == as_of:
        anchor: Optional[date] = as_of
    elif unique_dates[0] == yesterday:
        anchor = yesterday
    else:
        anchor = None

    current = 0
    if anchor is not None:
        for i, day in enumerate(unique_dates):
            if day != anchor - timedelta(days=i):
                break
            current += 1

    longest = 1
    run = 1
    for previous, day in zip(unique_dates, unique_dates[1:]):
        if (previous - day).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)

    return StreakSummary(current=current, longest=longest, this_month=this_month)


def analyze_mood(entries: Sequence[JournalEntryRead]) -> Optional[MoodAnalysis]:
    """
    Mood histogram and average over entries that carry a mood.

    Returns None for an empty entry list. When entries exist but none has a
    mood, ``total`` is 0 and ``average`` is None.
    """
    if not entries:
        return None

    moods = [entry.mood for entry in entries if entry.mood is not None]
    counts: Dict[int, int] = {}
    for mood in moods:
        counts[mood] = counts.get(mood, 0) + 1

    average = _round_half_up(sum(moods) / len(moods)) if moods else None
    return MoodAnalysis(counts=counts, average=average, total=len(moods))


def mood_percentages(analysis: Optional[MoodAnalysis]) -> Dict[int, float]:
    """Share of each mood value (1-5) among mood-rated entries, in percent."""
    if analysis is None or analysis.total == 0:
        return {mood: 0.0 for mood in MOOD_LABELS}
    return {
        mood: round(analysis.counts.get(mood, 0) / analysis.total * 100, 1)
        for mood in MOOD_LABELS
    }


def journal_insights(analysis: Optional[MoodAnalysis], streak: StreakSummary) -> List[str]:
    """Short encouragement lines shown next to the mood patterns."""
    insights = []
    if analysis is not None and analysis.average is not None:
        if analysis.average >= STRONG_MOOD_THRESHOLD:
            insights.append("You're maintaining strong emotional leadership!")
        if analysis.average < LOW_MOOD_THRESHOLD:
            insights.append("Consider focusing on self-care and stress management.")
    if streak.current >= CONSISTENCY_STREAK_DAYS:
        insights.append("Your consistency is building powerful self-awareness!")
    insights.append("Keep reflecting to strengthen your leadership mindset.")
    return insights
