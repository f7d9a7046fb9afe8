"""
Daily reflection prompt selection.
"""
from datetime import date, datetime
from typing import Sequence, Union

from brigade.core.exceptions import PromptListEmptyError
from brigade.schemas.journal import DailyPrompt

DAILY_PROMPTS = (
    "What's one leadership moment from today that you're proud of?",
    "How did you show up for your team today? What could you do better tomorrow?",
    "What's weighing on your mind as a leader right now?",
    "Describe a time today when you felt truly present in your kitchen.",
    "What's one thing you learned about yourself as a leader this week?",
    "How are you taking care of yourself so you can take care of others?",
    "What would your best day as a leader look like?",
    "What's one toxic pattern you're working to change in your kitchen?",
    "How did you handle stress today? What worked? What didn't?",
    "What's one way you showed empathy to a team member recently?",
    "What leadership principle are you trying to embody this month?",
    "How are you creating psychological safety in your kitchen?",
    "What's one difficult conversation you've been avoiding?",
    "How do you want to be remembered as a leader?",
    "What's working well in your leadership right now? What isn't?",
    "When did you last feel truly energized by your work?",
    "What would you tell a younger version of yourself about leadership?",
    "How do you balance being firm and being compassionate?",
    "What's one small change that could make a big difference in your kitchen?",
    "What are you most grateful for in your leadership journey right now?",
)


def day_of_year(on: date) -> int:
    """Whole days since Jan 1 of the same year, counting Jan 1 as day 1."""
    return on.timetuple().tm_yday


def select_prompt(on: Union[date, datetime], prompts: Sequence[str] = DAILY_PROMPTS) -> DailyPrompt:
    """
    Pick the prompt for a calendar day.

    The same date always maps to the same prompt for a given list. The
    rotation restarts every year, and changing the list length reassigns
    prompts to dates that were already shown.
    """
    if not prompts:
        raise PromptListEmptyError("Cannot select a daily prompt from an empty prompt list")
    if isinstance(on, datetime):
        on = on.date()

    doy = day_of_year(on)
    return DailyPrompt(id=doy, text=prompts[doy % len(prompts)], date=on)
