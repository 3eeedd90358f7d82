"""Habit-stacking suggestions from the AI gateway, with a fixed fallback."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Protocol

from ..errors import CollaboratorUnavailable
from ..logging_config import get_logger
from ..models.habit import Habit
from .ai_client import ChatCompletionsClient

logger = get_logger("suggestions")


@dataclass(frozen=True, slots=True)
class Suggestion:
    suggestion: str
    tips: tuple[str, ...]


FALLBACK_TIPS: tuple[str, ...] = (
    "Stack your new habit after an existing one (e.g., 'After I brush my teeth, I will meditate for 2 minutes')",
    "Start incredibly small - 2 minutes is better than zero",
    "During disruptions, keep only your keystone habits active",
    "Environment design: Make good habits obvious and easy",
    "Track progress visually to stay motivated",
)

FALLBACK_SUGGESTION = Suggestion(suggestion="Focus on consistency over intensity.", tips=FALLBACK_TIPS)

# Used when the model answered but produced no usable tip lines.
DEFAULT_REPLY_TIPS: tuple[str, ...] = (
    "Stack habits together for better adherence",
    "Keep your keystone habits during disruptions",
    "Start incredibly small - 2 minutes is better than zero",
)

COACH_PROMPT = """You are a habit-building coach specializing in resilient habit stacking and behavior design.
You help people build sustainable habits that survive life's disruptions (travel, stress, illness, busy periods).

Key principles you follow:
- Keystone habits are anchors that should be maintained even during disruptions
- Baseline habits support keystones but can be paused during challenging times
- Habit stacking (linking habits together) increases success rates
- Starting small and being consistent beats being ambitious and inconsistent
- Environment design is crucial for habit success

Provide practical, actionable advice. Be encouraging but realistic."""

_BULLET_RE = re.compile(r"^(?:[-*•]\s*|\d+\.\s*)")


class SuggestionClient(Protocol):
    def suggest(self, habit_summary: str, disruption_mode: bool, habit_count: int) -> Suggestion:
        ...


def summarize_habits(habits: Iterable[Habit]) -> str:
    """Render habits as ``"Name (category), ..."`` for the prompt."""

    return ", ".join(f"{h.name} ({h.category})" for h in habits)


def build_prompt(habit_summary: str, disruption_mode: bool, habit_count: int) -> str:
    habits_text = habit_summary or "No habits yet"
    if disruption_mode:
        return (
            "I'm currently in disruption mode (dealing with travel, stress, or life changes).\n"
            f"My habits are: {habits_text}.\n"
            f"I have {habit_count} habits total.\n"
            "How should I adjust my routine to maintain my essential habits while being kind "
            "to myself during this challenging period?"
        )
    return (
        f"My current habits are: {habits_text}.\n"
        f"I have {habit_count} habits total.\n"
        "Suggest resilient stacking strategies that will help these habits survive future "
        "disruptions like travel or stress.\n"
        "Also suggest what order to do them and how to link them together."
    )


def parse_suggestion_text(content: str) -> Suggestion:
    """First non-empty line is the suggestion; up to five following lines become tips."""

    lines = [line.strip() for line in (content or "").splitlines() if line.strip()]
    suggestion = lines[0] if lines else "Focus on consistency over intensity."
    tips = tuple(
        tip for tip in (_BULLET_RE.sub("", line).strip() for line in lines[1:6]) if len(tip) > 10
    )
    return Suggestion(suggestion=suggestion, tips=tips or DEFAULT_REPLY_TIPS)


class HttpSuggestionClient:
    """Suggestion collaborator backed by the chat-completions gateway."""

    def __init__(self, client: ChatCompletionsClient):
        self.client = client

    def suggest(self, habit_summary: str, disruption_mode: bool, habit_count: int) -> Suggestion:
        content = self.client.complete(
            [
                {"role": "system", "content": COACH_PROMPT},
                {"role": "user", "content": build_prompt(habit_summary, disruption_mode, habit_count)},
            ],
            max_tokens=500,
        )
        return parse_suggestion_text(content)


def fetch_suggestions(
    client: SuggestionClient | None, habits: list[Habit], disruption_mode: bool
) -> Suggestion:
    """Ask the collaborator for advice; any failure yields FALLBACK_SUGGESTION."""

    if client is None:
        return FALLBACK_SUGGESTION
    try:
        return client.suggest(summarize_habits(habits), disruption_mode, len(habits))
    except CollaboratorUnavailable as exc:
        logger.warning("Suggestion service unavailable, using fallback tips", extra={"error": str(exc)})
        return FALLBACK_SUGGESTION


__all__ = [
    "DEFAULT_REPLY_TIPS",
    "FALLBACK_SUGGESTION",
    "FALLBACK_TIPS",
    "HttpSuggestionClient",
    "Suggestion",
    "SuggestionClient",
    "build_prompt",
    "fetch_suggestions",
    "parse_suggestion_text",
    "summarize_habits",
]
