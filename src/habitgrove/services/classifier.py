"""Disruption classifier collaborator.

Given a free-text daily note, the classifier reports a detected disruption
type and a short recovery plan, or nothing. It is treated as unreliable:
callers catch ``CollaboratorUnavailable`` and carry on without it.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Optional, Protocol

from ..errors import CollaboratorUnavailable
from ..models.disruption import DETECTABLE_TYPES
from .ai_client import ChatCompletionsClient

CLASSIFIER_PROMPT = (
    "Analyze this daily log note and determine if it indicates a disruption. "
    'Return JSON only: {"disruption_type": "travel"|"stress"|"fatigue"|"illness"|null, '
    '"recovery_plan": "brief suggestion or null"}'
)

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```")


@dataclass(frozen=True, slots=True)
class Classification:
    disruption_type: str
    recovery_plan: Optional[str] = None


class DisruptionClassifier(Protocol):
    def classify(self, text: str) -> Optional[Classification]:
        """Return a classification, None for "no disruption", or raise CollaboratorUnavailable."""
        ...


def parse_classification(content: str) -> Optional[Classification]:
    """Parse the model's JSON reply, tolerating markdown code fences."""

    cleaned = _FENCE_RE.sub("", content or "").strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise CollaboratorUnavailable("Classifier reply was not valid JSON") from exc
    if not isinstance(parsed, dict):
        raise CollaboratorUnavailable("Classifier reply was not a JSON object")

    raw_type = parsed.get("disruption_type")
    if not isinstance(raw_type, str) or raw_type.strip().lower() not in DETECTABLE_TYPES:
        return None
    plan = parsed.get("recovery_plan")
    plan = plan.strip() if isinstance(plan, str) and plan.strip() else None
    return Classification(disruption_type=raw_type.strip().lower(), recovery_plan=plan)


class HttpDisruptionClassifier:
    """Classifier backed by the chat-completions gateway."""

    def __init__(self, client: ChatCompletionsClient):
        self.client = client

    def classify(self, text: str) -> Optional[Classification]:
        content = self.client.complete(
            [
                {"role": "system", "content": CLASSIFIER_PROMPT},
                {"role": "user", "content": text},
            ],
            max_tokens=150,
        )
        return parse_classification(content)


__all__ = [
    "Classification",
    "DisruptionClassifier",
    "HttpDisruptionClassifier",
    "parse_classification",
]
