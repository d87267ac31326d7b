"""Type-safe event definitions for turn handling.

Incoming events (turn starts and word outcomes) arrive as JSON over MQTT and
are decoded by ``parse_turn_start`` and ``parse_word_outcome``; outgoing events
notify listeners (HUD, settings store) about new suggestions and coverage
changes.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class EventType(str, Enum):
    """Event type identifiers, also used as EventEngine listener names."""

    # Game client events
    TURN_START = "turn.start"
    WORD_OUTCOME = "turn.outcome"

    # Engine notifications
    SUGGESTIONS_UPDATED = "engine.suggestions_updated"
    COVERAGE_CHANGED = "engine.coverage_changed"
    WORD_SUBMITTED = "engine.word_submitted"


@dataclass
class TurnEvent:
    """Base class for all turn events."""
    event_type: EventType


# ============================================================================
# GAME CLIENT EVENTS
# ============================================================================

@dataclass
class TurnStartEvent(TurnEvent):
    """A new turn began with a fresh syllable (ours or someone else's)."""
    syllable: str
    my_turn: bool
    language: Optional[str]

    def __init__(self, syllable: str, my_turn: bool, language: Optional[str] = None):
        super().__init__(EventType.TURN_START)
        self.syllable = syllable
        self.my_turn = my_turn
        self.language = language


@dataclass
class WordOutcomeEvent(TurnEvent):
    """The game accepted or rejected a submitted word."""
    word: str
    accepted: bool
    my_turn: bool
    reason: str

    def __init__(self, word: str, accepted: bool, my_turn: bool, reason: str = ""):
        super().__init__(EventType.WORD_OUTCOME)
        self.word = word
        self.accepted = accepted
        self.my_turn = my_turn
        self.reason = reason


# ============================================================================
# ENGINE NOTIFICATIONS
# ============================================================================

@dataclass
class SuggestionsUpdatedEvent(TurnEvent):
    """New ranked suggestions for a context, with display tones and warnings."""
    context: str
    syllable: str
    entries: list[Any]  # list[tuple[word, tone]]
    notices: list[str]

    def __init__(self, context: str, syllable: str, entries: list[Any], notices: list[str]):
        super().__init__(EventType.SUGGESTIONS_UPDATED)
        self.context = context
        self.syllable = syllable
        self.entries = entries
        self.notices = notices


@dataclass
class CoverageChangedEvent(TurnEvent):
    """Coverage tallies or goals changed and should be persisted/redrawn."""
    counts: list[int]
    targets: list[int]

    def __init__(self, counts: list[int], targets: list[int]):
        super().__init__(EventType.COVERAGE_CHANGED)
        self.counts = counts
        self.targets = targets


@dataclass
class WordSubmittedEvent(TurnEvent):
    """A word was handed to the submission sink."""
    word: str
    round_id: int
    now_ms: int

    def __init__(self, word: str, round_id: int, now_ms: int):
        super().__init__(EventType.WORD_SUBMITTED)
        self.word = word
        self.round_id = round_id
        self.now_ms = now_ms


def _load_payload(payload) -> dict:
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode()
    if not payload or not str(payload).strip():
        raise ValueError("empty payload")
    data = json.loads(payload)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def parse_turn_start(payload) -> TurnStartEvent:
    """Decode ``{"syllable": ..., "myTurn": ..., "language": ...}``.

    Raises:
        ValueError: If the payload is not a JSON object (json errors included)
    """
    data = _load_payload(payload)
    return TurnStartEvent(
        syllable=str(data.get("syllable") or ""),
        my_turn=bool(data.get("myTurn", data.get("my_turn", False))),
        language=data.get("language"),
    )


def parse_word_outcome(payload) -> WordOutcomeEvent:
    """Decode ``{"word": ..., "accepted": ..., "myTurn": ..., "reason": ...}``.

    Raises:
        ValueError: If the payload is not a JSON object or lacks ``accepted``
    """
    data = _load_payload(payload)
    if "accepted" not in data:
        raise ValueError("outcome payload lacks 'accepted'")
    return WordOutcomeEvent(
        word=str(data.get("word") or ""),
        accepted=bool(data["accepted"]),
        my_turn=bool(data.get("myTurn", data.get("my_turn", False))),
        reason=str(data.get("reason") or ""),
    )
