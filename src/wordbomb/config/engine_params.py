"""Runtime engine parameters, changeable between turns via MQTT settings messages."""
import argparse
import json
import re
from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional

from wordbomb.config import game_config

CONTEXT_SELF = "self"
CONTEXT_SPECTATOR = "spectator"


def clamp(value, low: int, high: int, fallback: int) -> int:
    """Clamp a user supplied number into [low, high], using fallback for junk."""
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return fallback
    return max(low, min(high, number))


def normalize_priority_order(order: Optional[Iterable[str]]) -> list[str]:
    """Return a full permutation of the priority keys.

    Unknown keys and duplicates are dropped; keys missing from ``order`` are
    appended in their default position.
    """
    result: list[str] = []
    if not isinstance(order, (list, tuple)):
        order = []
    for key in order:
        key = str(key).strip().lower()
        if key in game_config.PRIORITY_KEYS and key not in result:
            result.append(key)
    for key in game_config.PRIORITY_KEYS:
        if key not in result:
            result.append(key)
    return result


def move_priority(order: Iterable[str], key: str, position: int) -> list[str]:
    """Move one priority key to a (clamped) zero-based position."""
    result = normalize_priority_order(order)
    if key not in result:
        return result
    result.remove(key)
    position = clamp(position, 0, len(result), len(result))
    result.insert(position, key)
    return result


_MAJORITY_RE = re.compile(r"majority(\d{1,2})")
_PAIR_RE = re.compile(r"([a-z])\s*(\d{1,2})")


def parse_goal_spec(spec: Optional[str]) -> list[int]:
    """Parse a coverage goal spec into 26 per-letter targets.

    Supported tokens:
        ``majorityN``  every letter needs N before other overrides
        ``a3 f2``      single letter goals
        ``xz``         bare letters are excluded (goal 0)
    """
    targets = [game_config.DEFAULT_TARGET] * game_config.LETTER_COUNT
    text = re.sub(r"\s+", " ", (spec or "").lower()).strip()
    if not text:
        return targets

    majority = _MAJORITY_RE.search(text)
    if majority:
        base = clamp(majority.group(1), game_config.MIN_TALLY, game_config.MAX_TALLY, 0)
        targets = [base] * game_config.LETTER_COUNT

    text = _MAJORITY_RE.sub(" ", text)
    for letter, value in _PAIR_RE.findall(text):
        targets[ord(letter) - ord('a')] = clamp(value, game_config.MIN_TALLY, game_config.MAX_TALLY, 0)

    bare = _PAIR_RE.sub("", text)
    for letter in bare.replace(" ", ""):
        if letter in game_config.ALPHABET:
            targets[ord(letter) - ord('a')] = 0
    return targets


@dataclass
class ModeSettings:
    """Mode toggles for one context (our own turn, or watching someone else's)."""
    foul: bool = False
    pokemon: bool = False
    minerals: bool = False
    rare: bool = False
    coverage: bool = False
    length: bool = False
    hyphen: bool = False
    contains: bool = False
    target_length: int = game_config.DEFAULT_TARGET_LENGTH
    contains_text: str = ""

    def __post_init__(self) -> None:
        self.set_target_length(self.target_length)
        self.set_contains_text(self.contains_text)

    def set_target_length(self, value) -> None:
        self.target_length = clamp(value, game_config.MIN_TARGET_LENGTH,
                                   game_config.MAX_TARGET_LENGTH,
                                   game_config.DEFAULT_TARGET_LENGTH)

    def set_contains_text(self, text: Optional[str]) -> None:
        self.contains_text = str(text if text is not None else "").strip().lower()

    def special_enabled(self) -> bool:
        return self.foul or self.pokemon or self.minerals or self.rare

    @classmethod
    def from_dict(cls, data: dict) -> 'ModeSettings':
        if not isinstance(data, dict):
            data = {}
        return cls(
            foul=bool(data.get('foul', False)),
            pokemon=bool(data.get('pokemon', False)),
            minerals=bool(data.get('minerals', False)),
            rare=bool(data.get('rare', False)),
            coverage=bool(data.get('coverage', False)),
            length=bool(data.get('length', False)),
            hyphen=bool(data.get('hyphen', False)),
            contains=bool(data.get('contains', False)),
            target_length=data.get('target_length', game_config.DEFAULT_TARGET_LENGTH),
            contains_text=data.get('contains_text', ""),
        )


@dataclass
class EngineParams:
    """Configuration parameters for the suggestion engine.

    These parameters can be changed between turns via MQTT settings messages.
    Numeric values are clamped rather than rejected.
    """
    self_modes: ModeSettings = field(default_factory=ModeSettings)
    spectator_modes: ModeSettings = field(default_factory=ModeSettings)
    suggestions_limit: int = game_config.DEFAULT_SUGGESTIONS
    priority_order: list[str] = field(default_factory=lambda: list(game_config.PRIORITY_KEYS))
    postfix_enabled: bool = False
    postfix_text: str = ""
    goal_spec_enabled: bool = False
    goal_spec: str = ""
    paused: bool = False
    language: str = game_config.DEFAULT_LANGUAGE

    def __post_init__(self) -> None:
        self.set_suggestions_limit(self.suggestions_limit)
        self.priority_order = normalize_priority_order(self.priority_order)
        # Spectators can't tally, so coverage only exists for our own turns
        self.spectator_modes.coverage = False

    def set_suggestions_limit(self, value) -> None:
        self.suggestions_limit = clamp(value, game_config.MIN_SUGGESTIONS,
                                       game_config.MAX_SUGGESTIONS,
                                       game_config.DEFAULT_SUGGESTIONS)

    def set_priority_order(self, order: Iterable[str]) -> None:
        self.priority_order = normalize_priority_order(order)

    def set_priority_position(self, key: str, position: int) -> None:
        self.priority_order = move_priority(self.priority_order, key, position)

    def modes_for(self, context: str) -> ModeSettings:
        if context == CONTEXT_SPECTATOR:
            return self.spectator_modes
        return self.self_modes

    def active_postfix(self) -> str:
        return self.postfix_text if self.postfix_enabled else ""

    def goal_targets(self) -> list[int]:
        """Targets implied by the goal spec (all ones when the spec is disabled)."""
        return parse_goal_spec(self.goal_spec if self.goal_spec_enabled else "")

    @classmethod
    def from_json(cls, json_str: str) -> Optional['EngineParams']:
        """Create EngineParams from JSON string.

        Args:
            json_str: JSON string containing engine parameters

        Returns:
            EngineParams instance, or None if json_str is empty/None

        Raises:
            json.JSONDecodeError: If json_str is invalid JSON
        """
        if not json_str or json_str.strip() == "":
            return None

        data = json.loads(json_str)
        if not isinstance(data, dict):
            return None

        return cls(
            self_modes=ModeSettings.from_dict(data.get('self', {})),
            spectator_modes=ModeSettings.from_dict(data.get('spectator', {})),
            suggestions_limit=data.get('suggestions_limit', game_config.DEFAULT_SUGGESTIONS),
            priority_order=data.get('priority_order', list(game_config.PRIORITY_KEYS)),
            postfix_enabled=bool(data.get('postfix_enabled', False)),
            postfix_text=str(data.get('postfix_text') or ""),
            goal_spec_enabled=bool(data.get('goal_spec_enabled', False)),
            goal_spec=str(data.get('goal_spec') or ""),
            paused=bool(data.get('paused', False)),
            language=str(data.get('language') or game_config.DEFAULT_LANGUAGE),
        )

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'EngineParams':
        """Create EngineParams from argparse Namespace.

        Args:
            args: Parsed command-line arguments

        Returns:
            EngineParams instance with values from args
        """
        self_modes = ModeSettings(
            foul=args.foul,
            coverage=args.coverage,
            length=args.target_length is not None,
            hyphen=args.hyphen,
            contains=bool(args.contains),
            target_length=args.target_length or game_config.DEFAULT_TARGET_LENGTH,
            contains_text=args.contains or "",
        )
        return cls(
            self_modes=self_modes,
            suggestions_limit=args.suggestions,
            priority_order=args.priority.split(",") if args.priority else None,
            postfix_enabled=bool(args.postfix),
            postfix_text=args.postfix or "",
            goal_spec_enabled=bool(args.goals),
            goal_spec=args.goals or "",
            paused=args.paused,
            language=args.language,
        )

    def to_json(self) -> str:
        data = asdict(self)
        data['self'] = data.pop('self_modes')
        data['spectator'] = data.pop('spectator_modes')
        return json.dumps(data)

    def __str__(self) -> str:
        """Return string representation for logging."""
        return (f"EngineParams(limit={self.suggestions_limit}, priority={','.join(self.priority_order)}, "
                f"postfix={self.active_postfix()!r}, goals={self.goal_spec if self.goal_spec_enabled else '-'}, "
                f"paused={self.paused}, language={self.language})")
