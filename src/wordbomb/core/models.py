"""Value types shared by the candidate generator, the ranker and the turn selector."""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional

from wordbomb.config import game_config
from wordbomb.core.lexicon import Category


class Context(str, Enum):
    SELF = "self"
    SPECTATOR = "spectator"


class LengthFit(int, Enum):
    """How well a word fits the target length; larger is better."""
    NONE = 0
    NEAR = 1
    EXACT = 2


# Highest priority first; only the best matching category is recorded per word.
SPECIAL_CATEGORY_PRIORITY = (
    Category.PROFANITY,
    Category.POKEMON,
    Category.MINERALS,
    Category.RARE,
)

SPECIAL_CATEGORY_RANK = {
    category: len(SPECIAL_CATEGORY_PRIORITY) - position
    for position, category in enumerate(SPECIAL_CATEGORY_PRIORITY)
}

# Display tone for words picked because of their special category
SPECIAL_CATEGORY_TONE = {
    Category.PROFANITY: "foul",
    Category.POKEMON: "pokemon",
    Category.MINERALS: "minerals",
    Category.RARE: "rare",
}

TONE_DEFAULT = "default"
TONE_CONTAINS = "contains"
TONE_HYPHEN = "hyphen"
TONE_LENGTH_EXACT = "lengthExact"
TONE_LENGTH_FLEX = "lengthFlex"


def length_fit(word_length: int, target: int) -> tuple[LengthFit, int]:
    """Length-fit category and absolute distance from ``target``."""
    distance = abs(word_length - target)
    if distance == 0:
        return LengthFit.EXACT, 0
    if distance <= game_config.NEAR_LENGTH_WINDOW:
        return LengthFit.NEAR, distance
    return LengthFit.NONE, distance


@dataclass
class Candidate:
    """A matching word plus the per-criterion facts computed once per turn."""
    word: str
    sources: frozenset = frozenset()
    special: Optional[Category] = None
    contains_index: int = -1
    has_hyphen: bool = False
    length_fit: LengthFit = LengthFit.NONE
    length_distance: int = 0
    coverage_score: float = 0.0
    rank: int = -1
    tone: str = TONE_DEFAULT

    @property
    def length(self) -> int:
        return len(self.word)

    @property
    def special_rank(self) -> int:
        return SPECIAL_CATEGORY_RANK.get(self.special, 0) if self.special else 0

    @property
    def contains_match(self) -> bool:
        return self.contains_index >= 0


@dataclass(frozen=True)
class RankingContext:
    """Snapshot of the modes that drive the comparators for one turn."""
    contains_text: str = ""
    special_enabled: bool = False
    coverage: bool = False
    hyphen: bool = False
    length: bool = False
    target_length: int = game_config.DEFAULT_TARGET_LENGTH

    @property
    def length_is_cap(self) -> bool:
        """With coverage on, the target length acts as a maximum instead of a goal."""
        return self.length and self.coverage


@dataclass
class GenerationFlags:
    """UI warnings raised while generating one turn's suggestions."""
    foul_fallback: bool = False
    pokemon_fallback: bool = False
    minerals_fallback: bool = False
    rare_fallback: bool = False
    contains_fallback: bool = False
    hyphen_fallback: bool = False
    len_cap_applied: bool = False
    len_cap_relaxed: bool = False
    len_fallback: bool = False
    len_suppressed: bool = False

    def raised(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name)]


FALLBACK_FLAG_FOR_CATEGORY = {
    Category.PROFANITY: "foul_fallback",
    Category.POKEMON: "pokemon_fallback",
    Category.MINERALS: "minerals_fallback",
    Category.RARE: "rare_fallback",
}


@dataclass
class GenerationResult:
    syllable: str
    context: Context
    limit: int
    candidates: list[Candidate] = field(default_factory=list)
    flags: GenerationFlags = field(default_factory=GenerationFlags)
    ranking_context: RankingContext = field(default_factory=RankingContext)
    priority_order: tuple = tuple(game_config.PRIORITY_KEYS)

    @property
    def ordered_words(self) -> list[str]:
        return [candidate.word for candidate in self.candidates]

    @property
    def top_words(self) -> list[str]:
        return self.ordered_words[:self.limit]

    @property
    def display_entries(self) -> list[tuple[str, str]]:
        return [(candidate.word, candidate.tone) for candidate in self.candidates[:self.limit]]

    @property
    def candidate_details(self) -> dict[str, Candidate]:
        return {candidate.word: candidate for candidate in self.candidates}

    def __bool__(self) -> bool:
        return bool(self.candidates)
