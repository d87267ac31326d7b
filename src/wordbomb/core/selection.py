"""Per-turn word selection: offer the best word, then replacements after rejections."""
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from wordbomb.core import ranking
from wordbomb.core.errors import PoolExhausted
from wordbomb.core.lexicon import normalize_word
from wordbomb.core.models import Candidate, GenerationResult, RankingContext

logger = logging.getLogger(__name__)


class SelectionState(str, Enum):
    IDLE = "idle"
    AWAITING_SUBMISSION = "awaiting_submission"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXHAUSTED = "exhausted"


@dataclass
class RoundState:
    """Everything the selector knows about the current turn.

    Replaced wholesale when a new syllable arrives.
    """
    round_id: int
    syllable: str
    pool: list[Candidate]
    ranking_context: RankingContext
    priority_order: tuple
    postfix: str = ""
    failed: set[str] = field(default_factory=set)
    current: Optional[str] = None

    def eligible(self) -> list[Candidate]:
        return [candidate for candidate in self.pool if candidate.word not in self.failed]


class TurnSelector:
    """State machine: idle -> awaiting submission -> accepted / rejected.

    ``rng`` only breaks ties between functionally equal replacements; pass a
    seeded ``random.Random`` for reproducible selection.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()
        self.state = SelectionState.IDLE
        self.round: Optional[RoundState] = None
        self._round_counter = 0

    @property
    def failed(self) -> frozenset:
        return frozenset(self.round.failed) if self.round else frozenset()

    @property
    def current_word(self) -> Optional[str]:
        return self.round.current if self.round else None

    def reset(self) -> None:
        self.round = None
        self.state = SelectionState.IDLE

    def start_round(self, result: GenerationResult, postfix: str = "") -> str:
        """Begin a new turn from a freshly ranked result and return the top word.

        Raises:
            PoolExhausted: If the result holds no candidates
        """
        self._round_counter += 1
        self.round = RoundState(
            round_id=self._round_counter,
            syllable=result.syllable,
            pool=list(result.candidates),
            ranking_context=result.ranking_context,
            priority_order=tuple(result.priority_order),
            postfix=(postfix or "").strip().lower(),
        )
        if not self.round.pool:
            self.state = SelectionState.EXHAUSTED
            raise PoolExhausted(result.syllable, 0)
        return self._offer(self.round.pool[0])

    def _offer(self, candidate: Candidate) -> str:
        self.round.current = candidate.word
        self.state = SelectionState.AWAITING_SUBMISSION
        return candidate.word

    def mark_accepted(self, word: Optional[str] = None) -> None:
        if self.round is None:
            return
        self.state = SelectionState.ACCEPTED
        logger.debug(f"Round {self.round.round_id}: {word or self.round.current!r} accepted")

    def _blacklist(self, word: Optional[str]) -> None:
        postfix = self.round.postfix
        for failed_word in {normalize_word(word), normalize_word(self.round.current)}:
            if not failed_word:
                continue
            self.round.failed.add(failed_word)
            if postfix and failed_word.endswith(postfix) and len(failed_word) > len(postfix):
                self.round.failed.add(failed_word[:-len(postfix)])

    def select_replacement_after_failure(self, word: Optional[str] = None) -> str:
        """Blacklist a rejected word and pick the best word still eligible.

        The replacement is found by the same criteria elimination used for
        ranking, restricted to untried words; any tie left is broken at random.

        Raises:
            PoolExhausted: If no untried candidate remains this round
        """
        if self.round is None:
            raise PoolExhausted("", 0)
        self.state = SelectionState.REJECTED
        self._blacklist(word)

        eligible = self.round.eligible()
        if not eligible:
            self.state = SelectionState.EXHAUSTED
            raise PoolExhausted(self.round.syllable, len(self.round.failed))

        tied = ranking.eliminate(eligible, self.round.priority_order, self.round.ranking_context)
        choice = tied[0] if len(tied) == 1 else self.rng.choice(tied)
        logger.info(f"Round {self.round.round_id}: {word!r} rejected, trying {choice.word!r} "
                    f"({len(eligible)} left, {len(tied)} tied)")
        return self._offer(choice)
