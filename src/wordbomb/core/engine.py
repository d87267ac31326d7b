import logging
import random
from typing import Iterable, Optional

from wordbomb.config.engine_params import EngineParams
from wordbomb.core.candidates import CandidateGenerator
from wordbomb.core.coverage import CoverageTracker
from wordbomb.core.errors import PoolExhausted
from wordbomb.core.lexicon import Lexicon
from wordbomb.core.models import Context, GenerationResult
from wordbomb.core.selection import TurnSelector

logger = logging.getLogger(__name__)

_NOTICES = {
    "foul_fallback": "No profanity matched this prompt; falling back to regular suggestions.",
    "pokemon_fallback": "No Pokémon words matched this prompt; falling back to regular suggestions.",
    "minerals_fallback": "No mineral words matched this prompt; showing main list instead.",
    "rare_fallback": "No rare words matched this prompt; showing normal suggestions.",
    "contains_fallback": "Contains filter: no matches found; showing broader results.",
    "hyphen_fallback": "Hyphen mode: no hyphenated words matched this prompt.",
    "len_cap_relaxed": "No words fit under the target length; showing longer words.",
    "len_fallback": "Not enough words of the exact target length; including nearby lengths.",
    "len_suppressed": "Target length ignored because higher-priority lists supplied enough options.",
}


class SuggestionEngine:
    """Entry point tying the lexicon, coverage tally, ranker and turn selector together."""

    def __init__(self, lexicon: Lexicon, params: Optional[EngineParams] = None,
                 coverage: Optional[CoverageTracker] = None,
                 rng: Optional[random.Random] = None) -> None:
        self.params = params or EngineParams()
        self.coverage = coverage or CoverageTracker(targets=self.params.goal_targets())
        self.selector = TurnSelector(rng)
        self.last_results: dict[Context, GenerationResult] = {}
        self.lexicon = lexicon
        self.generator = CandidateGenerator(lexicon, self.coverage, self.params)
        self.coverage.set_weights(lexicon.letter_weights)

    def set_lexicon(self, lexicon: Lexicon) -> None:
        if lexicon is self.lexicon:
            return
        logger.info(f"Switching lexicon to {lexicon!r}")
        self.lexicon = lexicon
        self.generator.lexicon = lexicon
        self.coverage.set_weights(lexicon.letter_weights)

    def set_params(self, params: EngineParams) -> None:
        old_targets = self.params.goal_targets()
        self.params = params
        self.generator.params = params
        if params.goal_targets() != old_targets:
            self.coverage.set_targets(params.goal_targets())
        logger.info(f"Engine params updated: {params}")

    # ------------------------------------------------------------------
    # Suggestions and turn selection
    # ------------------------------------------------------------------

    def suggest(self, context: Context, syllable: str, limit: Optional[int] = None) -> GenerationResult:
        """Generate and rank candidates for ``syllable`` and remember the result."""
        result = self.generator.generate(context, syllable, limit)
        self.last_results[result.context] = result
        return result

    def start_turn(self, syllable: str) -> Optional[str]:
        """Rank a new turn's candidates and return the first word to submit.

        Any state from the previous turn (including its failed words) is dropped.
        Returns None when no word contains the syllable.
        """
        result = self.suggest(Context.SELF, syllable)
        try:
            return self.selector.start_round(result, self.params.active_postfix())
        except PoolExhausted as e:
            logger.info(f"Nothing to play: {e}")
            return None

    def select_replacement_after_failure(self, word: Optional[str] = None) -> str:
        return self.selector.select_replacement_after_failure(word)

    def apply_correct_word(self, word: str) -> bool:
        """Tally a confirmed correct word of ours; True if the coverage cycle restarted."""
        self.selector.mark_accepted(word)
        return self.coverage.apply(word)

    def notices(self, context: Context) -> list[str]:
        """Human readable warnings for the flags raised by the last result."""
        result = self.last_results.get(Context(context))
        if result is None:
            return []
        return [_NOTICES[name] for name in result.flags.raised() if name in _NOTICES]

    # ------------------------------------------------------------------
    # Coverage getters / setters
    # ------------------------------------------------------------------

    @property
    def coverage_counts(self) -> list[int]:
        return list(self.coverage.counts)

    @property
    def coverage_targets(self) -> list[int]:
        return list(self.coverage.targets)

    def set_coverage_count(self, idx: int, value) -> None:
        self.coverage.set_count(idx, value)

    def adjust_coverage_count(self, idx: int, delta: int) -> None:
        self.coverage.adjust_count(idx, delta)

    def set_target_count(self, idx: int, value) -> None:
        self.coverage.set_target(idx, value)

    def adjust_target_count(self, idx: int, delta: int) -> None:
        self.coverage.adjust_target(idx, delta)

    def set_goal_spec(self, spec: str, enabled: bool = True) -> None:
        self.params.goal_spec = spec or ""
        self.params.goal_spec_enabled = enabled
        self.coverage.set_targets(self.params.goal_targets())

    def reset_coverage(self) -> None:
        self.coverage.reset()
        if self.selector.round is not None:
            self.selector.round.failed.clear()

    # ------------------------------------------------------------------
    # Priority order getters / setters
    # ------------------------------------------------------------------

    @property
    def priority_order(self) -> list[str]:
        return list(self.params.priority_order)

    def set_priority_order(self, order: Iterable[str]) -> None:
        self.params.set_priority_order(order)

    def set_priority_position(self, key: str, position: int) -> None:
        self.params.set_priority_position(key, position)
