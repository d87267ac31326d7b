import logging
from dataclasses import replace
from typing import Optional

from wordbomb.config import game_config
from wordbomb.config.engine_params import EngineParams, ModeSettings, clamp
from wordbomb.core import ranking
from wordbomb.core.coverage import CoverageTracker
from wordbomb.core.lexicon import THEMED_CATEGORIES, Category, Lexicon, normalize_word
from wordbomb.core.models import (
    FALLBACK_FLAG_FOR_CATEGORY,
    SPECIAL_CATEGORY_PRIORITY,
    Candidate,
    Context,
    GenerationFlags,
    GenerationResult,
    RankingContext,
    length_fit,
)

logger = logging.getLogger(__name__)

_CATEGORY_TOGGLES = {
    Category.PROFANITY: "foul",
    Category.POKEMON: "pokemon",
    Category.MINERALS: "minerals",
    Category.RARE: "rare",
}


def enabled_categories(modes: ModeSettings) -> list[Category]:
    return [category for category in THEMED_CATEGORIES if getattr(modes, _CATEGORY_TOGGLES[category])]


def ranking_context_for(modes: ModeSettings) -> RankingContext:
    return RankingContext(
        contains_text=modes.contains_text if modes.contains else "",
        special_enabled=modes.special_enabled(),
        coverage=modes.coverage,
        hyphen=modes.hyphen,
        length=modes.length,
        target_length=modes.target_length,
    )


class CandidateGenerator:
    """Builds and ranks the candidate pool for one syllable.

    Generation never raises: an empty syllable or lexicon gives an empty
    result, and empty themed categories only raise fallback flags.
    """

    def __init__(self, lexicon: Lexicon, coverage: CoverageTracker, params: EngineParams) -> None:
        self.lexicon = lexicon
        self.coverage = coverage
        self.params = params

    def _collect_sources(self, syllable: str, modes: ModeSettings, flags: GenerationFlags) -> dict[str, set]:
        sources: dict[str, set] = {}
        for category in enabled_categories(modes):
            matches = self.lexicon.matching(category, syllable)
            if not matches:
                setattr(flags, FALLBACK_FLAG_FOR_CATEGORY[category], True)
                logger.debug(f"No {category.value} words contain {syllable!r}, using main list")
            for word in matches:
                sources.setdefault(word, set()).add(category)
        for word in self.lexicon.matching(Category.MAIN, syllable):
            sources.setdefault(word, set()).add(Category.MAIN)
        return sources

    def _build_candidate(self, word: str, sources: set, modes: ModeSettings) -> Candidate:
        special = next((category for category in SPECIAL_CATEGORY_PRIORITY if category in sources), None)
        contains_index = word.find(modes.contains_text) if modes.contains and modes.contains_text else -1
        fit, distance = length_fit(len(word), modes.target_length)
        return Candidate(
            word=word,
            sources=frozenset(sources),
            special=special,
            contains_index=contains_index,
            has_hyphen="-" in word,
            length_fit=fit,
            length_distance=distance,
            coverage_score=self.coverage.score(word),
        )

    def generate(self, context: Context, syllable: str, limit: Optional[int] = None) -> GenerationResult:
        context = Context(context)
        modes = self.params.modes_for(context.value)
        if limit is None:
            limit = self.params.suggestions_limit
        limit = clamp(limit, game_config.MIN_SUGGESTIONS, game_config.MAX_SUGGESTIONS,
                      game_config.DEFAULT_SUGGESTIONS)
        ctx = ranking_context_for(modes)
        if context is Context.SPECTATOR:
            ctx = replace(ctx, coverage=False)
        result = GenerationResult(syllable=normalize_word(syllable), context=context, limit=limit,
                                  ranking_context=ctx, priority_order=tuple(self.params.priority_order))
        if not result.syllable:
            return result

        flags = result.flags
        sources = self._collect_sources(result.syllable, modes, flags)
        candidates = [self._build_candidate(word, found_in, modes)
                      for word, found_in in sources.items()]

        if ctx.contains_text and candidates and not any(c.contains_match for c in candidates):
            flags.contains_fallback = True
        if ctx.hyphen and candidates and not any(c.has_hyphen for c in candidates):
            flags.hyphen_fallback = True

        if ctx.length_is_cap:
            capped = [c for c in candidates if c.length <= modes.target_length]
            if capped:
                flags.len_cap_applied = True
                candidates = capped
            else:
                flags.len_cap_relaxed = True

        result.candidates = ranking.rank(candidates, self.params.priority_order, ctx)
        ranking.apply_length_flags(flags, result.candidates, ctx, limit)
        logger.debug(f"{context.value} {result.syllable!r}: {len(result.candidates)} candidates, "
                     f"top={result.top_words} flags={flags.raised()}")
        return result
