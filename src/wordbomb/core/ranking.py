"""Multi-criteria ranking of candidate words.

The user orders five criteria; comparing two candidates walks that order and
the first criterion with a preference decides. Each comparator is a pure
function of the two candidates and the turn's RankingContext. A criterion
whose mode is off always reports a tie.
"""
import logging
from enum import Enum
from functools import cmp_to_key
from typing import Callable, Iterable, Sequence

from wordbomb.config import game_config
from wordbomb.core.models import (
    Candidate,
    GenerationFlags,
    LengthFit,
    RankingContext,
    SPECIAL_CATEGORY_TONE,
    TONE_CONTAINS,
    TONE_DEFAULT,
    TONE_HYPHEN,
    TONE_LENGTH_EXACT,
    TONE_LENGTH_FLEX,
)

logger = logging.getLogger(__name__)


class Criterion(str, Enum):
    CONTAINS = "contains"
    FOUL = "foul"  # all special categories, not just profanity
    COVERAGE = "coverage"
    HYPHEN = "hyphen"
    LENGTH = "length"


DEFAULT_PRIORITY_ORDER = tuple(Criterion(key) for key in game_config.PRIORITY_KEYS)

Comparator = Callable[[Candidate, Candidate, RankingContext], int]


def _sign(value) -> int:
    return (value > 0) - (value < 0)


def compare_contains(a: Candidate, b: Candidate, ctx: RankingContext) -> int:
    if not ctx.contains_text:
        return 0
    if a.contains_match != b.contains_match:
        return -1 if a.contains_match else 1
    if a.contains_match:
        return _sign(a.contains_index - b.contains_index)
    return 0


def compare_special(a: Candidate, b: Candidate, ctx: RankingContext) -> int:
    if not ctx.special_enabled:
        return 0
    return _sign(b.special_rank - a.special_rank)


def compare_coverage(a: Candidate, b: Candidate, ctx: RankingContext) -> int:
    if not ctx.coverage:
        return 0
    by_score = _sign(b.coverage_score - a.coverage_score)
    return by_score or _sign(a.length - b.length)


def compare_hyphen(a: Candidate, b: Candidate, ctx: RankingContext) -> int:
    if not ctx.hyphen:
        return 0
    return _sign(int(b.has_hyphen) - int(a.has_hyphen))


def compare_length(a: Candidate, b: Candidate, ctx: RankingContext) -> int:
    if not ctx.length:
        return 0
    if ctx.length_is_cap:
        return _sign(a.length - b.length)
    by_fit = _sign(int(b.length_fit) - int(a.length_fit))
    return by_fit or _sign(a.length_distance - b.length_distance)


COMPARATORS: dict[Criterion, Comparator] = {
    Criterion.CONTAINS: compare_contains,
    Criterion.FOUL: compare_special,
    Criterion.COVERAGE: compare_coverage,
    Criterion.HYPHEN: compare_hyphen,
    Criterion.LENGTH: compare_length,
}


def as_criteria(order: Iterable) -> tuple[Criterion, ...]:
    """Convert a normalised list of priority keys into Criterion values."""
    return tuple(Criterion(key) for key in order)


def compare_tie_break(a: Candidate, b: Candidate) -> int:
    """Final ordering once every criterion ties: score, then shorter, then alphabetical."""
    return (_sign(b.coverage_score - a.coverage_score)
            or _sign(a.length - b.length)
            or _sign((a.word > b.word) - (a.word < b.word)))


def compare_by_priority(a: Candidate, b: Candidate, order: Sequence[Criterion], ctx: RankingContext) -> int:
    for criterion in order:
        result = COMPARATORS[criterion](a, b, ctx)
        if result:
            return result
    return 0


def compare(a: Candidate, b: Candidate, order: Sequence[Criterion], ctx: RankingContext) -> int:
    return compare_by_priority(a, b, order, ctx) or compare_tie_break(a, b)


def tone_for(candidate: Candidate, order: Sequence[Criterion], ctx: RankingContext) -> str:
    """Display tone: the first criterion in priority order that applies to the word."""
    for criterion in order:
        if criterion is Criterion.CONTAINS:
            if ctx.contains_text and candidate.contains_match:
                return TONE_CONTAINS
        elif criterion is Criterion.FOUL:
            if ctx.special_enabled and candidate.special is not None:
                return SPECIAL_CATEGORY_TONE[candidate.special]
        elif criterion is Criterion.HYPHEN:
            if ctx.hyphen and candidate.has_hyphen:
                return TONE_HYPHEN
        elif criterion is Criterion.LENGTH:
            if not ctx.length:
                continue
            if candidate.length_fit is LengthFit.EXACT:
                return TONE_LENGTH_EXACT
            if ctx.length_is_cap or candidate.length_fit is LengthFit.NEAR:
                return TONE_LENGTH_FLEX
    return TONE_DEFAULT


def rank(candidates: Iterable[Candidate], order: Sequence, ctx: RankingContext) -> list[Candidate]:
    """Sort candidates best first and stamp each with its rank and tone.

    The order is total and deterministic: two distinct words never tie.
    """
    criteria = as_criteria(order)
    ranked = sorted(candidates, key=cmp_to_key(lambda a, b: compare(a, b, criteria, ctx)))
    for position, candidate in enumerate(ranked):
        candidate.rank = position
        candidate.tone = tone_for(candidate, criteria, ctx)
    return ranked


def eliminate(pool: Iterable[Candidate], order: Sequence, ctx: RankingContext) -> list[Candidate]:
    """Narrow ``pool`` to its best group under each criterion in turn.

    Unlike ``rank`` no tie-break chain is applied, so the result may hold
    several functionally equal words.
    """
    remaining = list(pool)
    for criterion in as_criteria(order):
        if len(remaining) <= 1:
            break
        comparator = COMPARATORS[criterion]
        best = min(remaining, key=cmp_to_key(lambda a, b: comparator(a, b, ctx)))
        remaining = [candidate for candidate in remaining if comparator(candidate, best, ctx) == 0]
    return remaining


def apply_length_flags(flags: GenerationFlags, ranked: Sequence[Candidate], ctx: RankingContext, limit: int) -> None:
    """Set ``len_fallback`` and ``len_suppressed`` for a ranked pool."""
    if not ctx.length:
        return
    if not ctx.coverage and ranked:
        exact = sum(1 for c in ranked if c.length_fit is LengthFit.EXACT)
        near = sum(1 for c in ranked if c.length_fit is LengthFit.NEAR)
        flags.len_fallback = exact == 0 or (exact < limit and near > 0)
    if ctx.special_enabled:
        special = sum(1 for c in ranked if c.special is not None)
        flags.len_suppressed = special >= limit
    if flags.len_fallback or flags.len_suppressed:
        logger.debug(f"Length flags for target {ctx.target_length}: "
                     f"fallback={flags.len_fallback} suppressed={flags.len_suppressed}")
