"""Alphabet coverage tally: 26 per-letter counts working toward 26 goals.

Counts never exceed their goal. Once every letter with a positive goal is
complete, the counts reset to zero and a new cycle starts (goals stay).
"""
import logging
from collections import Counter
from typing import Callable, Iterable, Optional

from wordbomb.config import game_config

logger = logging.getLogger(__name__)


def letter_index(letter: str) -> int:
    """Index 0-25 for a-z, -1 for anything else."""
    idx = ord(letter) - ord('a') if len(letter) == 1 else -1
    return idx if 0 <= idx < game_config.LETTER_COUNT else -1


def letter_occurrences(word: str) -> Counter:
    """Occurrences of each a-z letter in ``word`` keyed by letter index."""
    counts: Counter = Counter()
    for letter in (word or "").lower():
        idx = letter_index(letter)
        if idx >= 0:
            counts[idx] += 1
    return counts


def coverage_score(word: str, counts: list[int], targets: list[int], weights: Iterable[float]) -> float:
    """How much ``word`` advances the coverage goal.

    Each still-needed letter contributes min(occurrences, need) * weight, and
    one extra weight when that contribution finishes the letter. Letters with
    a zero goal are ignored.
    """
    weights = list(weights)
    score = 0.0
    for idx, occurrences in letter_occurrences(word).items():
        target = targets[idx]
        if target <= 0 or counts[idx] >= target:
            continue
        need = target - counts[idx]
        contribution = min(occurrences, need)
        score += contribution * weights[idx]
        if contribution == need:
            score += weights[idx]
    return score


def _clamp_tally(value) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return game_config.MIN_TALLY
    return max(game_config.MIN_TALLY, min(game_config.MAX_TALLY, number))


class CoverageTracker:
    """Coverage counts and goals.

    ``on_change`` is called with the tracker after every mutation so the
    settings store can persist and redisplay the tallies.
    """

    def __init__(self, targets: Optional[Iterable[int]] = None,
                 weights: Optional[Iterable[float]] = None,
                 on_change: Optional[Callable[['CoverageTracker'], None]] = None) -> None:
        self.counts: list[int] = [0] * game_config.LETTER_COUNT
        self.targets: list[int] = [game_config.DEFAULT_TARGET] * game_config.LETTER_COUNT
        self.weights: list[float] = [1.0] * game_config.LETTER_COUNT
        self.on_change = on_change
        if targets is not None:
            self._assign_targets(targets)
        if weights is not None:
            self.set_weights(weights)

    def _changed(self) -> None:
        if self.on_change:
            self.on_change(self)

    def _assign_targets(self, targets: Iterable[int]) -> None:
        values = [_clamp_tally(t) for t in list(targets)[:game_config.LETTER_COUNT]]
        values += [game_config.DEFAULT_TARGET] * (game_config.LETTER_COUNT - len(values))
        self.targets = values
        self.counts = [min(count, target) for count, target in zip(self.counts, self.targets)]

    def score(self, word: str) -> float:
        return coverage_score(word, self.counts, self.targets, self.weights)

    def is_complete(self) -> bool:
        """True when every letter with a positive goal has reached it."""
        positive = [idx for idx, target in enumerate(self.targets) if target > 0]
        return bool(positive) and all(self.counts[idx] >= self.targets[idx] for idx in positive)

    def missing_letters(self) -> dict[str, int]:
        """Remaining need per letter, only for letters that still need some."""
        return {
            game_config.ALPHABET[idx]: target - count
            for idx, (count, target) in enumerate(zip(self.counts, self.targets))
            if target > count
        }

    def apply(self, word: str) -> bool:
        """Tally a confirmed correct word.

        Returns:
            True when the word completed the goal and a new cycle started
        """
        for idx, occurrences in letter_occurrences(word).items():
            if self.targets[idx] > 0:
                self.counts[idx] = min(self.targets[idx], self.counts[idx] + occurrences)

        new_cycle = self.is_complete()
        if new_cycle:
            logger.info("Coverage goal complete, starting a new cycle")
            self.counts = [0] * game_config.LETTER_COUNT
        self._changed()
        return new_cycle

    def reset(self) -> None:
        self.counts = [0] * game_config.LETTER_COUNT
        self._changed()

    def set_count(self, idx: int, value) -> None:
        self.counts[idx] = min(_clamp_tally(value), self.targets[idx])
        self._changed()

    def adjust_count(self, idx: int, delta: int) -> None:
        self.set_count(idx, self.counts[idx] + delta)

    def set_target(self, idx: int, value) -> None:
        self.targets[idx] = _clamp_tally(value)
        self.counts[idx] = min(self.counts[idx], self.targets[idx])
        self._changed()

    def adjust_target(self, idx: int, delta: int) -> None:
        self.set_target(idx, self.targets[idx] + delta)

    def set_targets(self, targets: Iterable[int]) -> None:
        self._assign_targets(targets)
        self._changed()

    def set_weights(self, weights: Iterable[float]) -> None:
        values = [float(w) for w in list(weights)[:game_config.LETTER_COUNT]]
        values += [1.0] * (game_config.LETTER_COUNT - len(values))
        self.weights = values

    def snapshot(self) -> dict:
        return {"counts": list(self.counts), "targets": list(self.targets)}

    def __str__(self) -> str:
        return " ".join(f"{letter}{count}/{target}"
                        for letter, count, target in zip(game_config.ALPHABET, self.counts, self.targets)
                        if target > 0)
