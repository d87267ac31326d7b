import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Iterable, Optional

from wordbomb.config import game_config
from wordbomb.core.errors import CategoryUnavailable, NoLexiconAvailable
from wordbomb.game.time_provider import SystemTimeProvider, TimeProvider

logger = logging.getLogger(__name__)


class Category(str, Enum):
    MAIN = game_config.CATEGORY_MAIN
    PROFANITY = game_config.CATEGORY_PROFANITY
    POKEMON = game_config.CATEGORY_POKEMON
    MINERALS = game_config.CATEGORY_MINERALS
    RARE = game_config.CATEGORY_RARE


THEMED_CATEGORIES = (Category.PROFANITY, Category.POKEMON, Category.MINERALS, Category.RARE)


def normalize_word(candidate) -> str:
    return ("" if candidate is None else str(candidate)).strip().lower()


def _unique_words(candidates: Iterable) -> list[str]:
    words: list[str] = []
    seen: set[str] = set()
    for candidate in candidates:
        word = normalize_word(candidate)
        if word and word not in seen:
            seen.add(word)
            words.append(word)
    return words


def parse_word_list(text: Optional[str]) -> list[str]:
    """Parse a word list payload into unique lowercase words.

    Accepts a JSON array, a JSON object with a ``words`` array, or plain
    newline separated text. First-seen order is preserved.
    """
    if not text or not text.strip():
        return []
    trimmed = text.strip()
    if trimmed[0] in "[{":
        try:
            parsed = json.loads(trimmed)
            if isinstance(parsed, list):
                items = parsed
            elif isinstance(parsed, dict) and isinstance(parsed.get("words"), list):
                items = parsed["words"]
            else:
                items = []
            words = _unique_words(items)
            if words:
                return words
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse word payload as JSON, falling back to newline list: {e}")
    return _unique_words(text.splitlines())


def compute_letter_weights(words: Iterable[str]) -> list[float]:
    """Relative rarity multiplier per letter a-z, normalised to a mean of 1.0."""
    doc_freq = [0] * game_config.LETTER_COUNT
    total = 0
    for word in words:
        total += 1
        for letter in set(word):
            idx = ord(letter) - ord('a')
            if 0 <= idx < game_config.LETTER_COUNT:
                doc_freq[idx] += 1
    total = total or 1

    raw = [1.0 / max(game_config.MIN_LETTER_FREQUENCY, count / total) for count in doc_freq]
    mean = sum(raw) / game_config.LETTER_COUNT or 1.0
    return [weight / mean for weight in raw]


def normalize_language(name: Optional[str]) -> str:
    """Map a game dictionary name ("English", "pt-BR", ...) to a language code."""
    key = normalize_word(name)
    if not key:
        return game_config.DEFAULT_LANGUAGE
    return game_config.LANGUAGE_ALIASES.get(key, key)


class Lexicon:
    """Word lists for one language, one tuple per category plus letter weights."""

    @classmethod
    def from_words(
        cls,
        words: Iterable[str],
        profanity: Iterable[str] = (),
        pokemon: Iterable[str] = (),
        minerals: Iterable[str] = (),
        rare: Iterable[str] = (),
        language: str = game_config.DEFAULT_LANGUAGE,
    ) -> 'Lexicon':
        """Create a lexicon from word lists without any I/O."""
        return cls(language, {
            Category.MAIN: words,
            Category.PROFANITY: profanity,
            Category.POKEMON: pokemon,
            Category.MINERALS: minerals,
            Category.RARE: rare,
        })

    def __init__(self, language: str, lists: dict, letter_weights: Optional[Iterable[float]] = None,
                 fetched_at_ms: int = 0) -> None:
        self.language = language
        self.fetched_at_ms = fetched_at_ms
        self._lists: dict[Category, tuple[str, ...]] = {
            category: tuple(_unique_words(lists.get(category, ()))) for category in Category
        }
        self._sets = {category: frozenset(words) for category, words in self._lists.items()}
        if letter_weights is None:
            letter_weights = compute_letter_weights(self._lists[Category.MAIN])
        weights = list(letter_weights)[:game_config.LETTER_COUNT]
        weights += [1.0] * (game_config.LETTER_COUNT - len(weights))
        self.letter_weights: tuple[float, ...] = tuple(weights)

    @property
    def main(self) -> tuple[str, ...]:
        return self._lists[Category.MAIN]

    def words(self, category: Category) -> tuple[str, ...]:
        return self._lists[Category(category)]

    def contains(self, category: Category, word: str) -> bool:
        return normalize_word(word) in self._sets[Category(category)]

    def matching(self, category: Category, syllable: str) -> list[str]:
        """Words of ``category`` that contain ``syllable`` (case-insensitive)."""
        syllable = normalize_word(syllable)
        if not syllable:
            return []
        return [word for word in self._lists[Category(category)] if syllable in word]

    def __len__(self) -> int:
        return len(self.main)

    def __repr__(self) -> str:
        sizes = ", ".join(f"{category.value}={len(words)}" for category, words in self._lists.items())
        return f"Lexicon({self.language}: {sizes})"


class LexiconProvider(ABC):
    """Source of raw word list payloads.

    Implementations raise CategoryUnavailable when a list can't be fetched.
    """

    @abstractmethod
    async def fetch_category(self, language: str, category: Category) -> str:
        pass


class DirectoryLexiconProvider(LexiconProvider):
    """Reads ``<root>/<language>/<category>.txt`` files."""

    def __init__(self, root: str = game_config.DATA_DIR, open: Callable = open) -> None:
        self._root = root
        self._open = open

    def _read(self, path: str) -> str:
        with self._open(path, "r", encoding="utf-8") as f:
            return f.read()

    async def fetch_category(self, language: str, category: Category) -> str:
        path = os.path.join(self._root, language, f"{Category(category).value}.txt")
        try:
            return await asyncio.to_thread(self._read, path)
        except (OSError, UnicodeDecodeError) as e:
            raise CategoryUnavailable(language, Category(category).value, str(e)) from e


class LexiconStore:
    """Loads lexicons per language with a time based cache.

    Concurrent loads for one language share a single fetch. When a refresh
    fails the previous (stale) lexicon is served instead.
    """

    def __init__(self, provider: LexiconProvider, time_provider: Optional[TimeProvider] = None,
                 ttl_s: float = game_config.LEXICON_CACHE_TTL_S) -> None:
        self._provider = provider
        self._time = time_provider or SystemTimeProvider()
        self._ttl_ms = int(ttl_s * 1000)
        self._cache: dict[str, Lexicon] = {}
        self._loading: dict[str, asyncio.Task] = {}

    def peek(self, language: str) -> Optional[Lexicon]:
        """Return the cached lexicon (possibly stale) without fetching."""
        return self._cache.get(normalize_language(language))

    def is_fresh(self, lexicon: Lexicon) -> bool:
        return self._time.get_ticks() - lexicon.fetched_at_ms < self._ttl_ms

    def invalidate(self, language: Optional[str] = None) -> None:
        if language is None:
            self._cache.clear()
        else:
            self._cache.pop(normalize_language(language), None)

    async def load(self, language: str) -> Lexicon:
        lang = normalize_language(language)
        cached = self._cache.get(lang)
        if cached is not None and self.is_fresh(cached):
            return cached

        task = self._loading.get(lang)
        if task is None:
            task = asyncio.create_task(self._fetch(lang), name=f"lexicon load {lang}")
            self._loading[lang] = task
            task.add_done_callback(lambda done, lang=lang: self._forget_loading(lang, done))

        try:
            lexicon = await asyncio.shield(task)
        except NoLexiconAvailable as e:
            if cached is not None:
                logger.warning(f"Falling back to cached word data for {lang}: {e}")
                return cached
            raise
        self._cache[lang] = lexicon
        return lexicon

    def _forget_loading(self, lang: str, task: asyncio.Task) -> None:
        if self._loading.get(lang) is task:
            del self._loading[lang]

    async def _fetch_words(self, language: str, category: Category) -> list[str]:
        try:
            text = await self._provider.fetch_category(language, category)
        except CategoryUnavailable as e:
            logger.info(f"{e}; treating it as empty")
            return []
        return parse_word_list(text)

    async def _fetch(self, lang: str) -> Lexicon:
        logger.info(f"Loading word lists for {lang}")
        results = await asyncio.gather(*(self._fetch_words(lang, category) for category in Category))
        lists = dict(zip(Category, results))

        if not lists[Category.MAIN]:
            raise NoLexiconAvailable(lang, "main list is empty")

        if not lists[Category.PROFANITY] and lang != game_config.PROFANITY_FALLBACK_LANGUAGE:
            fallback = await self._fetch_words(game_config.PROFANITY_FALLBACK_LANGUAGE, Category.PROFANITY)
            if fallback:
                logger.info(f"Using {game_config.PROFANITY_FALLBACK_LANGUAGE} profanity list as fallback for {lang}")
                lists[Category.PROFANITY] = fallback

        lexicon = Lexicon(lang, lists, fetched_at_ms=self._time.get_ticks())
        logger.info(f"Loaded {lexicon!r}")
        return lexicon
