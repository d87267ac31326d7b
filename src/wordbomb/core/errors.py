"""Exceptions raised by the suggestion engine.

An empty syllable is deliberately not an error: generation simply returns an
empty result for it.
"""


class WordBombError(Exception):
    """Base class for all engine errors."""


class NoLexiconAvailable(WordBombError):
    """The main word list for a language is missing or empty.

    Fatal for the current turn: no candidates can be generated, so automated
    play must be skipped.
    """

    def __init__(self, language: str, reason: str = ""):
        self.language = language
        self.reason = reason
        message = f"No word list available for language {language!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class CategoryUnavailable(WordBombError):
    """A themed word list could not be fetched; the category is treated as empty."""

    def __init__(self, language: str, category: str, reason: str = ""):
        self.language = language
        self.category = category
        self.reason = reason
        super().__init__(f"Category {category!r} unavailable for {language!r}" + (f": {reason}" if reason else ""))


class PoolExhausted(WordBombError):
    """Every candidate of the current round has been tried and rejected."""

    def __init__(self, syllable: str, tried: int):
        self.syllable = syllable
        self.tried = tried
        super().__init__(f"All {tried} candidates for {syllable!r} were rejected")
