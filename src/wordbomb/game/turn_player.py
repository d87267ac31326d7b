import asyncio
import logging
import random
from abc import ABC, abstractmethod
from typing import Optional

from wordbomb.config import game_config
from wordbomb.config.engine_params import EngineParams
from wordbomb.core.coverage import CoverageTracker
from wordbomb.core.engine import SuggestionEngine
from wordbomb.core.errors import NoLexiconAvailable, PoolExhausted
from wordbomb.core.lexicon import LexiconStore
from wordbomb.core.models import Context, GenerationResult
from wordbomb.events.turn_events import (
    CoverageChangedEvent,
    SuggestionsUpdatedEvent,
    TurnStartEvent,
    WordOutcomeEvent,
    WordSubmittedEvent,
)
from wordbomb.game.time_provider import SystemTimeProvider, TimeProvider
from wordbomb.game_logging.game_loggers import TurnLogger
from wordbomb.utils.async_events import EventEngine, events

logger = logging.getLogger(__name__)


class SubmissionSink(ABC):
    """Performs the actual input of a chosen word in the game client."""

    @abstractmethod
    async def submit(self, text: str) -> None:
        pass


class QueueSubmissionSink(SubmissionSink):
    """Hands submissions to the MQTT publish queue as (topic, message, retain, timestamp)."""

    def __init__(self, publish_queue: asyncio.Queue, time_provider: Optional[TimeProvider] = None,
                 topic: str = game_config.TOPIC_SUBMIT) -> None:
        self.publish_queue = publish_queue
        self.topic = topic
        self._time = time_provider or SystemTimeProvider()

    async def submit(self, text: str) -> None:
        await self.publish_queue.put((self.topic, text, False, self._time.get_ticks()))


class TurnPlayer:
    """Reacts to turn events: regenerates suggestions, submits, retries on rejection.

    Only one turn is active at a time. A new turn cancels a submission still
    in flight, and coverage only changes on a confirmed correct word.
    """

    def __init__(self, store: LexiconStore, sink: SubmissionSink, params: Optional[EngineParams] = None,
                 time_provider: Optional[TimeProvider] = None,
                 turn_logger: Optional[TurnLogger] = None,
                 rng: Optional[random.Random] = None,
                 event_engine: EventEngine = events) -> None:
        self.store = store
        self.sink = sink
        self.params = params or EngineParams()
        self.language = self.params.language
        self.engine: Optional[SuggestionEngine] = None
        self.my_turn = False
        self._time = time_provider or SystemTimeProvider()
        self._turn_logger = turn_logger or TurnLogger(None)
        self._rng = rng
        self._events = event_engine
        self._submission: Optional[asyncio.Task] = None

    async def ensure_engine(self) -> SuggestionEngine:
        """Load (or reuse) the lexicon for the current language.

        Raises:
            NoLexiconAvailable: If the language has no main word list
        """
        lexicon = await self.store.load(self.language)
        if self.engine is None:
            self.engine = SuggestionEngine(lexicon, self.params, rng=self._rng)
            self.engine.coverage.on_change = self._coverage_changed
        else:
            self.engine.set_lexicon(lexicon)
        return self.engine

    def _coverage_changed(self, tracker: CoverageTracker) -> None:
        self._events.trigger(CoverageChangedEvent(list(tracker.counts), list(tracker.targets)))

    def update_params(self, params: EngineParams) -> None:
        language_changed = params.language != self.params.language
        self.params = params
        if language_changed:
            self.language = params.language
        if self.engine:
            self.engine.set_params(params)

    async def set_language(self, language: str) -> None:
        self.language = language
        try:
            await self.ensure_engine()
        except NoLexiconAvailable as e:
            logger.error(f"Language switch failed: {e}")

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    @property
    def submitting(self) -> bool:
        return self._submission is not None and not self._submission.done()

    def cancel_submission(self) -> None:
        if self.submitting:
            logger.info("Abandoning in-flight submission for a new turn")
            self._submission.cancel()
        self._submission = None

    def _submit(self, word: str) -> None:
        if self.params.paused:
            logger.info(f"Paused, not submitting {word!r}")
            return
        self.cancel_submission()
        round_id = self.engine.selector.round.round_id if self.engine.selector.round else 0
        self._submission = asyncio.create_task(self._run_submission(word, round_id),
                                               name=f"submit {word}")

    async def _run_submission(self, word: str, round_id: int) -> None:
        text = word + self.params.active_postfix()
        now_ms = self._time.get_ticks()
        await self.sink.submit(text)
        logger.info(f"Submitted {text!r} (round {round_id})")
        self._turn_logger.log_submission(text, round_id, now_ms)
        self._events.trigger(WordSubmittedEvent(text, round_id, now_ms))

    async def wait_for_submission(self) -> None:
        """Wait until the current submission (if any) has been handed off."""
        if self._submission is not None:
            try:
                await self._submission
            except asyncio.CancelledError:
                pass

    # ------------------------------------------------------------------
    # Turn events
    # ------------------------------------------------------------------

    def _announce(self, result: GenerationResult) -> None:
        self._events.trigger(SuggestionsUpdatedEvent(
            result.context.value,
            result.syllable,
            [list(entry) for entry in result.display_entries],
            self.engine.notices(result.context),
        ))
        self._turn_logger.log_turn_start(result.syllable, result.context is Context.SELF,
                                         result.top_words, result.flags.raised(),
                                         self._time.get_ticks())

    async def on_turn_start(self, event: TurnStartEvent) -> Optional[str]:
        """Handle a new syllable; returns the word submitted for our own turn."""
        self.cancel_submission()
        self.my_turn = event.my_turn
        if event.language:
            self.language = event.language
        try:
            engine = await self.ensure_engine()
        except NoLexiconAvailable as e:
            logger.error(f"Skipping automated play this turn: {e}")
            return None

        if not event.my_turn:
            self._announce(engine.suggest(Context.SPECTATOR, event.syllable))
            return None

        word = engine.start_turn(event.syllable)
        self._announce(engine.last_results[Context.SELF])
        if word:
            self._submit(word)
        return word

    async def on_outcome(self, event: WordOutcomeEvent) -> Optional[str]:
        """Handle the game's verdict; returns the replacement word after a rejection."""
        now_ms = self._time.get_ticks()
        self._turn_logger.log_outcome(event.word, event.accepted, event.my_turn, event.reason, now_ms)
        if not event.my_turn or self.engine is None:
            return None

        if event.accepted:
            if self.engine.apply_correct_word(event.word):
                logger.info("Coverage goal reached, tallies reset")
            return None

        logger.info(f"{event.word!r} rejected ({event.reason or 'no reason'})")
        try:
            replacement = self.engine.select_replacement_after_failure(event.word)
        except PoolExhausted as e:
            logger.warning(f"Giving up this turn: {e}")
            self._turn_logger.log_exhausted(e.syllable, e.tried, now_ms)
            return None
        self._submit(replacement)
        return replacement
