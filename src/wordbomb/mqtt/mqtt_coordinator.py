import asyncio
import json
import logging

import aiomqtt

from wordbomb.config import game_config
from wordbomb.config.engine_params import EngineParams
from wordbomb.events.turn_events import EventType, parse_turn_start, parse_word_outcome
from wordbomb.game.time_provider import SystemTimeProvider, TimeProvider
from wordbomb.game.turn_player import TurnPlayer
from wordbomb.utils.async_events import EventEngine, events

logger = logging.getLogger(__name__)


def _payload_str(payload) -> str:
    if isinstance(payload, (bytes, bytearray)):
        return payload.decode()
    return payload if payload else ""


class MQTTCoordinator:
    """Handles all MQTT message processing and routing."""

    def __init__(self, player: TurnPlayer, publish_queue: asyncio.Queue,
                 time_provider: TimeProvider = None) -> None:
        self.player = player
        self.publish_queue = publish_queue
        self._time = time_provider or SystemTimeProvider()

    def register_listeners(self, event_engine: EventEngine = events) -> None:
        """Republish engine notifications so the HUD and settings store can pick them up."""
        event_engine.on(EventType.SUGGESTIONS_UPDATED.value)(self.publish_suggestions)
        event_engine.on(EventType.COVERAGE_CHANGED.value)(self.publish_coverage)

    async def publish_suggestions(self, context: str, syllable: str, entries: list, notices: list) -> None:
        message = json.dumps({"syllable": syllable, "entries": entries, "notices": notices})
        await self.publish_queue.put((f"{game_config.TOPIC_SUGGESTIONS}/{context}", message, True,
                                      self._time.get_ticks()))

    async def publish_coverage(self, counts: list, targets: list) -> None:
        message = json.dumps({"counts": counts, "targets": targets})
        await self.publish_queue.put((game_config.TOPIC_COVERAGE, message, True, self._time.get_ticks()))

    async def handle_message(self, topic_str: str, payload) -> None:
        """Route MQTT messages to appropriate handlers."""
        if topic_str == game_config.TOPIC_TURN:
            try:
                event = parse_turn_start(payload)
            except ValueError as e:
                logger.warning(f"Invalid turn payload: {e}")
                return
            await self.player.on_turn_start(event)

        elif topic_str == game_config.TOPIC_OUTCOME:
            try:
                event = parse_word_outcome(payload)
            except ValueError as e:
                logger.warning(f"Invalid outcome payload: {e}")
                return
            await self.player.on_outcome(event)

        elif topic_str == game_config.TOPIC_SETTINGS:
            try:
                params = EngineParams.from_json(_payload_str(payload))
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid JSON in settings payload: {e}")
                return
            if params:
                logger.info(f"Settings from MQTT: {params}")
                self.player.update_params(params)

        elif topic_str == game_config.TOPIC_LANGUAGE:
            language = _payload_str(payload).strip()
            if language:
                await self.player.set_language(language)

        else:
            logger.debug(f"Ignoring message on {topic_str}")

    async def process_messages_task(self, mqtt_client: aiomqtt.Client, message_queue: asyncio.Queue) -> None:
        """Process MQTT messages and add them to the polling queue."""
        try:
            async for message in mqtt_client.messages:
                await message_queue.put(message)
        except aiomqtt.MqttError:
            # Expected on disconnect
            logger.info("MQTT message stream closed")

    async def dispatch_messages_task(self, message_queue: asyncio.Queue) -> None:
        """Handle queued messages one at a time so turn events stay serialized."""
        while True:
            message = await message_queue.get()
            try:
                await self.handle_message(str(message.topic), message.payload)
            except Exception as e:
                logger.exception(f"Error handling message on {message.topic}: {e}")
            finally:
                message_queue.task_done()
