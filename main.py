#!/usr/bin/env python3

import argparse
import asyncio
import logging
import sys

import aiomqtt

from wordbomb.config import game_config
from wordbomb.config.engine_params import EngineParams
from wordbomb.core.lexicon import DirectoryLexiconProvider, LexiconStore
from wordbomb.game.turn_player import QueueSubmissionSink, TurnPlayer
from wordbomb.game_logging.game_loggers import PublishLogger, TurnLogger
from wordbomb.mqtt.mqtt_coordinator import MQTTCoordinator
from wordbomb.utils.async_events import events

logger = logging.getLogger(__name__)


async def publish_tasks_in_queue(publish_client: aiomqtt.Client, queue: asyncio.Queue, publish_logger: PublishLogger) -> None:
    last_messages: dict[str, str] = {}
    while True:
        try:
            topic, message, retain, timestamp = await queue.get()
            # Publish retained messages only if they changed.
            if not retain or last_messages.get(topic) != message:
                await publish_client.publish(topic, message, retain=retain)
                last_messages[topic] = message
                logger.info(f"publishing: {topic}, {message}")
                publish_logger.log_mqtt_publish(topic, message, retain, timestamp)
        except asyncio.CancelledError:
            break
        except aiomqtt.MqttCodeError as e:
            # Don't exit on MqttCodeError, as it might be a transient issue
            logger.warning(f"publish_tasks_in_queue failed {e}")


async def main(args: argparse.Namespace, params: EngineParams) -> None:
    publish_logger = PublishLogger(game_config.PUBLISH_LOG_PATH if args.log_publishes else None)
    turn_logger = TurnLogger(game_config.TURN_LOG_PATH)
    store = LexiconStore(DirectoryLexiconProvider(args.data_dir))

    try:
        publish_logger.start_logging()
        turn_logger.start_logging()

        async with aiomqtt.Client(args.mqtt_server, port=args.mqtt_port) as subscribe_client:
            async with aiomqtt.Client(args.mqtt_server, port=args.mqtt_port) as publish_client:
                publish_queue: asyncio.Queue = asyncio.Queue()
                message_queue: asyncio.Queue = asyncio.Queue()

                player = TurnPlayer(store, QueueSubmissionSink(publish_queue), params, turn_logger=turn_logger)
                coordinator = MQTTCoordinator(player, publish_queue)
                coordinator.register_listeners()
                await events.start()

                # Warm the cache so the first turn doesn't wait on disk
                await player.set_language(params.language)
                await subscribe_client.subscribe("bombparty/#")

                tasks = [
                    asyncio.create_task(publish_tasks_in_queue(publish_client, publish_queue, publish_logger),
                                        name="mqtt publish handler"),
                    asyncio.create_task(coordinator.dispatch_messages_task(message_queue),
                                        name="mqtt dispatch"),
                ]
                try:
                    await coordinator.process_messages_task(subscribe_client, message_queue)
                finally:
                    for task in tasks:
                        task.cancel()
                    await asyncio.gather(*tasks, return_exceptions=True)
                    await events.stop()
    finally:
        turn_logger.stop_logging()
        publish_logger.stop_logging()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Suggest and auto-submit words for syllable word-chain games")
    parser.add_argument("--mqtt-server", default=game_config.MQTT_SERVER)
    parser.add_argument("--mqtt-port", default=game_config.MQTT_CLIENT_PORT, type=int)
    parser.add_argument("--data-dir", default=game_config.DATA_DIR, help="Directory of <language>/<category>.txt word lists")
    parser.add_argument("--language", default=game_config.DEFAULT_LANGUAGE)
    parser.add_argument("--suggestions", default=game_config.DEFAULT_SUGGESTIONS, type=int, help="Suggestions shown per turn (1-10)")
    parser.add_argument("--priority", help="Comma separated criteria order, e.g. foul,coverage,length,contains,hyphen")
    parser.add_argument("--foul", action=argparse.BooleanOptionalAction, default=False)
    parser.add_argument("--coverage", action=argparse.BooleanOptionalAction, default=False)
    parser.add_argument("--hyphen", action=argparse.BooleanOptionalAction, default=False)
    parser.add_argument("--target-length", type=int, help="Prefer words of this length (3-20)")
    parser.add_argument("--contains", help="Prefer words containing this fragment")
    parser.add_argument("--postfix", help="Text typed after every word")
    parser.add_argument("--goals", help="Coverage goals, e.g. 'majority2 x0 z0' or 'a3 qz'")
    parser.add_argument("--paused", action=argparse.BooleanOptionalAction, default=False, help="Suggest only, never submit")
    parser.add_argument("--log-publishes", action="store_true")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    params = EngineParams.from_args(args)
    logger.info(f"Starting with {params}")
    try:
        asyncio.run(main(args, params))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception as e:
        logger.exception(e)
        sys.exit(1)
