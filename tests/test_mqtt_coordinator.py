"""Tests for MQTT message routing and publishing."""
import asyncio
import json

import pytest

from wordbomb.config import game_config
from wordbomb.game.turn_player import QueueSubmissionSink
from wordbomb.testing.fake_lexicon_provider import FakeLexiconProvider
from wordbomb.testing.fake_mqtt_client import FakeMqttClient
from tests.fixtures.engine_factory import create_coordinator, drain


def qu_provider():
    return FakeLexiconProvider({
        "en": {"main": ["quack", "quote", "quiz"]},
        "fr": {"main": ["quoi", "quelque"]},
    })


async def settle(player, event_engine):
    await player.wait_for_submission()
    await asyncio.wait_for(event_engine.queue.join(), timeout=1.0)


@pytest.mark.asyncio
async def test_turn_message_publishes_suggestions():
    coordinator, player, event_engine, publish_queue = create_coordinator(qu_provider())
    await event_engine.start()
    try:
        await coordinator.handle_message(game_config.TOPIC_TURN, b'{"syllable": "qu", "myTurn": false}')
        await settle(player, event_engine)
    finally:
        await event_engine.stop()

    published = drain(publish_queue)
    assert len(published) == 1
    topic, message, retain, _ = published[0]
    assert topic == f"{game_config.TOPIC_SUGGESTIONS}/spectator"
    assert retain is True
    payload = json.loads(message)
    assert payload["syllable"] == "qu"
    assert [entry[0] for entry in payload["entries"]] == ["quack", "quote", "quiz"]
    assert payload["notices"] == []


@pytest.mark.asyncio
async def test_own_turn_submits_through_publish_queue():
    coordinator, player, event_engine, publish_queue = create_coordinator(qu_provider())
    player.sink = QueueSubmissionSink(publish_queue)
    await event_engine.start()
    try:
        await coordinator.handle_message(game_config.TOPIC_TURN, '{"syllable": "qu", "myTurn": true}')
        await settle(player, event_engine)
        await coordinator.handle_message(game_config.TOPIC_OUTCOME,
                                         '{"word": "quack", "accepted": true, "myTurn": true}')
        await settle(player, event_engine)
    finally:
        await event_engine.stop()

    topics = {item[0]: item for item in drain(publish_queue)}
    assert topics[game_config.TOPIC_SUBMIT][1] == "quack"
    assert topics[game_config.TOPIC_SUBMIT][2] is False
    assert f"{game_config.TOPIC_SUGGESTIONS}/self" in topics
    coverage = json.loads(topics[game_config.TOPIC_COVERAGE][1])
    assert sum(coverage["counts"]) == 5
    assert coverage["targets"] == [1] * 26


@pytest.mark.asyncio
async def test_settings_message_updates_params():
    coordinator, player, _, _ = create_coordinator(qu_provider())
    await coordinator.handle_message(game_config.TOPIC_SETTINGS, json.dumps({"suggestions_limit": 2, "paused": True}))
    assert player.params.suggestions_limit == 2
    assert player.params.paused is True


@pytest.mark.asyncio
async def test_bad_messages_are_ignored():
    coordinator, player, _, publish_queue = create_coordinator(qu_provider())
    await coordinator.handle_message(game_config.TOPIC_SETTINGS, "{not json")
    await coordinator.handle_message(game_config.TOPIC_TURN, "")
    await coordinator.handle_message(game_config.TOPIC_OUTCOME, '{"word": "quack"}')
    await coordinator.handle_message("bombparty/unknown", "hello")
    assert player.params.suggestions_limit == game_config.DEFAULT_SUGGESTIONS
    assert player.engine is None
    assert publish_queue.empty()


@pytest.mark.asyncio
async def test_language_message_loads_lexicon():
    coordinator, player, _, _ = create_coordinator(qu_provider())
    await coordinator.handle_message(game_config.TOPIC_LANGUAGE, b"French")
    assert player.engine.lexicon.language == "fr"


@pytest.mark.asyncio
async def test_messages_flow_from_client_to_player():
    coordinator, player, event_engine, publish_queue = create_coordinator(qu_provider())
    client = FakeMqttClient()
    message_queue: asyncio.Queue = asyncio.Queue()
    tasks = [
        asyncio.create_task(coordinator.process_messages_task(client, message_queue)),
        asyncio.create_task(coordinator.dispatch_messages_task(message_queue)),
    ]
    try:
        await client.inject_turn("qu", my_turn=True)
        for _ in range(100):
            if player.sink.submitted:
                break
            await asyncio.sleep(0.01)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    assert player.sink.submitted == ["quack"]
    assert client.pending() == 0


async def run_until_submitted(coordinator, player, client, message_queue):
    tasks = [
        asyncio.create_task(coordinator.process_messages_task(client, message_queue)),
        asyncio.create_task(coordinator.dispatch_messages_task(message_queue)),
    ]
    try:
        for _ in range(100):
            if player.sink.submitted:
                break
            await asyncio.sleep(0.01)
        return [task.done() for task in tasks]
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


@pytest.mark.asyncio
async def test_mistyped_settings_do_not_stop_turns():
    coordinator, player, _, _ = create_coordinator(qu_provider())
    client = FakeMqttClient()
    await client.inject_message(game_config.TOPIC_SETTINGS, '{"self": {"contains_text": 5}, "spectator": null}')
    await client.inject_turn("qu", my_turn=True)

    done = await run_until_submitted(coordinator, player, client, asyncio.Queue())

    assert done == [False, False]
    assert player.sink.submitted == ["quack"]
    assert player.params.self_modes.contains_text == "5"


@pytest.mark.asyncio
async def test_dispatch_survives_handler_errors(monkeypatch):
    coordinator, player, _, _ = create_coordinator(qu_provider())
    client = FakeMqttClient()
    handle_message = coordinator.handle_message
    failures = []

    async def fail_once(topic, payload):
        if not failures:
            failures.append(topic)
            raise RuntimeError("boom")
        await handle_message(topic, payload)

    monkeypatch.setattr(coordinator, "handle_message", fail_once)
    await client.inject_message(game_config.TOPIC_SETTINGS, '{"paused": false}')
    await client.inject_turn("qu", my_turn=True)

    done = await run_until_submitted(coordinator, player, client, asyncio.Queue())

    assert failures == [game_config.TOPIC_SETTINGS]
    assert done == [False, False]
    assert player.sink.submitted == ["quack"]
