import asyncio
import os
from io import StringIO

import pytest

from wordbomb.core.errors import CategoryUnavailable, NoLexiconAvailable
from wordbomb.core.lexicon import (
    Category,
    DirectoryLexiconProvider,
    Lexicon,
    LexiconStore,
    compute_letter_weights,
    normalize_language,
    parse_word_list,
)
from wordbomb.game.time_provider import MockTimeProvider
from wordbomb.testing.fake_lexicon_provider import FakeLexiconProvider


def test_parse_newline_list_dedupes_and_lowercases():
    assert parse_word_list("Apple\n banana \n\napple\nCherry") == ["apple", "banana", "cherry"]


def test_parse_json_array():
    assert parse_word_list('["Quack", "quiz", "quack"]') == ["quack", "quiz"]


def test_parse_json_object_with_words():
    assert parse_word_list('{"words": ["one", "two"]}') == ["one", "two"]


def test_parse_empty_payload():
    assert parse_word_list("") == []
    assert parse_word_list("   \n ") == []
    assert parse_word_list(None) == []


def test_letter_weights_have_mean_one():
    weights = compute_letter_weights(["cat", "bat", "rat", "quiz"])
    assert len(weights) == 26
    assert sum(weights) / 26 == pytest.approx(1.0)


def test_rare_letters_weigh_more():
    weights = compute_letter_weights(["cat", "bat", "rat", "quiz"])
    a, q, x = (ord(letter) - ord('a') for letter in "aqx")
    assert weights[q] > weights[a]
    # Letters that never appear are capped by the frequency floor
    assert weights[x] > weights[q]


def test_normalize_language():
    assert normalize_language("English") == "en"
    assert normalize_language("Brazilian Portuguese") == "pt-br"
    assert normalize_language("") == "en"
    assert normalize_language("fr") == "fr"


def test_lexicon_from_words():
    lexicon = Lexicon.from_words(["Quack", "quiz", "squid"], profanity=["quim"])
    assert lexicon.main == ("quack", "quiz", "squid")
    assert lexicon.matching(Category.MAIN, "QU") == ["quack", "quiz", "squid"]
    assert lexicon.matching(Category.MAIN, "") == []
    assert lexicon.contains(Category.PROFANITY, "QUIM")
    assert lexicon.words(Category.POKEMON) == ()
    assert len(lexicon) == 3


@pytest.mark.asyncio
async def test_store_caches_until_ttl_expires(fake_provider):
    time = MockTimeProvider(0)
    store = LexiconStore(fake_provider, time, ttl_s=10)

    first = await store.load("en")
    second = await store.load("English")
    assert first is second
    assert fake_provider.fetch_counts[("en", "main")] == 1

    time.advance(10_000)
    third = await store.load("en")
    assert third is not first
    assert fake_provider.fetch_counts[("en", "main")] == 2


@pytest.mark.asyncio
async def test_concurrent_loads_share_one_fetch(fake_provider):
    store = LexiconStore(fake_provider, MockTimeProvider(0))
    gate = fake_provider.hold()

    loads = [asyncio.create_task(store.load("en")) for _ in range(3)]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*loads)

    assert results[0] is results[1] is results[2]
    assert fake_provider.fetch_counts[("en", "main")] == 1


@pytest.mark.asyncio
async def test_failed_refresh_serves_stale_lexicon(fake_provider):
    time = MockTimeProvider(0)
    store = LexiconStore(fake_provider, time, ttl_s=10)
    cached = await store.load("en")

    time.advance(60_000)
    fake_provider.fail("en", "main")
    assert await store.load("en") is cached
    assert store.peek("en") is cached


@pytest.mark.asyncio
async def test_missing_main_list_raises():
    store = LexiconStore(FakeLexiconProvider({"de": {"profanity": ["x"]}}), MockTimeProvider(0))
    with pytest.raises(NoLexiconAvailable) as excinfo:
        await store.load("de")
    assert excinfo.value.language == "de"
    assert store.peek("de") is None


@pytest.mark.asyncio
async def test_missing_category_is_empty(fake_provider):
    fake_provider.fail("en", "pokemon")
    lexicon = await LexiconStore(fake_provider, MockTimeProvider(0)).load("en")
    assert lexicon.words(Category.POKEMON) == ()
    assert lexicon.words(Category.MINERALS) == ("quartz",)


@pytest.mark.asyncio
async def test_english_profanity_fills_in_for_other_languages(fake_provider):
    fake_provider.set_words("fr", "main", ["quelque", "quoi"])
    lexicon = await LexiconStore(fake_provider, MockTimeProvider(0)).load("French")
    assert lexicon.language == "fr"
    assert lexicon.words(Category.PROFANITY) == ("quimbecile",)


@pytest.mark.asyncio
async def test_invalidate_forces_refetch(fake_provider):
    store = LexiconStore(fake_provider, MockTimeProvider(0))
    await store.load("en")
    store.invalidate("en")
    assert store.peek("en") is None
    await store.load("en")
    assert fake_provider.fetch_counts[("en", "main")] == 2


@pytest.mark.asyncio
async def test_directory_provider_reads_category_files():
    files = {os.path.join("words", "en", "main.txt"): "quack\nquiz\n"}

    def my_open(path, mode, encoding=None):
        if path not in files:
            raise FileNotFoundError(path)
        return StringIO(files[path])

    provider = DirectoryLexiconProvider("words", open=my_open)
    assert await provider.fetch_category("en", Category.MAIN) == "quack\nquiz\n"
    with pytest.raises(CategoryUnavailable):
        await provider.fetch_category("en", Category.RARE)

    lexicon = await LexiconStore(provider, MockTimeProvider(0)).load("en")
    assert lexicon.main == ("quack", "quiz")


@pytest.mark.asyncio
async def test_undecodable_category_file_is_empty(tmp_path):
    language_dir = tmp_path / "en"
    language_dir.mkdir()
    (language_dir / "main.txt").write_text("quack\nquote", encoding="utf-8")
    (language_dir / "profanity.txt").write_bytes(b"\xff\xfebad")

    provider = DirectoryLexiconProvider(str(tmp_path))
    with pytest.raises(CategoryUnavailable):
        await provider.fetch_category("en", Category.PROFANITY)

    lexicon = await LexiconStore(provider, MockTimeProvider(0)).load("en")
    assert lexicon.main == ("quack", "quote")
    assert lexicon.words(Category.PROFANITY) == ()
