import sys
import os
import random
import pytest

# Ensure src and project root are in the python path for all tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from wordbomb.game.time_provider import MockTimeProvider
from wordbomb.testing.fake_lexicon_provider import FakeLexiconProvider


@pytest.fixture
def mock_time():
    return MockTimeProvider(1000)


@pytest.fixture
def seeded_rng():
    return random.Random(1)


@pytest.fixture
def fake_provider():
    """Provider serving a small English lexicon with every themed category."""
    return FakeLexiconProvider({
        "en": {
            "main": ["quack", "quote", "quiz", "equip", "squid", "banquet", "conquest", "quarter"],
            "profanity": ["quimbecile"],
            "pokemon": ["quagsire"],
            "minerals": ["quartz"],
            "rare": ["quixotic"],
        },
    })
