"""Centralized configuration for the word suggestion engine, including lexicon, ranking and MQTT settings."""

import os

# ============================================================================
# ALPHABET / COVERAGE SETTINGS
# ============================================================================
ALPHABET = "abcdefghijklmnopqrstuvwxyz"
LETTER_COUNT = len(ALPHABET)

MIN_TALLY = 0
MAX_TALLY = 99  # Upper bound for coverage goals and tallies
DEFAULT_TARGET = 1  # Every letter needed once unless a goal spec says otherwise

# Floor for document frequency so letters that never appear don't divide by zero
MIN_LETTER_FREQUENCY = 0.001


# ============================================================================
# LENGTH / SUGGESTION SETTINGS
# ============================================================================
MIN_TARGET_LENGTH = 3
MAX_TARGET_LENGTH = 20
DEFAULT_TARGET_LENGTH = 8
NEAR_LENGTH_WINDOW = 6  # +/- letters still counted as "near" the target

MIN_SUGGESTIONS = 1
MAX_SUGGESTIONS = 10
DEFAULT_SUGGESTIONS = 5


# ============================================================================
# LEXICON SETTINGS
# ============================================================================
CATEGORY_MAIN = "main"
CATEGORY_PROFANITY = "profanity"
CATEGORY_POKEMON = "pokemon"
CATEGORY_MINERALS = "minerals"
CATEGORY_RARE = "rare"

DEFAULT_LANGUAGE = "en"
PROFANITY_FALLBACK_LANGUAGE = "en"
LEXICON_CACHE_TTL_S = 5 * 60

# Game dictionary manifest names mapped to language codes
LANGUAGE_ALIASES = {
    "english": "en",
    "french": "fr",
    "german": "de",
    "spanish": "es",
    "brazilian portuguese": "pt-br",
    "portuguese": "pt-br",
    "nahuatl": "nah",
    "pokemon (english)": "pok-en",
    "pokemon (french)": "pok-fr",
    "pokemon (german)": "pok-de",
}


# ============================================================================
# RANKING SETTINGS
# ============================================================================
PRIORITY_KEYS = ("contains", "foul", "coverage", "hyphen", "length")


# ============================================================================
# MQTT SETTINGS
# ============================================================================
MQTT_SERVER = os.environ.get("MQTT_SERVER", "localhost")
MQTT_CLIENT_ID = 'wordbomb-engine'
MQTT_CLIENT_PORT = int(os.environ.get("MQTT_CLIENT_PORT", "1883"))

TOPIC_TURN = "bombparty/turn"
TOPIC_OUTCOME = "bombparty/outcome"
TOPIC_SETTINGS = "bombparty/settings"
TOPIC_LANGUAGE = "bombparty/language"
TOPIC_SUBMIT = "bombparty/submit"
TOPIC_SUGGESTIONS = "bombparty/suggestions"
TOPIC_COVERAGE = "bombparty/coverage"


# ============================================================================
# PATH SETTINGS
# ============================================================================
DATA_DIR = os.environ.get("WORDBOMB_DATA_DIR", "assets/words")
LOG_DIR = "output"
TURN_LOG_PATH = os.path.join(LOG_DIR, "turns.jsonl")
PUBLISH_LOG_PATH = os.path.join(LOG_DIR, "output.publish.jsonl")
