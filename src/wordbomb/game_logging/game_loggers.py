"""JSONL loggers for turn activity and MQTT publishes."""

import json
import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)


class BaseLogger:
    """Base class for all JSONL-based loggers."""
    def __init__(self, log_file: Optional[str]):
        self.log_file = log_file
        self.log_f = None

    def start_logging(self):
        """Open the log file for writing."""
        if self.log_file:
            logger.info(f"Logging to {self.log_file}")
            directory = os.path.dirname(self.log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self.log_f = open(self.log_file, "w")

    def stop_logging(self):
        """Close the log file."""
        if self.log_f:
            self.log_f.close()
            self.log_f = None

    def _write_event(self, event: dict):
        """Write a dictionary as a JSON line to the log file."""
        if not self.log_f:
            return
        self.log_f.write(json.dumps(event) + "\n")
        self.log_f.flush()


class TurnLogger(BaseLogger):
    """Logs every turn: the syllable, what we offered and how the game answered."""
    def log_turn_start(self, syllable: str, my_turn: bool, top_words: list[str], flags: list[str], now_ms: int):
        self._write_event({
            "time": now_ms,
            "event_type": "turn_start",
            "syllable": syllable,
            "my_turn": my_turn,
            "top_words": top_words,
            "flags": flags,
        })

    def log_submission(self, word: str, round_id: int, now_ms: int):
        self._write_event({
            "time": now_ms,
            "event_type": "submission",
            "word": word,
            "round_id": round_id,
        })

    def log_outcome(self, word: str, accepted: bool, my_turn: bool, reason: str, now_ms: int):
        self._write_event({
            "time": now_ms,
            "event_type": "outcome",
            "word": word,
            "accepted": accepted,
            "my_turn": my_turn,
            "reason": reason,
        })

    def log_exhausted(self, syllable: str, tried: int, now_ms: int):
        self._write_event({
            "time": now_ms,
            "event_type": "pool_exhausted",
            "syllable": syllable,
            "tried": tried,
        })


class PublishLogger(BaseLogger):
    """Logs MQTT publication activity."""
    def log_mqtt_publish(self, topic: str, message, retain: bool, timestamp_ms: int):
        """Log MQTT publish event to JSONL file."""
        event = {
            "time": timestamp_ms,
            "topic": topic,
            "message": message,
            "retain": retain
        }
        self._write_event(event)
